import uuid

from sqlalchemy import (
    MetaData,
    Column,
    String,
    Boolean,
    Index,
    Enum,
    DateTime,
)
from sqlalchemy.orm import declarative_base

from services.assessment_engine.definitions import TestTaxonomy

# Define naming conventions for constraints and indexes
# https://alembic.sqlalchemy.org/en/latest/naming.html
convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)
Base = declarative_base(metadata=metadata)


class Participant(Base):
    """
    The slice of a participant record the assigner reads and writes.
    Everything else about the participant lives with the surrounding application.
    """
    __tablename__ = "participants"

    id = Column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    # Permanent, set once on first assignment.
    test_type = Column(Enum(TestTaxonomy, name="test_type"), nullable=True)
    test_type_assigned_at = Column(DateTime(timezone=True), nullable=True)
    deleted = Column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("ix_participants_test_type_deleted", "test_type", "deleted"),
    )
