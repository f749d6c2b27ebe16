import logging
from datetime import datetime
from typing import Dict, Optional

from sqlalchemy import func, select
from sqlalchemy.orm import sessionmaker

from services.assessment_engine.definitions import TestTaxonomy
from services.assessment_engine.models import AssignmentExistsError

from .models import Participant

logger = logging.getLogger(__name__)


class SqlAlchemyAssignmentStore:
    """
    Reads per-taxonomy counts from the participants table and writes the
    one-time assignment. Each call runs in its own transaction; counting and
    recording are not serialized against concurrent assigners.
    """

    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def count_assignments(self) -> Dict[TestTaxonomy, int]:
        stmt = (
            select(Participant.test_type, func.count(Participant.id))
            .where(Participant.test_type.is_not(None), Participant.deleted.is_(False))
            .group_by(Participant.test_type)
        )
        with self.session_factory() as session:
            rows = session.execute(stmt).all()
        return {test_type: count for test_type, count in rows}

    def get_assignment(self, participant_id: str) -> Optional[TestTaxonomy]:
        with self.session_factory() as session:
            participant = session.get(Participant, participant_id)
            return participant.test_type if participant else None

    def record_assignment(self, participant_id: str, taxonomy: TestTaxonomy, assigned_at: datetime) -> None:
        with self.session_factory() as session:
            with session.begin():
                participant = session.get(Participant, participant_id)
                if participant is None:
                    participant = Participant(id=participant_id)
                    session.add(participant)
                elif participant.test_type is not None:
                    raise AssignmentExistsError(
                        f"Participant {participant_id} is already assigned to {participant.test_type.value}"
                    )
                participant.test_type = taxonomy
                participant.test_type_assigned_at = assigned_at
        logger.debug(f"Stored assignment {taxonomy.value} for participant {participant_id}")

    def mark_deleted(self, participant_id: str) -> None:
        """Soft-deletes a participant so they stop counting toward quotas."""
        with self.session_factory() as session:
            with session.begin():
                participant = session.get(Participant, participant_id)
                if participant is not None:
                    participant.deleted = True

