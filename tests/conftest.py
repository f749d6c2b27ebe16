import random

import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from services.assessment_engine.definitions import TestTaxonomy as Taxonomy
from services.assessment_engine.registry import get_test_config
from services.db.database import get_session_factory
from services.db.models import Base

# Use in-memory SQLite for testing
TEST_DATABASE_URL = "sqlite:///:memory:"


# --- Question bank fixtures ---

@pytest.fixture(scope="session")
def hexaco_config():
    return get_test_config(Taxonomy.HEXACO)


@pytest.fixture(scope="session")
def hexaco_modified_config():
    return get_test_config(Taxonomy.HEXACO_MODIFIED)


@pytest.fixture(scope="session")
def big_five_config():
    return get_test_config(Taxonomy.BIG_FIVE)


@pytest.fixture(scope="session")
def mbti_config():
    return get_test_config(Taxonomy.MBTI)


@pytest.fixture
def rng():
    """Seeded generator so random tie-breaks are reproducible."""
    return random.Random(1234)


@pytest.fixture
def uniform_answers():
    """Builds an answer set with every question of a bank answered the same way."""
    def _build(config, value):
        return [{"questionId": q.id, "value": value} for q in config.questions]
    return _build


# --- Database fixtures ---

@pytest.fixture
def db_engine():
    """Creates a fresh in-memory database per test."""
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session_factory(db_engine):
    return get_session_factory(db_engine)
