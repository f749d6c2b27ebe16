from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker

from services.core.config import engine_settings


def get_engine(db_url: str = None, echo: bool = False) -> Engine:
    """Creates a synchronous SQLAlchemy engine; defaults to ASSESSMENT_DATABASE_URL."""
    return create_engine(db_url or engine_settings.database_url, echo=echo, pool_pre_ping=True)


def get_session_factory(engine: Engine) -> sessionmaker:
    # Create a configured "Session" class
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
