# Storage for participant taxonomy assignments
from .models import Base, Participant
from .database import get_engine, get_session_factory
from .assignment_store import SqlAlchemyAssignmentStore
