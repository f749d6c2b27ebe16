"""
Storage seam for the balanced assigner: aggregate counts in, one permanent
assignment out. The SQLAlchemy implementation lives in services.db.
"""
import threading
from datetime import datetime
from typing import Dict, Optional, Protocol, Tuple

from .definitions import TestTaxonomy
from .models import AssignmentExistsError


class AssignmentStore(Protocol):
    def count_assignments(self) -> Dict[TestTaxonomy, int]:
        """Participants per assigned taxonomy, excluding deleted participants."""
        ...

    def get_assignment(self, participant_id: str) -> Optional[TestTaxonomy]:
        ...

    def record_assignment(self, participant_id: str, taxonomy: TestTaxonomy, assigned_at: datetime) -> None:
        ...


class InMemoryAssignmentStore:
    """Dictionary-backed store for tests and single-process tooling."""

    def __init__(self, initial_counts: Optional[Dict[TestTaxonomy, int]] = None):
        self._lock = threading.Lock()
        self._assignments: Dict[str, Tuple[TestTaxonomy, datetime]] = {}
        # Participants assigned before this store existed, known only by count.
        self._baseline: Dict[TestTaxonomy, int] = dict(initial_counts or {})

    def count_assignments(self) -> Dict[TestTaxonomy, int]:
        with self._lock:
            counts = dict(self._baseline)
            for taxonomy, _ in self._assignments.values():
                counts[taxonomy] = counts.get(taxonomy, 0) + 1
            return counts

    def get_assignment(self, participant_id: str) -> Optional[TestTaxonomy]:
        with self._lock:
            entry = self._assignments.get(participant_id)
            return entry[0] if entry else None

    def get_assigned_at(self, participant_id: str) -> Optional[datetime]:
        with self._lock:
            entry = self._assignments.get(participant_id)
            return entry[1] if entry else None

    def record_assignment(self, participant_id: str, taxonomy: TestTaxonomy, assigned_at: datetime) -> None:
        with self._lock:
            if participant_id in self._assignments:
                raise AssignmentExistsError(f"Participant {participant_id} is already assigned")
            self._assignments[participant_id] = (taxonomy, assigned_at)
