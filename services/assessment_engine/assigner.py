# services/assessment_engine/assigner.py
# Balanced, quota-based assignment of participants to taxonomies.

import logging
import random
from datetime import datetime, timezone
from typing import Dict, List, Mapping, Optional, Tuple, Union

from services.core.config import engine_settings

from .definitions import CORE_TAXONOMIES, EXPLORATORY_TAXONOMIES, TestTaxonomy
from .models import AssignmentExistsError
from .registry import coerce_taxonomy
from .store import AssignmentStore

logger = logging.getLogger(__name__)


def _complete_counts(counts: Mapping[Union[TestTaxonomy, str], int]) -> Dict[TestTaxonomy, int]:
    """Coerces keys to taxonomies and fills in zero for any taxonomy nobody holds yet."""
    complete = {taxonomy: 0 for taxonomy in CORE_TAXONOMIES + EXPLORATORY_TAXONOMIES}
    for key, count in counts.items():
        complete[coerce_taxonomy(key)] = int(count)
    return complete


def taxonomy_pool(counts: Mapping[Union[TestTaxonomy, str], int], quota: int) -> Tuple[TestTaxonomy, ...]:
    """
    Returns the taxonomies competing for the next participant.

    While any core taxonomy is below quota, only core taxonomies compete.
    Once every core taxonomy has reached the quota, exploratory taxonomies
    join the pool.
    """
    complete = _complete_counts(counts)
    core_filled = all(complete[taxonomy] >= quota for taxonomy in CORE_TAXONOMIES)
    return CORE_TAXONOMIES + EXPLORATORY_TAXONOMIES if core_filled else CORE_TAXONOMIES


def candidates(counts: Mapping[Union[TestTaxonomy, str], int], quota: int) -> List[TestTaxonomy]:
    """The least-populated members of the pool, in pool order."""
    complete = _complete_counts(counts)
    pool = taxonomy_pool(complete, quota)
    lowest = min(complete[taxonomy] for taxonomy in pool)
    return [taxonomy for taxonomy in pool if complete[taxonomy] == lowest]


def choose_taxonomy(
    counts: Mapping[Union[TestTaxonomy, str], int],
    quota: int,
    rng: Optional[random.Random] = None,
) -> TestTaxonomy:
    """Picks uniformly at random among the least-populated candidates."""
    return (rng or random).choice(candidates(counts, quota))


class BalancedAssigner:
    """
    Assigns each participant a taxonomy exactly once and keeps the
    distribution across taxonomies balanced.

    Reading the counts and recording the assignment are two separate store
    calls. Two concurrent first-time assignments can both observe the same
    counts and pick the same taxonomy, drifting the balance by one; the
    distribution is a soft target and this is accepted.
    """

    def __init__(self, store: AssignmentStore, quota: Optional[int] = None, rng: Optional[random.Random] = None):
        self.store = store
        self.quota = engine_settings.core_quota if quota is None else quota
        self.rng = rng or random.Random()
        if self.quota < 0:
            raise ValueError(f"Core quota must be non-negative, got {self.quota}")

    def assign(self, participant_id: str) -> TestTaxonomy:
        """
        Chooses and records a taxonomy for a participant without one.

        Raises:
            AssignmentExistsError: if the participant is already assigned.
        """
        existing = self.store.get_assignment(participant_id)
        if existing is not None:
            raise AssignmentExistsError(
                f"Participant {participant_id} is already assigned to {existing.value}"
            )

        counts = self.store.count_assignments()
        taxonomy = choose_taxonomy(counts, self.quota, self.rng)
        self.store.record_assignment(participant_id, taxonomy, datetime.now(timezone.utc))
        before = {t.value: c for t, c in _complete_counts(counts).items()}
        logger.info(f"Assigned participant {participant_id} to {taxonomy.value} (counts before: {before})")
        return taxonomy

    def get_or_assign(self, participant_id: str) -> TestTaxonomy:
        """Returns the existing assignment, assigning one first if there is none."""
        existing = self.store.get_assignment(participant_id)
        if existing is not None:
            logger.debug(f"Participant {participant_id} already assigned to {existing.value}")
            return existing
        return self.assign(participant_id)
