# services/assessment_engine/comparison.py
# Self versus observer comparison for Likert results.

import logging
from typing import Dict, List, Optional, Sequence, Union

from .definitions import AGREEMENT_TOLERANCE, INTERSTITIAL_CODES, MIN_OBSERVERS
from .models import (
    Agreement,
    BinaryScoreResult,
    DimensionComparison,
    LikertScoreResult,
    ObserverComparison,
    SubScaleDivergence,
    TestConfig,
)
from .scorer import round_half_up

logger = logging.getLogger(__name__)


def agreement_for(delta: int, tolerance: int = AGREEMENT_TOLERANCE) -> Agreement:
    if abs(delta) <= tolerance:
        return "aligned"
    return "observer_higher" if delta > 0 else "observer_lower"


def _average(scores: List[int]) -> int:
    if not scores:
        return 0
    return round_half_up(sum(scores) / len(scores))


def _sub_scale_divergences(
    self_result: LikertScoreResult,
    observers: List[LikertScoreResult],
    config: TestConfig,
) -> List[SubScaleDivergence]:
    divergences = []
    for attr, kind in (("facets", "facet"), ("aspects", "aspect")):
        self_subs = getattr(self_result, attr) or {}
        for dim in config.dimensions:
            if dim.code in INTERSTITIAL_CODES:
                continue
            for code, self_score in (self_subs.get(dim.code) or {}).items():
                observed = [
                    subs[dim.code][code]
                    for subs in (getattr(o, attr) for o in observers)
                    if subs and code in subs.get(dim.code, {})
                ]
                if not observed:
                    continue
                observer_score = _average(observed)
                delta = observer_score - self_score
                divergences.append(SubScaleDivergence(
                    dimension=dim.code,
                    code=code,
                    kind=kind,
                    self_score=self_score,
                    observer_score=observer_score,
                    delta=delta,
                    agreement=agreement_for(delta),
                ))
    return divergences


def compare_with_observers(
    self_result: Union[LikertScoreResult, BinaryScoreResult],
    observer_results: Sequence[Union[LikertScoreResult, BinaryScoreResult]],
    config: TestConfig,
    min_observers: int = MIN_OBSERVERS,
) -> Optional[ObserverComparison]:
    """
    Averages observer ratings per dimension and compares them with the self rating.

    Returns None when the self result is binary or fewer than `min_observers`
    Likert observer results are available. Interstitial scales are excluded.
    delta is observer minus self; |delta| <= 5 reads as aligned.
    """
    if not isinstance(self_result, LikertScoreResult):
        return None
    observers = [o for o in observer_results if isinstance(o, LikertScoreResult)]
    if len(observers) < min_observers:
        logger.debug(f"Skipping observer comparison: {len(observers)} of {min_observers} observers")
        return None

    dimensions: List[DimensionComparison] = []
    for code in config.dimension_codes:
        if code in INTERSTITIAL_CODES or code not in self_result.dimensions:
            continue
        self_score = self_result.dimensions[code]
        observer_score = _average([o.dimensions[code] for o in observers if code in o.dimensions])
        delta = observer_score - self_score
        dimensions.append(DimensionComparison(
            code=code,
            self_score=self_score,
            observer_score=observer_score,
            delta=delta,
            agreement=agreement_for(delta),
        ))

    comparison = ObserverComparison(
        observer_count=len(observers),
        dimensions=tuple(dimensions),
        divergences=tuple(_sub_scale_divergences(self_result, observers, config)),
    )
    summary: Dict[str, int] = {d.code: d.delta for d in comparison.dimensions}
    logger.debug(f"Observer comparison for {config.taxonomy.value} over {len(observers)} observers: {summary}")
    return comparison
