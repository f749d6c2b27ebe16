"""
Turns dimension scores into categorical profiles and fires the tension-pair
rules that drive the narrative layer.
"""
import logging
from typing import Dict, List, Mapping, Tuple, Union

from .definitions import HIGH_THRESHOLD, INSIGHT_LEVEL_KEYS, LOW_THRESHOLD, TestTaxonomy
from .models import BinaryScoreResult, LikertScoreResult, ProfileCategory, ProfileEngineOutput, TensionPairDef
from .normalizer import normalize
from .registry import coerce_taxonomy

logger = logging.getLogger(__name__)

# Evaluated in order. 'medium' never appears: it is the quiet category with no narrative attached.
TENSION_PAIRS: Tuple[TensionPairDef, ...] = (
    TensionPairDef(dim_a="H", level_a="high", dim_b="X", level_b="high", risk=False, content_key="ethicalLeader"),
    TensionPairDef(dim_a="H", level_a="high", dim_b="A", level_b="low",  risk=False, content_key="principledConfronter"),
    TensionPairDef(dim_a="H", level_a="high", dim_b="O", level_b="high", risk=False, content_key="responsibleInnovator"),
    TensionPairDef(dim_a="E", level_a="high", dim_b="X", level_b="high", risk=True,  content_key="supportedVisibility"),
    TensionPairDef(dim_a="E", level_a="high", dim_b="C", level_b="high", risk=True,  content_key="structuredStability"),
    TensionPairDef(dim_a="E", level_a="high", dim_b="O", level_b="high", risk=True,  content_key="safeExperimentation"),
    TensionPairDef(dim_a="X", level_a="low",  dim_b="A", level_b="high", risk=False, content_key="deepCollaboration"),
    TensionPairDef(dim_a="X", level_a="low",  dim_b="O", level_b="high", risk=False, content_key="solitaryInnovator"),
    TensionPairDef(dim_a="A", level_a="high", dim_b="O", level_b="high", risk=False, content_key="facilitatedInnovation"),
    TensionPairDef(dim_a="A", level_a="low",  dim_b="C", level_b="high", risk=False, content_key="structuredCompetitor"),
    TensionPairDef(dim_a="C", level_a="high", dim_b="O", level_b="high", risk=False, content_key="structuredInnovator"),
)


def categorize(score: float) -> ProfileCategory:
    """Strictly above 65 is high, strictly below 35 is low, both bounds are medium."""
    if score > HIGH_THRESHOLD:
        return "high"
    if score < LOW_THRESHOLD:
        return "low"
    return "medium"


def match_tension_pairs(categories: Mapping[str, ProfileCategory]) -> List[TensionPairDef]:
    """Rules whose two dimensions are both present and at the required levels, in catalogue order."""
    fired = []
    for pair in TENSION_PAIRS:
        # A dimension the taxonomy does not measure skips the rule.
        if categories.get(pair.dim_a) == pair.level_a and categories.get(pair.dim_b) == pair.level_b:
            fired.append(pair)
    return fired


def run_profile_engine(
    dimension_scores: Mapping[str, float],
    taxonomy: Union[TestTaxonomy, str],
) -> ProfileEngineOutput:
    taxonomy = coerce_taxonomy(taxonomy)
    canonical = normalize(dimension_scores, taxonomy)
    categories: Dict[str, ProfileCategory] = {code: categorize(score) for code, score in canonical.items()}
    fired = match_tension_pairs(categories)

    output = ProfileEngineOutput(
        categories=categories,
        insight_pairs=tuple(p for p in fired if not p.risk),
        risk_pairs=tuple(p for p in fired if p.risk),
        insight_keys={code: f"{code}.{INSIGHT_LEVEL_KEYS[level]}" for code, level in categories.items()},
    )
    logger.debug(
        f"Profile for {taxonomy.value}: {categories}, fired {[p.content_key for p in fired]}"
    )
    return output


def run_profile_engine_for_result(
    score_result: Union[LikertScoreResult, BinaryScoreResult],
    taxonomy: Union[TestTaxonomy, str],
) -> ProfileEngineOutput:
    """Binary results have no canonical dimensions and produce an empty profile."""
    if isinstance(score_result, BinaryScoreResult):
        return ProfileEngineOutput(categories={})
    return run_profile_engine(score_result.dimensions, taxonomy)
