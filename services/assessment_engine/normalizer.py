"""
Maps a taxonomy's dimension codes onto the canonical six-code space
(H, E, X, A, C, O) used by the profile engine.

This is the only place that knows how taxonomies differ; everything
downstream sees canonical codes only. Canonical codes a taxonomy does not
measure are omitted, never synthesized.
"""
import logging
from typing import Dict, Mapping, TypeVar, Union

from .definitions import CANONICAL_CODES, CODE_RENAMES, TestTaxonomy
from .registry import coerce_taxonomy

logger = logging.getLogger(__name__)

V = TypeVar("V")


def _check_renames_injective() -> None:
    for taxonomy, renames in CODE_RENAMES.items():
        targets = list(renames.values())
        if len(targets) != len(set(targets)):
            raise ValueError(f"Code renames for {taxonomy.value} map two codes onto the same canonical code")
        unknown = set(targets) - set(CANONICAL_CODES)
        if unknown:
            raise ValueError(f"Code renames for {taxonomy.value} target non-canonical codes {sorted(unknown)}")


_check_renames_injective()


def normalize(dimensions: Mapping[str, V], taxonomy: Union[TestTaxonomy, str]) -> Dict[str, V]:
    """
    Returns the scores keyed by canonical code.

    Taxonomies with a rename table (BIG_FIVE: N -> E, E -> X) are remapped;
    the others pass canonical codes through. Non-canonical codes, such as the
    interstitial Altruism scale or MBTI dichotomies, are dropped.
    """
    taxonomy = coerce_taxonomy(taxonomy)
    renames = CODE_RENAMES.get(taxonomy)

    normalized: Dict[str, V] = {}
    for code, score in dimensions.items():
        target = renames.get(code) if renames is not None else code
        if target in CANONICAL_CODES:
            normalized[target] = score

    # Keep canonical order for stable output.
    normalized = {code: normalized[code] for code in CANONICAL_CODES if code in normalized}
    dropped = set(dimensions) - (set(renames) if renames is not None else set(CANONICAL_CODES))
    if dropped:
        logger.debug(f"Codes outside the canonical space for {taxonomy.value}: {sorted(dropped)}")
    return normalized


def missing_canonical_codes(taxonomy: Union[TestTaxonomy, str], dimensions: Mapping[str, object]) -> list:
    """Canonical codes that will be absent after normalization (e.g. H for BIG_FIVE)."""
    normalized = normalize(dimensions, taxonomy)
    return [code for code in CANONICAL_CODES if code not in normalized]
