# services/assessment_engine/definitions.py
# Static definitions shared by the scorer, the assigner and the profile engine.

from enum import Enum
from typing import Dict, Tuple


class TestTaxonomy(str, Enum):
    """Identifier of a personality-model variant a participant can be assigned."""

    HEXACO = "HEXACO"                    # 6-dimension facet model
    HEXACO_MODIFIED = "HEXACO_MODIFIED"  # reduced-item variant of HEXACO
    BIG_FIVE = "BIG_FIVE"                # 5-dimension aspect model (BFAS)
    MBTI = "MBTI"                        # 4-dichotomy forced-choice model


# Core taxonomies are balanced first, up to the quota.
CORE_TAXONOMIES: Tuple[TestTaxonomy, ...] = (
    TestTaxonomy.HEXACO,
    TestTaxonomy.HEXACO_MODIFIED,
    TestTaxonomy.BIG_FIVE,
)

# Exploratory taxonomies only join the pool once every core quota is met.
EXPLORATORY_TAXONOMIES: Tuple[TestTaxonomy, ...] = (
    TestTaxonomy.MBTI,
)

# --- Canonical dimension space used by the profile engine ---

CANONICAL_CODES: Tuple[str, ...] = ('H', 'E', 'X', 'A', 'C', 'O')

# Bonus scales scored like dimensions but kept out of profile inference.
INTERSTITIAL_CODES: Tuple[str, ...] = ('I',)

# Foreign code -> canonical code. Codes not listed here and not canonical are dropped.
CODE_RENAMES: Dict[TestTaxonomy, Dict[str, str]] = {
    TestTaxonomy.BIG_FIVE: {
        'N': 'E',  # Neuroticism -> Emotionality
        'E': 'X',  # Extraversion -> internal X
        'O': 'O',
        'C': 'C',
        'A': 'A',
    },
}

# --- Likert scale ---

LIKERT_MIN = 1
LIKERT_MAX = 5

BINARY_OPTIONS: Tuple[str, str] = ('A', 'B')

# --- Profile categories ---

PROFILE_CATEGORIES: Tuple[str, ...] = ('low', 'medium', 'high')

# Category -> suffix of the per-dimension insight content key ("H.mid").
INSIGHT_LEVEL_KEYS: Dict[str, str] = {"low": "low", "medium": "mid", "high": "high"}

HIGH_THRESHOLD = 65  # strictly above -> high
LOW_THRESHOLD = 35   # strictly below -> low

# Observer comparison: |delta| at or below this reads as agreement.
AGREEMENT_TOLERANCE = 5
MIN_OBSERVERS = 2

# Question bank file per taxonomy, relative to the data directory.
CONFIG_FILES: Dict[TestTaxonomy, str] = {
    TestTaxonomy.HEXACO: "hexaco.yml",
    TestTaxonomy.HEXACO_MODIFIED: "hexaco_modified.yml",
    TestTaxonomy.BIG_FIVE: "big_five.yml",
    TestTaxonomy.MBTI: "mbti.yml",
}
