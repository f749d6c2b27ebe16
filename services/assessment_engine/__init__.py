# Assessment scoring, balanced assignment and profile inference
from .definitions import TestTaxonomy, CORE_TAXONOMIES, EXPLORATORY_TAXONOMIES, CANONICAL_CODES
from .models import (
    Answer,
    TestConfig,
    LikertScoreResult,
    BinaryScoreResult,
    DichotomyScore,
    ProfileEngineOutput,
    TensionPairDef,
    ObserverComparison,
    parse_score_result,
    AssessmentError,
    IncompleteAssessmentError,
    MissingAnswerError,
    DuplicateAnswerError,
    InvalidSubmissionError,
    TypologyConfigurationError,
    UnknownTaxonomyError,
    SpecValidationError,
    AssignmentExistsError,
)
from .registry import get_test_config, get_all_test_configs, get_all_taxonomies
from .scorer import calculate_scores, calculate_scores_for, validate_answers
from .normalizer import normalize
from .assigner import BalancedAssigner, taxonomy_pool, candidates, choose_taxonomy
from .store import AssignmentStore, InMemoryAssignmentStore
from .profile_engine import TENSION_PAIRS, categorize, match_tension_pairs, run_profile_engine, run_profile_engine_for_result
from .comparison import compare_with_observers
