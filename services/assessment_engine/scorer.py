# services/assessment_engine/scorer.py
# Turns validated answers into 0-100 dimension, facet/aspect and dichotomy scores.

import logging
import math
from collections import Counter
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

from pydantic import ValidationError

from .definitions import BINARY_OPTIONS, LIKERT_MAX, LIKERT_MIN, TestTaxonomy
from .models import (
    Answer,
    BinaryQuestion,
    BinaryScoreResult,
    DichotomyScore,
    DuplicateAnswerError,
    InvalidSubmissionError,
    LikertQuestion,
    LikertScoreResult,
    MissingAnswerError,
    TestConfig,
)
from .registry import get_test_config

logger = logging.getLogger(__name__)

AnswerInput = Union[Answer, Mapping[str, Any], Sequence[Any]]


# --- Helpers ---

def round_half_up(value: float) -> int:
    """Rounds .5 away from zero for non-negative scores (62.5 -> 63), unlike round()."""
    return int(math.floor(value + 0.5))


def normalize_likert_value(value: int, reversed_item: bool = False) -> float:
    """Maps a 1-5 answer onto 0-100 (1 -> 0, 5 -> 100), mirrored for reversed items."""
    normalized = (value - LIKERT_MIN) / (LIKERT_MAX - LIKERT_MIN) * 100
    return 100 - normalized if reversed_item else normalized


def _mean_score(values: List[float]) -> int:
    # Empty scales score 0; the loader already warned about them.
    if not values:
        return 0
    return round_half_up(sum(values) / len(values))


def _coerce_answer(raw: AnswerInput) -> Answer:
    if isinstance(raw, Answer):
        return raw
    try:
        if isinstance(raw, Mapping):
            return Answer.model_validate(raw)
        if isinstance(raw, (tuple, list)) and len(raw) == 2:
            return Answer(question_id=raw[0], value=raw[1])
    except ValidationError as e:
        raise InvalidSubmissionError(f"Malformed answer {raw!r}: {e}") from e
    raise InvalidSubmissionError(f"Malformed answer {raw!r}. Expected an Answer, a mapping or a (question_id, value) pair.")


def _check_likert_value(question: LikertQuestion, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or not LIKERT_MIN <= value <= LIKERT_MAX:
        raise InvalidSubmissionError(
            f"Invalid Likert value {value!r} for question {question.id}. "
            f"Expected an integer from {LIKERT_MIN} to {LIKERT_MAX}."
        )
    return value


def _resolve_pole(question: BinaryQuestion, value: Any) -> str:
    """Accepts 'A'/'B' or the chosen pole letter and returns the pole."""
    option_a, option_b = BINARY_OPTIONS
    if value == option_a or value == question.option_a.pole:
        return question.option_a.pole
    if value == option_b or value == question.option_b.pole:
        return question.option_b.pole
    raise InvalidSubmissionError(
        f"Invalid answer {value!r} for question {question.id}. Expected one of "
        f"{[option_a, option_b, question.option_a.pole, question.option_b.pole]}."
    )


# --- Validation ---

def validate_answers(
    answers: Iterable[AnswerInput],
    config: TestConfig,
    drop_unknown: bool = False,
) -> Dict[int, Union[int, str]]:
    """
    Checks an answer set against the active question bank before any scoring.

    Args:
        answers: Answer objects, {"questionId", "value"} mappings or (id, value) pairs.
        config: The question bank of the participant's taxonomy.
        drop_unknown: Discard answers for question ids the bank does not contain
                      (stale answers from an older bank version) instead of rejecting them.

    Returns:
        question id -> validated value (Likert integer, or the chosen pole letter for binary banks).

    Raises:
        InvalidSubmissionError: malformed answer, unknown question id, or out-of-range value.
        DuplicateAnswerError: more than one answer for a question.
        MissingAnswerError: a required question has no answer (an IncompleteAssessmentError).
    """
    coerced = [_coerce_answer(raw) for raw in answers]
    questions = {q.id: q for q in config.questions}

    unknown = sorted({a.question_id for a in coerced if a.question_id not in questions})
    if unknown:
        if not drop_unknown:
            logger.warning(f"Rejected submission for {config.taxonomy.value}: unknown question ids {unknown}")
            raise InvalidSubmissionError(f"Answers reference questions not in {config.taxonomy.value}: {unknown}")
        logger.warning(f"Dropping {len(unknown)} stale answers for {config.taxonomy.value}: {unknown}")
        coerced = [a for a in coerced if a.question_id in questions]

    answered = Counter(a.question_id for a in coerced)
    duplicates = [qid for qid, count in answered.items() if count > 1]
    if duplicates:
        logger.warning(f"Rejected submission for {config.taxonomy.value}: duplicate answers {sorted(duplicates)}")
        raise DuplicateAnswerError(duplicates)

    # With unknown ids and duplicates ruled out, a size mismatch means missing answers.
    missing = set(questions) - set(answered)
    if missing:
        logger.warning(f"Rejected submission for {config.taxonomy.value}: {len(missing)} of {len(questions)} answers missing")
        raise MissingAnswerError(missing)

    values: Dict[int, Union[int, str]] = {}
    for answer in coerced:
        question = questions[answer.question_id]
        if config.format == "likert":
            values[answer.question_id] = _check_likert_value(question, answer.value)
        else:
            values[answer.question_id] = _resolve_pole(question, answer.value)
    return values


# --- Scoring ---

def score_likert(values: Mapping[int, int], config: TestConfig) -> LikertScoreResult:
    """Averages normalized item values per dimension and per facet/aspect."""
    dimension_values: Dict[str, List[float]] = {dim.code: [] for dim in config.dimensions}
    sub_values: Dict[str, Dict[str, Dict[str, List[float]]]] = {
        "facets": {dim.code: {f.code: [] for f in dim.facets} for dim in config.dimensions if dim.facets},
        "aspects": {dim.code: {a.code: [] for a in dim.aspects} for dim in config.dimensions if dim.aspects},
    }

    for question in config.questions:
        normalized = normalize_likert_value(values[question.id], question.reversed)
        # Every item counts toward its dimension, tagged or not.
        dimension_values[question.dimension].append(normalized)
        tag = question.sub_scale
        if tag:
            kind, code = tag
            sub_values[kind][question.dimension][code].append(normalized)

    dimensions = {code: _mean_score(vals) for code, vals in dimension_values.items()}
    sub_scores: Dict[str, Optional[Dict[str, Dict[str, int]]]] = {}
    for kind, per_dimension in sub_values.items():
        sub_scores[kind] = {
            dim_code: {code: _mean_score(vals) for code, vals in subs.items()}
            for dim_code, subs in per_dimension.items()
        } or None

    logger.debug(f"Likert scores for {config.taxonomy.value}: {dimensions}")
    return LikertScoreResult(dimensions=dimensions, facets=sub_scores["facets"], aspects=sub_scores["aspects"])


def score_binary(poles: Mapping[int, str], config: TestConfig) -> BinaryScoreResult:
    """Counts pole-A choices per dichotomy and derives the type code."""
    dichotomies: Dict[str, DichotomyScore] = {}
    for dim in config.dimensions:
        pole_a, pole_b = dim.poles
        questions = [q for q in config.questions if q.dichotomy == dim.code]
        total = len(questions)
        count_a = sum(1 for q in questions if poles[q.id] == q.option_a.pole)

        percentage_a = round_half_up(count_a / total * 100) if total else 0
        # Decided on the reported percentage; 50 resolves toward pole A.
        dominant_pole = pole_a if total and percentage_a >= 50 else pole_b
        dichotomies[dim.code] = DichotomyScore(percentage_a=percentage_a, dominant_pole=dominant_pole)

    # Dominant poles in the bank's fixed dichotomy order, e.g. "INTJ".
    type_code = "".join(dichotomies[dim.code].dominant_pole for dim in config.dimensions)
    logger.debug(f"Binary scores for {config.taxonomy.value}: {type_code}")
    return BinaryScoreResult(dichotomies=dichotomies, type_code=type_code)


def calculate_scores(
    answers: Iterable[AnswerInput],
    config: TestConfig,
    drop_unknown: bool = False,
) -> Union[LikertScoreResult, BinaryScoreResult]:
    """
    Validates a complete answer set and scores it. Nothing is computed for a
    rejected submission; the result is produced whole or not at all.
    """
    values = validate_answers(answers, config, drop_unknown=drop_unknown)
    if config.format == "likert":
        return score_likert(values, config)
    return score_binary(values, config)


def calculate_scores_for(
    taxonomy: Union[TestTaxonomy, str],
    answers: Iterable[AnswerInput],
    drop_unknown: bool = False,
) -> Union[LikertScoreResult, BinaryScoreResult]:
    """Scores answers against the registered question bank of a taxonomy."""
    return calculate_scores(answers, get_test_config(taxonomy), drop_unknown=drop_unknown)
