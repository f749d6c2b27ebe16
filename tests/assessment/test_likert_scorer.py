# tests/assessment/test_likert_scorer.py
import pytest

from services.assessment_engine.loader import load_test_config_data
from services.assessment_engine.models import LikertScoreResult
from services.assessment_engine.scorer import (
    calculate_scores,
    calculate_scores_for,
    normalize_likert_value,
    round_half_up,
    score_likert,
)

# Small bank: one dimension with two facets and an untagged item.
SMALL_BANK = {
    "taxonomy": "HEXACO_MODIFIED",
    "name": "small",
    "format": "likert",
    "dimensions": [
        {"code": "H", "facets": [{"code": "sincerity"}, {"code": "fairness"}]},
        {"code": "E"},
    ],
    "questions": [
        {"id": 1, "dimension": "H", "facet": "sincerity"},
        {"id": 2, "dimension": "H", "facet": "sincerity", "reversed": True},
        {"id": 3, "dimension": "H", "facet": "fairness"},
        {"id": 4, "dimension": "H"},
        {"id": 5, "dimension": "E"},
    ],
}


@pytest.fixture(scope="module")
def small_config():
    return load_test_config_data(SMALL_BANK)


def keyed_answers(config, high=True):
    """Answers every item toward (or away from) its keyed direction."""
    answers = []
    for q in config.questions:
        toward = 1 if q.reversed else 5
        away = 5 if q.reversed else 1
        answers.append({"questionId": q.id, "value": toward if high else away})
    return answers


# --- Helpers ---

@pytest.mark.parametrize("value, expected", [(1, 0), (2, 25), (3, 50), (4, 75), (5, 100)])
def test_normalize_likert_value(value, expected):
    assert normalize_likert_value(value) == expected


@pytest.mark.parametrize("value, expected", [(1, 100), (2, 75), (3, 50), (4, 25), (5, 0)])
def test_normalize_likert_value_reversed(value, expected):
    assert normalize_likert_value(value, reversed_item=True) == expected


def test_round_half_up_rounds_halves_up():
    assert round_half_up(62.5) == 63
    assert round_half_up(87.5) == 88
    assert round_half_up(62.4999) == 62
    assert round_half_up(0) == 0
    assert round_half_up(100) == 100


# --- Dimension and facet scoring ---

def test_small_bank_scores(small_config):
    # H: 1 -> 100, 2 (reversed 4) -> 25, 3 -> 50, 4 -> 75; mean 62.5 -> 63
    values = {1: 5, 2: 4, 3: 3, 4: 4, 5: 2}
    result = score_likert(values, small_config)

    assert result.dimensions == {"H": 63, "E": 25}
    assert result.facets == {"H": {"sincerity": 63, "fairness": 50}}
    assert result.aspects is None


def test_untagged_items_count_toward_dimension_only(small_config):
    # Only the untagged item 4 moves; facets stay put.
    base = {1: 3, 2: 3, 3: 3, 4: 3, 5: 3}
    moved = {**base, 4: 5}
    before = score_likert(base, small_config)
    after = score_likert(moved, small_config)

    assert before.dimensions["H"] == 50
    assert after.dimensions["H"] == 63  # (50 + 50 + 50 + 100) / 4 = 62.5
    assert after.facets == before.facets


def test_facet_without_questions_scores_zero():
    bank = {
        "taxonomy": "HEXACO",
        "name": "sparse",
        "format": "likert",
        "dimensions": [{"code": "H", "facets": [{"code": "sincerity"}, {"code": "modesty"}]}],
        "questions": [{"id": 1, "dimension": "H", "facet": "sincerity"}],
    }
    config = load_test_config_data(bank)
    result = calculate_scores([{"questionId": 1, "value": 5}], config)
    assert result.facets == {"H": {"sincerity": 100, "modesty": 0}}


def test_hexaco_neutral_answers(hexaco_config, uniform_answers):
    result = calculate_scores(uniform_answers(hexaco_config, 3), hexaco_config)

    assert isinstance(result, LikertScoreResult)
    assert set(result.dimensions) == {"H", "E", "X", "A", "C", "O", "I"}
    assert all(score == 50 for score in result.dimensions.values())
    assert set(result.facets) == {"H", "E", "X", "A", "C", "O"}
    assert all(len(facets) == 4 for facets in result.facets.values())
    assert result.aspects is None


def test_hexaco_keyed_extremes(hexaco_config):
    high = calculate_scores(keyed_answers(hexaco_config, high=True), hexaco_config)
    low = calculate_scores(keyed_answers(hexaco_config, high=False), hexaco_config)

    assert all(score == 100 for score in high.dimensions.values())
    assert all(score == 0 for score in low.dimensions.values())
    assert all(score == 100 for facets in high.facets.values() for score in facets.values())


def test_all_fives_mirror_reversed_items(hexaco_config, uniform_answers):
    # Half of each HEXACO facet is reverse-keyed, so straight-lining lands in the middle.
    result = calculate_scores(uniform_answers(hexaco_config, 5), hexaco_config)
    assert all(score == 50 for score in result.dimensions.values())


def test_big_five_reports_aspects(big_five_config):
    result = calculate_scores(keyed_answers(big_five_config), big_five_config)

    assert list(result.dimensions) == ["O", "C", "E", "A", "N"]
    assert result.facets is None
    assert result.aspects["N"] == {"volatility": 100, "withdrawal": 100}
    assert result.aspects["O"] == {"intellect": 100, "openness": 100}


def test_hexaco_modified_bank(hexaco_modified_config, uniform_answers):
    result = calculate_scores(uniform_answers(hexaco_modified_config, 1), hexaco_modified_config)

    assert set(result.dimensions) == {"H", "E", "X", "A", "C", "O"}
    # 3 of 10 items per dimension are reversed: (7 * 0 + 3 * 100) / 10
    assert all(score == 30 for score in result.dimensions.values())
    assert "I" not in result.dimensions


def test_scores_are_bounded_integers(hexaco_config):
    answers = [{"questionId": q.id, "value": (q.id % 5) + 1} for q in hexaco_config.questions]
    result = calculate_scores(answers, hexaco_config)
    for score in result.dimensions.values():
        assert isinstance(score, int)
        assert 0 <= score <= 100


def test_calculate_scores_for_uses_registered_bank(uniform_answers, big_five_config):
    result = calculate_scores_for("BIG_FIVE", uniform_answers(big_five_config, 3))
    assert result.dimensions == {"O": 50, "C": 50, "E": 50, "A": 50, "N": 50}


def test_result_serializes_for_storage(small_config):
    result = score_likert({1: 5, 2: 1, 3: 5, 4: 5, 5: 1}, small_config)
    dumped = result.model_dump()
    assert dumped["type"] == "likert"
    assert dumped["dimensions"] == {"H": 100, "E": 0}


@pytest.mark.parametrize("value", [1, 2, 3, 4, 5])
def test_reversed_item_mirrors_the_opposite_answer(value):
    def bank(reversed_item):
        return load_test_config_data({
            "taxonomy": "HEXACO",
            "name": "single",
            "format": "likert",
            "dimensions": [{"code": "H", "facets": [{"code": "sincerity"}]}],
            "questions": [{"id": 1, "dimension": "H", "facet": "sincerity", "reversed": reversed_item}],
        })

    on_reversed = score_likert({1: value}, bank(True))
    on_keyed = score_likert({1: 6 - value}, bank(False))
    assert on_reversed == on_keyed


def test_scoring_is_deterministic(hexaco_config, mbti_config):
    likert_answers = [{"questionId": q.id, "value": (q.id * 7) % 5 + 1} for q in hexaco_config.questions]
    binary_answers = [{"questionId": q.id, "value": "A" if q.id % 3 else "B"} for q in mbti_config.questions]

    first = calculate_scores(likert_answers, hexaco_config).model_dump_json()
    second = calculate_scores(list(reversed(likert_answers)), hexaco_config).model_dump_json()
    assert first == second

    first = calculate_scores(binary_answers, mbti_config).model_dump_json(by_alias=True)
    second = calculate_scores(binary_answers, mbti_config).model_dump_json(by_alias=True)
    assert first == second
