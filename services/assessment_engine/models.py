from typing import Annotated, Any, Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, PositiveInt, StrictInt, StrictStr, TypeAdapter, computed_field, field_validator

from .definitions import TestTaxonomy

ProfileCategory = Literal["low", "medium", "high"]
Score = Annotated[int, Field(ge=0, le=100)]


# --- Question bank configuration ---

class SubScaleDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    label: Optional[str] = None


class DimensionDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    label: Optional[str] = None
    facets: Tuple[SubScaleDef, ...] = ()
    aspects: Tuple[SubScaleDef, ...] = ()
    poles: Optional[Tuple[str, str]] = None  # binary dichotomies only, pole A first


class LikertQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: PositiveInt
    dimension: str
    facet: Optional[str] = None
    aspect: Optional[str] = None
    reversed: bool = False

    @property
    def sub_scale(self) -> Optional[Tuple[str, str]]:
        """('facets' | 'aspects', code) for tagged questions, None otherwise."""
        if self.facet:
            return "facets", self.facet
        if self.aspect:
            return "aspects", self.aspect
        return None


class BinaryOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    pole: str = Field(min_length=1, max_length=1)


class BinaryQuestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: PositiveInt
    dichotomy: str
    option_a: BinaryOption
    option_b: BinaryOption


Question = Union[LikertQuestion, BinaryQuestion]


class TestConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    taxonomy: TestTaxonomy
    name: str
    format: Literal["likert", "binary"]
    dimensions: Tuple[DimensionDef, ...]
    questions: Tuple[Question, ...]

    @property
    def dimension_codes(self) -> List[str]:
        return [dim.code for dim in self.dimensions]

    @property
    def question_ids(self) -> List[int]:
        return [q.id for q in self.questions]

    def get_dimension(self, code: str) -> Optional[DimensionDef]:
        return next((dim for dim in self.dimensions if dim.code == code), None)


# --- Submission ---

class Answer(BaseModel):
    """One answer as handed over by the submission layer."""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    question_id: int = Field(alias="questionId")
    value: Union[StrictInt, StrictStr]


# --- Score results ---

class LikertScoreResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["likert"] = "likert"
    dimensions: Dict[str, Score]
    facets: Optional[Dict[str, Dict[str, Score]]] = None
    aspects: Optional[Dict[str, Dict[str, Score]]] = None


class DichotomyScore(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    percentage_a: Score = Field(alias="percentageA")
    dominant_pole: str = Field(alias="dominantPole")


class BinaryScoreResult(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    type: Literal["binary"] = "binary"
    dichotomies: Dict[str, DichotomyScore]
    type_code: str = Field(alias="typeCode")


ScoreResult = Annotated[Union[LikertScoreResult, BinaryScoreResult], Field(discriminator="type")]

_score_result_adapter = TypeAdapter(ScoreResult)


def parse_score_result(data: Dict[str, Any]) -> Union[LikertScoreResult, BinaryScoreResult]:
    """Rebuilds a stored score result (camelCase or snake_case keys)."""
    return _score_result_adapter.validate_python(data)


# --- Profile engine ---

class TensionPairDef(BaseModel):
    model_config = ConfigDict(frozen=True)

    dim_a: str
    level_a: ProfileCategory
    dim_b: str
    level_b: ProfileCategory
    risk: bool
    content_key: str

    @field_validator("level_a", "level_b")
    @classmethod
    def _no_medium(cls, value: str) -> str:
        if value == "medium":
            raise ValueError("'medium' carries no narrative and cannot be a tension pair level")
        return value


class ProfileEngineOutput(BaseModel):
    model_config = ConfigDict(frozen=True)

    categories: Dict[str, ProfileCategory]
    insight_pairs: Tuple[TensionPairDef, ...] = ()
    risk_pairs: Tuple[TensionPairDef, ...] = ()
    insight_keys: Dict[str, str] = Field(default_factory=dict)  # code -> "<code>.low" / ".mid" / ".high"

    @computed_field
    @property
    def has_insights(self) -> bool:
        return len(self.insight_pairs) > 0

    @computed_field
    @property
    def has_risks(self) -> bool:
        return len(self.risk_pairs) > 0

    @computed_field
    @property
    def needs_fallback_narrative(self) -> bool:
        # Profiles without any fired pair get the generic narrative.
        return not self.insight_pairs and not self.risk_pairs


# --- Observer comparison ---

Agreement = Literal["aligned", "observer_higher", "observer_lower"]


class DimensionComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    self_score: int
    observer_score: int
    delta: int
    agreement: Agreement


class SubScaleDivergence(BaseModel):
    model_config = ConfigDict(frozen=True)

    dimension: str
    code: str
    kind: Literal["facet", "aspect"]
    self_score: int
    observer_score: int
    delta: int
    agreement: Agreement


class ObserverComparison(BaseModel):
    model_config = ConfigDict(frozen=True)

    observer_count: int
    dimensions: Tuple[DimensionComparison, ...]
    divergences: Tuple[SubScaleDivergence, ...] = ()


# Custom Error Classes
class AssessmentError(ValueError):
    """Base class for rejected submissions. Raised before any score is computed."""
    pass

class IncompleteAssessmentError(AssessmentError):
    """The answer set does not cover the active question bank."""
    pass

class MissingAnswerError(IncompleteAssessmentError):
    """One or more required questions have no answer."""

    def __init__(self, missing_ids):
        self.missing_ids = sorted(missing_ids)
        super().__init__(f"Missing answers for required questions: {self.missing_ids}")

class DuplicateAnswerError(AssessmentError):
    """More than one answer was submitted for the same question."""

    def __init__(self, duplicate_ids):
        self.duplicate_ids = sorted(duplicate_ids)
        super().__init__(f"Duplicate answers for questions: {self.duplicate_ids}")

class InvalidSubmissionError(AssessmentError):
    """Custom exception for invalid submission data (e.g., out-of-range values)."""
    pass

class TypologyConfigurationError(Exception):
    """Custom exception for issues with the question bank configuration."""
    pass

class UnknownTaxonomyError(TypologyConfigurationError):
    """No question bank is registered for the taxonomy identifier."""
    pass

class SpecValidationError(TypologyConfigurationError):
    """Question bank data failed validation beyond the pydantic schema."""
    pass

class AssignmentExistsError(RuntimeError):
    """The participant already carries a permanent taxonomy assignment."""
    pass
