import logging
from pathlib import Path
from typing import Any, Dict, Union

import yaml
from pydantic import ValidationError

from services.assessment_engine.models import (
    BinaryQuestion,
    LikertQuestion,
    SpecValidationError,
    TestConfig,
)

logger = logging.getLogger(__name__)


def _check_unique(values, what: str, scope: str):
    seen = set()
    for value in values:
        if value in seen:
            raise SpecValidationError(f"Duplicate {what} '{value}' in {scope}")
        seen.add(value)


def _validate_likert(config: TestConfig) -> None:
    dimensions = {dim.code: dim for dim in config.dimensions}
    counts = {code: 0 for code in dimensions}

    for question in config.questions:
        if not isinstance(question, LikertQuestion):
            raise SpecValidationError(f"Question {question.id} is not a Likert question in likert config '{config.taxonomy.value}'")
        dim = dimensions.get(question.dimension)
        if dim is None:
            raise SpecValidationError(f"Question {question.id} references unknown dimension '{question.dimension}'")
        if question.facet and question.aspect:
            raise SpecValidationError(f"Question {question.id} is tagged with both a facet and an aspect")
        if question.facet and question.facet not in {f.code for f in dim.facets}:
            raise SpecValidationError(f"Question {question.id} references unknown facet '{question.facet}' of dimension '{dim.code}'")
        if question.aspect and question.aspect not in {a.code for a in dim.aspects}:
            raise SpecValidationError(f"Question {question.id} references unknown aspect '{question.aspect}' of dimension '{dim.code}'")
        counts[dim.code] += 1

    # Empty scales are scored as 0; flag them here since configs are static.
    for code, count in counts.items():
        if count == 0:
            logger.warning(f"Dimension '{code}' in '{config.taxonomy.value}' has no questions and will always score 0")
    for dim in config.dimensions:
        for kind, subs in (("facet", dim.facets), ("aspect", dim.aspects)):
            for sub in subs:
                tagged = [q for q in config.questions if getattr(q, kind) == sub.code and q.dimension == dim.code]
                if not tagged:
                    logger.warning(f"{kind.capitalize()} '{dim.code}/{sub.code}' in '{config.taxonomy.value}' has no questions and will always score 0")


def _validate_binary(config: TestConfig) -> None:
    dimensions = {dim.code: dim for dim in config.dimensions}
    for dim in config.dimensions:
        if dim.poles is None:
            raise SpecValidationError(f"Dichotomy '{dim.code}' must declare its two poles")
        if dim.poles[0] == dim.poles[1]:
            raise SpecValidationError(f"Dichotomy '{dim.code}' has identical poles")

    for question in config.questions:
        if not isinstance(question, BinaryQuestion):
            raise SpecValidationError(f"Question {question.id} is not a binary question in binary config '{config.taxonomy.value}'")
        dim = dimensions.get(question.dichotomy)
        if dim is None:
            raise SpecValidationError(f"Question {question.id} references unknown dichotomy '{question.dichotomy}'")
        if (question.option_a.pole, question.option_b.pole) != dim.poles:
            raise SpecValidationError(
                f"Question {question.id} poles ({question.option_a.pole}, {question.option_b.pole}) "
                f"do not match dichotomy '{dim.code}' poles {dim.poles}"
            )


def load_test_config_data(data: Dict[str, Any]) -> TestConfig:
    """
    Validates the raw dictionary data against the TestConfig model
    and performs the cross-reference checks pydantic cannot express.
    """
    try:
        config = TestConfig.model_validate(data)
    except ValidationError as e:
        raise SpecValidationError(f"Invalid question bank: {e}") from e

    scope = f"config '{config.taxonomy.value}'"
    _check_unique(config.dimension_codes, "dimension code", scope)
    _check_unique(config.question_ids, "question ID", scope)
    for dim in config.dimensions:
        _check_unique([f.code for f in dim.facets], "facet code", f"dimension '{dim.code}'")
        _check_unique([a.code for a in dim.aspects], "aspect code", f"dimension '{dim.code}'")

    if config.format == "likert":
        _validate_likert(config)
    else:
        _validate_binary(config)
    return config


def load_test_config_from_file(file_path: Union[str, Path]) -> TestConfig:
    """
    Loads a question bank from a YAML file, validates it,
    and returns a TestConfig object.
    """
    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except FileNotFoundError:
        raise SpecValidationError(f"File not found: {file_path}")
    except yaml.YAMLError as e:
        raise SpecValidationError(f"Error parsing YAML file {file_path}: {e}")

    if data is None:
        raise SpecValidationError(f"YAML file is empty or invalid: {file_path}")

    config = load_test_config_data(data)
    logger.info(f"Loaded question bank '{config.taxonomy.value}' from {file_path}: {len(config.dimensions)} dimensions, {len(config.questions)} questions")
    return config
