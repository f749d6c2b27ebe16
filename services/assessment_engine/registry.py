"""
Process-wide, read-only table of question banks, one per taxonomy.
"""
import logging
from functools import lru_cache
from pathlib import Path
from typing import Dict, List, Optional, Union

from services.core.config import engine_settings

from .definitions import CONFIG_FILES, TestTaxonomy
from .loader import load_test_config_from_file
from .models import TestConfig, UnknownTaxonomyError

logger = logging.getLogger(__name__)


def coerce_taxonomy(taxonomy: Union[TestTaxonomy, str]) -> TestTaxonomy:
    """Accepts the enum or its string value; anything else is a deployment defect."""
    if isinstance(taxonomy, TestTaxonomy):
        return taxonomy
    try:
        return TestTaxonomy(taxonomy)
    except ValueError:
        raise UnknownTaxonomyError(f"Unsupported test type: {taxonomy!r}") from None


@lru_cache(maxsize=None)
def _load(taxonomy: TestTaxonomy, data_dir: Path) -> TestConfig:
    file_name = CONFIG_FILES.get(taxonomy)
    if file_name is None:
        raise UnknownTaxonomyError(f"No question bank registered for test type: {taxonomy.value}")
    config = load_test_config_from_file(data_dir / file_name)
    if config.taxonomy != taxonomy:
        raise UnknownTaxonomyError(
            f"Question bank {file_name} declares '{config.taxonomy.value}', expected '{taxonomy.value}'"
        )
    return config


def get_test_config(taxonomy: Union[TestTaxonomy, str], data_dir: Optional[Path] = None) -> TestConfig:
    """
    Returns the question bank for a taxonomy. Banks are loaded on first use and
    cached for the lifetime of the process.

    Raises:
        UnknownTaxonomyError: if the identifier has no registered bank.
    """
    return _load(coerce_taxonomy(taxonomy), Path(data_dir or engine_settings.data_dir))


def get_all_test_configs(data_dir: Optional[Path] = None) -> Dict[TestTaxonomy, TestConfig]:
    return {taxonomy: get_test_config(taxonomy, data_dir) for taxonomy in TestTaxonomy}


def get_all_taxonomies() -> List[TestTaxonomy]:
    return list(CONFIG_FILES.keys())
