from __future__ import annotations

import pytest

from lib_schema_config.application.store import ConfigStore, Strictness
from lib_schema_config.domain.schema import Section

from tests.support import SAMPLE_YAML, SCHEMA, open_text


@pytest.fixture
def schema() -> Section:
    return SCHEMA


@pytest.fixture
def store() -> ConfigStore:
    """A fail-fast store holding only defaults."""

    return ConfigStore(SCHEMA)


@pytest.fixture
def lenient_store() -> ConfigStore:
    """A best-effort store holding only defaults."""

    return ConfigStore(SCHEMA, strictness=Strictness.BEST_EFFORT)


@pytest.fixture
def sample_store() -> ConfigStore:
    """A fail-fast store opened from :data:`tests.support.SAMPLE_YAML`."""

    return open_text(SAMPLE_YAML)
