"""
Pytest configuration and shared fixtures for VoxFoyer testing.

Provides a fixed reference instant, household contexts, engine components
and temporary configuration directories for unit and integration tests.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import Mock

import pytest
import yaml

from voxfoyer.intelligence.child_matcher import HouseholdContext
from voxfoyer.intelligence.guess_provider import GuessProvider, RawGuess
from voxfoyer.intelligence.task_extractor import SemanticTaskExtractor
from voxfoyer.processors.core.temporal_resolver import TemporalResolver

from .fixtures.sample_data import FIXED_NOW, SAMPLE_CHILDREN, SAMPLE_CONFIGURATIONS


@pytest.fixture
def now():
    """Fixed reference instant (a Monday morning)"""
    return FIXED_NOW


@pytest.fixture
def household():
    """Household with Johan, Emma and Léa"""
    return HouseholdContext.from_names(SAMPLE_CHILDREN)


@pytest.fixture
def empty_household():
    """Household without any child"""
    return HouseholdContext()


@pytest.fixture
def temporal_resolver():
    """Resolver with default settings"""
    return TemporalResolver()


@pytest.fixture
def keyword_extractor(temporal_resolver):
    """Extractor backed by the keyword guess provider"""
    return SemanticTaskExtractor(temporal_resolver=temporal_resolver)


@pytest.fixture
def mock_guess_provider():
    """Guess provider returning a configurable RawGuess"""
    provider = Mock(spec=GuessProvider)
    provider.guess.return_value = RawGuess(
        action_text="Acheter du pain",
        category_raw="quotidien",
        child_name_raw=None,
        date_raw=None,
        urgency_raw="normale",
        confidence=0.9,
    )
    return provider


@pytest.fixture
def mocked_extractor(mock_guess_provider, temporal_resolver):
    """Extractor whose guesses come from the mock provider"""
    return SemanticTaskExtractor(
        guess_provider=mock_guess_provider,
        temporal_resolver=temporal_resolver,
    )


# Configuration Fixtures
@pytest.fixture
def temp_config_dir():
    """Temporary directory holding a default_config.yaml"""
    with tempfile.TemporaryDirectory() as temp_dir:
        config_dir = Path(temp_dir) / "config"
        config_dir.mkdir()

        with open(config_dir / "default_config.yaml", "w", encoding="utf-8") as f:
            yaml.safe_dump(SAMPLE_CONFIGURATIONS["default"], f, allow_unicode=True)

        yield config_dir


@pytest.fixture
def clean_env(monkeypatch):
    """Remove VOXFOYER_* variables so tests see only their own overrides"""
    for key in list(os.environ):
        if key.startswith("VOXFOYER_"):
            monkeypatch.delenv(key, raising=False)
    return monkeypatch
