"""Shared test fixtures."""

from pathlib import Path

import pytest

from autoscrub.manifest import ScrubConfig

FIXTURES_DIR = Path(__file__).parent / "fixtures"


@pytest.fixture
def sample_manifest_path() -> Path:
    return FIXTURES_DIR / "sample_manifest.json"


@pytest.fixture
def config() -> ScrubConfig:
    return ScrubConfig(min_duration=2.0, margin=0.25, speed=8.0)
