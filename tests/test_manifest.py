"""Tests for manifest loading and validation."""

import json
from pathlib import Path

import pytest

from autoscrub.manifest import (
    ConfigurationError,
    Manifest,
    ScrubConfig,
    load_manifest,
)


class TestScrubConfig:
    def test_defaults(self):
        cfg = ScrubConfig()
        assert cfg.min_duration == 2.0
        assert cfg.margin == 0.25
        assert cfg.speed == 8.0
        assert cfg.threshold_db == -18.0
        assert cfg.target_lufs == -18.0
        assert cfg.normalize is True

    def test_margin_below_half_duration_accepted(self):
        cfg = ScrubConfig(min_duration=2.0, margin=0.9)
        assert cfg.margin == 0.9

    def test_margin_at_or_above_half_duration_rejected(self):
        with pytest.raises(ConfigurationError, match="less than half"):
            ScrubConfig(min_duration=2.0, margin=1.0)

    def test_negative_margin_rejected(self):
        with pytest.raises(ConfigurationError):
            ScrubConfig(margin=-0.1)

    def test_non_positive_duration_rejected(self):
        with pytest.raises(ConfigurationError):
            ScrubConfig(min_duration=0.0)

    def test_non_positive_speed_rejected(self):
        with pytest.raises(ConfigurationError, match="speed"):
            ScrubConfig(speed=0.0)

    def test_positive_target_rejected(self):
        with pytest.raises(ConfigurationError, match="target_lufs"):
            ScrubConfig(target_lufs=1.0)

    @pytest.mark.parametrize("field", ["min_duration", "margin", "speed", "threshold_db", "target_lufs"])
    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_rejected(self, field, value):
        with pytest.raises(ConfigurationError, match="finite"):
            ScrubConfig(**{field: value})

    def test_is_value_error(self):
        with pytest.raises(ValueError):
            ScrubConfig(speed=-1.0)


class TestManifest:
    def test_minimal(self):
        m = Manifest(input=Path("in.mp4"))
        assert m.version == "1"
        assert m.output is None
        assert m.scrub == ScrubConfig()


class TestLoadManifest:
    def test_load_sample(self, sample_manifest_path: Path):
        m = load_manifest(sample_manifest_path)
        assert m.version == "1"
        assert m.input == Path("video.mp4")
        assert m.output is None
        assert m.scrub.min_duration == 0.5
        assert m.scrub.margin == 0.0
        assert m.scrub.target_lufs == -14.0

    def test_load_invalid_json(self, tmp_path: Path):
        bad = tmp_path / "bad.json"
        bad.write_text("not json")
        with pytest.raises(json.JSONDecodeError):
            load_manifest(bad)

    def test_load_missing_fields(self, tmp_path: Path):
        incomplete = tmp_path / "incomplete.json"
        incomplete.write_text('{"version": "1"}')
        with pytest.raises(ValueError, match="must contain"):
            load_manifest(incomplete)

    def test_load_invalid_scrub(self, tmp_path: Path):
        path = tmp_path / "m.json"
        path.write_text(json.dumps({"input": "a.mp4", "scrub": {"min_duration": 1.0, "margin": 0.5}}))
        with pytest.raises(ConfigurationError):
            load_manifest(path)
