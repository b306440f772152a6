"""Tests for the gain stage."""

from autoscrub.editors.loudness import compute_gain, volume_stage


class TestComputeGain:
    def test_boost(self):
        assert compute_gain(-20.0, -18.0) == 2.0

    def test_cut(self):
        assert compute_gain(-10.0, -14.0) == -4.0

    def test_on_target(self):
        assert compute_gain(-18.0, -18.0) == 0.0


class TestVolumeStage:
    def test_nonzero_gain(self):
        assert volume_stage(2.0) == "\n[an] volume=2.0dB [a];"

    def test_zero_gain(self):
        assert volume_stage(0.0) == ""
