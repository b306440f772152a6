"""Silence detection analyzer."""

import logging
from dataclasses import dataclass, field
from pathlib import Path

from autoscrub import ffutil
from autoscrub.editors.loudness import compute_gain
from autoscrub.manifest import ScrubConfig
from autoscrub.models import LoudnessResult, TimeRange

logger = logging.getLogger(__name__)


@dataclass
class SilenceAnalysis:
    """Everything graph synthesis needs to know about one input file."""

    silences: list[TimeRange] = field(default_factory=list)
    loudness: LoudnessResult | None = None


def adjusted_threshold(measured_db: float, threshold_db: float, target_db: float) -> float:
    """Silence threshold for the track as recorded, given it will be normalized.

    The configured threshold applies to the normalized audio, so it is
    shifted by the same amount the gain stage will shift the track.
    """
    return measured_db + threshold_db - target_db


def measure(input_path: Path, config: ScrubConfig) -> LoudnessResult:
    """Measure integrated loudness and derive gain and detection threshold."""
    measured = ffutil.measure_loudness(input_path)
    result = LoudnessResult(
        measured_db=measured,
        target_db=config.target_lufs,
        gain_db=compute_gain(measured, config.target_lufs),
        threshold_db=adjusted_threshold(measured, config.threshold_db, config.target_lufs),
    )
    logger.info(
        "measured loudness=%s dBLUFS; gain=%s dB; threshold=%s dB",
        result.measured_db, result.gain_db, result.threshold_db,
    )
    return result


def analyze_silence(input_path: Path, config: ScrubConfig) -> SilenceAnalysis:
    """Measure loudness (when normalizing) and detect silences, once each."""
    loudness = measure(input_path, config) if config.normalize else None
    threshold = loudness.threshold_db if loudness else config.threshold_db

    logger.info("searching for silence...")
    silences = ffutil.detect_silence(
        input_path,
        threshold_db=threshold,
        min_duration=config.min_duration,
    )
    return SilenceAnalysis(silences=silences, loudness=loudness)
