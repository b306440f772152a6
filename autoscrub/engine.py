"""Orchestrator — runs the scrub pipeline defined by a Manifest."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from autoscrub import ffutil
from autoscrub.analyzers.silence import analyze_silence
from autoscrub.editors.loudness import compute_gain
from autoscrub.editors.speedup import build_filtergraph, truncate_silences
from autoscrub.manifest import Manifest, ScrubConfig
from autoscrub.models import TimeRange

logger = logging.getLogger(__name__)

FILTERGRAPH_SUFFIX = ".filter-graph"
SUPPORTED_FFMPEG = range(6, 9)


@dataclass
class EngineResult:
    output_path: Path
    filtergraph: str = ""
    silences_detected: int = 0
    silences_sped_up: int = 0
    measured_lufs: float | None = None
    gain_db: float = 0.0
    silences: list[TimeRange] = field(default_factory=list)


def filtergraph_path(input_path: Path) -> Path:
    """``<dir>/<stem>.filter-graph`` next to the input video."""
    return input_path.with_name(input_path.stem + FILTERGRAPH_SUFFIX)


def synthesize(
    silences: Sequence[TimeRange],
    config: ScrubConfig,
    measured_lufs: float | None = None,
) -> tuple[str, float]:
    """Build the filtergraph for already-detected silences.

    Returns the graph text and the gain it applies. Without a loudness
    measurement (or with normalization off) no volume stage is added.
    """
    gain = 0.0
    if config.normalize and measured_lufs is not None:
        gain = compute_gain(measured_lufs, config.target_lufs)
    return build_filtergraph(silences, config, gain=gain), gain


def process(
    manifest: Manifest,
    on_progress: Callable[[str, float], None] | None = None,
) -> EngineResult:
    """Analyze the input and write its filtergraph file.

    Args:
        manifest: Validated scrub manifest.
        on_progress: Optional callback(stage_name, fraction_complete).
    """

    def _progress(stage: str, frac: float) -> None:
        if on_progress:
            on_progress(stage, frac)

    ffutil.check_ffmpeg()
    version = ffutil.ffmpeg_version()
    # advisory only: unknown or git-build versions still run
    if ffutil.major_version(version) not in SUPPORTED_FFMPEG:
        logger.warning("ffmpeg %s is untested; versions 6 to 8 are supported", version)

    logger.info("processing file: %s", manifest.input.name)
    config = manifest.scrub

    _progress("Measuring loudness" if config.normalize else "Scanning audio for silence", 0.05)
    analysis = analyze_silence(manifest.input, config)
    _progress("Building filtergraph", 0.80)

    measured = analysis.loudness.measured_db if analysis.loudness else None
    graph, gain = synthesize(analysis.silences, config, measured_lufs=measured)

    output_path = manifest.output or filtergraph_path(manifest.input)
    output_path.write_text(graph, encoding="utf-8")
    logger.info("wrote %s", output_path.name)

    _progress("Done", 1.0)
    return EngineResult(
        output_path=output_path,
        filtergraph=graph,
        silences_detected=len(analysis.silences),
        silences_sped_up=len(truncate_silences(analysis.silences)),
        measured_lufs=measured,
        gain_db=gain,
        silences=analysis.silences,
    )
