"""Speed-up editor — builds the filter_complex graph that fast-forwards silences.

Each internal silence contributes a pair of segments: the normal-speed
stretch before it (ending ``margin`` seconds into the silence) and the
sped-up middle of the silence. A final normal-speed segment runs from the
last silence to the end of the media, and one concat filter stitches all
segments back together in chronological order.

Segment ``k`` (1-based) is written to nodes ``2k-1`` (before) and ``2k``
(during); the trailing segment is node ``2N+1``.
"""

import logging
from dataclasses import dataclass, field
from typing import Sequence

from autoscrub.editors.loudness import (
    AUDIO_OUTPUT_LABEL,
    GAIN_OUTPUT_LABEL,
    volume_stage,
)
from autoscrub.editors.tempo import atempo_chain, setpts_speedup
from autoscrub.manifest import ScrubConfig
from autoscrub.models import TimeRange

logger = logging.getLogger(__name__)

V_IN = "[0:v]"
A_IN = "[0:a]"
SETPTS = "setpts=PTS-STARTPTS"


@dataclass(frozen=True)
class SegmentBoundaries:
    """Trim ranges around one silence, in seconds of the source media."""

    before: tuple[float, float]
    during: tuple[float, float]


@dataclass(frozen=True)
class BuildCursor:
    """Position of graph assembly: pairs emitted so far and where the next one starts."""

    segment_index: int = 0
    cursor_time: float = 0.0


@dataclass
class GraphStages:
    video: list[str] = field(default_factory=list)
    audio: list[str] = field(default_factory=list)
    concat: list[str] = field(default_factory=list)
    nodes: int = 0


def truncate_silences(silences: Sequence[TimeRange]) -> Sequence[TimeRange]:
    """Omit silence at the very start and end of the media.

    Those stretches are absorbed by the leading and trailing normal-speed
    segments. Returns a slice of *silences*.
    """
    if not silences:
        return silences[:0]
    first = 1 if silences[0].start <= 0 else 0
    last = len(silences) - (1 if silences[-1].open_ended else 0)
    return silences[first:last]


def segment_boundaries(
    cursor_time: float, silence: TimeRange, margin: float
) -> tuple[SegmentBoundaries, float]:
    """Return the trim ranges for *silence* and the cursor for the next one.

    A "during" range of zero or negative length is returned as is.
    """
    if silence.end is None:
        raise ValueError(f"open-ended silence at {silence.start} cannot be sped up")

    begin = silence.start + margin
    end = silence.end - margin
    bounds = SegmentBoundaries(before=(cursor_time, begin), during=(begin, end))
    return bounds, end


def add_silence(
    stages: GraphStages,
    cursor: BuildCursor,
    silence: TimeRange,
    config: ScrubConfig,
) -> BuildCursor:
    """Append the before/during stages for *silence* and return the advanced cursor."""
    k = cursor.segment_index + 1
    before, during = 2 * k - 1, 2 * k
    bounds, next_time = segment_boundaries(cursor.cursor_time, silence, config.margin)
    b_from, b_to = bounds.before
    d_from, d_to = bounds.during

    tempo = atempo_chain(config.speed)
    speedup_audio = f"a{SETPTS}, {tempo}" if tempo else f"a{SETPTS}"

    stages.video.extend([
        f"{V_IN} trim={b_from}:{b_to}, {SETPTS} [v{before}];",
        f"{V_IN} trim={d_from}:{d_to}, {setpts_speedup(config.speed)} [v{during}];",
    ])
    stages.audio.extend([
        f"{A_IN} atrim={b_from}:{b_to}, a{SETPTS} [a{before}];",
        f"{A_IN} atrim={d_from}:{d_to}, {speedup_audio} [a{during}];",
    ])
    stages.concat.append(f"[v{before}] [a{before}] [v{during}] [a{during}]")
    stages.nodes = during

    return BuildCursor(segment_index=k, cursor_time=next_time)


def add_tail(stages: GraphStages, cursor: BuildCursor) -> None:
    """Append the normal-speed segment from the last silence to the end of media."""
    node = 2 * cursor.segment_index + 1
    trim_till_end = f"trim=start={cursor.cursor_time}"

    stages.video.append(f"{V_IN} {trim_till_end}, {SETPTS} [v{node}];")
    stages.audio.append(f"{A_IN} a{trim_till_end}, a{SETPTS} [a{node}];")
    stages.concat.append(f"[v{node}] [a{node}]")
    stages.nodes = node


def build_stages(silences: Sequence[TimeRange], config: ScrubConfig) -> GraphStages:
    """Fold every internal silence into filter stages, then add the tail."""
    stages = GraphStages()
    cursor = BuildCursor()
    for silence in truncate_silences(silences):
        cursor = add_silence(stages, cursor, silence, config)
    add_tail(stages, cursor)

    logger.debug("speeding up %d silences across %d segments", cursor.segment_index, stages.nodes)
    return stages


def render(stages: GraphStages, gain_pending: bool = False) -> str:
    """Join the stages into filter_complex text ending in a concat filter."""
    a_out = GAIN_OUTPUT_LABEL if gain_pending else AUDIO_OUTPUT_LABEL
    concat = " ".join(stages.concat) + f" concat=n={stages.nodes}:v=1:a=1 [v] {a_out};"
    return "\n".join(["\n".join(stages.video), "\n".join(stages.audio), concat])


def build_filtergraph(
    silences: Sequence[TimeRange], config: ScrubConfig, gain: float = 0.0
) -> str:
    """Return the complete filtergraph, including the volume stage for nonzero *gain*."""
    stages = build_stages(silences, config)
    return render(stages, gain_pending=gain != 0) + volume_stage(gain)
