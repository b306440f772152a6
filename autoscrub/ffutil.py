"""FFmpeg subprocess helpers: silence detection and loudness measurement."""

import logging
import re
import shutil
import subprocess
from pathlib import Path

from autoscrub.models import TimeRange

logger = logging.getLogger(__name__)


class ExternalToolError(RuntimeError):
    """Raised when ffmpeg cannot be run or exits abnormally."""
    pass


class FFmpegNotFoundError(ExternalToolError):
    pass


_SILENCE_START = re.compile(r"silence_start: ([-+\d.eE]+)")
_SILENCE_END = re.compile(r"silence_end: ([-+\d.eE]+) \| silence_duration: ([-+\d.eE]+)")
_INTEGRATED = re.compile(r"I:\s+(-?[\d.]+|-inf) LUFS")


def check_ffmpeg() -> None:
    """Raise FFmpegNotFoundError if ffmpeg is not on PATH."""
    if shutil.which("ffmpeg") is None:
        raise FFmpegNotFoundError("ffmpeg not found on PATH")


def _run(cmd: list[str]) -> subprocess.CompletedProcess:
    logger.debug("running %s", " ".join(cmd))
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise ExternalToolError(f"{cmd[0]} failed to start: {e}") from e

    if result.returncode != 0:
        tail = (result.stderr or "").strip()[-500:]
        raise ExternalToolError(
            f"{cmd[0]} exited with rc={result.returncode}" + (f": {tail}" if tail else "")
        )
    return result


def ffmpeg_version() -> str:
    """Return the version string reported by ``ffmpeg -version`` (e.g. ``n7.1``)."""
    result = _run(["ffmpeg", "-hide_banner", "-version"])
    first_line = result.stdout.splitlines()[0] if result.stdout else ""
    parts = first_line.split()
    if len(parts) < 3:
        raise ExternalToolError(f"unrecognized ffmpeg version output: {first_line!r}")
    version = parts[2]
    logger.info("ffmpeg version: %s", version)
    return version


def major_version(version: str) -> int | None:
    """Major release number of an ffmpeg version string, ``n7.1.3`` -> 7.

    Git builds (``N-112233-g0123abc``) carry no release number; None is returned.
    """
    match = re.match(r"n?(\d+)\.", version)
    if match is None:
        return None
    return int(match.group(1))


def parse_silence_ranges(stderr: str) -> list[TimeRange]:
    """Parse silencedetect output from ffmpeg stderr into TimeRanges.

    A ``silence_start`` with no matching ``silence_end`` (silence extends to
    EOF) becomes an open-ended range whose ``end`` is None.
    """
    ranges: list[TimeRange] = []
    pending: float | None = None
    total_duration = 0.0

    for line in stderr.splitlines():
        if not line.startswith("[silencedetect "):
            continue
        start = _SILENCE_START.search(line)
        if start:
            pending = float(start.group(1))
            continue
        end = _SILENCE_END.search(line)
        if end and pending is not None:
            ranges.append(TimeRange(start=pending, end=float(end.group(1))))
            total_duration += float(end.group(2))
            pending = None

    if pending is not None:
        ranges.append(TimeRange(start=pending, end=None))

    n = len(ranges)
    average = total_duration / n if n else 0.0
    logger.info("found %d silences with average_duration=%s", n, average)
    return ranges


def detect_silence(
    input_path: Path,
    threshold_db: float,
    min_duration: float,
) -> list[TimeRange]:
    """Run FFmpeg silencedetect and return silent time ranges in order."""
    cmd = [
        "ffmpeg",
        "-hide_banner",
        "-nostats",
        "-i", str(input_path),
        "-af", f"silencedetect=n={threshold_db}dB:d={min_duration}",
        "-f", "null", "-",
    ]
    result = _run(cmd)
    return parse_silence_ranges(result.stderr)


def parse_loudness(stderr: str) -> float:
    """Extract integrated loudness (LUFS) from ebur128 summary output.

    Per-frame lines also carry an ``I:`` field, so only the text after the
    final ``Summary:`` header is searched.
    """
    summary_at = stderr.rfind("Summary:")
    if summary_at == -1:
        raise ExternalToolError("ebur128 summary not found in ffmpeg output")

    match = _INTEGRATED.search(stderr, summary_at)
    if match is None:
        raise ExternalToolError("integrated loudness not found in ebur128 summary")
    return float(match.group(1))


def measure_loudness(input_path: Path) -> float:
    """Scan the audio with the ebur128 filter and return integrated loudness."""
    cmd = [
        "ffmpeg",
        "-hide_banner",
        "-nostats",
        "-i", str(input_path),
        "-c:v", "copy",
        "-af", "ebur128",
        "-f", "null", "-",
    ]
    result = _run(cmd)
    return parse_loudness(result.stderr)
