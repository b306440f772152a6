"""JSON manifest schema — the contract between CLI/API and engine."""

import json
import math
from dataclasses import dataclass, field
from pathlib import Path


class ConfigurationError(ValueError):
    """Raised when scrub settings violate one of their invariants."""
    pass


@dataclass
class ScrubConfig:
    """Configuration for fast-forwarding silences and normalizing loudness.

    ``margin`` seconds at each edge of a silence stay at normal speed, so a
    silence must last longer than two margins to be sped up at all.
    """

    min_duration: float = 2.0
    margin: float = 0.25
    speed: float = 8.0
    threshold_db: float = -18.0
    target_lufs: float = -18.0
    normalize: bool = True

    def __post_init__(self) -> None:
        for name in ("min_duration", "margin", "speed", "threshold_db", "target_lufs"):
            value = getattr(self, name)
            if not math.isfinite(value):
                raise ConfigurationError(f"{name}={value} must be a finite number")
        if self.margin < 0:
            raise ConfigurationError(f"margin={self.margin} must not be negative")
        if self.min_duration <= 0:
            raise ConfigurationError(f"min_duration={self.min_duration} must be positive")
        if self.margin >= self.min_duration / 2:
            raise ConfigurationError(
                f"margin={self.margin} must be less than half of min_duration={self.min_duration}"
            )
        if self.speed <= 0:
            raise ConfigurationError(f"speed={self.speed} must be positive")
        if self.target_lufs > 0:
            raise ConfigurationError(f"target_lufs={self.target_lufs} must not be above 0 dB")


@dataclass
class Manifest:
    """Top-level scrub manifest.

    ``output`` defaults to ``<input stem>.filter-graph`` next to the input.
    """

    input: Path
    output: Path | None = None
    version: str = "1"
    scrub: ScrubConfig = field(default_factory=ScrubConfig)


def load_manifest(path: str | Path) -> Manifest:
    """Load and validate a manifest from a JSON file."""
    path = Path(path)
    data = json.loads(path.read_text())

    if "input" not in data:
        raise ValueError("Manifest must contain an 'input' field")

    scrub = ScrubConfig(**data["scrub"]) if "scrub" in data else ScrubConfig()

    return Manifest(
        version=data.get("version", "1"),
        input=Path(data["input"]),
        output=Path(data["output"]) if data.get("output") else None,
        scrub=scrub,
    )
