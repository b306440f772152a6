"""Loudness normalization stage appended after the concat filter."""

# concat writes its audio here when a volume stage follows
GAIN_OUTPUT_LABEL = "[an]"
AUDIO_OUTPUT_LABEL = "[a]"

def compute_gain(measured_db: float, target_db: float) -> float:
    """Gain in dB that brings *measured_db* to *target_db*."""
    return target_db - measured_db


def volume_stage(gain: float) -> str:
    """Return the volume filter line, or an empty string for zero gain."""
    if gain == 0:
        return ""
    return f"\n{GAIN_OUTPUT_LABEL} volume={gain}dB {AUDIO_OUTPUT_LABEL};"
