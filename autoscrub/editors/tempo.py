"""Tempo decomposition for ffmpeg's atempo filter.

A single atempo instance only accepts ratios in [0.5, 2.0], so larger or
smaller speed changes are expressed as a chain of stages.
"""

import math

from autoscrub.manifest import ConfigurationError

MAX_RATIO = 2.0
MIN_RATIO = 0.5


def factorize(factor: float) -> list[float]:
    """Split *factor* into atempo ratios whose product is *factor*.

    >>> factorize(8.0)
    [2.0, 2.0, 2.0]
    >>> factorize(3.0)
    [2.0, 1.5]
    """
    if not factor > 0 or math.isinf(factor):
        raise ConfigurationError(f"speed factor {factor} must be a positive number")

    # factor == mantissa * 2**exponent with mantissa in [0.5, 1)
    mantissa, exponent = math.frexp(factor)

    if factor >= 1:
        ratios = [MAX_RATIO] * (exponent - 1)
        remainder = mantissa * 2
    elif mantissa == 0.5:
        ratios = [MIN_RATIO] * (1 - exponent)
        remainder = 1.0
    else:
        ratios = [MIN_RATIO] * -exponent
        remainder = mantissa

    if remainder != 1.0:
        ratios.append(remainder)
    return ratios


def atempo_chain(factor: float) -> str:
    """Comma-joined atempo filters that change audio tempo by *factor*.

    The last ratio is written as its value (``atempo=1.5``), not as a quotient
    like ``atempo=3.0/2``; ffmpeg evaluates both to the same tempo.
    """
    return ",".join(f"atempo={ratio}" for ratio in factorize(factor))


def setpts_speedup(factor: float) -> str:
    """setpts filter that plays video *factor* times faster."""
    return f"setpts=(PTS-STARTPTS)/{factor}"
