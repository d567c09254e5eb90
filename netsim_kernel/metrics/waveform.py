"""
Waveform Generator — synthetic utilization as oscillation plus noise.

value(t) = base + amplitude * sin(2*pi*f*t + phase)
                + noise_amplitude * sin(2*pi*noise_f*t)

clamped to [0, 100]. The randomness lives entirely in the pattern, which is
drawn once per resource, so identical (pattern, t) pairs always agree.
"""

import math
import random
from typing import Optional

from netsim_kernel.models.waveform import WaveformPattern

MIN_VALUE = 0.0
MAX_VALUE = 100.0
DEFAULT_SEED_VALUE = 50.0

FREQUENCY_RANGE = (0.2, 0.5)
AMPLITUDE_RANGE = (15.0, 40.0)
NOISE_AMPLITUDE_RANGE = (5.0, 15.0)
NOISE_FREQUENCY_RANGE = (0.8, 1.2)


def _draw(rng: random.Random, bounds: tuple) -> float:
    low, high = bounds
    return low + rng.random() * (high - low)


def create_pattern(
    seed_value: Optional[float] = None,
    rng: Optional[random.Random] = None,
) -> WaveformPattern:
    """Draw a new pattern centred on seed_value (50.0 when not given)."""
    rng = rng or random.Random()
    return WaveformPattern(
        frequency=_draw(rng, FREQUENCY_RANGE),
        phase=rng.random() * 2 * math.pi,
        base_value=DEFAULT_SEED_VALUE if seed_value is None else seed_value,
        amplitude=_draw(rng, AMPLITUDE_RANGE),
        noise_amplitude=_draw(rng, NOISE_AMPLITUDE_RANGE),
        noise_frequency=_draw(rng, NOISE_FREQUENCY_RANGE),
    )


def _raw_value(pattern: WaveformPattern, t: float) -> float:
    return (
        pattern.base_value
        + pattern.amplitude * math.sin(2 * math.pi * pattern.frequency * t + pattern.phase)
        + pattern.noise_amplitude * math.sin(2 * math.pi * pattern.noise_frequency * t)
    )


def _clamp(value: float) -> float:
    return min(MAX_VALUE, max(MIN_VALUE, value))


def waveform_value(pattern: WaveformPattern, elapsed_seconds: float) -> float:
    """Evaluate the pattern at the given point on its clock."""
    return _clamp(_raw_value(pattern, elapsed_seconds))


def anchored_value(pattern: WaveformPattern, elapsed_seconds: float) -> float:
    """
    Evaluate the pattern shifted by a constant so that t=0 yields base_value.

    Both sine terms keep their shape; only the phase offset of the main term
    at t=0 is removed, so a resource resumes from its last known value.
    """
    t = elapsed_seconds
    main = (
        math.sin(2 * math.pi * pattern.frequency * t + pattern.phase)
        - math.sin(pattern.phase)
    )
    return _clamp(
        pattern.base_value
        + pattern.amplitude * main
        + pattern.noise_amplitude * math.sin(2 * math.pi * pattern.noise_frequency * t)
    )
