"""Waveform Pattern — fixed oscillation parameters for one resource."""

from pydantic import BaseModel, ConfigDict


class WaveformPattern(BaseModel):
    """
    Drawn once when a resource is first observed and never changed afterwards.
    Only the elapsed time fed to the generator moves between calls.
    """

    model_config = ConfigDict(frozen=True)

    frequency: float                        # Hz of the main oscillation
    phase: float                            # radians
    base_value: float                       # centre line, usually the last known value
    amplitude: float
    noise_amplitude: float
    noise_frequency: float
