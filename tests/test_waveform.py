"""Tests for the waveform generator."""

import math
import random

import pytest

from netsim_kernel.metrics.waveform import (
    DEFAULT_SEED_VALUE,
    anchored_value,
    create_pattern,
    waveform_value,
)
from netsim_kernel.models.waveform import WaveformPattern


def _flat_pattern(base: float) -> WaveformPattern:
    return WaveformPattern(
        frequency=0.3,
        phase=1.0,
        base_value=base,
        amplitude=0.0,
        noise_amplitude=0.0,
        noise_frequency=1.0,
    )


class TestCreatePattern:
    def test_parameter_ranges(self):
        rng = random.Random(7)
        for _ in range(200):
            p = create_pattern(rng=rng)
            assert 0.2 <= p.frequency < 0.5
            assert 0 <= p.phase < 2 * math.pi
            assert 15 <= p.amplitude < 40
            assert 5 <= p.noise_amplitude < 15
            assert 0.8 <= p.noise_frequency < 1.2

    def test_default_seed_value(self):
        assert create_pattern().base_value == DEFAULT_SEED_VALUE == 50.0

    def test_seed_value_becomes_base(self):
        assert create_pattern(82.0, random.Random(1)).base_value == 82.0

    def test_same_rng_seed_same_pattern(self):
        assert create_pattern(40.0, random.Random(3)) == create_pattern(40.0, random.Random(3))

    def test_pattern_is_immutable(self):
        p = create_pattern(rng=random.Random(0))
        with pytest.raises(Exception):
            p.amplitude = 1.0


class TestWaveformValue:
    def test_always_within_bounds(self):
        rng = random.Random(11)
        for _ in range(100):
            p = create_pattern(rng.uniform(-50, 150), rng)
            for t in (0, 0.5, 1.7, 13.0, 600.25, 86400.0):
                assert 0.0 <= waveform_value(p, t) <= 100.0

    def test_flat_pattern_returns_base(self):
        p = _flat_pattern(50.0)
        for t in (0.0, 1.0, 2.5, 1000.0):
            assert waveform_value(p, t) == 50.0

    def test_clamps_high_and_low(self):
        assert waveform_value(_flat_pattern(130.0), 3.0) == 100.0
        assert waveform_value(_flat_pattern(-5.0), 3.0) == 0.0

    def test_deterministic(self):
        p = create_pattern(60.0, random.Random(5))
        assert waveform_value(p, 42.125) == waveform_value(p, 42.125)

    def test_matches_formula(self):
        p = WaveformPattern(
            frequency=0.25,
            phase=0.0,
            base_value=50.0,
            amplitude=20.0,
            noise_amplitude=0.0,
            noise_frequency=1.0,
        )
        # Quarter period of a 0.25 Hz wave is one second
        assert waveform_value(p, 1.0) == pytest.approx(70.0)
        assert waveform_value(p, 3.0) == pytest.approx(30.0)


class TestAnchoredValue:
    def test_starts_at_base_value(self):
        rng = random.Random(21)
        for _ in range(100):
            p = create_pattern(rng.uniform(0, 100), rng)
            assert anchored_value(p, 0.0) == p.base_value

    def test_resumes_from_persisted_value(self):
        p = create_pattern(82.0, random.Random(8))
        assert anchored_value(p, 0.0) == 82.0

    def test_constant_shift_of_waveform(self):
        p = WaveformPattern(
            frequency=0.3,
            phase=1.2,
            base_value=50.0,
            amplitude=10.0,
            noise_amplitude=5.0,
            noise_frequency=1.0,
        )
        offset = 10.0 * math.sin(1.2)
        for t in (0.4, 2.0, 17.5):
            assert anchored_value(p, t) == pytest.approx(waveform_value(p, t) - offset)

    def test_within_bounds(self):
        rng = random.Random(13)
        for _ in range(100):
            p = create_pattern(rng.uniform(0, 100), rng)
            for t in (0.3, 5.0, 99.9):
                assert 0.0 <= anchored_value(p, t) <= 100.0
