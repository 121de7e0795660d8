"""Shared fixtures for the Vitals test suite."""

import pytest

from vitals_probe import LivenessSignal
from vitals_wave import WaveformState


@pytest.fixture
def signal():
    return LivenessSignal()


@pytest.fixture
def state(signal):
    """Waveform with default geometry and no auto pulse"""
    return WaveformState(signal=signal)
