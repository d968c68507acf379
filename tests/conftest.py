"""Pytest configuration and shared fixtures."""

import numpy as np
import pytest

from zenscape.core.signal import SignalBuffer, Track

# Default sample rate for test audio
TEST_SR = 44100


@pytest.fixture
def sample_rate() -> int:
    """Default sample rate for tests."""
    return TEST_SR


@pytest.fixture
def pure_sine(sample_rate: int) -> SignalBuffer:
    """
    Generate a unit-amplitude 440Hz sine wave (A4 note), 5 seconds long.
    """
    duration = 5.0
    t = np.arange(int(sample_rate * duration)) / sample_rate
    y = np.sin(2 * np.pi * 440.0 * t)
    return SignalBuffer(y.astype(np.float32), sample_rate)


@pytest.fixture
def silence(sample_rate: int) -> SignalBuffer:
    """One second of digital silence."""
    return SignalBuffer(np.zeros(sample_rate, dtype=np.float32), sample_rate)


@pytest.fixture
def short_signal() -> SignalBuffer:
    """1000 samples of noise, shorter than one analysis window."""
    rng = np.random.default_rng(42)
    y = rng.standard_normal(1000).astype(np.float32) * 0.3
    return SignalBuffer(y, 22050)


@pytest.fixture
def voice_like(sample_rate: int) -> SignalBuffer:
    """
    Two seconds of a gliding tone under a slow swell, loosely voice-like.
    """
    duration = 2.0
    t = np.arange(int(sample_rate * duration)) / sample_rate
    freq = 150.0 + 100.0 * t
    phase = 2 * np.pi * np.cumsum(freq) / sample_rate
    swell = 0.2 + 0.7 * np.sin(np.pi * t / duration)
    y = swell * np.sin(phase)
    return SignalBuffer(y.astype(np.float32), sample_rate)


@pytest.fixture
def flat_envelope():
    """Factory for constant-value tracks."""
    def make(value: float, n_windows: int = 64) -> Track:
        return Track(np.full(n_windows, value, dtype=np.float32))
    return make


@pytest.fixture
def temp_audio_file(tmp_path, voice_like):
    """Write a stereo WAV whose first channel is the voice-like signal."""
    import soundfile as sf

    y = voice_like.samples
    stereo = np.stack([y, np.zeros_like(y)], axis=1)
    audio_path = tmp_path / "test_voice.wav"
    sf.write(audio_path, stereo, voice_like.sample_rate)
    return audio_path
