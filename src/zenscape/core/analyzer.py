"""
Feature extraction module for the zen transformation.

Extracts the two drivers of the synthesis stage from a mono recording:
a smoothed amplitude envelope and a coarse zero-crossing pitch track,
both on a 2048-sample window hopped every 512 samples.
"""

import logging
from dataclasses import dataclass
from typing import Callable

import numpy as np
from numpy.lib.stride_tricks import sliding_window_view
from scipy.ndimage import uniform_filter1d

from zenscape.core.signal import WINDOW_SIZE, SignalBuffer, Track

logger = logging.getLogger(__name__)


def frame_signal(samples: np.ndarray, window_size: int = WINDOW_SIZE) -> np.ndarray:
    """
    Slice a signal into overlapping analysis windows.

    Args:
        samples: Mono signal.
        window_size: Window length; the hop is a quarter of it.

    Returns:
        Array of shape (n_windows, window_size). Zero rows when the
        signal is shorter than the grid allows.
    """
    hop_size = window_size // 4
    n_windows = Track.expected_length(len(samples), window_size)
    if n_windows == 0:
        return np.zeros((0, window_size), dtype=samples.dtype)

    windows = sliding_window_view(samples, window_size)[::hop_size]
    return windows[:n_windows]


def reduce_windows(
    windows: np.ndarray,
    reducer: Callable[[np.ndarray], np.ndarray],
    batch_size: int = 1024,
) -> np.ndarray:
    """
    Apply a per-row reduction over a window view in batches.

    The view from `frame_signal` shares memory with the signal; batching
    keeps temporaries small for long recordings.
    """
    if windows.shape[0] == 0:
        return np.zeros(0, dtype=np.float64)

    return np.concatenate([
        reducer(windows[start:start + batch_size])
        for start in range(0, windows.shape[0], batch_size)
    ])


def smooth(values: np.ndarray, radius: int) -> np.ndarray:
    """
    Symmetric moving average of the given radius.

    Edge entries average only the neighbours that exist, so the ends are
    not pulled towards zero.
    """
    if len(values) == 0:
        return np.zeros(0, dtype=np.float32)

    size = 2 * radius + 1
    data = values.astype(np.float64)
    sums = uniform_filter1d(data, size=size, mode="constant", cval=0.0) * size
    counts = uniform_filter1d(np.ones_like(data), size=size, mode="constant", cval=0.0) * size
    return (sums / np.rint(counts)).astype(np.float32)


class EnvelopeExtractor:
    """Mean absolute amplitude per window, lightly smoothed."""

    def __init__(self, window_size: int = WINDOW_SIZE, smoothing_radius: int = 5):
        self.window_size = window_size
        self.smoothing_radius = smoothing_radius

    def extract(self, signal: SignalBuffer) -> Track:
        windows = frame_signal(signal.samples, self.window_size)
        raw = reduce_windows(
            windows,
            lambda batch: np.abs(batch).sum(axis=1, dtype=np.float64),
        ) / self.window_size
        values = smooth(raw, self.smoothing_radius)
        return Track(values, self.window_size, self.window_size // 4)


class PitchEstimator:
    """
    Coarse fundamental frequency from the zero-crossing count.

    Each window estimates (crossings / 2) * (sample_rate / window_size).
    This favours voice ranges and makes no attempt at musical accuracy;
    layers map the values into their own ranges.
    """

    def __init__(self, window_size: int = WINDOW_SIZE, smoothing_radius: int = 3):
        self.window_size = window_size
        self.smoothing_radius = smoothing_radius

    def count_crossings(self, windows: np.ndarray) -> np.ndarray:
        """Count adjacent pairs whose sign class (>= 0 vs < 0) differs."""
        if windows.shape[0] == 0:
            return np.zeros(0, dtype=np.int64)
        non_negative = windows >= 0
        return np.count_nonzero(non_negative[:, 1:] != non_negative[:, :-1], axis=1)

    def estimate(self, signal: SignalBuffer) -> Track:
        windows = frame_signal(signal.samples, self.window_size)
        crossings = reduce_windows(windows, self.count_crossings)
        raw = (crossings / 2.0) * (signal.sample_rate / self.window_size)
        values = smooth(raw, self.smoothing_radius)
        return Track(values, self.window_size, self.window_size // 4)


@dataclass
class AnalyzedSignal:
    """Envelope and pitch tracks extracted from one recording."""

    envelope: Track
    pitch: Track
    sample_rate: int
    n_samples: int

    @property
    def n_windows(self) -> int:
        return len(self.envelope)


class FeatureAnalyzer:
    """
    Extracts the synthesis drivers from a mono recording.

    Both tracks share the same window grid so that a window index
    means the same point in time in either of them.
    """

    def __init__(self, window_size: int = WINDOW_SIZE):
        """
        Initialize the analyzer.

        Args:
            window_size: Analysis window in samples. The hop is window_size / 4.
        """
        self.window_size = window_size
        self.envelope_extractor = EnvelopeExtractor(window_size=window_size)
        self.pitch_estimator = PitchEstimator(window_size=window_size)

    def analyze(self, signal: SignalBuffer) -> AnalyzedSignal:
        """
        Run envelope extraction and pitch estimation.

        Args:
            signal: Mono input signal.

        Returns:
            AnalyzedSignal with both tracks. Tracks are empty for inputs
            shorter than one window.
        """
        envelope = self.envelope_extractor.extract(signal)
        pitch = self.pitch_estimator.estimate(signal)

        logger.debug(
            "Analyzed %d samples at %d Hz into %d windows",
            signal.length,
            signal.sample_rate,
            len(envelope),
        )

        return AnalyzedSignal(
            envelope=envelope,
            pitch=pitch,
            sample_rate=signal.sample_rate,
            n_samples=signal.length,
        )
