"""
Signal containers shared by the analysis and synthesis stages.

Mono input, windowed analysis tracks and the stereo result.
"""

from dataclasses import dataclass, field

import numpy as np

from zenscape.errors import InvalidInputError

WINDOW_SIZE = 2048
HOP_SIZE = WINDOW_SIZE // 4


def _is_positive_integral(value) -> bool:
    try:
        return float(value).is_integer() and value > 0
    except (TypeError, ValueError, OverflowError):
        return False


@dataclass(frozen=True)
class SignalBuffer:
    """Read-only view over one channel of recorded samples."""

    samples: np.ndarray
    sample_rate: int
    length: int | None = None

    def __post_init__(self):
        samples = np.asarray(self.samples, dtype=np.float32)

        if samples.ndim != 1:
            raise InvalidInputError(
                f"Expected a 1-D mono signal, got shape {samples.shape}"
            )
        if not _is_positive_integral(self.sample_rate):
            raise InvalidInputError(
                f"Sample rate must be a positive integer, got {self.sample_rate!r}"
            )
        if self.length is not None and self.length != len(samples):
            raise InvalidInputError(
                f"Declared length {self.length} does not match "
                f"sample count {len(samples)}"
            )
        if not np.all(np.isfinite(samples)):
            raise InvalidInputError("Signal contains NaN or infinite samples")

        samples = samples.copy()
        samples.flags.writeable = False

        object.__setattr__(self, "samples", samples)
        object.__setattr__(self, "sample_rate", int(self.sample_rate))
        object.__setattr__(self, "length", len(samples))

    @property
    def duration(self) -> float:
        """Duration in seconds."""
        return self.length / self.sample_rate

    @property
    def output_length(self) -> int:
        """
        Number of output samples per channel for this input.

        floor(duration * sample_rate), with the product rounded first so
        float error in the duration never drops the final sample.
        """
        return int(np.floor(round(self.duration * self.sample_rate, 6)))


@dataclass(frozen=True)
class Track:
    """Per-window analysis values on the shared window/hop grid."""

    values: np.ndarray
    window_size: int = WINDOW_SIZE
    hop_size: int = HOP_SIZE

    def __len__(self) -> int:
        return len(self.values)

    @property
    def is_empty(self) -> bool:
        return len(self.values) == 0

    @staticmethod
    def expected_length(n_samples: int, window_size: int = WINDOW_SIZE) -> int:
        """Number of windows for a signal of `n_samples` samples."""
        hop_size = window_size // 4
        return max(0, (n_samples - window_size) // hop_size)

    def per_sample(self, n_samples: int) -> np.ndarray:
        """
        Stretch the track over an output buffer of `n_samples`.

        Sample i reads index floor((i / n_samples) * len(track)), clamped to
        the last entry. An empty track reads as silence.
        """
        if self.is_empty or n_samples == 0:
            return np.zeros(n_samples, dtype=np.float64)

        positions = np.arange(n_samples, dtype=np.float64)
        indices = np.floor((positions / n_samples) * len(self.values)).astype(np.int64)
        indices = np.minimum(indices, len(self.values) - 1)
        return self.values[indices].astype(np.float64)


@dataclass
class StereoOutputBuffer:
    """Rendered stereo result. Holds read-only copies of both channels."""

    left: np.ndarray
    right: np.ndarray
    sample_rate: int
    n_channels: int = field(default=2, init=False)

    def __post_init__(self):
        if len(self.left) != len(self.right):
            raise InvalidInputError(
                f"Channel lengths differ: {len(self.left)} vs {len(self.right)}"
            )
        self.left = np.array(self.left)
        self.right = np.array(self.right)
        for channel in (self.left, self.right):
            channel.flags.writeable = False

    def __len__(self) -> int:
        return len(self.left)

    @property
    def duration(self) -> float:
        return len(self.left) / self.sample_rate

    @property
    def peak(self) -> float:
        """Largest absolute sample value across both channels."""
        if len(self.left) == 0:
            return 0.0
        return float(max(np.max(np.abs(self.left)), np.max(np.abs(self.right))))

    def as_array(self) -> np.ndarray:
        """Return a (n_samples, 2) array, the layout soundfile expects."""
        return np.stack([self.left, self.right], axis=1)
