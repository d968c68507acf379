"""
Audio file loading.
"""

from pathlib import Path
from typing import Union

import librosa
import numpy as np

from zenscape.core.signal import SignalBuffer


def load_signal(
    audio_path: Union[str, Path],
    sr: int | None = None,
) -> SignalBuffer:
    """
    Load the first channel of an audio file.

    Args:
        audio_path: Path to audio file (wav, mp3, flac, webm).
        sr: Target sample rate. None preserves the original.

    Returns:
        SignalBuffer with the first channel of the file.
    """
    y, sr_out = librosa.load(audio_path, sr=sr, mono=False)
    if y.ndim > 1:
        y = y[0]
    return SignalBuffer(np.ascontiguousarray(y, dtype=np.float32), int(sr_out))
