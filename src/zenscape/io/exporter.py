"""
Output serialization module.

Writes the rendered stereo buffer to MP3, WAV or a NumPy archive.
"""

from pathlib import Path
from typing import Union

import numpy as np
import soundfile as sf

from zenscape.core.analyzer import AnalyzedSignal
from zenscape.core.signal import StereoOutputBuffer
from zenscape.io.encoder import Mp3BlockEncoder, encode_stereo

FORMAT_SUFFIXES = {
    "mp3": ".mp3",
    "wav": ".wav",
    "numpy": ".npz",
}


class AudioExporter:
    """Exports a composition to disk."""

    def __init__(self, wav_subtype: str = "PCM_16"):
        """
        Initialize the exporter.

        Args:
            wav_subtype: soundfile subtype for WAV output ("PCM_16" or "FLOAT").
        """
        self.wav_subtype = wav_subtype

    def export_wav(
        self,
        buffer: StereoOutputBuffer,
        output_path: Union[str, Path],
    ) -> Path:
        """
        Write a stereo WAV file.

        Args:
            buffer: Rendered stereo output.
            output_path: Path for the WAV file.

        Returns:
            Path to written file.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        sf.write(output_path, buffer.as_array(), buffer.sample_rate, subtype=self.wav_subtype)
        return output_path

    def export_mp3(
        self,
        buffer: StereoOutputBuffer,
        output_path: Union[str, Path],
        encoder: Mp3BlockEncoder | None = None,
    ) -> Path:
        """
        Encode to 128 kbps stereo MP3 and write it.

        Nothing is written if encoding fails.
        """
        data = encode_stereo(buffer, encoder=encoder)
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "wb") as f:
            f.write(data)
        return output_path

    def export_numpy(
        self,
        buffer: StereoOutputBuffer,
        output_path: Union[str, Path],
        analyzed: AnalyzedSignal | None = None,
    ) -> Path:
        """
        Export the raw float channels as a .npz archive.

        The envelope and pitch tracks are included when given.
        """
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        arrays = {
            "left": buffer.left,
            "right": buffer.right,
            "sample_rate": buffer.sample_rate,
        }
        if analyzed is not None:
            arrays["envelope"] = analyzed.envelope.values
            arrays["pitch"] = analyzed.pitch.values

        np.savez_compressed(output_path, **arrays)
        return output_path

    def export(
        self,
        buffer: StereoOutputBuffer,
        output_path: Union[str, Path],
        format: str = "mp3",
        analyzed: AnalyzedSignal | None = None,
        encoder: Mp3BlockEncoder | None = None,
    ) -> Path:
        """Dispatch on format ("mp3", "wav" or "numpy")."""
        if format == "mp3":
            return self.export_mp3(buffer, output_path, encoder=encoder)
        if format == "wav":
            return self.export_wav(buffer, output_path)
        if format == "numpy":
            return self.export_numpy(buffer, output_path, analyzed=analyzed)
        raise ValueError(f"Unknown output format: {format!r}")
