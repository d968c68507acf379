"""
Main transformation pipeline.

Orchestrates the complete flow from a recorded audio file to an encoded
zen composition on disk.
"""

import logging
import threading
from pathlib import Path
from typing import Any, Union

from zenscape.core.analyzer import AnalyzedSignal
from zenscape.core.composer import ComposerConfig, ZenComposer
from zenscape.core.signal import SignalBuffer, StereoOutputBuffer
from zenscape.io.encoder import Mp3BlockEncoder
from zenscape.io.exporter import FORMAT_SUFFIXES, AudioExporter
from zenscape.io.loader import load_signal

logger = logging.getLogger(__name__)


class ZenPipeline:
    """
    Complete recording-to-composition pipeline.

    Combines loading, analysis, composition and export into a single
    unified interface.
    """

    def __init__(
        self,
        sample_rate: int | None = None,
        config: ComposerConfig | None = None,
        seed: int | None = None,
        exporter: AudioExporter | None = None,
    ):
        """
        Initialize the pipeline.

        Args:
            sample_rate: Resample input to this rate. None keeps the file rate.
            config: Composition settings.
            seed: Seed for the stochastic layers (random if None).
            exporter: Output writer.
        """
        self.sample_rate = sample_rate
        self.composer = ZenComposer(config=config, seed=seed)
        self.exporter = exporter or AudioExporter()

    @staticmethod
    def default_output_path(audio_path: Union[str, Path], format: str = "mp3") -> Path:
        """<input stem>_zen.<ext> next to the input file."""
        audio_path = Path(audio_path)
        return audio_path.with_name(f"{audio_path.stem}_zen{FORMAT_SUFFIXES[format]}")

    def load(self, audio_path: Union[str, Path]) -> SignalBuffer:
        """
        Phase A: Load the first channel of the recording.
        """
        return load_signal(audio_path, sr=self.sample_rate)

    def analyze(self, signal: SignalBuffer) -> AnalyzedSignal:
        """
        Phase B: Extract envelope and pitch tracks.
        """
        return self.composer.analyzer.analyze(signal)

    def compose(
        self,
        signal: SignalBuffer,
        analyzed: AnalyzedSignal | None = None,
        cancel_event: threading.Event | None = None,
    ) -> StereoOutputBuffer:
        """
        Phase C: Render the stereo composition.
        """
        return self.composer.compose(signal, cancel_event=cancel_event, analyzed=analyzed)

    def export(
        self,
        buffer: StereoOutputBuffer,
        output_path: Union[str, Path],
        format: str = "mp3",
        analyzed: AnalyzedSignal | None = None,
        encoder: Mp3BlockEncoder | None = None,
    ) -> Path:
        """
        Phase D: Write the composition to disk.
        """
        return self.exporter.export(
            buffer,
            output_path,
            format=format,
            analyzed=analyzed,
            encoder=encoder,
        )

    def process(
        self,
        audio_path: Union[str, Path],
        output_path: Union[str, Path] | None = None,
        format: str = "mp3",
        encoder: Mp3BlockEncoder | None = None,
        cancel_event: threading.Event | None = None,
    ) -> dict[str, Any]:
        """
        Run the complete pipeline from recording to composition.

        Args:
            audio_path: Path to input audio file.
            output_path: Path for the output file. If None, nothing is written.
            format: Output format ("mp3", "wav" or "numpy").
            encoder: MP3 block encoder override.
            cancel_event: Cancels composition at the next layer boundary.

        Returns:
            Dictionary with the rendered buffer and processing info.
        """
        signal = self.load(audio_path)
        analyzed = self.analyze(signal)
        buffer = self.compose(signal, analyzed=analyzed, cancel_event=cancel_event)

        result = {
            "buffer": buffer,
            "duration": signal.duration,
            "sample_rate": signal.sample_rate,
            "n_samples": len(buffer),
            "n_windows": analyzed.n_windows,
            "peak": buffer.peak,
        }

        if output_path:
            written_path = self.export(
                buffer,
                output_path,
                format=format,
                analyzed=analyzed,
                encoder=encoder,
            )
            result["output_path"] = str(written_path)
            logger.info("Wrote %s", written_path)

        return result
