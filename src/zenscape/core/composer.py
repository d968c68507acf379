"""
Zen composition module.

Turns a mono recording into a stereo ambient piece: extracts the envelope
and pitch tracks, renders the synthesis layers for each channel in a fixed
order and applies a breathing loudness contour that follows the source.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field

import numpy as np

from zenscape.core.analyzer import AnalyzedSignal, FeatureAnalyzer
from zenscape.core.signal import SignalBuffer, StereoOutputBuffer, Track
from zenscape.errors import CompositionCancelled
from zenscape.synthesis.layers import (
    AmbientPad,
    GentlePiano,
    RainDrops,
    ReverbTail,
    Shimmer,
    SoftSynth,
    SubBass,
    SynthesisLayer,
)

logger = logging.getLogger(__name__)

N_CHANNELS = 2


@dataclass
class LayerMix:
    """Mix level of each synthesis layer."""

    pad: float = 0.20
    synth: float = 0.15
    piano: float = 0.12
    reverb: float = 0.10
    bass: float = 0.08
    shimmer: float = 0.06
    rain: float = 0.05


@dataclass
class ComposerConfig:
    """Composition settings."""

    mix: LayerMix = field(default_factory=LayerMix)
    stereo_spread: float = 0.05  # Per-channel LFO phase offset
    shaping_exponent: float = 0.5
    headroom: float = 0.75
    hard_limit: bool = False  # Clip to [-1, 1] after shaping
    include_rain: bool = False
    parallel_channels: bool = False


class ZenComposer:
    """
    Renders the stereo zen composition for a mono recording.

    Layers run in a fixed order. The reverb reads back everything the pad,
    synth and piano have written, so reordering them changes the result.
    """

    def __init__(
        self,
        config: ComposerConfig | None = None,
        seed: int | None = None,
        rng: np.random.Generator | None = None,
        analyzer: FeatureAnalyzer | None = None,
    ):
        """
        Initialize the composer.

        Args:
            config: Composition settings (defaults if None).
            seed: Seed for the stochastic layers. Ignored when rng is given.
            rng: Random source for the stochastic layers.
            analyzer: Feature analyzer (default 2048-sample windows).
        """
        self.config = config or ComposerConfig()
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.analyzer = analyzer or FeatureAnalyzer()
        self.layers = self.build_layers()

    def build_layers(self) -> tuple[SynthesisLayer, ...]:
        """Layer chain in render order."""
        mix = self.config.mix
        layers = [
            AmbientPad(mix.pad),
            SoftSynth(mix.synth),
            GentlePiano(mix.piano),
            ReverbTail(mix.reverb),
            SubBass(mix.bass),
            Shimmer(mix.shimmer),
        ]
        if self.config.include_rain:
            layers.append(RainDrops(mix.rain))
        return tuple(layers)

    def shape(self, buffer: np.ndarray, envelope: Track) -> None:
        """
        Apply the global loudness contour in place.

        Sample i uses envelope[floor(i / (len(buffer) / len(envelope)))],
        scaled by envelope ** exponent * headroom. An empty envelope
        silences the buffer.
        """
        n = len(buffer)
        if n == 0:
            return
        if envelope.is_empty:
            buffer[:] = 0.0
            return

        positions = np.arange(n, dtype=np.float64)
        samples_per_window = n / len(envelope)
        indices = np.floor(positions / samples_per_window).astype(np.int64)
        indices = np.minimum(indices, len(envelope) - 1)
        env = envelope.values[indices].astype(np.float64)

        buffer *= np.power(env, self.config.shaping_exponent) * self.config.headroom

        if self.config.hard_limit:
            np.clip(buffer, -1.0, 1.0, out=buffer)

    def render_channel(
        self,
        channel: int,
        analyzed: AnalyzedSignal,
        n_samples: int,
        rng: np.random.Generator,
        cancel_event: threading.Event | None = None,
    ) -> np.ndarray:
        """
        Render one output channel.

        Args:
            channel: Channel index (0 = left, 1 = right).
            analyzed: Envelope and pitch tracks.
            n_samples: Output length in samples.
            rng: Random source for this channel.
            cancel_event: Checked before each layer.

        Returns:
            Shaped float32 channel buffer.
        """
        offset = channel * self.config.stereo_spread
        buffer = np.zeros(n_samples, dtype=np.float64)

        for layer in self.layers:
            if cancel_event is not None and cancel_event.is_set():
                raise CompositionCancelled(
                    f"Cancelled before layer '{layer.name}' on channel {channel}"
                )
            layer.render(
                buffer,
                analyzed.envelope,
                analyzed.pitch,
                analyzed.sample_rate,
                offset=offset,
                rng=rng,
            )
            logger.debug("Channel %d: rendered %s", channel, layer.name)

        self.shape(buffer, analyzed.envelope)
        return buffer.astype(np.float32)

    def compose(
        self,
        signal: SignalBuffer,
        cancel_event: threading.Event | None = None,
        analyzed: AnalyzedSignal | None = None,
    ) -> StereoOutputBuffer:
        """
        Transform a mono recording into the stereo zen composition.

        Args:
            signal: Mono input recording.
            cancel_event: Optional event; when set, composition stops at the
                next layer boundary with CompositionCancelled.
            analyzed: Tracks already extracted from `signal`, if available.

        Returns:
            StereoOutputBuffer at the input sample rate and duration.
        """
        if analyzed is None:
            analyzed = self.analyzer.analyze(signal)
        n_samples = signal.output_length
        channel_rngs = self.rng.spawn(N_CHANNELS)

        logger.info(
            "Composing %.2fs at %d Hz (%d windows, %d layers)",
            signal.duration,
            signal.sample_rate,
            analyzed.n_windows,
            len(self.layers),
        )

        if self.config.parallel_channels:
            with ThreadPoolExecutor(max_workers=N_CHANNELS) as executor:
                futures = [
                    executor.submit(
                        self.render_channel,
                        channel,
                        analyzed,
                        n_samples,
                        channel_rngs[channel],
                        cancel_event,
                    )
                    for channel in range(N_CHANNELS)
                ]
                channels = [future.result() for future in futures]
        else:
            channels = [
                self.render_channel(
                    channel,
                    analyzed,
                    n_samples,
                    channel_rngs[channel],
                    cancel_event,
                )
                for channel in range(N_CHANNELS)
            ]

        return StereoOutputBuffer(
            left=channels[0],
            right=channels[1],
            sample_rate=signal.sample_rate,
        )
