"""
Generative synthesis layers.

Each layer adds its voice into a channel buffer in place, driven by the
envelope and pitch tracks of the source recording. Every contribution is
scaled by the envelope, so silent stretches of the recording stay silent.
"""

import abc
import logging

import numpy as np

from zenscape.core.signal import Track
from zenscape.synthesis.theory import (
    CHORD_TABLE,
    PENTATONIC_RATIOS,
    PIANO_SCALE,
    SYNTH_BASE_HZ,
)

logger = logging.getLogger(__name__)

TWO_PI = 2.0 * np.pi


def _track_values(track: Track | None, n_samples: int) -> np.ndarray:
    if track is None:
        return np.zeros(n_samples, dtype=np.float64)
    return track.per_sample(n_samples)


def _time_axis(n_samples: int, sample_rate: int) -> np.ndarray:
    return np.arange(n_samples, dtype=np.float64) / sample_rate


class SynthesisLayer(abc.ABC):
    """
    Base class for one additive voice.

    Subclasses implement `render`, which mutates `buffer` in place.
    """

    name = "layer"
    stochastic = False

    def __init__(self, amplitude: float):
        """
        Args:
            amplitude: Mix level of this layer before envelope scaling.
        """
        self.amplitude = amplitude

    @abc.abstractmethod
    def render(
        self,
        buffer: np.ndarray,
        envelope: Track,
        pitch: Track | None,
        sample_rate: int,
        offset: float = 0.0,
        rng: np.random.Generator | None = None,
    ) -> None:
        """
        Add this layer into `buffer`.

        Args:
            buffer: Channel buffer, modified in place.
            envelope: Amplitude track of the source.
            pitch: Pitch track of the source, or None for layers that ignore it.
            sample_rate: Output sample rate.
            offset: Per-channel phase/timing offset for stereo width.
            rng: Random source for stochastic layers.
        """

    def _generator(self, rng: np.random.Generator | None) -> np.random.Generator:
        if rng is None:
            return np.random.default_rng()
        return rng

    def __repr__(self) -> str:
        return f"{type(self).__name__}(amplitude={self.amplitude})"


class AmbientPad(SynthesisLayer):
    """
    Slow chord pad walking through the chord table.

    The output is split into four equal segments, one chord each. Every
    chord note gets a fundamental, a 1% detuned copy and a quiet octave,
    and the whole pad breathes with a 0.2 Hz LFO.
    """

    name = "pad"

    def render(self, buffer, envelope, pitch, sample_rate, offset=0.0, rng=None):
        n = len(buffer)
        if n == 0:
            return

        t = _time_axis(n, sample_rate)
        env = _track_values(envelope, n)

        chord_duration = n / len(CHORD_TABLE)
        chord_index = np.floor(np.arange(n) / chord_duration).astype(np.int64)
        chord_index = np.minimum(chord_index, len(CHORD_TABLE) - 1)
        chords = np.asarray(CHORD_TABLE)

        pad = np.zeros(n, dtype=np.float64)
        for note in range(chords.shape[1]):
            phase = TWO_PI * chords[chord_index, note] * t
            pad += np.sin(phase) * 0.3
            pad += np.sin(phase * 1.01) * 0.2
            pad += np.sin(phase * 2) * 0.15

        lfo = np.sin(TWO_PI * 0.2 * t + offset) * 0.3 + 0.7

        buffer += pad * self.amplitude * env * lfo


class SoftSynth(SynthesisLayer):
    """
    Melodic voice that follows the pitch track through a pentatonic scale.

    The estimated pitch picks a scale degree above 220 Hz; the tone is
    retriggered with a 100 ms attack ramp every half second.
    """

    name = "synth"

    def render(self, buffer, envelope, pitch, sample_rate, offset=0.0, rng=None):
        n = len(buffer)
        if n == 0:
            return

        t = _time_axis(n, sample_rate)
        env = _track_values(envelope, n)
        base_pitch = _track_values(pitch, n)

        ratios = np.asarray(PENTATONIC_RATIOS)
        degree = np.floor(np.mod(base_pitch / 50.0, len(ratios))).astype(np.int64)
        target_freq = SYNTH_BASE_HZ * ratios[degree]

        phase = TWO_PI * target_freq * t
        tone = np.sin(phase) + np.sin(phase * 2) * 0.3 + np.sin(phase * 3) * 0.15

        positions = np.arange(n, dtype=np.float64)
        attack = np.minimum(
            1.0,
            np.mod(positions, sample_rate * 0.5) / (sample_rate * 0.1),
        )

        buffer += tone * attack * self.amplitude * env


class GentlePiano(SynthesisLayer):
    """
    Bell-like piano notes sprinkled over loud passages.

    Only windows with an envelope above 0.4 can trigger; each such sample
    fires with probability 0.001 * envelope. A note lasts 2-3 s and decays
    at 1.2/s with slightly stretched partials.
    """

    name = "piano"
    stochastic = True

    trigger_threshold = 0.4
    trigger_rate = 0.001
    partials = ((2.01, 0.3), (3.02, 0.15), (4.03, 0.08))

    def render(self, buffer, envelope, pitch, sample_rate, offset=0.0, rng=None):
        n = len(buffer)
        if n == 0:
            return
        rng = self._generator(rng)

        env = _track_values(envelope, n)
        draws = rng.random(n)
        triggers = np.flatnonzero(
            (env > self.trigger_threshold) & (draws < self.trigger_rate * env)
        )

        for start in triggers:
            note_duration = 2.0 + rng.random()
            note_samples = int(np.floor(note_duration * sample_rate))
            freq = PIANO_SCALE[int(rng.integers(len(PIANO_SCALE)))]

            stop = min(start + note_samples, n)
            t = _time_axis(stop - start, sample_rate)
            decay = np.exp(-t * 1.2)

            phase = TWO_PI * freq * t
            note = np.sin(phase) * 0.6
            for ratio, gain in self.partials:
                note += np.sin(phase * ratio) * gain * decay

            buffer[start:stop] += note * self.amplitude * decay * env[start]

        logger.debug("Piano triggered %d notes", len(triggers))


class ReverbTail(SynthesisLayer):
    """
    Feedback reverb built from four delay taps.

    Each output sample adds the already-processed samples 37, 53, 79 and
    97 ms earlier, so echoes of echoes build up a tail. Samples are
    processed in blocks no longer than the shortest tap, which keeps every
    read strictly behind the block being written.
    """

    name = "reverb"

    delay_times = (0.037, 0.053, 0.079, 0.097)
    feedback = 0.5
    tap_decay = 0.8

    def tap_delays(self, sample_rate: int) -> list[int]:
        """Delay of each tap in samples."""
        return [int(np.floor(delay * sample_rate)) for delay in self.delay_times]

    def tap_gains(self) -> list[float]:
        """Overall gain applied to each tap."""
        return [
            self.amplitude * self.feedback * self.tap_decay ** idx
            for idx in range(len(self.delay_times))
        ]

    def render(self, buffer, envelope, pitch, sample_rate, offset=0.0, rng=None):
        n = len(buffer)
        if n == 0:
            return

        delays = self.tap_delays(sample_rate)
        block = max(1, min(delays))

        for start in range(0, n, block):
            stop = min(start + block, n)
            for idx, delay in enumerate(delays):
                lo = max(start, delay)
                if lo >= stop:
                    continue
                decay = self.tap_decay ** idx
                buffer[lo:stop] += (
                    buffer[lo - delay:stop - delay] * self.amplitude * self.feedback * decay
                )


class SubBass(SynthesisLayer):
    """Sine drone between 55 and 110 Hz following the pitch track."""

    name = "bass"

    low_hz = 55.0
    pitch_span_hz = 300.0

    def render(self, buffer, envelope, pitch, sample_rate, offset=0.0, rng=None):
        n = len(buffer)
        if n == 0:
            return

        t = _time_axis(n, sample_rate)
        env = _track_values(envelope, n)
        bass_pitch = _track_values(pitch, n)

        position = np.clip(bass_pitch / self.pitch_span_hz, 0.0, 1.0)
        freq = self.low_hz + position * self.low_hz

        lfo = np.sin(TWO_PI * 0.1 * t) * 0.2 + 0.8
        buffer += np.sin(TWO_PI * freq * t) * lfo * self.amplitude * env


class Shimmer(SynthesisLayer):
    """
    High sparkles in the 2-4 kHz range.

    Each sample fires with probability 0.005 * envelope. A sparkle lasts
    100-300 ms under a half-sine window with fast exponential decay.
    """

    name = "shimmer"
    stochastic = True

    trigger_rate = 0.005

    def render(self, buffer, envelope, pitch, sample_rate, offset=0.0, rng=None):
        n = len(buffer)
        if n == 0:
            return
        rng = self._generator(rng)

        env = _track_values(envelope, n)
        draws = rng.random(n)
        triggers = np.flatnonzero(draws < self.trigger_rate * env)

        for start in triggers:
            duration = 0.1 + rng.random() * 0.2
            length = int(np.floor(duration * sample_rate))
            freq = 2000.0 + rng.random() * 2000.0
            if length == 0:
                continue

            stop = min(start + length, n)
            j = np.arange(stop - start, dtype=np.float64)
            u = j / length
            decay = np.exp(-u * 10)
            window = np.sin(u * np.pi)
            phase = TWO_PI * freq * (j / sample_rate)

            buffer[start:stop] += np.sin(phase) * self.amplitude * decay * window * env[start]

        logger.debug("Shimmer triggered %d sparkles", len(triggers))


class RainDrops(SynthesisLayer):
    """
    Short 50 ms noise bursts gated by the envelope.

    Not part of the default layer order; enabled through the composer config.
    """

    name = "rain"
    stochastic = True

    trigger_rate = 0.0005
    drop_time = 0.05

    def render(self, buffer, envelope, pitch, sample_rate, offset=0.0, rng=None):
        n = len(buffer)
        if n == 0:
            return
        rng = self._generator(rng)

        env = _track_values(envelope, n)
        draws = rng.random(n)
        triggers = np.flatnonzero(draws < self.trigger_rate * env)
        drop_length = int(np.floor(sample_rate * self.drop_time))
        if drop_length == 0:
            return

        for start in triggers:
            stop = min(start + drop_length, n)
            j = np.arange(stop - start, dtype=np.float64)
            decay = np.exp(-j / (drop_length * 0.3))
            noise = rng.random(stop - start) - 0.5
            buffer[start:stop] += noise * self.amplitude * decay * env[start]
