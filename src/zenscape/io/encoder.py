"""
MP3 encoder boundary.

Converts the rendered stereo float buffer to 16-bit PCM and feeds it to a
block encoder 1152 samples per channel at a time. The default encoder
pipes raw PCM to ffmpeg's LAME encoder.
"""

import logging
import subprocess
from typing import Protocol

import numpy as np

from zenscape.core.signal import StereoOutputBuffer
from zenscape.errors import EncodeError

logger = logging.getLogger(__name__)

BLOCK_SIZE = 1152
MP3_BITRATE_KBPS = 128
MP3_CHANNELS = 2


def to_pcm16(samples: np.ndarray) -> np.ndarray:
    """Scale float samples to int16 with rounding and clamping."""
    scaled = np.rint(np.asarray(samples, dtype=np.float64) * 32767)
    return np.clip(scaled, -32768, 32767).astype(np.int16)


class Mp3BlockEncoder(Protocol):
    """Incremental stereo encoder fed with int16 blocks."""

    def encode_buffer(self, left: np.ndarray, right: np.ndarray) -> bytes:
        ...

    def flush(self) -> bytes:
        ...


class FfmpegMp3Encoder:
    """
    Block encoder backed by the ffmpeg binary.

    Blocks are interleaved and collected; the actual encode runs on
    flush(), so encode_buffer() always returns no bytes.
    """

    def __init__(
        self,
        sample_rate: int,
        bitrate_kbps: int = MP3_BITRATE_KBPS,
        channels: int = MP3_CHANNELS,
        ffmpeg_path: str = "ffmpeg",
    ):
        self.sample_rate = sample_rate
        self.bitrate_kbps = bitrate_kbps
        self.channels = channels
        self.ffmpeg_path = ffmpeg_path
        self._chunks: list[bytes] = []

    def command(self) -> list[str]:
        return [
            self.ffmpeg_path, "-y",
            "-hide_banner",
            "-loglevel", "error",
            # Raw interleaved PCM from pipe
            "-f", "s16le",
            "-ar", str(self.sample_rate),
            "-ac", str(self.channels),
            "-i", "pipe:0",
            # MP3 to stdout
            "-c:a", "libmp3lame",
            "-b:a", f"{self.bitrate_kbps}k",
            "-f", "mp3",
            "pipe:1",
        ]

    def encode_buffer(self, left: np.ndarray, right: np.ndarray) -> bytes:
        if len(left) != len(right):
            raise EncodeError(
                f"Channel blocks differ in length: {len(left)} vs {len(right)}"
            )
        interleaved = np.empty(len(left) * 2, dtype="<i2")
        interleaved[0::2] = left
        interleaved[1::2] = right
        self._chunks.append(interleaved.tobytes())
        return b""

    def flush(self) -> bytes:
        pcm = b"".join(self._chunks)
        self._chunks = []

        try:
            proc = subprocess.run(
                self.command(),
                input=pcm,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except FileNotFoundError as e:
            raise EncodeError(f"ffmpeg not found: {self.ffmpeg_path}") from e

        if proc.returncode != 0:
            stderr = proc.stderr.decode("utf-8", errors="replace")
            error_lines = [
                line for line in stderr.split("\n")
                if "error" in line.lower() or "invalid" in line.lower()
            ]
            error_msg = "\n".join(error_lines[-5:]) if error_lines else stderr[-500:]
            raise EncodeError(
                f"ffmpeg exited with code {proc.returncode}: {error_msg}"
            )

        return proc.stdout


def encode_stereo(
    buffer: StereoOutputBuffer,
    encoder: Mp3BlockEncoder | None = None,
    block_size: int = BLOCK_SIZE,
) -> bytes:
    """
    Encode a stereo buffer to one MP3 byte stream.

    Args:
        buffer: Rendered stereo output.
        encoder: Block encoder (ffmpeg-backed at 128 kbps if None).
        block_size: Samples per channel per encoder call.

    Returns:
        Bytes from every block call in order, followed by the flush bytes.

    Raises:
        EncodeError: The encoder failed. The stereo buffer is left untouched.
    """
    if encoder is None:
        encoder = FfmpegMp3Encoder(buffer.sample_rate)

    left = to_pcm16(buffer.left)
    right = to_pcm16(buffer.right)

    parts = []
    try:
        for start in range(0, len(left), block_size):
            chunk = encoder.encode_buffer(
                left[start:start + block_size],
                right[start:start + block_size],
            )
            if len(chunk) > 0:
                parts.append(bytes(chunk))
        tail = encoder.flush()
    except EncodeError:
        raise
    except Exception as e:
        raise EncodeError(f"Encoder failed: {e}") from e

    if len(tail) > 0:
        parts.append(bytes(tail))

    encoded = b"".join(parts)
    logger.debug("Encoded %d samples into %d bytes", len(left), len(encoded))
    return encoded
