"""Speech playback state.

Spoken responses arrive as base64-encoded 16-bit little-endian PCM. The
session decodes them into float samples and hands them to an injected audio
sink; only one clip plays at a time.
"""

import asyncio
import base64
import binascii
import logging
import sys
from array import array
from collections.abc import Awaitable, Callable

from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_RATE = 24000
PCM16_SCALE = 32768.0


class AudioClip(BaseModel):
    """Decoded audio, one list of float samples per channel."""

    sample_rate: int = DEFAULT_SAMPLE_RATE
    channels: list[list[float]] = Field(default_factory=list)

    @property
    def frame_count(self) -> int:
        return len(self.channels[0]) if self.channels else 0

    @property
    def duration_seconds(self) -> float:
        return self.frame_count / self.sample_rate


class PlaybackBusyError(RuntimeError):
    """Raised when play() is called while a clip is still playing."""


def decode_pcm16(
    content: str,
    *,
    sample_rate: int = DEFAULT_SAMPLE_RATE,
    num_channels: int = 1,
) -> AudioClip:
    """Decode base64 interleaved 16-bit PCM into per-channel float samples.

    Raises:
        ValueError: If the payload is not valid base64 or not whole frames.
    """
    try:
        raw = base64.b64decode(content, validate=True)
    except binascii.Error as e:
        raise ValueError("Audio payload is not valid base64") from e

    if len(raw) % (2 * num_channels):
        raise ValueError("Audio payload does not contain whole 16-bit frames")

    samples = array("h")
    samples.frombytes(raw)
    if sys.byteorder == "big":
        samples.byteswap()

    channels = [
        [sample / PCM16_SCALE for sample in samples[channel::num_channels]]
        for channel in range(num_channels)
    ]
    return AudioClip(sample_rate=sample_rate, channels=channels)


AudioSink = Callable[[AudioClip], Awaitable[None]]


class PlaybackSession:
    """Tracks whether speech is playing and serializes playback."""

    def __init__(self, sink: AudioSink, *, sample_rate: int = DEFAULT_SAMPLE_RATE) -> None:
        self._sink = sink
        self._sample_rate = sample_rate
        self._lock = asyncio.Lock()

    @property
    def is_playing(self) -> bool:
        return self._lock.locked()

    async def play(self, content: str) -> bool:
        """Decode and play one clip.

        Returns:
            True if the clip played to completion, False if it could not be
            decoded or the sink failed.

        Raises:
            PlaybackBusyError: If another clip is still playing.
        """
        if self._lock.locked():
            raise PlaybackBusyError("Playback already in progress")

        async with self._lock:
            try:
                clip = decode_pcm16(content, sample_rate=self._sample_rate)
                await self._sink(clip)
            except Exception:
                logger.exception("Failed to play audio")
                return False
        return True
