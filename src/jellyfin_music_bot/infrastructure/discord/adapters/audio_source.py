"""discord.py audio sources fed from a :class:`BufferedStream`.

discord.py decodes through an FFmpeg subprocess whose stdin is written by a
plain thread. :class:`StreamPipe` gives that thread a blocking ``read()``
that pulls from the async stream on the event loop.
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import io
import logging
from typing import TYPE_CHECKING

import discord

from jellyfin_music_bot.application.interfaces.voice_transport import AudioResource
from jellyfin_music_bot.domain.shared.exceptions import StreamFetchError
from jellyfin_music_bot.domain.shared.messages import LogTemplates

if TYPE_CHECKING:
    from ....infrastructure.audio.stream_buffer import BufferedStream

logger = logging.getLogger(__name__)

PIPE_READ_SIZE: int = 64 * 1024


class StreamPipe(io.RawIOBase):
    """Blocking, thread-side reader over an async stream owned by *loop*.

    Must never be read from the loop thread itself.
    """

    def __init__(self, stream: BufferedStream, loop: asyncio.AbstractEventLoop) -> None:
        super().__init__()
        self._stream = stream
        self._loop = loop

    def readable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        if self.closed or self._loop.is_closed():
            return b""

        wanted = size if size and size > 0 else PIPE_READ_SIZE
        future = asyncio.run_coroutine_threadsafe(self._stream.read(wanted), self._loop)
        try:
            return future.result()
        except StreamFetchError as exc:
            logger.warning(LogTemplates.STREAM_READ_FAILED, self._stream.url, exc.message)
            return b""
        except concurrent.futures.CancelledError:
            return b""


class DiscordAudioResource(AudioResource):
    """FFmpeg-decoded, volume-adjustable source over a buffered stream."""

    def __init__(
        self,
        stream: BufferedStream,
        *,
        loop: asyncio.AbstractEventLoop,
        volume: float,
        before_options: str | None = None,
        options: str | None = None,
    ) -> None:
        self._stream = stream
        self._loop = loop
        self._pipe = StreamPipe(stream, loop)
        ffmpeg_source = discord.FFmpegPCMAudio(
            self._pipe,
            pipe=True,
            before_options=before_options or None,
            options=options or None,
        )
        self.source = discord.PCMVolumeTransformer(ffmpeg_source, volume=volume)
        self._close_task: asyncio.Task[None] | None = None

    @property
    def volume(self) -> float:
        return self.source.volume

    @volume.setter
    def volume(self, value: float) -> None:
        self.source.volume = max(0.0, min(2.0, value))

    @property
    def closed(self) -> bool:
        return self._pipe.closed

    def close(self) -> None:
        """Stop the decoder and release the HTTP stream. Call on the loop thread."""
        if self._pipe.closed:
            return
        self._pipe.close()
        self.source.cleanup()
        self._close_task = self._loop.create_task(self._stream.aclose())
