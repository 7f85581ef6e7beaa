"""
Pre-fill Stream Buffer

Opens a media stream over HTTP and buffers a fixed amount of it before
handing it to the decoder, so playback does not start on a cold pipe.
"""

from __future__ import annotations

import logging
import time
from collections import deque
from collections.abc import AsyncIterator
from typing import TYPE_CHECKING

import httpx

from jellyfin_music_bot.domain.shared.exceptions import StreamFetchError
from jellyfin_music_bot.domain.shared.messages import LogTemplates
from jellyfin_music_bot.utils.reply import format_bytes

if TYPE_CHECKING:
    from ...config.settings import PlaybackSettings

logger = logging.getLogger(__name__)


class BufferedStream:
    """Async byte stream that serves pre-filled chunks, then reads through.

    Chunks are only produced when the consumer asks for them, so a slow
    consumer is never pushed more data than it requested.
    """

    def __init__(
        self,
        url: str,
        response: httpx.Response,
        source: AsyncIterator[bytes],
        prefilled: deque[bytes],
        *,
        exhausted: bool,
    ) -> None:
        self.url = url
        self._response = response
        self._source = source
        self._queue = prefilled
        self._exhausted = exhausted
        self._closed = False
        self._pending = b""

    @property
    def buffered_bytes(self) -> int:
        """Bytes still waiting in the pre-fill queue."""
        return sum(len(chunk) for chunk in self._queue) + len(self._pending)

    @property
    def closed(self) -> bool:
        return self._closed

    def __aiter__(self) -> BufferedStream:
        return self

    async def __anext__(self) -> bytes:
        if self._pending:
            chunk, self._pending = self._pending, b""
            return chunk
        if self._queue:
            return self._queue.popleft()
        if self._exhausted or self._closed:
            raise StopAsyncIteration

        try:
            return await anext(self._source)
        except StopAsyncIteration:
            self._exhausted = True
            raise
        except (httpx.HTTPError, httpx.StreamError) as exc:
            self._exhausted = True
            raise StreamFetchError(self.url, message=f"Stream read failed: {exc}") from exc

    async def read(self, size: int = -1) -> bytes:
        """Read up to *size* bytes (all remaining if negative). Returns b"" at EOF."""
        if size == 0:
            return b""
        if size < 0:
            return b"".join([chunk async for chunk in self])

        # At most one chunk per call; short reads are fine for a pipe reader
        try:
            chunk = await self.__anext__()
        except StopAsyncIteration:
            return b""
        if len(chunk) > size:
            chunk, self._pending = chunk[:size], chunk[size:]
        return chunk

    async def aclose(self) -> None:
        """Release the HTTP response. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._queue.clear()
        self._pending = b""
        await self._response.aclose()

    async def __aenter__(self) -> BufferedStream:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class StreamBuffer:
    """Opens :class:`BufferedStream` instances on a shared HTTP client."""

    def __init__(self, client: httpx.AsyncClient, settings: PlaybackSettings) -> None:
        self._client = client
        self._prefill_bytes = settings.prefill_bytes

    async def open(self, url: str) -> BufferedStream:
        """GET *url* and block until the pre-fill threshold or EOF is reached.

        Raises:
            StreamFetchError: On a non-success or body-less response, or a
                network error while pre-filling.
        """
        request = self._client.build_request("GET", url)
        try:
            response = await self._client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise StreamFetchError(url, message=f"Failed to fetch stream: {exc}") from exc

        if not response.is_success or response.status_code == httpx.codes.NO_CONTENT:
            await response.aclose()
            raise StreamFetchError(url, status_code=response.status_code)

        target = self._prefill_bytes
        prefilled: deque[bytes] = deque()
        buffered = 0
        next_quarter = 1
        exhausted = False
        started = time.perf_counter()
        source = response.aiter_bytes()

        try:
            while buffered < target:
                try:
                    chunk = await anext(source)
                except StopAsyncIteration:
                    exhausted = True
                    break
                if not chunk:
                    continue
                prefilled.append(chunk)
                buffered += len(chunk)

                while next_quarter <= 4 and buffered * 4 >= target * next_quarter:
                    logger.debug(
                        LogTemplates.STREAM_PREFILL_PROGRESS,
                        format_bytes(min(buffered, target)),
                        format_bytes(target),
                        min(100.0, buffered * 100 / target),
                    )
                    next_quarter += 1
        except (httpx.HTTPError, httpx.StreamError) as exc:
            await response.aclose()
            raise StreamFetchError(url, message=f"Stream read failed: {exc}") from exc
        except BaseException:
            await response.aclose()
            raise

        elapsed_ms = (time.perf_counter() - started) * 1000
        logger.info(LogTemplates.STREAM_PREFILL_COMPLETE, format_bytes(buffered), elapsed_ms)
        return BufferedStream(url, response, source, prefilled, exhausted=exhausted)
