"""Audio infrastructure - pre-filled HTTP media streams."""

from jellyfin_music_bot.infrastructure.audio.stream_buffer import BufferedStream, StreamBuffer

__all__ = [
    "BufferedStream",
    "StreamBuffer",
]
