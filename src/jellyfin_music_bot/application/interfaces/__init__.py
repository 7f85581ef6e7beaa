"""Port interfaces implemented by the infrastructure layer."""

from jellyfin_music_bot.application.interfaces.catalog import CatalogClient
from jellyfin_music_bot.application.interfaces.notifier import NowPlayingNotifier
from jellyfin_music_bot.application.interfaces.voice_transport import (
    AudioPlayer,
    AudioResource,
    VoiceConnection,
    VoiceTransport,
)

__all__ = [
    "CatalogClient",
    "NowPlayingNotifier",
    "VoiceTransport",
    "VoiceConnection",
    "AudioPlayer",
    "AudioResource",
]
