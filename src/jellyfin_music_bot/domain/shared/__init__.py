"""
Shared Domain Kernel

Contains exceptions and constrained types shared across the bounded contexts.
"""

from jellyfin_music_bot.domain.shared.exceptions import (
    CatalogError,
    ConnectError,
    DomainError,
    FetchError,
    InvalidOperationError,
    PlayerError,
    StreamFetchError,
)

__all__ = [
    "DomainError",
    "InvalidOperationError",
    "ConnectError",
    "CatalogError",
    "StreamFetchError",
    "FetchError",
    "PlayerError",
]
