"""Base exception classes for domain-level errors."""

from __future__ import annotations


class DomainError(Exception):
    """Base exception for all domain-level errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__


class InvalidOperationError(DomainError):
    """Raised when an operation is invalid in the current state."""

    def __init__(self, operation: str, current_state: str, message: str | None = None) -> None:
        msg = message or f"Cannot perform '{operation}' in state '{current_state}'"
        super().__init__(msg, code="INVALID_OPERATION")
        self.operation = operation
        self.current_state = current_state


class ConnectError(DomainError):
    """Raised when a voice connection cannot reach the ready state."""

    def __init__(self, guild_id: int, message: str | None = None) -> None:
        msg = message or f"Voice connection for guild {guild_id} could not become ready"
        super().__init__(msg, code="CONNECT_ERROR")
        self.guild_id = guild_id


class CatalogError(DomainError):
    """Raised when the media catalog cannot be queried."""

    def __init__(self, operation: str, message: str | None = None) -> None:
        msg = message or f"Catalog request failed: {operation}"
        super().__init__(msg, code="CATALOG_ERROR")
        self.operation = operation


class StreamFetchError(DomainError):
    """Raised when a media stream cannot be opened or read."""

    def __init__(
        self, url: str, status_code: int | None = None, message: str | None = None
    ) -> None:
        msg = message or f"Failed to fetch stream: {status_code}"
        super().__init__(msg, code="STREAM_FETCH_ERROR")
        self.url = url
        self.status_code = status_code


FetchError = StreamFetchError


class PlayerError(DomainError):
    """Raised or reported when the audio player fails to decode or output audio."""

    def __init__(self, guild_id: int | None, message: str | None = None) -> None:
        msg = message or f"Audio player error in guild {guild_id}"
        super().__init__(msg, code="PLAYER_ERROR")
        self.guild_id = guild_id
