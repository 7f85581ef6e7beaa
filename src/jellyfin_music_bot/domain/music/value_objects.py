"""Immutable value objects for the music bounded context."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class MediaType(Enum):
    """Kind of media a catalog item carries."""

    AUDIO = "audio"
    VIDEO = "video"


class ConnectionState(Enum):
    """Lifecycle of a voice-transport connection.

    Owned by the connection itself; everything else only observes
    transitions through state listeners.
    """

    CONNECTING = "connecting"
    SIGNALLING = "signalling"
    READY = "ready"
    DISCONNECTED = "disconnected"
    DESTROYED = "destroyed"

    @property
    def is_live(self) -> bool:
        return self != ConnectionState.DESTROYED


class SessionPhase(Enum):
    """Per-guild session phase with enforced transitions.

    State transitions:
    - IDLE -> CONNECTING (voice connection requested)
    - CONNECTING -> READY (connection ready) | IDLE (connect failed)
    - READY -> LOADING (play-loop iteration begins)
    - LOADING -> PLAYING (resource handed to the player)
    - LOADING -> READY (no item found or iteration failed)
    - PLAYING -> READY (track ended, errored or was stopped)
    - PLAYING -> LOADING (new iteration replaces the current track)
    - Any -> TEARING_DOWN (connection destroyed)
    - TEARING_DOWN -> IDLE (guild state removed)
    """

    IDLE = "idle"
    CONNECTING = "connecting"
    READY = "ready"
    LOADING = "loading"
    PLAYING = "playing"
    TEARING_DOWN = "tearing_down"

    def can_transition_to(self, target: SessionPhase) -> bool:
        """Check if transition to target phase is valid."""
        valid_transitions = {
            SessionPhase.IDLE: {SessionPhase.CONNECTING, SessionPhase.TEARING_DOWN},
            SessionPhase.CONNECTING: {
                SessionPhase.READY,
                SessionPhase.IDLE,
                SessionPhase.TEARING_DOWN,
            },
            SessionPhase.READY: {SessionPhase.LOADING, SessionPhase.TEARING_DOWN},
            SessionPhase.LOADING: {
                SessionPhase.PLAYING,
                SessionPhase.READY,
                SessionPhase.TEARING_DOWN,
            },
            SessionPhase.PLAYING: {
                SessionPhase.READY,
                SessionPhase.LOADING,
                SessionPhase.TEARING_DOWN,
            },
            SessionPhase.TEARING_DOWN: {SessionPhase.IDLE},
        }
        return target in valid_transitions.get(self, set())

    @property
    def is_connected(self) -> bool:
        return self in {SessionPhase.READY, SessionPhase.LOADING, SessionPhase.PLAYING}


class PlayerStatus(Enum):
    """Output status of an audio player."""

    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"

    @property
    def is_active(self) -> bool:
        return self in {PlayerStatus.PLAYING, PlayerStatus.PAUSED}


class PlayerSignalKind(Enum):
    """What a player reports back to the playback loop."""

    FINISHED = "finished"  # natural end of track, or stop()
    ERROR = "error"  # decode/output failure; the player is idle afterwards


@dataclass(frozen=True)
class PlayerSignal:
    """Completion or error signal published by an audio player."""

    kind: PlayerSignalKind
    error: BaseException | None = None

    @classmethod
    def finished(cls) -> PlayerSignal:
        return cls(PlayerSignalKind.FINISHED)

    @classmethod
    def failed(cls, error: BaseException) -> PlayerSignal:
        return cls(PlayerSignalKind.ERROR, error)

    @property
    def is_error(self) -> bool:
        return self.kind == PlayerSignalKind.ERROR
