"""Utility functions for formatting Discord messages and log lines."""

from __future__ import annotations

from functools import cache

from jellyfin_music_bot.domain.shared.types import BYTES_PER_MIB

_BYTES_PER_KIB = 1024


def format_bytes(num_bytes: int) -> str:
    """Human-readable size: ``512 B``, ``1.5 KB``, ``4.00 MB``."""
    if num_bytes < _BYTES_PER_KIB:
        return f"{num_bytes} B"
    if num_bytes < BYTES_PER_MIB:
        return f"{num_bytes / _BYTES_PER_KIB:.1f} KB"
    return f"{num_bytes / BYTES_PER_MIB:.2f} MB"


@cache
def truncate(text: str, max_length: int = 100) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 1] + "…"
