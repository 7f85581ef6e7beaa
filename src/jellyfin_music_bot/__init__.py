"""Jellyfin playlist radio for Discord voice channels."""

__version__ = "1.0.0"
