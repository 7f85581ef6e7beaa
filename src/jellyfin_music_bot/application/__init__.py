"""
Application Layer

Orchestrates domain objects and infrastructure ports to run the playback loop.

Structure:
- interfaces/: Port interfaces for the catalog, voice transport and notifier
- services/: Connection manager and playback session manager
"""
