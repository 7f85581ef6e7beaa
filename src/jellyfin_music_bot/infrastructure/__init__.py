"""Infrastructure layer - external systems integration.

This layer contains implementations for:
- Jellyfin (REST catalog client)
- Audio (HTTP pre-fill stream buffer)
- Discord (bot, cogs, views, voice transport adapter)
"""
