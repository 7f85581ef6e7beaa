#!/usr/bin/env python3
"""Main entry point for the Jellyfin Music Bot."""

from __future__ import annotations

import json
import logging
import logging.config
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from jellyfin_music_bot.domain.shared.messages import ErrorMessages, LogTemplates

if TYPE_CHECKING:
    from jellyfin_music_bot.config.settings import Settings

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"


def setup_logging(log_level: str = "INFO") -> None:
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    try:
        with open(_LOGGING_CONFIG_PATH) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError):
        logging.basicConfig(
            level=resolved_level,
            format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.warning(
            "Could not load %s, falling back to basic config", _LOGGING_CONFIG_PATH
        )

    logging.getLogger().setLevel(resolved_level)


def _missing_credential(settings: Settings) -> str | None:
    """Return the error for the first empty credential, or None when all are set."""
    required = (
        (settings.discord.token.get_secret_value(), ErrorMessages.DISCORD_TOKEN_REQUIRED),
        (settings.jellyfin.api_key.get_secret_value(), ErrorMessages.JELLYFIN_API_KEY_REQUIRED),
        (settings.jellyfin.user_id, ErrorMessages.JELLYFIN_USER_ID_REQUIRED),
    )
    for value, error in required:
        if not value:
            return error
    return None


def main() -> int:
    from jellyfin_music_bot.config.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as e:
        setup_logging()
        logging.getLogger(__name__).error(LogTemplates.BOT_CONFIG_INVALID, e)
        return 1

    setup_logging(settings.log_level)

    logger = logging.getLogger(__name__)

    missing = _missing_credential(settings)
    if missing is not None:
        logger.error(missing)
        return 1

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    logger.info(
        LogTemplates.BOT_JELLYFIN_TARGET, settings.jellyfin.url, settings.jellyfin.user_id
    )

    from jellyfin_music_bot.config.container import create_container
    from jellyfin_music_bot.infrastructure.discord.bot import create_bot

    container = create_container(settings)
    bot = create_bot(container, settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(settings.discord.token.get_secret_value())
        logger.info(LogTemplates.BOT_STOPPED)
        return 0
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
