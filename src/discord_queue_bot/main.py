#!/usr/bin/env python3
"""Main entry point for the Discord Queue Bot."""

from __future__ import annotations

import json
import logging
import logging.config
import os
import sys
from pathlib import Path

from pydantic import ValidationError

from discord_queue_bot.domain.shared.messages import ErrorMessages, LogTemplates

_LOGGING_CONFIG_PATH = Path(__file__).resolve().parents[2] / "logging_config.json"
_LOGGING_CONFIG_ENV = "LOGGING_CONFIG"
_BASIC_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_CONFIG = 2


def setup_logging(log_level: str = "INFO", config_path: Path | None = None) -> None:
    """Load the dictConfig file (``LOGGING_CONFIG`` overrides the bundled one).

    A missing or broken file falls back to a plain console handler. Either way
    the root level follows *log_level*.
    """
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)
    path = config_path or Path(os.environ.get(_LOGGING_CONFIG_ENV, _LOGGING_CONFIG_PATH))

    try:
        with open(path) as f:
            config = json.load(f)
        logging.config.dictConfig(config)
    except (FileNotFoundError, json.JSONDecodeError, ValueError) as exc:
        logging.basicConfig(level=resolved_level, format=_BASIC_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")
        logging.warning(LogTemplates.LOGGING_CONFIG_FALLBACK, path, type(exc).__name__)

    logging.getLogger().setLevel(resolved_level)


def main() -> int:
    from discord_queue_bot.config.settings import get_settings

    try:
        settings = get_settings()
    except ValidationError as exc:
        setup_logging()
        logging.getLogger(__name__).error(LogTemplates.SETTINGS_INVALID, exc)
        return EXIT_BAD_CONFIG

    setup_logging(settings.log_level)
    logger = logging.getLogger(__name__)

    token_value = settings.discord.token.get_secret_value()
    if not token_value:
        logger.error(ErrorMessages.DISCORD_TOKEN_REQUIRED)
        return EXIT_BAD_CONFIG

    logger.info(LogTemplates.BOT_STARTING.format(environment=settings.environment))
    catalogs = ["YouTube", "Spotify"] if settings.spotify.enabled else ["YouTube"]
    logger.info(LogTemplates.BOT_CATALOGS_ENABLED, ", ".join(catalogs))

    from discord_queue_bot.config.container import create_container
    from discord_queue_bot.infrastructure.discord.bot import create_bot

    bot = create_bot(create_container(settings), settings)

    try:
        logger.info(LogTemplates.BOT_STARTING_RUN)
        bot.run_with_graceful_shutdown(token_value)
    except KeyboardInterrupt:
        logger.info(LogTemplates.BOT_KEYBOARD_INTERRUPT)
    except Exception as e:
        logger.exception(LogTemplates.BOT_FATAL_ERROR, e)
        return EXIT_FAILURE

    logger.info(LogTemplates.BOT_STOPPED)
    return EXIT_OK


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
