"""
Tests for main.py - Main Entry Point

Tests for the main entry point including:
- Logging configuration and its basicConfig fallback
- Token validation
- Container and bot creation
- Exit codes for clean stops and crashes
"""

import json
import logging
from unittest.mock import MagicMock, mock_open, patch

import pytest
from pydantic import SecretStr
from pydantic import ValidationError as PydanticValidationError

from discord_queue_bot.config.settings import DiscordSettings
from discord_queue_bot.main import EXIT_BAD_CONFIG, EXIT_FAILURE, cli, main, setup_logging


def _settings_error() -> PydanticValidationError:
    try:
        DiscordSettings(command_prefix="")
    except PydanticValidationError as exc:
        return exc
    raise AssertionError("empty prefix should not validate")


def _mock_settings(token: str = "test_token_123", log_level: str = "INFO") -> MagicMock:
    mock_discord = MagicMock()
    mock_discord.token = SecretStr(token)

    mock_settings = MagicMock()
    mock_settings.discord = mock_discord
    mock_settings.log_level = log_level
    mock_settings.environment = "test"
    return mock_settings


class TestLoggingSetup:
    """Tests for logging configuration."""

    def _make_valid_config(self) -> dict:
        return {
            "version": 1,
            "disable_existing_loggers": False,
            "handlers": {},
            "loggers": {
                "discord": {"level": "WARNING"},
                "httpx": {"level": "WARNING"},
            },
            "root": {"level": "INFO", "handlers": []},
        }

    def test_dictconfig_called_when_json_exists(self):
        """Should call dictConfig when logging_config.json exists."""
        config = self._make_valid_config()
        m = mock_open(read_data=json.dumps(config))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig") as mock_dc,
        ):
            setup_logging()

            mock_dc.assert_called_once_with(config)

    def test_fallback_to_basicconfig_when_json_missing(self):
        """Should fallback to basicConfig when logging_config.json is missing."""
        with (
            patch("builtins.open", side_effect=FileNotFoundError),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

            mock_bc.assert_called_once()
            assert mock_bc.call_args[1]["level"] == logging.INFO

    def test_fallback_to_basicconfig_when_json_malformed(self):
        """Should fallback to basicConfig when JSON is malformed."""
        m = mock_open(read_data="{invalid json")
        with (
            patch("builtins.open", m),
            patch("logging.basicConfig") as mock_bc,
        ):
            setup_logging()

            mock_bc.assert_called_once()

    def test_root_logger_level_overridden_by_settings(self):
        """Should override root logger level with the provided log_level."""
        m = mock_open(read_data=json.dumps(self._make_valid_config()))
        with (
            patch("builtins.open", m),
            patch("logging.config.dictConfig"),
            patch("logging.getLogger") as mock_get_logger,
        ):
            mock_root = MagicMock()
            mock_get_logger.return_value = mock_root

            setup_logging("DEBUG")

            mock_root.setLevel.assert_called_once_with(logging.DEBUG)

    def test_explicit_config_path(self, tmp_path):
        """Should load the file passed in instead of the bundled one."""
        path = tmp_path / "logging.json"
        path.write_text(json.dumps(self._make_valid_config()))

        with patch("logging.config.dictConfig") as mock_dc:
            setup_logging(config_path=path)

        mock_dc.assert_called_once_with(self._make_valid_config())

    def test_env_config_path(self, tmp_path, monkeypatch):
        """Should honour LOGGING_CONFIG when no path is passed."""
        path = tmp_path / "from_env.json"
        path.write_text(json.dumps(self._make_valid_config()))
        monkeypatch.setenv("LOGGING_CONFIG", str(path))

        with patch("logging.config.dictConfig") as mock_dc:
            setup_logging()

        mock_dc.assert_called_once()

    def test_shipped_config_is_valid_json(self):
        """Should ship a logging config that uses the colored console formatter."""
        from discord_queue_bot.main import _LOGGING_CONFIG_PATH

        config = json.loads(_LOGGING_CONFIG_PATH.read_text())

        assert config["version"] == 1
        formatter = config["formatters"]["console"]["()"]
        assert formatter == "discord_queue_bot.utils.logging.ColoredFormatter"


class TestMainFunction:
    """Tests for main entry point function."""

    def test_main_returns_error_without_token(self):
        """Should return the configuration error code when the Discord token is missing."""
        with (
            patch(
                "discord_queue_bot.config.settings.get_settings",
                return_value=_mock_settings(token=""),
            ),
            patch("discord_queue_bot.main.setup_logging"),
            patch("discord_queue_bot.config.container.create_container") as mock_container,
        ):
            exit_code = main()

        assert exit_code == EXIT_BAD_CONFIG
        mock_container.assert_not_called()

    def test_main_rejects_invalid_settings(self):
        """Should exit with the configuration error code when settings fail validation."""
        with (
            patch(
                "discord_queue_bot.config.settings.get_settings", side_effect=_settings_error()
            ),
            patch("discord_queue_bot.main.setup_logging"),
            patch("discord_queue_bot.config.container.create_container") as mock_container,
        ):
            exit_code = main()

        assert exit_code == EXIT_BAD_CONFIG
        mock_container.assert_not_called()

    def test_main_successful_run(self):
        """Should return 0 on successful bot run."""
        mock_bot = MagicMock()

        with (
            patch(
                "discord_queue_bot.config.settings.get_settings", return_value=_mock_settings()
            ),
            patch("discord_queue_bot.main.setup_logging"),
            patch("discord_queue_bot.config.container.create_container"),
            patch("discord_queue_bot.infrastructure.discord.bot.create_bot", return_value=mock_bot),
        ):
            exit_code = main()

        assert exit_code == 0
        mock_bot.run_with_graceful_shutdown.assert_called_once_with("test_token_123")

    def test_main_handles_keyboard_interrupt(self):
        """Should return 0 on KeyboardInterrupt (graceful shutdown)."""
        mock_bot = MagicMock()
        mock_bot.run_with_graceful_shutdown.side_effect = KeyboardInterrupt()

        with (
            patch(
                "discord_queue_bot.config.settings.get_settings", return_value=_mock_settings()
            ),
            patch("discord_queue_bot.main.setup_logging"),
            patch("discord_queue_bot.config.container.create_container"),
            patch("discord_queue_bot.infrastructure.discord.bot.create_bot", return_value=mock_bot),
        ):
            exit_code = main()

        assert exit_code == 0

    def test_main_handles_exception(self):
        """Should return error code on unhandled exception."""
        mock_bot = MagicMock()
        mock_bot.run_with_graceful_shutdown.side_effect = RuntimeError("Bot crashed!")

        with (
            patch(
                "discord_queue_bot.config.settings.get_settings", return_value=_mock_settings()
            ),
            patch("discord_queue_bot.main.setup_logging"),
            patch("discord_queue_bot.config.container.create_container"),
            patch("discord_queue_bot.infrastructure.discord.bot.create_bot", return_value=mock_bot),
        ):
            exit_code = main()

        assert exit_code == EXIT_FAILURE

    def test_main_wires_container_and_bot(self):
        """Should create the container from settings and the bot from both."""
        settings = _mock_settings()
        mock_container = MagicMock()

        with (
            patch("discord_queue_bot.config.settings.get_settings", return_value=settings),
            patch("discord_queue_bot.main.setup_logging") as mock_setup_logging,
            patch(
                "discord_queue_bot.config.container.create_container",
                return_value=mock_container,
            ) as mock_create_container,
            patch(
                "discord_queue_bot.infrastructure.discord.bot.create_bot",
                return_value=MagicMock(),
            ) as mock_create_bot,
        ):
            main()

        mock_setup_logging.assert_called_once_with("INFO")
        mock_create_container.assert_called_once_with(settings)
        mock_create_bot.assert_called_once_with(mock_container, settings)


class TestCli:
    """Tests for the console script wrapper."""

    def test_cli_exits_with_main_code(self):
        """Should exit with the code returned by main."""
        with patch("discord_queue_bot.main.main", return_value=1):
            with pytest.raises(SystemExit) as exc_info:
                cli()

        assert exc_info.value.code == 1
