"""Tests for the CLI entry point."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from txms_relay.__main__ import (
    EXIT_CONFIG_ERROR,
    EXIT_SUCCESS,
    configure_logging,
    create_parser,
    main,
    print_config_summary,
    run_config_check,
    validate_config,
)


@pytest.fixture
def blockbook_env(monkeypatch):
    """Minimal valid environment."""
    monkeypatch.setenv("PROVIDER", "https://blockbook.test")
    monkeypatch.setenv("ENDPOINT", "api/v2/sendtx/")
    monkeypatch.delenv("PROVIDER_TYPE", raising=False)


class TestCreateParser:
    """Tests for argument parser creation."""

    def test_parser_has_version(self):
        """Parser should have version flag."""
        parser = create_parser()
        with pytest.raises(SystemExit) as exc_info:
            parser.parse_args(["--version"])
        assert exc_info.value.code == 0

    def test_parser_config_check(self):
        parser = create_parser()
        args = parser.parse_args(["--config-check"])
        assert args.config_check is True

    def test_parser_host_and_port(self):
        parser = create_parser()
        args = parser.parse_args(["--host", "127.0.0.1", "--port", "9000"])
        assert args.host == "127.0.0.1"
        assert args.port == 9000

    def test_parser_default_values(self):
        """Parser should have correct defaults."""
        parser = create_parser()
        args = parser.parse_args([])
        assert args.config_check is False
        assert args.log_level is None
        assert args.host is None
        assert args.port is None


class TestConfigureLogging:
    """Tests for logging configuration."""

    def test_configure_logging_info(self):
        configure_logging("INFO")
        assert logging.getLogger().level == logging.INFO

    def test_configure_logging_debug(self):
        configure_logging("DEBUG")
        assert logging.getLogger().level == logging.DEBUG

    def test_noisy_libraries_quieted(self):
        configure_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING


class TestValidateConfig:
    """Tests for configuration validation."""

    def test_validate_config_success(self, blockbook_env):
        settings = validate_config()
        assert settings is not None
        assert settings.node.submission_url == "https://blockbook.test/api/v2/sendtx/"

    def test_validate_config_failure(self, monkeypatch, capsys):
        """Should return None when the provider URL is missing."""
        monkeypatch.delenv("PROVIDER", raising=False)
        monkeypatch.delenv("PROVIDER_TYPE", raising=False)

        settings = validate_config()
        assert settings is None

        captured = capsys.readouterr()
        assert "Configuration validation failed" in captured.err


class TestRunConfigCheck:
    """Tests for config check mode."""

    def test_config_check_prints_summary(self, blockbook_env, capsys):
        settings = validate_config()
        assert settings is not None

        result = run_config_check(settings)
        assert result == EXIT_SUCCESS

        captured = capsys.readouterr()
        assert "Configuration is valid!" in captured.out
        assert "Provider: blockbook -> https://blockbook.test/api/v2/sendtx/" in captured.out

    def test_unknown_provider_type(self, monkeypatch, capsys):
        monkeypatch.setenv("PROVIDER_TYPE", "electrum")

        settings = validate_config()
        assert settings is not None

        assert run_config_check(settings) == EXIT_CONFIG_ERROR
        assert "Unknown PROVIDER_TYPE: electrum" in capsys.readouterr().err

    def test_rpc_summary_shows_method(self, monkeypatch, capsys):
        monkeypatch.setenv("PROVIDER_TYPE", "rpc")
        monkeypatch.setenv("RPC_URL", "http://node.test:8545")

        settings = validate_config()
        assert settings is not None
        print_config_summary(settings)

        assert "RPC Method: eth_sendRawTransaction" in capsys.readouterr().out


class TestMain:
    """Tests for main entry point."""

    def test_main_with_config_check(self, blockbook_env):
        with pytest.raises(SystemExit) as exc_info:
            main(["--config-check"])

        assert exc_info.value.code == EXIT_SUCCESS

    def test_main_with_invalid_config(self, monkeypatch):
        monkeypatch.delenv("PROVIDER", raising=False)
        monkeypatch.delenv("PROVIDER_TYPE", raising=False)

        with pytest.raises(SystemExit) as exc_info:
            main([])

        assert exc_info.value.code == EXIT_CONFIG_ERROR

    @patch("txms_relay.__main__.run_server")
    @patch("txms_relay.__main__.asyncio.run")
    def test_main_runs_server(self, mock_asyncio_run, mock_run_server, blockbook_env):
        """Main should serve with CLI overrides when not in config-check mode."""
        mock_asyncio_run.return_value = EXIT_SUCCESS

        with pytest.raises(SystemExit) as exc_info:
            main(["--port", "9000"])

        assert exc_info.value.code == EXIT_SUCCESS
        mock_asyncio_run.assert_called_once()
        _settings, host, port = mock_run_server.call_args.args
        assert host == "0.0.0.0"
        assert port == 9000

    @patch("txms_relay.__main__.run_server")
    @patch("txms_relay.__main__.asyncio.run")
    def test_main_keeps_ephemeral_port(self, mock_asyncio_run, mock_run_server, blockbook_env):
        """An explicit --port 0 is not replaced by the configured port."""
        mock_asyncio_run.return_value = EXIT_SUCCESS

        with pytest.raises(SystemExit):
            main(["--port", "0", "--host", "127.0.0.1"])

        _settings, host, port = mock_run_server.call_args.args
        assert host == "127.0.0.1"
        assert port == 0


class TestIntegration:
    """Integration tests for CLI invocation."""

    def test_cli_help_option(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["-h"])

        assert exc_info.value.code == 0
        captured = capsys.readouterr()
        assert "txms-relay" in captured.out
        assert "--config-check" in captured.out

    def test_cli_version_option(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])

        assert exc_info.value.code == 0
        assert "0.1.0" in capsys.readouterr().out

    def test_cli_invalid_log_level(self):
        with pytest.raises(SystemExit) as exc_info:
            main(["--log-level", "INVALID"])

        assert exc_info.value.code == 2
