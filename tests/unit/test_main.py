"""Tests for the command line entry point."""

from unittest.mock import patch

import pytest

import main


class TestParseArgs:
    """Tests for parse_args."""

    def test_defaults_are_none(self):
        """Test unset options leave settings untouched."""
        args = main.parse_args([])
        assert args.host is None
        assert args.port is None
        assert args.log_level is None

    def test_overrides(self):
        """Test options are parsed and the log level upper-cased."""
        args = main.parse_args(["--host", "0.0.0.0", "--port", "8080", "--log-level", "debug"])
        assert args.host == "0.0.0.0"
        assert args.port == 8080
        assert args.log_level == "DEBUG"


class TestMain:
    """Tests for main."""

    def test_runs_uvicorn_with_overrides(self, monkeypatch):
        """Test CLI values reach uvicorn and logging."""
        monkeypatch.delenv("HOST", raising=False)
        with patch("main.setup_structured_logging") as setup_logging, patch(
            "uvicorn.run"
        ) as run:
            assert main.main(["--port", "8081", "--log-level", "warning"]) == 0

        setup_logging.assert_called_once()
        assert setup_logging.call_args.kwargs["level"] == "WARNING"
        assert run.call_args.kwargs["port"] == 8081
        assert run.call_args.kwargs["host"] == "127.0.0.1"

    def test_invalid_configuration(self, monkeypatch):
        """Test invalid environment returns exit code 1."""
        monkeypatch.setenv("PORT", "not-a-port")
        with patch("uvicorn.run") as run:
            assert main.main([]) == 1
        run.assert_not_called()

    @pytest.mark.parametrize("port", ["0", "70000"])
    def test_out_of_range_port_override(self, port):
        """Test CLI overrides are validated like environment values."""
        with patch("main.setup_structured_logging") as setup_logging, patch("uvicorn.run") as run:
            assert main.main(["--port", port]) == 1

        setup_logging.assert_not_called()
        run.assert_not_called()
