"""Tests for the chat-relay command line interface."""

from unittest.mock import patch

from typer.testing import CliRunner

from chat_relay.cli import typer_app
from chat_relay.uvicorn_filters import ExcludeMetricsFilter

runner = CliRunner()


class TestServeCommand:
    """Tests for `chat-relay serve`."""

    def test_serve_runs_application_factory(self):
        """Test serve starts uvicorn on the application factory."""
        with patch("chat_relay.cli.uvicorn.run") as mock_run:
            result = runner.invoke(
                typer_app, ["serve", "--host", "127.0.0.1", "-p", "9000"]
            )

        assert result.exit_code == 0
        mock_run.assert_called_once_with(
            "chat_relay:application",
            factory=True,
            host="127.0.0.1",
            port=9000,
            reload=False,
        )
        assert "ws://127.0.0.1:9000/ws" in result.output

    def test_serve_installs_access_log_filter(self):
        """Test serve keeps monitoring paths out of the access log."""
        with (
            patch("chat_relay.cli.uvicorn.run"),
            patch("chat_relay.cli.logging.getLogger") as mock_get_logger,
        ):
            runner.invoke(typer_app, ["serve"])

        mock_get_logger.assert_any_call("uvicorn.access")
        installed = mock_get_logger.return_value.addFilter.call_args[0][0]
        assert isinstance(installed, ExcludeMetricsFilter)


class TestSettingsCommand:
    """Tests for `chat-relay settings`."""

    def test_settings_lists_relay_configuration(self):
        """Test settings prints the effective configuration."""
        result = runner.invoke(typer_app, ["settings"])

        assert result.exit_code == 0
        assert "WS_RECEIVE_BUFFER_SIZE" in result.output
        assert "4096" in result.output
        assert "truncate" in result.output
