"""
Tests for the command line lifecycle.
"""

import os
import signal
import threading
from unittest.mock import MagicMock, patch

import pytest

from incidence_bot import cli
from incidence_bot.common.config import BotSettings
from incidence_bot.common.exceptions import SessionError


class _CountingHandler:
    def __init__(self):
        self.ticks = 0

    def tick(self):
        self.ticks += 1


@pytest.fixture
def no_signal_handlers():
    """Replace signal installation with an immediate stop."""
    with patch.object(cli, "install_signal_handlers", side_effect=lambda event: event.set()) as mocked:
        yield mocked


class TestArgumentParsing:
    """Tests for CLI flags."""

    def test_flags(self):
        """Test flag names and defaults."""
        args = cli.build_parser().parse_args(
            ["--timer", "*/10 * * * *", "--token", "abc", "--channel", "42"]
        )

        assert args.timer == "*/10 * * * *"
        assert args.token == "abc"
        assert args.channel == "42"
        assert args.once is False

    def test_unset_flags_are_none(self):
        """Test that unset flags defer to settings defaults."""
        args = cli.build_parser().parse_args([])

        assert args.timer is None
        assert args.token is None
        assert args.channel is None


class TestMain:
    """Tests for cli.main."""

    def test_invalid_timer_exits_nonzero(self):
        """Test that a timer without five fields aborts startup."""
        assert cli.main(["--timer", "0 18 * *"]) == 1

    def test_malformed_cron_exits_nonzero(self, no_signal_handlers):
        """Test that an unparsable cron expression aborts startup."""
        assert cli.main(["--timer", "99 * * * *", "--channel", "42"]) == 1

    def test_session_failure_exits_nonzero(self):
        """Test that a failed Discord session aborts startup."""
        with patch.dict(os.environ, {"NOTIFICATION_MOCK": "false"}):
            with patch.object(cli.DiscordClient, "open", side_effect=SessionError("401")):
                assert cli.main(["--token", "bad", "--channel", "42"]) == 1

    def test_empty_token_exits_nonzero(self):
        """Test that the default empty token cannot open a session."""
        with patch.dict(os.environ, {"NOTIFICATION_MOCK": "false", "DISCORD_TOKEN": ""}):
            assert cli.main(["--channel", "42"]) == 1

    def test_once(self):
        """Test a single check in mock mode."""
        assert cli.main(["--once", "--channel", "42"]) == 0

    def test_once_fetch_failure(self):
        """Test that --once reports a failed fetch."""
        with patch.object(cli.IncidenceHandler, "handle", return_value={"success": True, "data": {"fetched": False}}):
            assert cli.main(["--once", "--channel", "42"]) == 1

    def test_runs_until_signal(self, no_signal_handlers):
        """Test the scheduled run exits 0 once stopped."""
        assert cli.main(["--channel", "42"]) == 0
        no_signal_handlers.assert_called_once()

    def test_client_closed_on_exit(self, no_signal_handlers):
        """Test that the Discord session is released on shutdown."""
        client = MagicMock()
        with patch.object(cli, "open_client", return_value=client):
            assert cli.main(["--channel", "42"]) == 0

        client.close.assert_called_once()


class TestRunUntilStopped:
    """Tests for the blocking run loop."""

    def test_returns_when_stopped(self):
        """Test that a set stop event ends the run."""
        settings = BotSettings(channel_id="42", run_on_start=True, _env_file=None)
        handler = _CountingHandler()
        stop_event = threading.Event()
        stop_event.set()

        cli.run_until_stopped(settings, handler, stop_event)

        assert handler.ticks == 1

    def test_signal_sets_stop_event(self):
        """Test that SIGTERM sets the stop event."""
        previous_int = signal.getsignal(signal.SIGINT)
        previous_term = signal.getsignal(signal.SIGTERM)
        stop_event = threading.Event()

        try:
            cli.install_signal_handlers(stop_event)
            signal.getsignal(signal.SIGTERM)(signal.SIGTERM, None)
        finally:
            signal.signal(signal.SIGINT, previous_int)
            signal.signal(signal.SIGTERM, previous_term)

        assert stop_event.is_set()
