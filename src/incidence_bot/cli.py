"""
Incidence Bot command line entry point.

Wires the settings into the Discord client, the tick handler and the
scheduler, then blocks until SIGINT or SIGTERM.

Usage:
    incidence-bot --timer "0 18 * * *" --token BOT_TOKEN --channel CHANNEL_ID
"""

import argparse
import logging
import signal
import threading
from typing import List, Optional

from pydantic import ValidationError

from incidence_bot import __version__
from incidence_bot.common.config import BotSettings, load_settings
from incidence_bot.common.discord.client import DiscordClient
from incidence_bot.common.exceptions import ScheduleError, SessionError
from incidence_bot.handler import IncidenceHandler
from incidence_bot.scheduler import TickScheduler

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO") -> None:
    """Configure logging for the bot."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper(), logging.INFO),
        format="[%(levelname)s] %(asctime)s - %(name)s - %(message)s",
        handlers=[logging.StreamHandler()],
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="incidence-bot",
        description="Posts the weekly COVID-19 incidence of a district to Discord",
    )
    parser.add_argument("--timer", default=None, help="Cron notation for the schedule (default: 0 18 * * *)")
    parser.add_argument("--token", default=None, help="Discord bot token")
    parser.add_argument("--channel", default=None, help="Discord channel to post to")
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    parser.add_argument("--once", action="store_true", help="Run a single check now and exit")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def install_signal_handlers(stop_event: threading.Event) -> None:
    """Set stop_event on SIGINT and SIGTERM."""

    def _handle_signal(signum, frame):
        logger.info(f"Received {signal.Signals(signum).name}, shutting down...")
        stop_event.set()

    signal.signal(signal.SIGINT, _handle_signal)
    signal.signal(signal.SIGTERM, _handle_signal)


def open_client(settings: BotSettings) -> Optional[DiscordClient]:
    """Open the Discord session, or return None in notification mock mode.

    Raises:
        SessionError: If the session cannot be opened
    """
    if settings.notification_mock:
        logger.info("Notification mock enabled, not connecting to Discord")
        return None

    client = DiscordClient(token=settings.discord_token)
    client.open()
    return client


def run_until_stopped(
    settings: BotSettings,
    handler: IncidenceHandler,
    stop_event: threading.Event,
) -> None:
    """Schedule the handler and block until stop_event is set.

    Raises:
        ScheduleError: If the timer expression cannot be registered
    """
    scheduler = TickScheduler(settings.timer, handler.tick)
    scheduler.start()

    try:
        if settings.run_on_start:
            handler.tick()
        stop_event.wait()
    finally:
        scheduler.shutdown(wait=False)


def main(argv: Optional[List[str]] = None) -> int:
    """Run the bot.

    Returns:
        Process exit status
    """
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings(
            timer=args.timer,
            discord_token=args.token,
            channel_id=args.channel,
            log_level=args.log_level,
        )
    except ValidationError as e:
        setup_logging()
        logger.error(f"Invalid configuration: {e}")
        return 1

    setup_logging(settings.log_level)
    logger.info(f"Starting Incidence Bot {__version__}")

    try:
        client = open_client(settings)
    except SessionError as e:
        logger.error(f"Could not open Discord session: {e}")
        return 1

    try:
        handler = IncidenceHandler(settings, client=client)

        if args.once:
            result = handler.handle()
            data = result.get("data") or {}
            return 0 if result["success"] and data.get("fetched") else 1

        stop_event = threading.Event()
        install_signal_handlers(stop_event)
        logger.info("Press Ctrl+C to stop")

        try:
            run_until_stopped(settings, handler, stop_event)
        except ScheduleError as e:
            logger.error(f"Could not schedule notifications: {e}")
            return 1
    finally:
        if client is not None:
            client.close()

    logger.info("Incidence Bot stopped")
    return 0
