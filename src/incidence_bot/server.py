"""
Incidence Bot FastAPI Server.

Optional status server that runs the scheduler in the background and
exposes health, statistics and an on-demand check.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from incidence_bot import __version__
from incidence_bot.cli import open_client, setup_logging
from incidence_bot.common.config import BotSettings, get_settings
from incidence_bot.common.discord.client import DiscordClient
from incidence_bot.handler import IncidenceHandler
from incidence_bot.scheduler import TickScheduler

logger = logging.getLogger(__name__)


class CheckRequest(BaseModel):
    """Check request body."""
    publish_notifications: bool = True


# Global instances
_handler: Optional[IncidenceHandler] = None
_scheduler: Optional[TickScheduler] = None
_client: Optional[DiscordClient] = None


def get_handler(settings: Optional[BotSettings] = None) -> IncidenceHandler:
    """Get or create handler instance."""
    global _handler, _client
    if _handler is None:
        settings = settings or get_settings()
        _client = open_client(settings)
        _handler = IncidenceHandler(settings, client=_client)
    return _handler


def reset_state() -> None:
    """Drop global instances, releasing the scheduler and Discord session."""
    global _handler, _scheduler, _client
    if _scheduler is not None:
        _scheduler.shutdown(wait=False)
    if _client is not None:
        _client.close()
    _handler = None
    _scheduler = None
    _client = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler."""
    global _scheduler
    settings = get_settings()
    logger.info("Incidence Bot server starting...")

    handler = get_handler(settings)
    _scheduler = TickScheduler(settings.timer, handler.tick)
    _scheduler.start()

    yield

    logger.info("Incidence Bot server shutting down...")
    reset_state()


app = FastAPI(
    title="Incidence Bot API",
    description=(
        "Scheduled weekly-incidence notifications for Discord.\n\n"
        "- Status message on every scheduled check\n"
        "- Everyone alert when the incidence reaches the threshold"
    ),
    version=__version__,
    lifespan=lifespan,
)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "service": "incidence-bot",
        "version": __version__,
        "endpoints": {
            "health": "GET /health",
            "stats": "GET /stats",
            "check": "POST /check",
        },
    }


@app.get("/health")
async def health():
    """Health check endpoint."""
    handler = get_handler()
    return {
        "status": "healthy",
        "service": "incidence-bot",
        "district": handler.settings.district_key,
        "scheduler_running": bool(_scheduler and _scheduler.running),
        "mock_mode": handler.fetcher.is_mock,
    }


@app.get("/stats")
async def stats():
    """Get processing statistics."""
    handler = get_handler()
    next_run = _scheduler.next_run_time if _scheduler else None
    return {
        "handler_stats": handler.get_stats(),
        "timer": handler.settings.timer,
        "next_run_time": next_run.isoformat() if next_run else None,
    }


@app.post("/check")
def check(request: CheckRequest):
    """Run one check now.

    Fetches the district data and, unless publish_notifications is
    false, posts the status and alert messages.
    """
    handler = get_handler()
    result = handler.handle({"body": request.model_dump()}, None)
    return JSONResponse(content=result)


def run_server(
    host: Optional[str] = None,
    port: Optional[int] = None,
    reload: bool = False,
):
    """Run the FastAPI server."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level)
    uvicorn.run(
        "incidence_bot.server:app",
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
    )


def main() -> None:
    import argparse

    parser = argparse.ArgumentParser(description="Incidence Bot Server")
    parser.add_argument("--host", default=None, help="Host to bind")
    parser.add_argument("--port", type=int, default=None, help="Port to bind")
    parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()
    run_server(host=args.host, port=args.port, reload=args.reload)


if __name__ == "__main__":
    main()
