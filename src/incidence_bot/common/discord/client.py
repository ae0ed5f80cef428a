"""
Discord REST Client.

Minimal bot client for the Discord HTTP API: session check, channel and
guild lookup, and plain-text message delivery.

Reference:
- https://discord.com/developers/docs/reference
"""

import logging
import threading
from typing import Any, Dict, List, Optional

import requests

from incidence_bot.common.discord.models import Channel, Guild
from incidence_bot.common.exceptions import DeliveryError, SessionError

logger = logging.getLogger(__name__)


class DiscordClient:
    """
    Discord bot client over the REST API.

    Usage:
        client = DiscordClient(token="YOUR_BOT_TOKEN")
        client.open()
        client.send_message("1234567890", "Hello")
    """

    API_BASE = "https://discord.com/api/v10"

    def __init__(
        self,
        token: str,
        session: Optional[requests.Session] = None,
        timeout: Optional[float] = None,
    ):
        """Initialize Discord client.

        Args:
            token: Bot token (without the "Bot " prefix)
            session: Optional requests session shared by all threads
            timeout: Request timeout in seconds (None waits indefinitely)
        """
        self.token = token
        self.timeout = timeout
        self._session = session
        self._local = threading.local()
        self._sessions: List[requests.Session] = []
        self._sessions_lock = threading.Lock()
        self.user: Optional[Dict[str, Any]] = None

    def _get_session(self) -> requests.Session:
        """Get the injected session or this thread's own session.

        requests.Session is not thread-safe, and ticks call the client from
        scheduler worker threads, so each thread gets a separate session.
        """
        if self._session is not None:
            session = self._session
        else:
            session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        session.headers["Authorization"] = f"Bot {self.token}"
        return session

    def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        """Make HTTP request to the Discord API.

        Args:
            method: HTTP method
            path: API path starting with "/"
            json: Optional JSON body

        Returns:
            Decoded JSON response
        """
        session = self._get_session()
        url = f"{self.API_BASE}{path}"

        try:
            response = session.request(method, url, json=json, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except Exception as e:
            logger.debug(f"Discord API error on {method} {path}: {e}")
            raise

    @property
    def is_open(self) -> bool:
        """Check if the session was opened successfully."""
        return self.user is not None

    def open(self) -> Dict[str, Any]:
        """Open the bot session by verifying the token.

        Returns:
            Bot user object

        Raises:
            SessionError: If the token is missing or rejected
        """
        if not self.token:
            raise SessionError("Discord bot token not set")

        try:
            self.user = self._request("GET", "/users/@me")
        except (requests.RequestException, ValueError) as e:
            raise SessionError(f"could not open Discord session: {e}") from e

        logger.info(f"Discord session opened as {self.user.get('username', 'unknown')}")
        return self.user

    def close(self) -> None:
        """Close every HTTP session opened by this client."""
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
            self._local = threading.local()
        if self._session is not None:
            sessions.append(self._session)
            self._session = None
        for session in sessions:
            session.close()
        self.user = None
        logger.info("Discord session closed")

    def get_channel(self, channel_id: str) -> Channel:
        """Look up a channel.

        Args:
            channel_id: Channel snowflake ID

        Returns:
            Channel object
        """
        return Channel.from_dict(self._request("GET", f"/channels/{channel_id}"))

    def get_guild(self, guild_id: str) -> Guild:
        """Look up a guild including its roles.

        Args:
            guild_id: Guild snowflake ID

        Returns:
            Guild object
        """
        return Guild.from_dict(self._request("GET", f"/guilds/{guild_id}"))

    def send_message(self, channel_id: str, content: str) -> Dict[str, Any]:
        """Send a plain-text message.

        Args:
            channel_id: Target channel ID
            content: Message text

        Returns:
            Created message object

        Raises:
            DeliveryError: If the message could not be sent
        """
        try:
            return self._request(
                "POST",
                f"/channels/{channel_id}/messages",
                json={"content": content},
            )
        except (requests.RequestException, ValueError) as e:
            raise DeliveryError(f"could not send message to channel {channel_id}: {e}") from e
