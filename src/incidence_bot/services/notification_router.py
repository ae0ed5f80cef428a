"""
Notification Router for Incidence Bot.

Sends the status message for every report and, when the incidence
reaches the threshold, an alert mentioning everyone.
- Status: always sent first
- Alert: only if report.alert and the everyone mention resolves

Delivery is best-effort: failures become NotificationResult entries
and log lines, never exceptions.
"""

import logging
import os
from abc import ABC, abstractmethod
from typing import List, Optional

from incidence_bot.common.discord.client import DiscordClient
from incidence_bot.common.exceptions import DeliveryError, MentionResolutionError
from incidence_bot.services.mention_resolver import MentionResolver
from incidence_bot.services.message_builder import MessageBuilder
from incidence_bot.services.models import IncidenceReport, MessageKind, NotificationResult

logger = logging.getLogger(__name__)


class BaseNotificationSender(ABC):
    """Abstract base class for notification senders."""

    channel_name: str = "none"

    @abstractmethod
    def send(self, channel_id: str, content: str, kind: MessageKind) -> NotificationResult:
        """Send a message.

        Args:
            channel_id: Target channel
            content: Message text
            kind: Status or alert

        Returns:
            NotificationResult
        """
        pass

    @abstractmethod
    def resolve_mention(self, channel_id: str) -> str:
        """Resolve the everyone mention for a channel.

        Raises:
            MentionResolutionError: If the mention cannot be resolved
        """
        pass


class DiscordNotificationSender(BaseNotificationSender):
    """Discord notification sender."""

    channel_name = "discord"

    def __init__(self, client: DiscordClient, resolver: Optional[MentionResolver] = None):
        """Initialize Discord sender.

        Args:
            client: Opened Discord client
            resolver: Mention resolver (created from client if None)
        """
        self.client = client
        self.resolver = resolver or MentionResolver(client)

    def send(self, channel_id: str, content: str, kind: MessageKind) -> NotificationResult:
        """Send a Discord message."""
        try:
            self.client.send_message(channel_id, content)
        except DeliveryError as e:
            return NotificationResult(
                success=False,
                channel=self.channel_name,
                kind=kind,
                error=str(e),
            )

        return NotificationResult(
            success=True,
            channel=self.channel_name,
            kind=kind,
            message=content,
        )

    def resolve_mention(self, channel_id: str) -> str:
        return self.resolver.resolve_everyone(channel_id)


class MockNotificationSender(BaseNotificationSender):
    """Mock notification sender for testing."""

    channel_name = "mock"

    def __init__(self, mention: Optional[str] = "<@&0>"):
        """Initialize mock sender.

        Args:
            mention: Mention returned by resolve_mention (None simulates a
                guild without an everyone role)
        """
        self.mention = mention
        self.fail_kinds: List[MessageKind] = []
        self.sent_messages: List[dict] = []

    def send(self, channel_id: str, content: str, kind: MessageKind) -> NotificationResult:
        """Mock send message."""
        if kind in self.fail_kinds:
            logger.info(f"[MOCK] Simulated {kind.value} delivery failure")
            return NotificationResult(
                success=False,
                channel=self.channel_name,
                kind=kind,
                error="simulated delivery failure",
            )

        self.sent_messages.append({
            "channel_id": channel_id,
            "content": content,
            "kind": kind,
        })
        logger.info(f"[MOCK] Message sent to {channel_id}: {content}")

        return NotificationResult(
            success=True,
            channel=self.channel_name,
            kind=kind,
            message=content,
        )

    def resolve_mention(self, channel_id: str) -> str:
        if self.mention is None:
            raise MentionResolutionError("[MOCK] no everyone role")
        return self.mention

    def get_sent_messages(self) -> List[dict]:
        """Get list of sent messages."""
        return self.sent_messages.copy()

    def clear(self) -> None:
        """Clear sent messages."""
        self.sent_messages.clear()


class NotificationRouter:
    """
    Routes incidence reports to the chat channel.

    Routing rules:
    - Status message: always
    - Alert message: report.alert is True and mention resolution succeeds
    """

    def __init__(
        self,
        channel_id: str,
        client: Optional[DiscordClient] = None,
        sender: Optional[BaseNotificationSender] = None,
        message_builder: Optional[MessageBuilder] = None,
        use_mock: Optional[bool] = None,
    ):
        """Initialize notification router.

        Args:
            channel_id: Channel all messages go to
            client: Opened Discord client (required unless mocked or sender given)
            sender: Explicit sender, overrides client and use_mock
            message_builder: Message builder
            use_mock: Use mock sender (auto-detect if None)
        """
        if use_mock is None:
            use_mock = os.environ.get("NOTIFICATION_MOCK", "").lower() == "true"

        if sender is not None:
            self._sender = sender
        elif use_mock:
            self._sender = MockNotificationSender()
        elif client is not None:
            self._sender = DiscordNotificationSender(client)
        else:
            raise ValueError("NotificationRouter needs a Discord client, a sender, or use_mock")

        self.channel_id = channel_id
        self.use_mock = isinstance(self._sender, MockNotificationSender)
        self._message_builder = message_builder or MessageBuilder()

        logger.info(
            f"NotificationRouter initialized: "
            f"channel={channel_id}, sender={self._sender.channel_name}"
        )

    @property
    def sender(self) -> BaseNotificationSender:
        """Get underlying sender."""
        return self._sender

    def route_report(self, report: IncidenceReport) -> List[NotificationResult]:
        """Send status and, if due, alert messages for a report.

        Args:
            report: Evaluated incidence report

        Returns:
            List of NotificationResult in send order
        """
        results = []

        status = self._message_builder.build_status(report)
        status_result = self._sender.send(self.channel_id, status, MessageKind.STATUS)
        self._log_result(status_result)
        results.append(status_result)

        if not report.alert:
            return results

        try:
            mention = self._sender.resolve_mention(self.channel_id)
        except MentionResolutionError as e:
            logger.warning(f"Alert skipped, could not resolve everyone mention: {e}")
            results.append(
                NotificationResult(
                    success=False,
                    channel=self._sender.channel_name,
                    kind=MessageKind.ALERT,
                    error=str(e),
                )
            )
            return results

        alert = self._message_builder.build_alert(mention)
        alert_result = self._sender.send(self.channel_id, alert, MessageKind.ALERT)
        self._log_result(alert_result)
        results.append(alert_result)

        return results

    def _log_result(self, result: NotificationResult) -> None:
        if result.success:
            logger.info(f"{result.kind.value.capitalize()} message sent via {result.channel}")
        else:
            logger.warning(
                f"{result.kind.value.capitalize()} message not delivered via "
                f"{result.channel}: {result.error}"
            )

    def get_mock_sender(self) -> Optional[MockNotificationSender]:
        """Get mock sender for testing."""
        if isinstance(self._sender, MockNotificationSender):
            return self._sender
        return None
