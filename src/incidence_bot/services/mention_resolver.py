"""
Role Mention Resolver.

Resolves the mention token of the "everyone" role in the guild a
channel belongs to.
"""

import logging

import requests

from incidence_bot.common.discord.client import DiscordClient
from incidence_bot.common.exceptions import MentionResolutionError

logger = logging.getLogger(__name__)

EVERYONE_ROLE = "everyone"


class MentionResolver:
    """Looks up role mentions through the Discord client."""

    def __init__(self, client: DiscordClient, role_name: str = EVERYONE_ROLE):
        """Initialize mention resolver.

        Args:
            client: Opened Discord client
            role_name: Exact role name to look for
        """
        self.client = client
        self.role_name = role_name

    def resolve_everyone(self, channel_id: str) -> str:
        """Return the mention token of the everyone role for a channel.

        Args:
            channel_id: Channel whose guild is searched

        Returns:
            Mention token such as "<@&1234>"

        Raises:
            MentionResolutionError: If the channel or guild lookup fails or
                no role carries the exact name
        """
        try:
            channel = self.client.get_channel(channel_id)
        except (requests.RequestException, ValueError, KeyError) as e:
            raise MentionResolutionError(f"could not look up channel {channel_id}: {e}") from e

        if not channel.guild_id:
            raise MentionResolutionError(f"channel {channel_id} does not belong to a guild")

        try:
            guild = self.client.get_guild(channel.guild_id)
        except (requests.RequestException, ValueError, KeyError) as e:
            raise MentionResolutionError(f"could not look up guild {channel.guild_id}: {e}") from e

        role = guild.find_role(self.role_name)
        if role is None:
            raise MentionResolutionError(
                f"could not find role {self.role_name!r} in guild {guild.id}"
            )

        logger.debug(f"Resolved {self.role_name} role in guild {guild.id}: {role.id}")
        return role.mention
