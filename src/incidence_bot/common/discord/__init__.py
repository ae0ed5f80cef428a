"""Discord REST client module."""

from incidence_bot.common.discord.client import DiscordClient
from incidence_bot.common.discord.models import Channel, Guild, Role

__all__ = ["DiscordClient", "Channel", "Guild", "Role"]
