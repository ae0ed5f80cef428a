"""Common handlers for Incidence Bot."""

from incidence_bot.common.handlers.base_handler import BaseHandler

__all__ = ["BaseHandler"]
