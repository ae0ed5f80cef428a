"""
Discord API models.

Data classes for the subset of Discord objects the bot reads.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class Role:
    """Guild role."""

    id: str
    name: str

    @property
    def mention(self) -> str:
        """Mention token that notifies every member holding this role."""
        return f"<@&{self.id}>"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Role":
        return cls(id=str(data["id"]), name=data.get("name", ""))


@dataclass
class Channel:
    """Text channel."""

    id: str
    guild_id: Optional[str] = None
    name: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Channel":
        guild_id = data.get("guild_id")
        return cls(
            id=str(data["id"]),
            guild_id=str(guild_id) if guild_id else None,
            name=data.get("name") or "",
        )


@dataclass
class Guild:
    """Guild (server) with its roles."""

    id: str
    name: str = ""
    roles: List[Role] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Guild":
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            roles=[Role.from_dict(r) for r in data.get("roles", [])],
        )

    def find_role(self, name: str) -> Optional[Role]:
        """Return the first role whose name matches exactly."""
        for role in self.roles:
            if role.name == name:
                return role
        return None
