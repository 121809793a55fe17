"""Chat completion messages."""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional


ROLE_SYSTEM = "system"
ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

ROLES = (ROLE_SYSTEM, ROLE_USER, ROLE_ASSISTANT)


@dataclass
class ChatMessage:
    """
    A single chat message.

    Attributes:
        role: One of "system", "user" or "assistant"
        content: Message text
        name: Optional author name
    """

    role: str
    content: str
    name: Optional[str] = None

    def __post_init__(self):
        if self.role not in ROLES:
            raise ValueError(f"Unknown role: {self.role}. Use one of {', '.join(ROLES)}")

    def to_dict(self) -> Dict[str, str]:
        """Transport form; absent or empty fields are omitted."""
        result = {"role": self.role, "content": self.content, "name": self.name}
        return {key: value for key, value in result.items() if value}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        """Build a message from its transport form."""
        return cls(
            role=data["role"],
            content=data.get("content") or "",
            name=data.get("name"),
        )
