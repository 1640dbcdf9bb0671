"""Client-side models for the authenticated identity and login credentials."""
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from .schemas import Friend


@dataclass
class User:
    user_id: Optional[str] = None
    name: Optional[str] = None
    profile: Dict[str, Any] = field(default_factory=dict)
    friends: Dict[str, Friend] = field(default_factory=dict)

    def merge_profile(self, data: Dict[str, Any]) -> None:
        """Merge a profile payload; fields absent from ``data`` keep their value."""
        self.profile.update(data)
        if data.get("name"):
            self.name = data["name"]


@dataclass
class Credentials:
    """Either an email/password pair or a previously saved app state."""

    email: Optional[str] = None
    password: Optional[str] = None
    app_state: Any = None

    @property
    def identity(self) -> str:
        return self.email or "saved session"

    def to_payload(self) -> Dict[str, Any]:
        if self.app_state is not None:
            return {"appState": self.app_state}
        return {"email": self.email, "password": self.password}
