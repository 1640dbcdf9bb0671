"""Local client storage for the persisted session token."""
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import PersistenceError

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load_state(self) -> Dict[str, Any]:
        if self.path.exists():
            with self.path.open("r", encoding="utf-8") as f:
                return json.load(f)
        return {}

    def load(self) -> Optional[Any]:
        """Return the saved app state, or None when there is none."""
        try:
            return self.load_state().get("app_state")
        except (OSError, ValueError) as exc:
            logger.warning("SESSION_LOAD_FAIL path=%s reason=%s", self.path, exc)
            return None

    def save(self, app_state: Any) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("w", encoding="utf-8") as f:
                json.dump({"app_state": app_state}, f, indent=2)
        except (OSError, TypeError) as exc:
            raise PersistenceError(f"Could not save session to {self.path}: {exc}") from exc
        logger.info("SESSION_SAVED path=%s", self.path)

    def delete(self) -> None:
        self.path.unlink(missing_ok=True)
        logger.info("SESSION_DELETED path=%s", self.path)
