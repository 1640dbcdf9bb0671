from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from term_chat.client.errors import ChatPlatformError
from term_chat.client.models import Credentials
from term_chat.client.schemas import Friend, ThreadMessage
from term_chat.client.session import Session
from term_chat.client.storage import SessionStore

ME = "100"

DEFAULT_FRIENDS = [
    {"fullName": "Alice Anderson", "userID": "201", "vanity": "alice.a"},
    {"fullName": "Bob Brown", "userID": "202"},
    {"fullName": "Carol Chen", "userID": "203"},
]

DEFAULT_THREADS = [
    {
        "threadID": "301",
        "name": "Book Club",
        "color": "#ff0000",
        "lastMessageTimestamp": 1700000000000,
        "unreadCount": 2,
        "participantIDs": ["100", "201", "202"],
        "snippet": "see you thursday",
    },
    {"threadID": "201", "name": None, "lastMessageTimestamp": 1690000000000, "unreadCount": 0},
]


class FakeAPI:
    """In-memory stand-in for the remote client."""

    def __init__(
        self,
        *,
        user_id: str = ME,
        profile: dict[str, Any] | None = None,
        friends: list[dict[str, Any]] | None = None,
        threads: list[dict[str, Any]] | None = DEFAULT_THREADS,
        thread_info: dict[str, dict[str, Any]] | None = None,
        app_state: Any = None,
    ) -> None:
        self.user_id = user_id
        self.profile = profile if profile is not None else {"name": "Me Myself", "firstName": "Me"}
        self.friends = list(DEFAULT_FRIENDS if friends is None else friends)
        self.threads = threads
        self.thread_info = dict(thread_info or {})
        self.app_state = app_state if app_state is not None else {"cookies": ["c_user=100"]}
        self.history: dict[str, list[dict[str, Any]]] = {}
        self.sent: list[tuple[str, str]] = []
        self.thread_info_calls: list[str] = []
        self.events: list[dict[str, Any]] = []

    def get_app_state(self) -> Any:
        return self.app_state

    def get_current_user_id(self) -> str:
        return self.user_id

    async def get_user_info(self, user_id: str) -> dict[str, dict[str, Any]]:
        return {user_id: dict(self.profile)}

    async def get_friends_list(self) -> list[Friend]:
        return [Friend.model_validate(f) for f in self.friends]

    async def get_thread_list(self, limit: int, before: Any, folders: list[str]) -> list[dict[str, Any]] | None:
        if self.threads is None:
            return None
        return [dict(t) for t in self.threads[:limit]]

    async def get_thread_info(self, thread_id: str) -> dict[str, Any]:
        self.thread_info_calls.append(thread_id)
        if thread_id not in self.thread_info:
            raise ChatPlatformError("not-found", thread_id)
        return dict(self.thread_info[thread_id])

    async def get_thread_history(self, thread_id: str, amount: int) -> list[ThreadMessage]:
        return [ThreadMessage.model_validate(m) for m in self.history.get(thread_id, [])[-amount:]]

    async def send_message(self, body: str, thread_id: str) -> dict[str, Any]:
        self.sent.append((body, thread_id))
        return {"messageID": f"mid.{len(self.sent)}"}

    async def listen(self, on_event: Any) -> None:
        for event in self.events:
            await on_event(event)


class Recorder:
    def __init__(self) -> None:
        self.calls: list[Any] = []

    def __call__(self, *args: Any) -> None:
        self.calls.append(args[0] if len(args) == 1 else args)


def make_session(state_dir: Path, api: FakeAPI | None = None, **kwargs: Any) -> Session:
    fake = api or FakeAPI()

    async def fake_login(base_url, credentials, options):
        return fake

    kwargs.setdefault("login", fake_login)
    kwargs.setdefault("notify", Recorder())
    kwargs.setdefault("output", Recorder())
    kwargs.setdefault("prompt_code", lambda: "123456")
    return Session(SessionStore(state_dir / "session.json"), server_url="http://chat.test", **kwargs)


async def login_and_fetch(session: Session, credentials: Any = None) -> Session:
    await session.authenticate(credentials or Credentials(email="me@example.com", password="hunter22"))
    await session.fetch_user()
    return session


def ready_session(state_dir: Path, api: FakeAPI | None = None, **kwargs: Any) -> Session:
    session = make_session(state_dir, api, **kwargs)
    asyncio.run(login_and_fetch(session))
    return session
