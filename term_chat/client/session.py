"""The chat session: identity, thread cache, unread state and command dispatch."""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import requests

from . import api, helpers
from ..shared.utils import find_prefix_match
from .cache import ThreadCache
from .commands import COMMAND_HANDLERS
from .config import SERVER_URL, THREAD_LIST_FOLDERS, THREAD_LIST_LIMIT
from .errors import (
    AuthError,
    InvalidCommandError,
    LoginApprovalRequired,
    NameResolutionError,
    NoThreadsError,
    TermChatError,
    ThreadNotFoundError,
)
from .events import handle_event
from .lock import LockState
from .models import Credentials, User
from .schemas import Friend, ThreadRecord
from .storage import SessionStore

logger = logging.getLogger(__name__)


class Session:
    """A logged-in chat session.

    All remote calls go through ``self.api``; every thread that enters the
    cache goes through ``cache_thread``.
    """

    def __init__(
        self,
        store: SessionStore,
        server_url: str = SERVER_URL,
        debug: bool = False,
        login: Callable[..., Awaitable[Any]] = api.login,
        get_credentials: Callable[[SessionStore], Credentials] = helpers.get_credentials,
        prompt_code: Callable[[], str] = helpers.prompt_code,
        notify: Callable[[int], None] = helpers.notify_terminal,
        output: Callable[[str], None] = print,
    ):
        self.store = store
        self.server_url = server_url
        self.debug = debug
        self.api: Optional[api.APIClient] = None
        self.user: Optional[User] = None
        self.cache = ThreadCache()
        self.lock = LockState()
        self.commands: Dict[str, Callable[..., Awaitable[Any]]] = dict(COMMAND_HANDLERS)
        self.last_thread: Optional[str] = None
        self.unread_messages_count = 0
        self.notify = notify
        self.output = output
        self._login = login
        self._get_credentials = get_credentials
        self._prompt_code = prompt_code

    def ensure_ready(self) -> api.APIClient:
        if self.api is None or self.user is None:
            raise RuntimeError("Not logged in")
        return self.api

    async def authenticate(self, credentials: Credentials) -> None:
        """Log in, answering approval challenges, and persist the session token."""
        self.output("Logging in...")
        logger.info("LOGIN_START identity=%s", credentials.identity)
        options = api.LoginOptions(log_level="info" if self.debug else "silent")

        attempt = self._login(self.server_url, credentials, options)
        while True:
            try:
                client = await attempt
                break
            except LoginApprovalRequired as challenge:
                code = await asyncio.to_thread(self._prompt_code)
                attempt = challenge.resume(code)
            except (requests.RequestException, TermChatError, ValueError) as exc:
                logger.warning("LOGIN_FAIL identity=%s reason=%s", credentials.identity, exc)
                raise AuthError(credentials.identity, exc) from exc

        self.store.save(client.get_app_state())
        self.api = client
        self.user = User(user_id=client.get_current_user_id())
        logger.info("LOGIN_SUCCESS identity=%s user_id=%s", credentials.identity, self.user.user_id)

    async def get_or_refresh_user_info(self) -> User:
        client = self.ensure_ready()
        user_id = client.get_current_user_id()
        data = await client.get_user_info(user_id)
        self.user.merge_profile(data.get(user_id) or {})
        # the profile payload does not carry the id itself
        self.user.user_id = user_id
        return self.user

    async def refresh_friends_list(self) -> User:
        client = self.ensure_ready()
        friends = await client.get_friends_list()
        self.user.friends = {friend.full_name: friend for friend in friends}
        return self.user

    async def refresh_thread_list(self) -> None:
        client = self.ensure_ready()
        threads = await client.get_thread_list(THREAD_LIST_LIMIT, None, THREAD_LIST_FOLDERS)
        if threads is None:
            raise NoThreadsError()
        self.cache.put_many(threads)

    async def fetch_user(self) -> User:
        """Refresh identity, friends and threads concurrently; all three must succeed."""
        results = await asyncio.gather(
            self.get_or_refresh_user_info(),
            self.refresh_friends_list(),
            self.refresh_thread_list(),
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return self.user

    def cache_thread(self, thread: Any) -> ThreadRecord:
        return self.cache.put(thread)

    def find_friend_by_id(self, user_id: str) -> Optional[Friend]:
        if self.user is None:
            return None
        return next((f for f in self.user.friends.values() if f.user_id == user_id), None)

    async def refresh_thread(self, thread_id: str) -> ThreadRecord:
        client = self.ensure_ready()
        data = dict(await client.get_thread_info(thread_id))
        data.setdefault("threadID", thread_id)
        return self.cache_thread(data)

    async def get_thread_by_id(self, thread_id: str, require_name: bool = False) -> ThreadRecord:
        thread = self.cache.get(thread_id)
        if thread is not None:
            return thread

        client = self.ensure_ready()
        data = dict(await client.get_thread_info(thread_id))
        data.setdefault("threadID", thread_id)
        if not data.get("name") and require_name:
            data["name"] = self._resolve_thread_name(thread_id)
        return self.cache_thread(data)

    def _resolve_thread_name(self, thread_id: str) -> str:
        if thread_id == self.user.user_id:
            if not self.user.name:
                raise NameResolutionError(thread_id)
            return self.user.name
        friend = self.find_friend_by_id(thread_id)
        if friend is None:
            raise NameResolutionError(thread_id)
        return friend.full_name

    async def get_thread_by_name(self, name: str) -> ThreadRecord:
        """Find a thread whose name starts with ``name``, ignoring case.

        Falls back to the friends list, returning an uncached record built
        from the friend's name and user id.
        """
        thread_id = self.cache.find_id_by_name(name)
        if thread_id is None:
            friends = self.user.friends if self.user else {}
            friend_name = find_prefix_match(friends, name)
            if friend_name is None:
                raise ThreadNotFoundError(name)
            return ThreadRecord(thread_id=friends[friend_name].user_id, name=friend_name)

        thread = await self.get_thread_by_id(thread_id)
        if not thread.name:
            return thread.model_copy(update={"name": name})
        return thread

    def clear(self) -> None:
        """Reset the unread counter and the terminal title."""
        if self.unread_messages_count == 0:
            return
        self.unread_messages_count = 0
        self.notify(0)

    async def process_command(self, raw_command: str) -> Any:
        if not raw_command.strip():
            return None
        # typing means new messages have been read
        self.clear()

        name, command_line = self.lock.resolve(raw_command)
        handler = self.commands.get(name)
        if handler is None:
            raise InvalidCommandError()
        return await handler(self, command_line)

    async def execute(self, raw_command: str) -> None:
        """Run one command, printing its result or its error."""
        try:
            result = await self.process_command(raw_command)
        except Exception as exc:  # noqa: BLE001
            logger.info("COMMAND_FAIL command=%r reason=%s", raw_command.split(" ", 1)[0], exc)
            self.output(str(exc))
            return
        if result:
            self.output(result)

    async def _on_event(self, payload: Dict[str, Any]) -> None:
        try:
            await handle_event(self, payload)
        except Exception:  # noqa: BLE001
            logger.exception("EVENT_FAIL type=%s", payload.get("type"))

    def _listener_done(self, task: "asyncio.Task[None]") -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("LISTEN_STOPPED reason=%s", exc, exc_info=exc)
            self.output(f"Stopped receiving messages: {exc}")

    async def _bootstrap(self) -> bool:
        try:
            credentials = await asyncio.to_thread(self._get_credentials, self.store)
            await self.authenticate(credentials)
            await self.fetch_user()
        except Exception as exc:  # noqa: BLE001
            logger.error("BOOTSTRAP_FAIL reason=%s", exc)
            self.output(str(exc))
            return False
        logger.info("SESSION_READY user_id=%s threads=%s", self.user.user_id, len(self.cache))
        self.output(f"Successfully logged in as {self.user.name}")
        return True

    async def start(self) -> bool:
        """Log in, listen for events and read commands until end of input."""
        self.notify(0)
        if not await self._bootstrap():
            return False
        listener = asyncio.create_task(self.api.listen(self._on_event))
        listener.add_done_callback(self._listener_done)
        try:
            while True:
                try:
                    line = await asyncio.to_thread(input, "> ")
                except EOFError:
                    break
                await self.execute(line)
        finally:
            listener.cancel()
        return True

    async def start_single(self, raw_command: str) -> bool:
        """Log in and run one command."""
        if not await self._bootstrap():
            return False
        await self.execute(raw_command)
        return True

    def logout(self) -> None:
        """Forget the saved session and exit."""
        self.store.delete()
        logger.info("LOGOUT user_id=%s", self.user.user_id if self.user else None)
        self.output("Logged out.")
        raise SystemExit(0)
