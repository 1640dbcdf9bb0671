"""HTTP API client for interacting with the chat platform."""
import asyncio
import logging
from dataclasses import asdict, dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional

import requests

from .config import LISTEN_TIMEOUT, REQUEST_TIMEOUT
from .errors import ChatPlatformError, LoginApprovalRequired
from .models import Credentials
from .schemas import Friend, LoginResponse, ThreadMessage

logger = logging.getLogger(__name__)

LOGIN_APPROVAL_ERROR = "login-approval"
LISTEN_RETRY_DELAY = 5


@dataclass
class LoginOptions:
    force_login: bool = True
    self_listen: bool = True
    listen_events: bool = True
    log_level: str = "silent"


def _raise_for_error(resp: requests.Response) -> None:
    if resp.ok:
        return
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        raise ChatPlatformError(str(body["error"]), str(body.get("detail", "")))
    resp.raise_for_status()


def _login_response(base_url: str, resp: requests.Response, options: LoginOptions) -> "APIClient":
    if resp.status_code == 401:
        try:
            body = resp.json()
        except ValueError:
            body = {}
        if isinstance(body, dict) and body.get("error") == LOGIN_APPROVAL_ERROR:
            challenge_id = str(body.get("challengeID", ""))
            logger.info("LOGIN_APPROVAL challenge=%s", challenge_id)
            raise LoginApprovalRequired(
                challenge_id, lambda code: approve_login(base_url, challenge_id, code, options)
            )
    _raise_for_error(resp)
    data = LoginResponse.model_validate(resp.json())
    logger.info("LOGIN_SUCCESS user_id=%s", data.user_id)
    return APIClient(base_url, data.token, data.user_id, data.app_state)


def _login_sync(base_url: str, credentials: Credentials, options: LoginOptions) -> "APIClient":
    base_url = base_url.rstrip("/")
    payload = {**credentials.to_payload(), "options": asdict(options)}
    resp = requests.post(f"{base_url}/auth/login", json=payload, timeout=REQUEST_TIMEOUT)
    return _login_response(base_url, resp, options)


def _approve_sync(base_url: str, challenge_id: str, code: str, options: LoginOptions) -> "APIClient":
    resp = requests.post(
        f"{base_url}/auth/approve",
        json={"challengeID": challenge_id, "code": code, "options": asdict(options)},
        timeout=REQUEST_TIMEOUT,
    )
    return _login_response(base_url, resp, options)


async def login(base_url: str, credentials: Credentials, options: LoginOptions) -> "APIClient":
    """Log in and return a session-scoped client.

    Raises LoginApprovalRequired when the platform asks for an approval code.
    """
    return await asyncio.to_thread(_login_sync, base_url, credentials, options)


async def approve_login(base_url: str, challenge_id: str, code: str, options: LoginOptions) -> "APIClient":
    return await asyncio.to_thread(_approve_sync, base_url, challenge_id, code, options)


class APIClient:
    def __init__(self, base_url: str, token: str, user_id: str, app_state: Any):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.user_id = user_id
        self.app_state = app_state

    def _headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json", "Authorization": f"Bearer {self.token}"}

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, timeout: float = REQUEST_TIMEOUT) -> Any:
        logger.debug("GET %s params=%s", path, params)
        resp = requests.get(f"{self.base_url}{path}", params=params, headers=self._headers(), timeout=timeout)
        _raise_for_error(resp)
        return resp.json()

    def _post(self, path: str, payload: Dict[str, Any]) -> Any:
        logger.debug("POST %s", path)
        resp = requests.post(f"{self.base_url}{path}", json=payload, headers=self._headers(), timeout=REQUEST_TIMEOUT)
        _raise_for_error(resp)
        return resp.json()

    def get_app_state(self) -> Any:
        return self.app_state

    def get_current_user_id(self) -> str:
        return self.user_id

    async def get_user_info(self, user_id: str) -> Dict[str, Dict[str, Any]]:
        """Return profiles keyed by user id."""
        return await asyncio.to_thread(self._get, f"/users/{user_id}")

    async def get_friends_list(self) -> List[Friend]:
        data = await asyncio.to_thread(self._get, "/friends")
        return [Friend.model_validate(f) for f in data]

    async def get_thread_list(
        self, limit: int, before: Optional[int], folders: List[str]
    ) -> Optional[List[Dict[str, Any]]]:
        params: Dict[str, Any] = {"limit": limit, "folders": ",".join(folders)}
        if before is not None:
            params["before"] = before
        return await asyncio.to_thread(self._get, "/threads", params)

    async def get_thread_info(self, thread_id: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self._get, f"/threads/{thread_id}")

    async def get_thread_history(self, thread_id: str, amount: int) -> List[ThreadMessage]:
        data = await asyncio.to_thread(self._get, f"/threads/{thread_id}/messages", {"limit": amount})
        return [ThreadMessage.model_validate(m) for m in data]

    async def send_message(self, body: str, thread_id: str) -> Dict[str, Any]:
        return await asyncio.to_thread(self._post, f"/threads/{thread_id}/messages", {"body": body})

    def _poll_events(self, cursor: Optional[str]) -> Dict[str, Any]:
        return self._get("/events", {"cursor": cursor} if cursor else None, timeout=LISTEN_TIMEOUT)

    async def listen(self, on_event: Callable[[Dict[str, Any]], Awaitable[None]]) -> None:
        """Long-poll the event stream forever, handing events to ``on_event`` one at a time."""
        cursor: Optional[str] = None
        while True:
            try:
                batch = await asyncio.to_thread(self._poll_events, cursor)
            except (requests.RequestException, ChatPlatformError) as exc:
                logger.warning("LISTEN_FAIL reason=%s", exc)
                await asyncio.sleep(LISTEN_RETRY_DELAY)
                continue
            cursor = batch.get("cursor", cursor)
            for event in batch.get("events", []):
                await on_event(event)
