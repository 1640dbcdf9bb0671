"""Typed events from the platform's event stream and their handlers."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

from .errors import TermChatError, UnknownEventError

if TYPE_CHECKING:
    from .session import Session

logger = logging.getLogger(__name__)

THREAD_NAME_LOG_TYPE = "log:thread-name"


class EventKind(str, Enum):
    MESSAGE = "message"
    THREAD_EVENT = "event"
    TYPING = "typ"
    READ_RECEIPT = "read_receipt"
    MESSAGE_REACTION = "message_reaction"


@dataclass(frozen=True)
class MessageEvent:
    thread_id: str
    sender_id: str
    body: str
    message_id: str = ""
    timestamp: Optional[int] = None
    is_group: bool = False
    attachments: List[Dict[str, Any]] = field(default_factory=list)
    kind: EventKind = field(default=EventKind.MESSAGE, init=False)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "MessageEvent":
        return cls(
            thread_id=str(data["threadID"]),
            sender_id=str(data["senderID"]),
            body=data.get("body") or "",
            message_id=str(data.get("messageID", "")),
            timestamp=data.get("timestamp"),
            is_group=bool(data.get("isGroup", False)),
            attachments=list(data.get("attachments") or []),
        )


@dataclass(frozen=True)
class ThreadEvent:
    """A change to the thread itself: rename, color, membership."""

    thread_id: str
    author: str
    log_message_type: str
    log_message_body: str = ""
    kind: EventKind = field(default=EventKind.THREAD_EVENT, init=False)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "ThreadEvent":
        return cls(
            thread_id=str(data["threadID"]),
            author=str(data.get("author", "")),
            log_message_type=str(data.get("logMessageType", "")),
            log_message_body=data.get("logMessageBody") or "",
        )


@dataclass(frozen=True)
class TypingEvent:
    thread_id: str
    sender_id: str
    is_typing: bool
    kind: EventKind = field(default=EventKind.TYPING, init=False)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "TypingEvent":
        return cls(
            thread_id=str(data["threadID"]),
            sender_id=str(data.get("from", "")),
            is_typing=bool(data.get("isTyping", False)),
        )


@dataclass(frozen=True)
class ReadReceiptEvent:
    thread_id: str
    reader: str
    time: Optional[int] = None
    kind: EventKind = field(default=EventKind.READ_RECEIPT, init=False)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "ReadReceiptEvent":
        return cls(thread_id=str(data["threadID"]), reader=str(data.get("reader", "")), time=data.get("time"))


@dataclass(frozen=True)
class MessageReactionEvent:
    thread_id: str
    message_id: str
    user_id: str
    reaction: str
    kind: EventKind = field(default=EventKind.MESSAGE_REACTION, init=False)

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "MessageReactionEvent":
        return cls(
            thread_id=str(data["threadID"]),
            message_id=str(data.get("messageID", "")),
            user_id=str(data.get("userID", "")),
            reaction=data.get("reaction") or "",
        )


EVENT_TYPES = {
    EventKind.MESSAGE: MessageEvent,
    EventKind.THREAD_EVENT: ThreadEvent,
    EventKind.TYPING: TypingEvent,
    EventKind.READ_RECEIPT: ReadReceiptEvent,
    EventKind.MESSAGE_REACTION: MessageReactionEvent,
}


def parse_event(payload: Dict[str, Any]) -> Any:
    try:
        kind = EventKind(payload.get("type"))
    except ValueError:
        raise UnknownEventError(payload.get("type")) from None
    return EVENT_TYPES[kind].from_payload(payload)


async def _thread_label(session: "Session", thread_id: str) -> str:
    try:
        thread = await session.get_thread_by_id(thread_id, require_name=True)
    except TermChatError:
        return thread_id
    return thread.name or thread_id


async def on_message(session: "Session", event: MessageEvent) -> None:
    label = await _thread_label(session, event.thread_id)
    if event.sender_id == session.user.user_id:
        session.output(f"You -> {label}: {event.body}")
        return
    session.unread_messages_count += 1
    session.notify(session.unread_messages_count)
    session.last_thread = event.thread_id
    sender = label
    if event.is_group:
        friend = session.find_friend_by_id(event.sender_id)
        sender = f"{friend.full_name if friend else event.sender_id} in {label}"
    body = event.body
    if event.attachments:
        body = f"{body} [{len(event.attachments)} attachment(s)]".strip()
    session.output(f"New message from {sender} - {body}")


async def on_thread_event(session: "Session", event: ThreadEvent) -> None:
    if event.log_message_type == THREAD_NAME_LOG_TYPE:
        await session.refresh_thread(event.thread_id)
    label = await _thread_label(session, event.thread_id)
    session.output(f"[{label}] {event.log_message_body}")


async def on_typing(session: "Session", event: TypingEvent) -> None:
    logger.debug("TYPING thread=%s from=%s typing=%s", event.thread_id, event.sender_id, event.is_typing)


async def on_read_receipt(session: "Session", event: ReadReceiptEvent) -> None:
    logger.debug("READ thread=%s reader=%s", event.thread_id, event.reader)


async def on_message_reaction(session: "Session", event: MessageReactionEvent) -> None:
    label = await _thread_label(session, event.thread_id)
    session.output(f"[{label}] reaction {event.reaction}")


EVENT_HANDLERS: Dict[EventKind, Callable[["Session", Any], Awaitable[None]]] = {
    EventKind.MESSAGE: on_message,
    EventKind.THREAD_EVENT: on_thread_event,
    EventKind.TYPING: on_typing,
    EventKind.READ_RECEIPT: on_read_receipt,
    EventKind.MESSAGE_REACTION: on_message_reaction,
}


async def handle_event(session: "Session", payload: Dict[str, Any]) -> None:
    event = parse_event(payload)
    await EVENT_HANDLERS[event.kind](session, event)
