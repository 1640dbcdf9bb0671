"""Command handlers for the interactive prompt.

Every handler is ``async def handler(session, command_line)`` and returns the
text to show the operator, or None.
"""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Tuple

from ..shared.utils import parse_quoted_target, split_command
from .errors import CommandSyntaxError, TermChatError

if TYPE_CHECKING:
    from .session import Session

DEFAULT_RECENT_COUNT = 5
DEFAULT_HISTORY_COUNT = 5

HELP_TEXT = """Commands:
  m "<name>" <message>   send a message (alias: message)
  r <message>            reply to the last thread that messaged you (alias: reply)
  contacts               list your friends
  recent [n]             show the n most recent threads
  h "<name>" [n]         show the last n messages with <name> (alias: history)
  lock "<name>"          send everything you type to <name>
  unlock                 leave lock mode
  clear                  clear the screen
  logout                 forget the saved session and quit
  help                   show this message"""


def _command_body(command_line: str) -> str:
    parts = command_line.strip().split(" ", 1)
    return parts[1].strip() if len(parts) > 1 else ""


def _parse_count(text: str, default: int) -> int:
    if not text:
        return default
    try:
        count = int(text)
    except ValueError:
        raise CommandSyntaxError(f"Invalid count: {text}") from None
    if count <= 0:
        raise CommandSyntaxError(f"Invalid count: {text}")
    return count


def _parse_target(command_line: str, usage: str) -> Tuple[str, str]:
    parsed = parse_quoted_target(command_line)
    if parsed is None:
        raise CommandSyntaxError(f"Invalid syntax - usage: {usage}")
    return parsed


async def message(session: Session, command_line: str) -> str:
    target, body = _parse_target(command_line, 'm "<name>" <message>')
    if not body:
        raise CommandSyntaxError('No message to send - usage: m "<name>" <message>')
    client = session.ensure_ready()
    thread = await session.get_thread_by_name(target)
    await client.send_message(body, thread.thread_id)
    session.last_thread = thread.thread_id
    return f"Sent message to {thread.name}"


async def reply(session: Session, command_line: str) -> str:
    body = _command_body(command_line)
    if not body:
        raise CommandSyntaxError("No message to send - usage: r <message>")
    if session.last_thread is None:
        raise TermChatError("Nobody to reply to yet.")
    client = session.ensure_ready()
    thread = await session.get_thread_by_id(session.last_thread, require_name=True)
    await client.send_message(body, thread.thread_id)
    return f"Sent message to {thread.name}"


async def contacts(session: Session, command_line: str) -> str:
    session.ensure_ready()
    names = sorted(session.user.friends)
    if not names:
        return "You have no contacts."
    return "\n".join(names)


async def recent(session: Session, command_line: str) -> str:
    count = _parse_count(_command_body(command_line), DEFAULT_RECENT_COUNT)
    await session.refresh_thread_list()
    lines = []
    for idx, thread in enumerate(session.cache.recent(count), start=1):
        label = thread.name or thread.thread_id
        if thread.unread_count:
            label = f"{label} ({thread.unread_count} unread)"
        lines.append(f"{idx}. {label}")
    return "\n".join(lines) or "No recent threads."


async def history(session: Session, command_line: str) -> str:
    target, rest = _parse_target(command_line, 'h "<name>" [n]')
    count = _parse_count(rest, DEFAULT_HISTORY_COUNT)
    client = session.ensure_ready()
    thread = await session.get_thread_by_name(target)
    messages = await client.get_thread_history(thread.thread_id, count)

    lines = []
    for msg in messages:
        if msg.sender_id == session.user.user_id:
            sender = "You"
        else:
            friend = session.find_friend_by_id(msg.sender_id)
            sender = friend.full_name if friend else thread.name or msg.sender_id
        lines.append(f"{sender}: {msg.body}")
    return "\n".join(lines) or f"No messages with {thread.name}."


async def lock(session: Session, command_line: str) -> str:
    parsed = parse_quoted_target(command_line)
    target = parsed[0] if parsed else " ".join(split_command(command_line)[1:])
    if not target:
        raise CommandSyntaxError('Invalid syntax - usage: lock "<name>"')
    thread = await session.get_thread_by_name(target)
    session.lock.lock(thread.name or target)
    return f"Locked on to {session.lock.target} (type 'unlock' to unlock)"


async def unlock(session: Session, command_line: str) -> str:
    if not session.lock.is_locked:
        return "Not locked."
    target = session.lock.target
    session.lock.unlock()
    return f"Unlocked from {target}"


async def clear(session: Session, command_line: str) -> None:
    session.output("\033[2J\033[H")


async def help_(session: Session, command_line: str) -> str:
    return HELP_TEXT


async def logout(session: Session, command_line: str) -> None:
    session.logout()


CommandHandler = Callable[["Session", str], Awaitable[Any]]

COMMAND_HANDLERS: Dict[str, CommandHandler] = {
    "m": message,
    "message": message,
    "r": reply,
    "reply": reply,
    "contacts": contacts,
    "recent": recent,
    "h": history,
    "history": history,
    "lock": lock,
    "unlock": unlock,
    "clear": clear,
    "help": help_,
    "logout": logout,
}
