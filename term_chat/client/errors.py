"""Error types raised by the chat session."""
from typing import Any, Awaitable, Callable


class TermChatError(Exception):
    """Base class for all session errors."""


class ChatPlatformError(TermChatError):
    """The remote platform answered with an error body."""

    def __init__(self, error: str, detail: str = ""):
        super().__init__(f"{error}: {detail}" if detail else error)
        self.error = error
        self.detail = detail


class LoginApprovalRequired(TermChatError):
    """Login is paused until the operator supplies an approval code.

    ``resume`` continues the same login attempt; it does not start a new one.
    """

    def __init__(self, challenge_id: str, resume: Callable[[str], Awaitable[Any]]):
        super().__init__("Login approval required")
        self.challenge_id = challenge_id
        self._resume = resume

    def resume(self, code: str) -> Awaitable[Any]:
        return self._resume(code)


class AuthError(TermChatError):
    def __init__(self, identity: str, cause: BaseException):
        super().__init__(f"Failed to login as [{identity}] - {cause}")
        self.identity = identity
        self.cause = cause


class PersistenceError(TermChatError):
    """The session token could not be written to disk."""


class NoThreadsError(TermChatError):
    def __init__(self, message: str = "Nothing returned from thread list"):
        super().__init__(message)


class NameResolutionError(TermChatError):
    def __init__(self, thread_id: str):
        super().__init__("Name could not be found for thread")
        self.thread_id = thread_id


class ThreadNotFoundError(TermChatError):
    def __init__(self, name: str):
        super().__init__("No thread could be found.")
        self.name = name


class InvalidCommandError(TermChatError):
    def __init__(self, message: str = "Invalid command - check your syntax"):
        super().__init__(message)


class CommandSyntaxError(InvalidCommandError):
    """A known command was given malformed arguments."""


class UnknownEventError(TermChatError):
    def __init__(self, event_type: Any):
        super().__init__(f"Unknown event type: {event_type!r}")
        self.event_type = event_type


class InvalidPayloadError(TermChatError):
    """The platform sent a payload that does not match the expected shape."""
