"""Lock mode: pin all input as message text to a single target."""
from typing import Optional, Tuple

from ..shared.utils import split_command

UNLOCK_COMMAND = "unlock"
SEND_COMMAND = "m"


def resolve_input(target: Optional[str], raw: str) -> Tuple[str, str]:
    """Map (lock target, input line) to (command name, command line).

    While locked, only a bare ``unlock`` escapes; anything else becomes the
    body of a message to the target. Blank input has no command and raises
    ValueError.
    """
    tokens = split_command(raw)
    if not tokens:
        raise ValueError("blank input has no command")
    if target is None:
        return tokens[0], raw.strip()
    if raw.strip() == UNLOCK_COMMAND:
        return UNLOCK_COMMAND, UNLOCK_COMMAND
    return SEND_COMMAND, f'{SEND_COMMAND} "{target}" {" ".join(tokens)}'


class LockState:
    def __init__(self) -> None:
        self.target: Optional[str] = None

    @property
    def is_locked(self) -> bool:
        return self.target is not None

    def lock(self, target: str) -> None:
        self.target = target

    def unlock(self) -> None:
        self.target = None

    def resolve(self, raw: str) -> Tuple[str, str]:
        return resolve_input(self.target, raw)
