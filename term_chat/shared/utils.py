"""Shared utility functions."""
import re
from typing import Iterable, List, Optional, Tuple

QUOTED_TARGET_RE = re.compile(r'^\S+\s+"(?P<target>[^"]+)"\s*(?P<rest>.*)$', re.DOTALL)


def split_command(raw: str) -> List[str]:
    """Split an input line on whitespace; token 0 is the command name."""
    return raw.replace("\n", " ").split()


def parse_quoted_target(command_line: str) -> Optional[Tuple[str, str]]:
    """Return (target, rest) for lines shaped like ``cmd "target" rest``."""
    match = QUOTED_TARGET_RE.match(command_line.strip())
    if not match:
        return None
    return match.group("target"), match.group("rest").strip()


def find_prefix_match(names: Iterable[str], prefix: str) -> Optional[str]:
    """Return the first name starting with ``prefix``, ignoring case."""
    needle = prefix.lower()
    return next((n for n in names if n.lower().startswith(needle)), None)
