"""Operator prompts and terminal notification helpers."""
import getpass
import sys

from .models import Credentials
from .storage import SessionStore

TITLE = "term-chat"


def get_credentials(store: SessionStore) -> Credentials:
    """Use the saved session if there is one, otherwise ask for email and password."""
    app_state = store.load()
    if app_state is not None:
        return Credentials(app_state=app_state)
    print("=== Login ===")
    email = input("Email: ").strip()
    password = getpass.getpass("Password: ")
    return Credentials(email=email, password=password)


def prompt_code() -> str:
    print("Login approval required. Check your other devices for a code.")
    return input("Approval code: ").strip()


def notify_terminal(unread_count: int = 0) -> None:
    """Show the unread count in the terminal title."""
    title = f"{TITLE} ({unread_count})" if unread_count else TITLE
    sys.stdout.write(f"\033]0;{title}\007")
    sys.stdout.flush()
