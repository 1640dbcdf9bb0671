"""Client configuration values."""
import os
from pathlib import Path

SERVER_URL = os.environ.get("TERM_CHAT_SERVER_URL", "http://127.0.0.1:8000")
SESSION_FILE_PATH = Path(os.environ.get("TERM_CHAT_SESSION_FILE", Path.home() / ".term_chat_session.json"))
LOG_FILE = Path(os.environ.get("TERM_CHAT_LOG_FILE", Path.home() / ".term_chat.log"))
DEBUG = os.environ.get("TERM_CHAT_DEBUG", "").strip().lower() in {"1", "true", "yes"}

REQUEST_TIMEOUT = 10
LISTEN_TIMEOUT = 60
THREAD_LIST_LIMIT = 20
THREAD_LIST_FOLDERS = ["INBOX"]
