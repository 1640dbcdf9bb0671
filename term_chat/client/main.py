"""Console entry point for the terminal chat client."""
import argparse
import asyncio
import sys
from typing import List, Optional

from . import config
from .logging_config import configure_logging
from .session import Session
from .storage import SessionStore


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="term-chat", description="Terminal chat client")
    parser.add_argument("-c", "--command", help="run a single command and exit")
    parser.add_argument("--debug", action="store_true", default=config.DEBUG, help="verbose remote client logging")
    parser.add_argument("--server", default=config.SERVER_URL, help="chat platform URL")
    parser.add_argument("--session-file", default=str(config.SESSION_FILE_PATH), help="where the login session is kept")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    args = build_parser().parse_args(argv)
    configure_logging(debug=args.debug)
    session = Session(SessionStore(args.session_file), server_url=args.server, debug=args.debug)

    try:
        if args.command:
            ok = asyncio.run(session.start_single(args.command))
        else:
            ok = asyncio.run(session.start())
    except KeyboardInterrupt:
        ok = True
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
