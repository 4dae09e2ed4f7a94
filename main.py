#!/usr/bin/env python3
"""
AuthCore -- administrative command line.

Usage:
  python main.py serve
  python main.py serve --host 0.0.0.0 --port 9000
  python main.py create-user alice
  python main.py create-user alice --password-stdin < pw.txt
  python main.py hash-password

Environment variables:
  SECRET_KEY      Required. Token signing secret, at least 32 characters.
  DATABASE_URL    SQLAlchemy URL of the user store (default: sqlite file).
  See core/config.py for the full list.
"""

import argparse
import getpass
import sys

from sqlalchemy.exc import IntegrityError

from auth.passwords import CredentialVerifier
from auth.store import UserStore
from core.config import get_settings


def _read_password(from_stdin: bool) -> str:
    """Read a password from stdin (first line) or prompt twice on the terminal."""
    if from_stdin:
        return sys.stdin.readline().rstrip("\n")
    password = getpass.getpass("Password: ")
    if getpass.getpass("Repeat password: ") != password:
        print("  [!] Passwords do not match.", file=sys.stderr)
        sys.exit(1)
    return password


def cmd_create_user(args: argparse.Namespace) -> int:
    settings = get_settings()
    verifier = CredentialVerifier(rounds=settings.bcrypt_rounds)
    password_hash = verifier.hash(_read_password(args.password_stdin))
    store = UserStore(args.database_url or settings.database_url)
    try:
        subject_id = store.create_user(args.username, password_hash)
    except IntegrityError:
        print(f"  [!] User '{args.username}' already exists.", file=sys.stderr)
        return 1
    finally:
        store.close()
    print(subject_id)
    return 0


def cmd_hash_password(args: argparse.Namespace) -> int:
    settings = get_settings()
    verifier = CredentialVerifier(rounds=settings.bcrypt_rounds)
    print(verifier.hash(_read_password(args.password_stdin)))
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "asgi:app",
        host=args.host or settings.host,
        port=args.port or settings.port,
        reload=args.reload,
    )
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="authcore",
        description="Credential verification and signed session tokens.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  SECRET_KEY=... python main.py create-user alice
  SECRET_KEY=... python main.py serve --port 9000
        """,
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--host", default=None, help="Bind address (default: HOST setting)")
    serve.add_argument("--port", type=int, default=None, help="Bind port (default: PORT setting)")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    serve.set_defaults(func=cmd_serve)

    create = sub.add_parser("create-user", help="Add a user to the store and print its subject ID")
    create.add_argument("username")
    create.add_argument("--database-url", default=None, metavar="URL", help="Override DATABASE_URL")
    create.add_argument("--password-stdin", action="store_true", help="Read the password from stdin")
    create.set_defaults(func=cmd_create_user)

    hashpw = sub.add_parser("hash-password", help="Print a bcrypt hash for a password")
    hashpw.add_argument("--password-stdin", action="store_true", help="Read the password from stdin")
    hashpw.set_defaults(func=cmd_hash_password)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
