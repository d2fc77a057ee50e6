"""Command-line interface for the users API service."""

from __future__ import annotations
import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Sequence

from app.config import Settings, load_settings, resolve_data_path
from app.store import StoreError, UserStore

logger = logging.getLogger("usersapi.main")


def _parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: USERS_API_CONFIG)",
    )
    common.add_argument(
        "--data-file",
        default=None,
        help="Path to the JSON users file (default: USERS_DB_PATH or data/users.json)",
    )

    parser = argparse.ArgumentParser(description="User management REST API utilities")
    subparsers = parser.add_subparsers(dest="command")

    parser.set_defaults(command="serve")

    subparsers.add_parser(
        "init-db", parents=[common], help="Create the users file if it does not exist"
    )
    subparsers.add_parser("list", parents=[common], help="Print the stored users")

    serve_parser = subparsers.add_parser("serve", parents=[common], help="Start the HTTP API")
    serve_parser.add_argument("--host", default=None, help="Bind address for the API")
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port for the HTTP API (default: 5000)",
    )

    args_list = list(argv) if argv is not None else sys.argv[1:]
    known_commands = {"serve", "init-db", "list"}

    if not args_list:
        args_list = ["serve"]
    else:
        first = args_list[0]
        if first in ("-h", "--help"):
            return parser.parse_args(args_list)
        if first not in known_commands:
            args_list = ["serve", *args_list]

    return parser.parse_args(args_list)


def _resolve_settings(args: argparse.Namespace) -> Settings:
    config_path = Path(args.config) if args.config else None
    settings = load_settings(config_path)
    if args.data_file:
        settings = replace(settings, data_file=resolve_data_path(args.data_file))
    if getattr(args, "host", None):
        settings = replace(settings, host=args.host)
    if getattr(args, "port", None):
        settings = replace(settings, port=args.port)
    return settings


def _initialise_store(settings: Settings) -> UserStore:
    store = UserStore(settings.data_file)
    store.initialize()
    logger.info("Users file ready at %s", settings.data_file)
    return store


def _serve(*, store: UserStore, settings: Settings) -> None:
    from app.api import create_app
    import uvicorn

    logger.info("Starting users API on http://%s:%s", settings.host, settings.port)
    logger.info("Database: JSON file %s", settings.data_file)

    app = create_app(store=store, settings=settings)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level="info")


def _list_users(store: UserStore) -> int:
    try:
        users = store.read_all()
    except StoreError as exc:
        print(f"Failed to read users: {exc}", file=sys.stderr)
        return 1

    if not users:
        print("No users are currently stored.")
        return 0

    print(f"{len(users)} user(s) found:")
    print(f"{'ID':<32}  {'Name':<24}  {'Email':<32}  Created")
    print("-" * 110)
    for user in users:
        user_id = str(user.get("_id", "?"))
        name = str(user.get("name", ""))
        email = str(user.get("email", ""))
        created = str(user.get("createdAt", ""))
        print(f"{user_id:<32}  {name:<24}  {email:<32}  {created}")
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for CLI usage."""

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")

    args = _parse_args(argv)
    try:
        settings = _resolve_settings(args)
    except ValueError as exc:
        raise SystemExit(f"Invalid configuration: {exc}") from exc

    store = _initialise_store(settings)

    if args.command == "serve":
        _serve(store=store, settings=settings)
    elif args.command == "list":
        return _list_users(store)
    elif args.command == "init-db":
        print("Users file initialisation complete.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
