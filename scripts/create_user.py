import argparse
import os
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from app.config import resolve_data_path
from app.store import StoreError, UserStore
from app.users import ValidationError, create_user


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Add a user to the JSON users file")
    parser.add_argument("name", help="Display name for the user")
    parser.add_argument("email", help="Unique email address")
    parser.add_argument("--age", type=int, default=None, help="Optional age")
    parser.add_argument("--country", default=None, help="Country (defaults to Unknown)")
    parser.add_argument(
        "--db",
        dest="db_path",
        default=None,
        help="Path to the users file (defaults to USERS_DB_PATH or data/users.json)",
    )
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    db_env = args.db_path or os.getenv("USERS_DB_PATH")
    store = UserStore(resolve_data_path(db_env))
    store.initialize()

    payload = {
        "name": args.name.strip(),
        "email": args.email.strip(),
        "age": args.age,
        "country": args.country,
    }
    try:
        user = create_user(store, payload)
    except (ValidationError, StoreError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print(f"Created user {user['_id']}: {user['name']} <{user['email']}>")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
