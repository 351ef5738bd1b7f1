"""Register a user from the command line.

Usage:
  python scripts/create_user.py --user-id alice1 --name Alice --email a@x.com \
      --phone 5551234 --password '...'

Goes through the same validation and uniqueness checks as POST /api/register.
"""

import argparse
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from flickhub.auth import AccountService, make_password_context
from flickhub.config import load_config
from flickhub.db import Database, init_db
from flickhub.errors import FlickHubError


def main() -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--user-id", required=True)
    ap.add_argument("--name", required=True)
    ap.add_argument("--email", required=True)
    ap.add_argument("--phone", required=True)
    ap.add_argument("--password", required=True)
    args = ap.parse_args()

    cfg = load_config()
    db = Database(cfg.DB_DSN, pool_size=1, ssl=cfg.DB_SSL)
    try:
        init_db(db)
        accounts = AccountService(db, password_context=make_password_context(cfg.PASSWORD_HASH_ROUNDS))
        try:
            created = accounts.register(
                user_id=args.user_id,
                name=args.name,
                email=args.email,
                phone=args.phone,
                password=args.password,
            )
        except FlickHubError as e:
            print(f"Error: {e.message}")
            sys.exit(1)
    finally:
        db.close()

    print(f"Created user: {created['userId']}")


if __name__ == "__main__":
    main()
