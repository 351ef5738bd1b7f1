import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from flickhub.auth.crud import count_users
from flickhub.config import load_config
from flickhub.db import Database, init_db


def main() -> None:
    cfg = load_config()
    db = Database(cfg.DB_DSN, pool_size=1, ssl=cfg.DB_SSL)
    try:
        init_db(db)
        with db.connection() as conn:
            n = count_users(conn)
    finally:
        db.close()

    print(f"DB initialized ({db.dialect}), users: {n}")


if __name__ == "__main__":
    main()
