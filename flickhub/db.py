from __future__ import annotations

import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Sequence
from urllib.parse import urlparse

import psycopg2
import psycopg2.errors
import psycopg2.extras
import psycopg2.pool

from flickhub.schema import get_schema_sql


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def _detect_dialect(dsn: str) -> str:
    """Return 'postgres' or 'sqlite'."""
    s = (dsn or "").strip()
    if not s:
        return "sqlite"
    try:
        scheme = urlparse(s).scheme.lower()
    except Exception:
        scheme = ""
    if scheme in ("postgres", "postgresql"):
        return "postgres"
    return "sqlite"


def _redact_dsn(dsn: str) -> str:
    """Drop the password from a DSN before it is printed."""
    try:
        p = urlparse(dsn)
    except Exception:
        return "<dsn>"
    if not p.password:
        return dsn
    netloc = p.netloc.replace(f":{p.password}@", ":***@")
    return p._replace(netloc=netloc).geturl()


def _qmark_to_pct(sql: str) -> str:
    """Convert SQLite qmark placeholders (?) to psycopg2 placeholders (%s).

    Skips '?' inside single/double-quoted literals. Not a full SQL parser, but
    sufficient for the statements in this codebase.
    """
    out: List[str] = []
    in_single = False
    in_double = False
    for ch in sql:
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == "?" and not in_single and not in_double:
            out.append("%s")
            continue
        out.append(ch)
    return "".join(out)


def is_unique_violation(exc: BaseException) -> bool:
    """True when `exc` is the store rejecting a duplicate key."""
    if isinstance(exc, sqlite3.IntegrityError):
        return "UNIQUE" in str(exc).upper()
    if isinstance(exc, psycopg2.errors.UniqueViolation):
        return True
    return False


class PGCursor:
    def __init__(self, cur: Any):
        self._cur = cur

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> "PGCursor":
        self._cur.execute(_qmark_to_pct(sql), tuple(params or ()))
        return self

    def fetchone(self) -> Any:
        return self._cur.fetchone()


class PGConnection:
    """A tiny adapter that makes psycopg2 connections look like sqlite3 connections."""

    def __init__(self, conn: Any):
        self._conn = conn

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> PGCursor:
        wrapper = PGCursor(self._conn.cursor())
        wrapper.execute(sql, params)
        return wrapper

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()


class Database:
    """Process-scoped, bounded connection pool.

    - Postgres: psycopg2 ThreadedConnectionPool (RealDictCursor rows).
    - SQLite: one connection per acquire, gated by a semaphore of the same size.

    `connection()` commits on success, rolls back on error and always hands the
    connection back.
    """

    def __init__(self, db_dsn: str, *, pool_size: int = 10, ssl: bool = False):
        self.dsn = (db_dsn or "").strip()
        self.dialect = _detect_dialect(self.dsn)
        self.pool_size = max(1, int(pool_size))
        self._pg_pool: psycopg2.pool.ThreadedConnectionPool | None = None
        self._gate = threading.BoundedSemaphore(self.pool_size)

        if self.dialect == "postgres":
            kwargs: dict[str, Any] = {"cursor_factory": psycopg2.extras.RealDictCursor}
            if ssl:
                # Verify against the system CA store, not ~/.postgresql/root.crt.
                kwargs["sslmode"] = "verify-full"
                kwargs["sslrootcert"] = "system"
            self._pg_pool = psycopg2.pool.ThreadedConnectionPool(1, self.pool_size, self.dsn, **kwargs)
        else:
            if self.dsn.lower().startswith("sqlite:///"):
                self.dsn = self.dsn[len("sqlite:///") :]
            Path(self.dsn).parent.mkdir(parents=True, exist_ok=True)

        _debug(f"Pool ready ({self.dialect}, size={self.pool_size}) at {_redact_dsn(self.dsn)}")

    def _open_sqlite(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.dsn, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA busy_timeout=5000;")  # 5s
        return conn

    @contextmanager
    def connection(self) -> Iterator[Any]:
        if self._pg_pool is not None:
            # ThreadedConnectionPool raises PoolError instead of blocking when exhausted.
            with self._gate:
                raw = self._pg_pool.getconn()
                conn = PGConnection(raw)
                try:
                    yield conn
                    conn.commit()
                except Exception:
                    if not raw.closed:
                        conn.rollback()
                    raise
                finally:
                    # Dead connections (server restart, dropped socket) are discarded.
                    self._pg_pool.putconn(raw, close=bool(raw.closed))
            return

        with self._gate:
            conn = self._open_sqlite()
            try:
                yield conn
                conn.commit()
            except Exception:
                conn.rollback()
                raise
            finally:
                conn.close()

    def close(self) -> None:
        if self._pg_pool is not None:
            self._pg_pool.closeall()
            self._pg_pool = None


def init_db(db: Database) -> None:
    """Create the users table if it does not exist yet."""
    _debug(f"Initializing DB ({db.dialect})")
    with db.connection() as conn:
        ddl = get_schema_sql(db.dialect)
        if db.dialect == "postgres":
            # Several API processes may start at once; serialize the DDL. The lock is
            # released when the transaction commits or rolls back.
            conn.execute("SELECT pg_advisory_xact_lock(2147483647);")
            for stmt in [s.strip() for s in ddl.split(";") if s.strip()]:
                conn.execute(stmt)
        else:
            conn.executescript(ddl)
    _debug("Database ready - users table exists")
