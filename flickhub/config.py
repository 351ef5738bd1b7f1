import os
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote

from dotenv import load_dotenv

# Load a local .env file if present.
load_dotenv()


def _env_bool(name: str, default: Optional[bool] = None) -> Optional[bool]:
    """Parse a boolean environment variable.

    Returns:
      - True/False if the env var is set to a recognizable value
      - default if unset or unrecognized

    Accepted truthy: 1, true, yes, y, on
    Accepted falsy:  0, false, no, n, off
    """

    raw = os.environ.get(name)
    if raw is None:
        return default
    v = raw.strip().lower()
    if v in ("1", "true", "yes", "y", "on"):
        return True
    if v in ("0", "false", "no", "n", "off"):
        return False
    return default


def _default_db_dsn() -> str:
    """Resolve the store DSN.

    Order: DATABASE_URL, then a Postgres URL assembled from DB_HOST/DB_PORT/DB_USER/
    DB_PASS/DB_NAME, then the SQLite file at FLICKHUB_DB_PATH.
    """
    url = (os.environ.get("DATABASE_URL") or "").strip()
    if url:
        return url

    host = (os.environ.get("DB_HOST") or "").strip()
    if host:
        port = (os.environ.get("DB_PORT") or "5432").strip()
        user = quote(os.environ.get("DB_USER") or "", safe="")
        password = quote(os.environ.get("DB_PASS") or "", safe="")
        name = (os.environ.get("DB_NAME") or "").strip()
        auth = f"{user}:{password}@" if password else (f"{user}@" if user else "")
        return f"postgresql://{auth}{host}:{port}/{name}"

    return os.environ.get("FLICKHUB_DB_PATH", "./flickhub.sqlite")


@dataclass(frozen=True)
class Config:
    """Runtime configuration, read once at process start.

    IMPORTANT: Provide TMDB_API_KEY and database credentials via environment
    variables or a .env file. Never hardcode secrets in source code.
    """

    # -----------------
    # Store
    # -----------------
    DB_DSN: str = _default_db_dsn()

    # Require verified TLS for the Postgres connection (sslmode=verify-full).
    DB_SSL: bool = _env_bool("DB_SSL", False) is True

    # Upper bound on concurrently open store connections.
    DB_POOL_SIZE: int = int(os.environ.get("DB_POOL_SIZE", "10"))

    # -----------------
    # TMDB (catalog proxy)
    # -----------------
    TMDB_API_KEY: str | None = os.environ.get("TMDB_API_KEY")
    TMDB_BASE_URL: str = os.environ.get("TMDB_BASE_URL", "https://api.themoviedb.org/3")
    TMDB_LANGUAGE: str = os.environ.get("TMDB_LANGUAGE", "en-US")
    TMDB_TIMEOUT_SECONDS: float = float(os.environ.get("TMDB_TIMEOUT_SECONDS", "30"))

    # -----------------
    # Auth
    # -----------------
    # pbkdf2_sha256 rounds; tests lower this to keep hashing fast.
    PASSWORD_HASH_ROUNDS: int = int(os.environ.get("PASSWORD_HASH_ROUNDS", "200000"))

    # Where the frontend navigates after a successful login.
    LOGIN_REDIRECT_URL: str = os.environ.get("LOGIN_REDIRECT_URL", "/index.html")

    # -----------------
    # HTTP
    # -----------------
    API_HOST: str = os.environ.get("API_HOST", "0.0.0.0")
    PORT: int = int(os.environ.get("PORT", "3000"))

    # Comma-separated list; "*" allows any origin.
    CORS_ALLOW_ORIGINS: str = os.environ.get("CORS_ALLOW_ORIGINS", "*")


def load_config() -> Config:
    return Config()
