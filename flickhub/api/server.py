from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from flickhub import __version__
from flickhub.auth import AccountService, make_password_context
from flickhub.config import Config, load_config
from flickhub.db import Database, init_db
from flickhub.errors import FlickHubError, InternalError, ValidationError
from flickhub.tmdb.client import CatalogProxy


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


def _error_response(err: FlickHubError) -> JSONResponse:
    return JSONResponse(status_code=err.status_code, content={"success": False, "message": err.message})


# -----------------------------
# Request bodies
# -----------------------------
# Fields are optional so that missing values reach the service and get its
# "All fields are required." message instead of a schema error.


class RegisterRequest(BaseModel):
    userId: Optional[str] = None
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    password: Optional[str] = None


class LoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


# -----------------------------
# Dependencies
# -----------------------------


def get_accounts(request: Request) -> AccountService:
    accounts = getattr(request.app.state, "accounts", None)
    if accounts is None:
        raise InternalError()
    return accounts


def get_catalog(request: Request) -> CatalogProxy:
    return request.app.state.catalog


def create_app(cfg: Config | None = None) -> FastAPI:
    cfg = cfg or load_config()

    app = FastAPI(title="FlickHub API", version=__version__)
    app.state.cfg = cfg
    app.state.catalog = CatalogProxy(
        cfg.TMDB_API_KEY,
        base_url=cfg.TMDB_BASE_URL,
        language=cfg.TMDB_LANGUAGE,
        timeout=cfg.TMDB_TIMEOUT_SECONDS,
    )

    _cors_origins = [o.strip() for o in (cfg.CORS_ALLOW_ORIGINS or "").split(",") if o.strip()]
    if _cors_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=_cors_origins,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.on_event("startup")
    def _on_startup() -> None:
        db = Database(cfg.DB_DSN, pool_size=cfg.DB_POOL_SIZE, ssl=cfg.DB_SSL)
        # Ensure schema exists.
        init_db(db)
        app.state.db = db
        app.state.accounts = AccountService(
            db, password_context=make_password_context(cfg.PASSWORD_HASH_ROUNDS)
        )

    @app.on_event("shutdown")
    def _on_shutdown() -> None:
        db = getattr(app.state, "db", None)
        if db is not None:
            db.close()

    # -----------------------------
    # Error rendering
    # -----------------------------

    @app.exception_handler(FlickHubError)
    async def _app_error(_request: Request, exc: FlickHubError) -> JSONResponse:
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def _request_error(_request: Request, _exc: RequestValidationError) -> JSONResponse:
        # Malformed JSON or wrong field types.
        return _error_response(ValidationError("Invalid request body."))

    @app.exception_handler(Exception)
    async def _unhandled_error(request: Request, exc: Exception) -> JSONResponse:
        _debug(f"Unhandled error on {request.url.path}: {type(exc).__name__}")
        return _error_response(InternalError())

    # -----------------------------
    # Health
    # -----------------------------

    @app.get("/api/health")
    def health() -> Dict[str, Any]:
        return {"status": "ok", "message": "FlickHub API running"}

    # -----------------------------
    # TMDB proxy
    # -----------------------------

    @app.get("/api/tmdb/{category}")
    def tmdb_category(category: str, catalog: CatalogProxy = Depends(get_catalog)) -> Response:
        body = catalog.fetch(category)
        return Response(content=body, media_type="application/json")

    # -----------------------------
    # Auth
    # -----------------------------

    @app.post("/api/register", status_code=201)
    def register(payload: RegisterRequest, accounts: AccountService = Depends(get_accounts)) -> Dict[str, Any]:
        created = accounts.register(
            user_id=payload.userId,
            name=payload.name,
            email=payload.email,
            phone=payload.phone,
            password=payload.password,
        )
        return {"success": True, "message": "Account created!", "userId": created["userId"]}

    @app.post("/api/login")
    def login(payload: LoginRequest, accounts: AccountService = Depends(get_accounts)) -> Dict[str, Any]:
        user = accounts.login(username=payload.username, password=payload.password)
        return {
            "success": True,
            "message": f"Welcome back, {user['name']}!",
            "userId": user["userId"],
            "name": user["name"],
            "redirectUrl": cfg.LOGIN_REDIRECT_URL,
        }

    return app


app = create_app()
