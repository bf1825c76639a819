"""HTTP API exposing the user directory to the management front-end."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from .config import env_flag, load_seed_users, resolve_seed_path
from .directory import UserDirectory
from .errors import DirectoryError

logger = logging.getLogger("usermgmt.service")


class UserView(BaseModel):
    email: str
    accessLevel: str
    state: str


class UserListResponse(BaseModel):
    status: str
    users: List[UserView]


class StatusResponse(BaseModel):
    status: str


class InviteRequest(BaseModel):
    emails: List[str] = Field(..., description="Email addresses to invite")
    # Untyped so every value, null included, is reported as invalidAccess.
    accessLevel: Any = Field(..., description="One of read-only, full or limited")


class UserRequest(BaseModel):
    email: str = Field(..., description="Email address of an existing user")


def build_directory(seed_path: Optional[Path] = None) -> UserDirectory:
    """Create a directory from a seed file, or from the built-in fixture."""

    if seed_path is None:
        seed_path = resolve_seed_path(os.getenv("USERMGMT_SEED_PATH"))
    if seed_path is None:
        return UserDirectory()
    logger.info("Loading seed users from %s", seed_path)
    return UserDirectory(load_seed_users(seed_path))


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(DirectoryError)
    async def directory_error_handler(request: Request, exc: DirectoryError) -> JSONResponse:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.code, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def register_user_routes(
    app: FastAPI,
    directory: UserDirectory,
    *,
    include_test_routes: bool = False,
) -> None:
    """Expose the user management endpoints on the provided application."""

    @app.get("/healthz")
    async def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/v1/users", response_model=UserListResponse)
    async def list_users() -> UserListResponse:
        result = await directory.list_users()
        return UserListResponse(
            status=str(result["status"]),
            users=[UserView(**user.to_dict()) for user in result["users"]],  # type: ignore[union-attr]
        )

    @app.post("/v1/users/invite", response_model=StatusResponse)
    async def invite_users(request: InviteRequest) -> StatusResponse:
        result = await directory.invite_users(request.emails, request.accessLevel)
        return StatusResponse(status=str(result["status"]))

    @app.post("/v1/users/resend-invite", response_model=StatusResponse)
    async def resend_invite(request: UserRequest) -> StatusResponse:
        result = await directory.resend_invite(request.email)
        return StatusResponse(status=str(result["status"]))

    @app.post("/v1/users/revoke", response_model=StatusResponse)
    async def revoke_access(request: UserRequest) -> StatusResponse:
        result = await directory.revoke_access(request.email)
        return StatusResponse(status=str(result["status"]))

    if include_test_routes:

        @app.post("/v1/users/mark-active", response_model=StatusResponse)
        async def mark_as_active(request: UserRequest) -> StatusResponse:
            result = await directory.mark_as_active(request.email)
            return StatusResponse(status=str(result["status"]))


def create_app(
    *,
    directory: UserDirectory | None = None,
    include_test_routes: bool | None = None,
) -> FastAPI:
    """Instantiate the FastAPI application around a user directory."""

    user_directory = directory if directory is not None else build_directory()
    if include_test_routes is None:
        include_test_routes = env_flag(os.getenv("USERMGMT_ENABLE_TEST_ROUTES"))

    app = FastAPI(
        title="User Management Backend",
        version="0.1.0",
        description="Mock backend for inviting, listing and revoking user accounts.",
    )
    app.state.directory = user_directory

    if include_test_routes:
        logger.warning("Test-only routes are enabled. Do not expose this service publicly.")

    register_error_handlers(app)
    register_user_routes(app, user_directory, include_test_routes=include_test_routes)

    return app


__all__ = ["build_directory", "create_app", "register_user_routes", "register_error_handlers"]
