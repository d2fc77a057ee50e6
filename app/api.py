"""FastAPI application exposing CRUD endpoints for the users collection."""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Body, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from .config import Settings, load_settings
from .store import UserStore
from .users import (
    UserNotFoundError,
    ValidationError,
    create_user,
    delete_user,
    list_users,
    update_user,
)

logger = logging.getLogger("usersapi.api")

ENDPOINTS: Dict[str, str] = {
    "GET /users": "Get all users",
    "POST /users": "Create a new user",
    "PUT /users/:id": "Update user by ID",
    "DELETE /users/:id": "Delete user by ID",
}


class CreateUserRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Any = None
    email: Any = None
    age: Any = None
    country: Any = None


def _failure(status_code: int, message: str, error: Optional[str] = None) -> JSONResponse:
    content: Dict[str, object] = {"success": False, "message": message}
    if error is not None:
        content["error"] = error
    return JSONResponse(status_code=status_code, content=content)


def create_app(
    *,
    store: UserStore | None = None,
    settings: Settings | None = None,
) -> FastAPI:
    if settings is None:
        settings = load_settings()
    if store is None:
        store = UserStore(settings.data_file)
        store.initialize()

    app = FastAPI(
        title="User Management REST API",
        description="CRUD endpoints for users persisted in a JSON file",
        version="1.0.0",
    )
    app.state.store = store
    app.state.settings = settings

    def _server_error(message: str, exc: Exception) -> JSONResponse:
        return _failure(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            message,
            str(exc) if settings.expose_errors else None,
        )

    @app.exception_handler(RequestValidationError)
    async def handle_invalid_body(request: Request, exc: RequestValidationError):
        logger.warning("Rejected %s %s: %s", request.method, request.url.path, exc.errors())
        return _failure(status.HTTP_400_BAD_REQUEST, "Request body must be a JSON object")

    @app.get("/")
    def read_root() -> Dict[str, object]:
        return {
            "message": "User Management REST API",
            "endpoints": ENDPOINTS,
            "database": f"JSON file ({store.path.name})",
        }

    @app.get("/health")
    def healthcheck() -> Dict[str, str]:
        return {"status": "ok"}

    @app.get("/users")
    def get_users():
        logger.info("GET /users - Fetching all users")
        try:
            users = list_users(store)
        except Exception as exc:
            logger.exception("Error in GET /users")
            return _server_error("Server error while fetching users", exc)

        return {"success": True, "count": len(users), "data": users}

    @app.post("/users", status_code=status.HTTP_201_CREATED)
    def post_user(payload: CreateUserRequest):
        logger.info("POST /users - Creating new user")
        try:
            user = create_user(store, payload.model_dump())
        except ValidationError as exc:
            return _failure(status.HTTP_400_BAD_REQUEST, str(exc))
        except Exception as exc:
            logger.exception("Error in POST /users")
            return _server_error("Error creating user", exc)

        return {"success": True, "message": "User created successfully", "data": user}

    @app.put("/users/{user_id}")
    def put_user(user_id: str, payload: Dict[str, Any] = Body(...)):
        logger.info("PUT /users/%s - Updating user", user_id)
        try:
            user = update_user(store, user_id, payload, restrict=settings.restrict_updates)
        except UserNotFoundError as exc:
            return _failure(status.HTTP_404_NOT_FOUND, str(exc))
        except Exception as exc:
            logger.exception("Error in PUT /users/%s", user_id)
            return _server_error("Error updating user", exc)

        return {"success": True, "message": "User updated successfully", "data": user}

    @app.delete("/users/{user_id}")
    def remove_user(user_id: str):
        logger.info("DELETE /users/%s - Deleting user", user_id)
        try:
            user = delete_user(store, user_id)
        except UserNotFoundError as exc:
            return _failure(status.HTTP_404_NOT_FOUND, str(exc))
        except Exception as exc:
            logger.exception("Error in DELETE /users/%s", user_id)
            return _server_error("Error deleting user", exc)

        return {"success": True, "message": "User deleted successfully", "data": user}

    return app


__all__ = ["CreateUserRequest", "ENDPOINTS", "create_app"]
