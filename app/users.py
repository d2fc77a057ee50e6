"""Create, list, update and delete operations over the users file."""
from __future__ import annotations

import logging
from typing import List, Mapping

from .models import DEFAULT_COUNTRY, UPDATABLE_FIELDS, User
from .store import UserRecord, UserStore, current_timestamp, find_index, new_user_id

logger = logging.getLogger("usersapi.users")


class UsersError(Exception):
    """Base class for errors raised by user operations."""


class ValidationError(UsersError):
    """Raised when a request payload is rejected."""


class UserNotFoundError(UsersError):
    """Raised when no record matches the requested identifier."""

    def __init__(self, user_id: str) -> None:
        super().__init__("User not found")
        self.user_id = user_id


def list_users(store: UserStore) -> List[UserRecord]:
    return store.read_all()


def create_user(store: UserStore, payload: Mapping[str, object]) -> UserRecord:
    """Validate ``payload`` and append a new record to the collection."""

    name = payload.get("name")
    email = payload.get("email")
    if not name or not email:
        raise ValidationError("Name and email are required fields")

    with store.transaction() as records:
        if any(record.get("email") == email for record in records):
            raise ValidationError("Email already exists")

        now = current_timestamp()
        user = User(
            id=new_user_id(),
            name=name,  # type: ignore[arg-type]
            email=email,  # type: ignore[arg-type]
            age=payload.get("age") or None,  # type: ignore[arg-type]
            country=payload.get("country") or DEFAULT_COUNTRY,  # type: ignore[arg-type]
            created_at=now,
            updated_at=now,
        )
        record = user.to_record()
        records.append(record)

    logger.info("Created user %s", user.id)
    return record


def update_user(
    store: UserStore,
    user_id: str,
    payload: Mapping[str, object],
    *,
    restrict: bool = True,
) -> UserRecord:
    """Shallow-merge ``payload`` over the stored record and refresh ``updatedAt``.

    When ``restrict`` is true only :data:`UPDATABLE_FIELDS` are taken from the
    payload; identifiers and timestamps supplied by the client are ignored.
    Otherwise every key in the payload overwrites the stored value.
    """

    if restrict:
        changes = {key: payload[key] for key in UPDATABLE_FIELDS if key in payload}
    else:
        changes = dict(payload)

    with store.transaction() as records:
        index = find_index(records, user_id)
        if index is None:
            raise UserNotFoundError(user_id)

        updated = {**records[index], **changes, "updatedAt": current_timestamp()}
        records[index] = updated

    logger.info("Updated user %s (%s)", user_id, ", ".join(sorted(changes)) or "no fields")
    return updated


def delete_user(store: UserStore, user_id: str) -> UserRecord:
    with store.transaction() as records:
        index = find_index(records, user_id)
        if index is None:
            raise UserNotFoundError(user_id)
        removed = records.pop(index)

    logger.info("Deleted user %s", user_id)
    return removed


__all__ = [
    "UserNotFoundError",
    "UsersError",
    "ValidationError",
    "create_user",
    "delete_user",
    "list_users",
    "update_user",
]
