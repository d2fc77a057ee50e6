"""Domain models for the users collection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Union

DEFAULT_COUNTRY = "Unknown"

# Fields a client may change through an update when updates are restricted.
UPDATABLE_FIELDS = ("name", "email", "age", "country")


@dataclass(frozen=True)
class User:
    """Represents a user record as it is first written to the users file."""

    id: str
    name: str
    email: str
    age: Optional[Union[int, float]]
    country: str
    created_at: str
    updated_at: str

    def to_record(self) -> Dict[str, object]:
        return {
            "_id": self.id,
            "name": self.name,
            "email": self.email,
            "age": self.age,
            "country": self.country,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }


__all__ = ["DEFAULT_COUNTRY", "UPDATABLE_FIELDS", "User"]
