"""JSON file persistence for user records."""
from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
import threading
import uuid
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Iterator, List, Optional

logger = logging.getLogger("usersapi.store")

UserRecord = Dict[str, object]


class StoreError(RuntimeError):
    """Raised when the backing file cannot be read or written."""


def _ensure_directory(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _target_mode(path: Path) -> int:
    """Return the permission bits the users file should carry after a rewrite."""

    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        pass
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def current_timestamp() -> str:
    """Return the current UTC time as an ISO-8601 string with millisecond precision."""

    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def new_user_id() -> str:
    return uuid.uuid4().hex


def find_index(records: List[UserRecord], user_id: str) -> Optional[int]:
    for index, record in enumerate(records):
        if record.get("_id") == user_id:
            return index
    return None


class UserStore:
    """Load and persist the full user collection on every operation.

    Nothing is cached between calls; each read goes back to disk. Mutating
    callers should go through :meth:`transaction` so that concurrent requests
    in the same process cannot interleave their read-modify-write cycles.
    """

    def __init__(self, path: Path) -> None:
        self._path = path
        self._lock = threading.Lock()

    @property
    def path(self) -> Path:
        return self._path

    def initialize(self) -> None:
        """Create the data file with an empty collection if it does not exist yet."""

        _ensure_directory(self._path)
        with self._lock:
            if not self._path.exists():
                self.write_all([])
                logger.info("Created empty users file at %s", self._path)

    def read_all(self) -> List[UserRecord]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except UnicodeDecodeError as exc:
            raise StoreError(f"{self._path.name} is not valid UTF-8") from exc
        except OSError as exc:
            raise StoreError(f"Unable to read {self._path.name}: {exc.strerror or exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StoreError(f"{self._path.name} does not contain valid JSON: {exc.msg}") from exc

        if not isinstance(data, list):
            raise StoreError(f"{self._path.name} must contain a JSON array of users")
        return data

    def write_all(self, records: List[UserRecord]) -> None:
        _ensure_directory(self._path)
        payload = json.dumps(records, indent=2, ensure_ascii=False)
        fd, tmp_name = tempfile.mkstemp(
            dir=str(self._path.parent), prefix=f".{self._path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.chmod(tmp_name, _target_mode(self._path))
            os.replace(tmp_name, self._path)
        except OSError as exc:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise StoreError(f"Unable to write {self._path.name}: {exc.strerror or exc}") from exc

    @contextmanager
    def transaction(self) -> Iterator[List[UserRecord]]:
        """Hold the store lock for one read-modify-write cycle.

        The yielded list is written back when the block exits cleanly. If the
        block raises, the file is left untouched.
        """

        with self._lock:
            records = self.read_all()
            yield records
            self.write_all(records)


__all__ = [
    "StoreError",
    "UserRecord",
    "UserStore",
    "current_timestamp",
    "find_index",
    "new_user_id",
]
