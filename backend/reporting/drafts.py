"""Keyed, time-boxed persistence of in-progress edits.

The store serialises ``DraftRecord`` snapshots into a string key-value
medium.  It never holds the live tree; callers hand it rows and get rows
back.
"""

from __future__ import annotations

import errno
import logging
import os
import tempfile
import time
from datetime import timedelta
from pathlib import Path
from typing import Callable, Protocol
from urllib.parse import quote

from pydantic import ValidationError

from reporting.config import DEFAULT_KEY_TOKEN, DRAFT_KEY_PREFIX, DRAFT_RETENTION_HOURS
from reporting.errors import DraftLoadError, StorageError
from reporting.rows import DraftRecord, FinancialRow

_log = logging.getLogger(__name__)


# ── Key construction ───────────────────────────────────────────────────────

def _key_part(value: str | None) -> str:
    if value is None or value == "":
        return DEFAULT_KEY_TOKEN
    # "_" is the separator, so it must not survive inside a part.
    return quote(value, safe="").replace("_", "%5F")


def derive_key(health_center: str | None, reporting_period: str | None) -> str:
    """Composite draft key for a facility/period selection."""
    return f"{DRAFT_KEY_PREFIX}_{_key_part(health_center)}_{_key_part(reporting_period)}"


# ── Persistence media ──────────────────────────────────────────────────────

class DraftMedium(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def delete(self, key: str) -> None: ...


class MemoryDraftMedium:
    """Dict-backed medium with an optional quota on the total stored bytes."""

    def __init__(self, quota_bytes: int | None = None):
        self._data: dict[str, str] = {}
        self._quota = quota_bytes

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        if self._quota is not None:
            used = sum(len(v.encode("utf-8")) for k, v in self._data.items() if k != key)
            if used + len(value.encode("utf-8")) > self._quota:
                raise OSError(errno.ENOSPC, "Draft storage quota exceeded")
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._data


class FileDraftMedium:
    """One JSON file per key inside ``directory``."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, self._path(key))
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


# ── Store ──────────────────────────────────────────────────────────────────

def _now_ms() -> int:
    return int(time.time() * 1000)


class DraftStore:
    """Load/save/remove drafts with a retention window.

    ``load`` distinguishes "nothing to restore" (``None``) from "restore
    failed" (``DraftLoadError``).  Expired or future-dated records behave as
    absent and are removed on the way out.
    """

    def __init__(
        self,
        medium: DraftMedium,
        *,
        retention: timedelta = timedelta(hours=DRAFT_RETENTION_HOURS),
        clock: Callable[[], int] = _now_ms,
    ):
        self.medium = medium
        self.retention_ms = int(retention.total_seconds() * 1000)
        self._clock = clock

    def load(self, key: str) -> DraftRecord | None:
        try:
            raw = self.medium.get(key)
        except (OSError, UnicodeDecodeError) as exc:
            raise DraftLoadError(f"Could not read draft '{key}': {exc}") from exc
        if raw is None:
            return None

        try:
            record = DraftRecord.model_validate_json(raw)
        except ValidationError as exc:
            raise DraftLoadError(f"Corrupted draft '{key}': {exc.error_count()} validation error(s)") from exc

        age = self._clock() - record.timestamp
        # A timestamp in the future cannot be trusted to ever age out.
        if age < 0 or age > self.retention_ms:
            _log.info("Discarding expired draft %s (age %d ms)", key, age)
            try:
                self.medium.delete(key)
            except OSError as exc:
                _log.warning("Could not remove expired draft %s: %s", key, exc)
            return None
        return record

    def save(self, key: str, form_data: list[FinancialRow]) -> DraftRecord:
        record = DraftRecord(form_data=form_data, timestamp=self._clock())
        try:
            payload = record.model_dump_json(by_alias=True)
            self.medium.set(key, payload)
        except (OSError, ValueError, TypeError) as exc:
            raise StorageError(f"Could not save draft '{key}': {exc}") from exc
        _log.info("Draft %s saved (%d bytes)", key, len(payload))
        return record

    def remove(self, key: str) -> None:
        try:
            self.medium.delete(key)
        except OSError as exc:
            raise StorageError(f"Could not remove draft '{key}': {exc}") from exc
