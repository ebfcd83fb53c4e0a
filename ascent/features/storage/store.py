"""
Record store: whole-record load and save of the versioned UserRecord.

Every mutation in the app is load -> pure engine call -> save. Stores only
move bytes; they never merge or partially update a record.
"""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

from pydantic import ValidationError as PydanticValidationError

from ascent.core.errors import StorageError
from ascent.core.logging import log_event
from ascent.features.history import coerce_completions
from ascent.models.user_record import SCHEMA_VERSION, UserRecord

DEFAULT_STORAGE_KEY = "@ascent_v15_data"


class RecordStore(Protocol):
    def load(self) -> UserRecord: ...

    def save(self, record: UserRecord) -> None: ...

    def clear(self) -> None: ...


def record_from_blob(blob: Optional[Dict[str, Any]]) -> UserRecord:
    """Validate a stored blob, sanitizing completion history first."""
    if blob is None:
        return UserRecord()
    if not isinstance(blob, dict):
        raise StorageError("Stored record is not an object")

    version = blob.get("schemaVersion", blob.get("schema_version", SCHEMA_VERSION))
    if not isinstance(version, int) or version > SCHEMA_VERSION:
        raise StorageError(f"Unsupported schema version {version!r} (this build reads up to {SCHEMA_VERSION})")

    cleaned = dict(blob)
    if "completions" in cleaned:
        cleaned["completions"] = coerce_completions(cleaned["completions"] or ())
    try:
        return UserRecord.model_validate(cleaned)
    except PydanticValidationError as exc:
        raise StorageError(f"Stored record failed validation: {exc.error_count()} error(s)") from exc


def record_to_blob(record: UserRecord) -> Dict[str, Any]:
    return record.model_dump(mode="json", by_alias=True)


class InMemoryRecordStore:
    """Keeps the serialized blob in memory. Used by tests and previews."""

    def __init__(self, record: Optional[UserRecord] = None):
        self._blob: Optional[Dict[str, Any]] = record_to_blob(record) if record is not None else None

    def load(self) -> UserRecord:
        return record_from_blob(self._blob)

    def save(self, record: UserRecord) -> None:
        self._blob = record_to_blob(record)

    def clear(self) -> None:
        self._blob = None


class JsonFileRecordStore:
    """
    JSON file holding a key -> record mapping.

    Other keys in the file are preserved. Writes go to a temp file in the
    same directory and are swapped in with os.replace.
    """

    def __init__(self, path: Union[str, Path], key: str = DEFAULT_STORAGE_KEY):
        self.path = Path(path)
        self.key = key

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Could not read {self.path}: {exc}") from exc
        if not text.strip():
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt data file {self.path}: {exc.msg}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Corrupt data file {self.path}: expected an object")
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=".ascent-", suffix=".tmp", dir=str(self.path.parent))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2)
            os.replace(tmp_name, self.path)
        except OSError as exc:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StorageError(f"Could not write {self.path}: {exc}") from exc

    def load(self) -> UserRecord:
        record = record_from_blob(self._read_all().get(self.key))
        log_event(
            "debug",
            "storage.loaded",
            event_type="storage.load",
            extra={"path": str(self.path), "habits": len(record.habits), "completions": len(record.completions)},
        )
        return record

    def save(self, record: UserRecord) -> None:
        data = self._read_all()
        data[self.key] = record_to_blob(record)
        self._write_all(data)
        log_event("debug", "storage.saved", event_type="storage.save", extra={"path": str(self.path)})

    def clear(self) -> None:
        data = self._read_all()
        if self.key not in data:
            return
        del data[self.key]
        if data:
            self._write_all(data)
        else:
            self.path.unlink()
        log_event("info", "storage.cleared", event_type="storage.clear", extra={"path": str(self.path)})
