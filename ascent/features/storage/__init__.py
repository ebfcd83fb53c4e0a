from ascent.features.storage.store import (
    DEFAULT_STORAGE_KEY,
    InMemoryRecordStore,
    JsonFileRecordStore,
    RecordStore,
    record_from_blob,
    record_to_blob,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "InMemoryRecordStore",
    "JsonFileRecordStore",
    "RecordStore",
    "record_from_blob",
    "record_to_blob",
]
