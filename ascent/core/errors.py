"""Error taxonomy for collaborator seams.

The engines absorb data problems into ordinary result values. These errors
are only raised where a caller asks for something that cannot be honoured:
bad configuration, an invalid state transition, or an unreadable store.
"""

from typing import Optional

from ascent.core.logging import get_run_id


class AppError(Exception):
    code = "app_error"

    def __init__(self, message: str, *, code: Optional[str] = None, run_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        self.run_id = run_id or get_run_id()

    def to_dict(self) -> dict:
        return {
            "error": {"code": self.code, "message": self.message, "run_id": self.run_id},
        }


class ValidationError(AppError, ValueError):
    code = "validation_error"


class NotFoundError(AppError, LookupError):
    code = "not_found"


class ConfigError(AppError, RuntimeError):
    code = "config_error"


class StorageError(AppError):
    code = "storage_error"
