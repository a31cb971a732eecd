"""
Error types for the GCC explorer backend.

Hierarchy:
    ExplorerError
    ├── DataLoadError
    ├── DataNotLoadedError
    ├── SavedFilterError
    │   ├── SavedFilterNotFoundError
    │   └── SavedFilterValidationError
    └── ExportError
"""


class ExplorerError(Exception):
    """Base exception for all explorer errors."""

    def __init__(self, message: str, code: str = "UNKNOWN", details: dict | None = None):
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(f"[{code}] {message}")


# --- Data ---

class DataLoadError(ExplorerError):
    """CSV directory missing, unreadable or empty."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message, code="DATA_LOAD_FAILED", details={"path": path})


class DataNotLoadedError(ExplorerError):
    def __init__(self):
        super().__init__("Data not loaded", code="DATA_NOT_LOADED")


# --- Saved Filters ---

class SavedFilterError(ExplorerError):
    """Base class for saved filter store errors."""


class SavedFilterNotFoundError(SavedFilterError):
    def __init__(self, user_id: str, filter_id: int):
        super().__init__(
            f"Saved filter {filter_id} not found",
            code="SAVED_FILTER_NOT_FOUND",
            details={"user_id": user_id, "filter_id": filter_id},
        )


class SavedFilterValidationError(SavedFilterError):
    def __init__(self, message: str):
        super().__init__(message, code="SAVED_FILTER_INVALID")


# --- Export ---

class ExportError(ExplorerError):
    def __init__(self, message: str):
        super().__init__(message, code="EXPORT_FAILED")
