"""Exception types raised by reviewsync."""

from __future__ import annotations

from pathlib import Path
from typing import Optional


class ReviewSyncError(RuntimeError):
    """Base class for all reviewsync errors."""


class ConfigError(ReviewSyncError):
    """Raised when a configuration override holds an unusable value."""

    def __init__(self, setting: str, message: str):
        self.setting = setting
        self.message = message
        super().__init__(f"{setting}: {message}")


class FindingsInputError(ReviewSyncError):
    """Raised when a findings file exists but cannot be safely loaded."""

    def __init__(self, path: Path, message: str):
        self.path = path
        self.message = message
        super().__init__(f"{path}: {message}")


class PlatformError(ReviewSyncError):
    """Raised when a GitHub or Azure DevOps API call fails."""

    def __init__(self, operation: str, message: str, status_code: Optional[int] = None):
        self.operation = operation
        self.message = message
        self.status_code = status_code
        detail = f"HTTP {status_code}: {message}" if status_code is not None else message
        super().__init__(f"{operation} failed ({detail})")
