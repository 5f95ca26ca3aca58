"""Errors raised by the offload pipeline.

Every error carries the process exit code the command line maps it to.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from offload.models import FileRecord


class OffloadError(Exception):
    exit_code = 1


class ConfigError(OffloadError):
    """Invalid or contradictory options."""


class NotFoundError(OffloadError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"Directory does not exist or is not a directory: {path}")
        self.path = path


class ScanError(OffloadError):
    def __init__(self, path: Path, cause: OSError) -> None:
        super().__init__(f"Cannot read directory {path}: {cause.strerror or cause}")
        self.path = path
        self.cause = cause


class NoCandidatesError(OffloadError):
    """No file matched the filter. Informational, not a failure."""

    exit_code = 0


class CopyFailure(OffloadError):
    def __init__(self, record: FileRecord, cause: BaseException | str) -> None:
        super().__init__(f"Backup of {record.rel_path} failed: {cause}")
        self.record = record
        self.cause = cause


class ConfirmationMismatch(OffloadError):
    def __init__(self, answer: str | None) -> None:
        super().__init__("Aborted: confirmation not given.")
        self.answer = answer


class DeletionFailure(OffloadError):
    """Removal of one original failed; collected, never raised by the engine."""

    exit_code = 2

    def __init__(self, record: FileRecord, cause: BaseException | str) -> None:
        super().__init__(f"Could not delete {record.rel_path}: {cause}")
        self.record = record
        self.cause = cause
