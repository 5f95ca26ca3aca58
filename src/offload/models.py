from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Iterable

from offload.errors import ConfigError, DeletionFailure

NO_EXTENSION = "none"
BYTES_PER_MIB = 1024 * 1024


def extension_of(name: str) -> str | None:
    """Return the lowercased final suffix of ``name`` or None if it has none."""
    _, dot, suffix = name.rpartition(".")
    if not dot or not suffix:
        return None
    return suffix.lower()


@dataclass(frozen=True)
class FileRecord:
    path: Path
    rel_path: str
    size: int
    extension: str  # lowercased suffix or NO_EXTENSION


@dataclass(frozen=True)
class FilterSpec:
    threshold_bytes: int
    extensions: frozenset[str] | None = None  # None matches every extension

    @property
    def match_all(self) -> bool:
        return self.extensions is None

    def matches(self, path: Path | str, size: int) -> bool:
        if size < self.threshold_bytes:
            return False
        if self.extensions is None:
            return True
        ext = extension_of(Path(path).name)
        return ext is not None and ext in self.extensions

    @classmethod
    def from_options(cls, threshold_mb: str | float, types: str | None) -> FilterSpec:
        """Build a filter from a threshold in MB and a space-separated type list."""
        try:
            threshold = float(threshold_mb)
        except (TypeError, ValueError):
            raise ConfigError(f"Threshold must be a number of MB, got {threshold_mb!r}") from None
        if not math.isfinite(threshold) or threshold < 0:
            raise ConfigError(
                f"Threshold must be a non-negative number of MB, got {threshold_mb!r}"
            )

        extensions: set[str] = set()
        for token in (types or "").split():
            ext = token.lstrip(".").lower()
            if not ext or "/" in ext or "\\" in ext or "." in ext:
                raise ConfigError(
                    f"Invalid file type {token!r}; use bare extensions like 'mov'"
                )
            extensions.add(ext)
        return cls(
            threshold_bytes=int(threshold * BYTES_PER_MIB),
            extensions=frozenset(extensions) if extensions else None,
        )

    def describe_types(self) -> str:
        if self.match_all:
            return "all"
        return " ".join(sorted(self.extensions))


@dataclass(frozen=True)
class ExtensionStats:
    count: int
    total_bytes: int


@dataclass(frozen=True)
class Summary:
    by_extension: dict[str, ExtensionStats]
    total_count: int
    total_bytes: int

    def rows(self) -> list[tuple[str, ExtensionStats]]:
        return sorted(
            self.by_extension.items(),
            key=lambda item: (-item[1].total_bytes, item[0]),
        )


@dataclass(frozen=True)
class Session:
    root_dir: Path
    backup_root: Path
    filter: FilterSpec
    dry_run: bool = True
    do_backup: bool = True
    do_delete: bool = False
    confirmed: bool = False


@dataclass
class BackupManifest:
    destination: Path
    records: list[FileRecord] = field(default_factory=list)
    _index: set[FileRecord] = field(default_factory=set, init=False, repr=False)

    def __post_init__(self) -> None:
        self._index.update(self.records)

    def add(self, record: FileRecord) -> None:
        self.records.append(record)
        self._index.add(record)

    def __contains__(self, record: object) -> bool:
        return record in self._index

    def __len__(self) -> int:
        return len(self.records)


class SessionState(Enum):
    IDLE = "idle"
    SCANNING = "scanning"
    PREVIEWING = "previewing"
    EXIT = "exit"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    ABORTED = "aborted"
    BACKING_UP = "backing_up"
    DELETING = "deleting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class RunResult:
    state: SessionState
    candidates: tuple[FileRecord, ...] = ()
    summary: Summary | None = None
    top_files: list[FileRecord] = field(default_factory=list)
    manifest: BackupManifest | None = None
    deleted: list[FileRecord] = field(default_factory=list)
    failures: list[DeletionFailure] = field(default_factory=list)
    pruned_dirs: list[Path] = field(default_factory=list)


def total_size(records: Iterable[FileRecord]) -> int:
    return sum(record.size for record in records)
