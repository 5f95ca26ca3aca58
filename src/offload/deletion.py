from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Sequence

from offload.errors import DeletionFailure
from offload.models import BackupManifest, FileRecord

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]


@dataclass
class DeletionOutcome:
    deleted: list[FileRecord] = field(default_factory=list)
    failures: list[DeletionFailure] = field(default_factory=list)


def delete_files(
    candidates: Sequence[FileRecord],
    manifest: BackupManifest | None,
    on_progress: ProgressCallback | None = None,
    allow_without_backup: bool = False,
) -> DeletionOutcome:
    """Remove the originals of ``candidates``.

    With a manifest only backed-up records are removed; anything else is
    reported as a failure. Without one, ``allow_without_backup`` must be set.
    A failure on one file never stops the others.
    """
    if manifest is None and not allow_without_backup:
        raise ValueError("Refusing to delete without a backup manifest.")

    outcome = DeletionOutcome()
    total = len(candidates)
    for index, record in enumerate(candidates, start=1):
        if on_progress is not None:
            on_progress(index, total, record.path.name)
        if manifest is not None and record not in manifest:
            outcome.failures.append(DeletionFailure(record, "not in backup manifest"))
            logger.error("Skipped %s: not in backup manifest", record.path)
            continue
        try:
            record.path.unlink()
        except OSError as exc:
            logger.error("Failed to delete %s: %s", record.path, exc)
            outcome.failures.append(DeletionFailure(record, exc))
        else:
            logger.debug("Deleted %s", record.path)
            outcome.deleted.append(record)
    return outcome


def prune_empty_dirs(root: Path) -> list[Path]:
    """Remove empty directories below ``root``, deepest first. ``root`` stays."""
    root = Path(root)
    removed: list[Path] = []
    for dirpath, _dirnames, _filenames in os.walk(root, topdown=False):
        path = Path(dirpath)
        if path == root:
            continue
        try:
            if any(path.iterdir()):
                continue
            path.rmdir()
        except OSError as exc:
            logger.warning("Could not remove directory %s: %s", path, exc)
            continue
        logger.debug("Removed empty directory %s", path)
        removed.append(path)
    return removed
