from __future__ import annotations

import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Callable, Sequence

from offload.errors import CopyFailure
from offload.models import BackupManifest, FileRecord

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int, str], None]

BACKUP_PREFIX = "backup_"


def new_run_id() -> str:
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def make_backup_dir(backup_root: Path, run_id: str) -> Path:
    """Create ``<backup_root>/backup_<run_id>``, suffixing it until unused."""
    backup_root.mkdir(parents=True, exist_ok=True)
    candidate = backup_root / f"{BACKUP_PREFIX}{run_id}"
    attempt = 0
    while True:
        try:
            candidate.mkdir()
        except FileExistsError:
            attempt += 1
            candidate = backup_root / f"{BACKUP_PREFIX}{run_id}_{attempt}"
            continue
        return candidate


def backup_files(
    candidates: Sequence[FileRecord],
    destination: Path,
    on_progress: ProgressCallback | None = None,
) -> BackupManifest:
    """Copy every candidate under ``destination``, mirroring relative paths.

    Stops at the first failure and raises CopyFailure; the failed item's
    partial copy is removed and never enters the manifest.
    """
    manifest = BackupManifest(destination=destination)
    total = len(candidates)
    for index, record in enumerate(candidates, start=1):
        if on_progress is not None:
            on_progress(index, total, record.path.name)
        dst = destination / record.rel_path
        try:
            dst.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(record.path, dst)
            copied = dst.stat().st_size
        except OSError as exc:
            _discard_partial(dst)
            raise CopyFailure(record, exc) from exc
        except BaseException:
            _discard_partial(dst)
            raise
        if copied != record.size:
            _discard_partial(dst)
            raise CopyFailure(
                record, f"copied {copied} bytes, expected {record.size}"
            )
        manifest.add(record)
        logger.debug("Backed up %s -> %s", record.path, dst)
    logger.info("Backed up %d file(s) to %s", len(manifest), destination)
    return manifest


def _discard_partial(path: Path) -> None:
    try:
        path.unlink()
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("Could not remove partial copy %s: %s", path, exc)
