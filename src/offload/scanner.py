from __future__ import annotations

import logging
import os
import stat
from pathlib import Path

from offload.errors import NotFoundError, ScanError
from offload.models import NO_EXTENSION, FileRecord, FilterSpec, extension_of

logger = logging.getLogger(__name__)


def scan(root: Path, file_filter: FilterSpec) -> tuple[FileRecord, ...]:
    """Collect every regular file under ``root`` accepted by ``file_filter``.

    Symlinks are neither followed nor returned. An unreadable root raises
    ScanError; unreadable subdirectories are logged and skipped. The result
    is sorted by relative path and is the snapshot every later stage works
    from.
    """
    root = Path(root)
    if not root.is_dir():
        raise NotFoundError(root)
    root = root.resolve()

    results: list[FileRecord] = []
    def on_error(exc: OSError) -> None:
        _walk_error(root, exc)

    for dirpath, _dirnames, filenames in os.walk(root, onerror=on_error):
        for name in filenames:
            full_path = Path(dirpath) / name
            try:
                st = full_path.lstat()
            except OSError as exc:
                logger.warning("Unable to stat %s: %s", full_path, exc)
                continue
            if not stat.S_ISREG(st.st_mode):
                continue
            if not file_filter.matches(full_path, st.st_size):
                continue
            results.append(_file_record(root, full_path, st.st_size))
    results.sort(key=lambda r: r.rel_path)
    logger.debug("Scanned %s: %d candidate(s)", root, len(results))
    return tuple(results)


def _file_record(root: Path, path: Path, size: int) -> FileRecord:
    return FileRecord(
        path=path,
        rel_path=path.relative_to(root).as_posix(),
        size=size,
        extension=extension_of(path.name) or NO_EXTENSION,
    )


def _walk_error(root: Path, exc: OSError) -> None:
    if exc.filename is not None and Path(exc.filename) == root:
        raise ScanError(root, exc) from exc
    logger.warning("Cannot read directory %s during scan: %s", exc.filename, exc)
