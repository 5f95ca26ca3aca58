from __future__ import annotations

import os
from pathlib import Path

import pytest

MIB = 1024 * 1024


def make_file(path: Path, size: int) -> Path:
    """Create a sparse file of ``size`` bytes."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as handle:
        handle.truncate(size)
    return path


def snapshot(root: Path) -> dict[str, tuple[str, int, float]]:
    """Map every entry under ``root`` to (kind, size, mtime)."""
    entries: dict[str, tuple[str, int, float]] = {}
    if not root.exists():
        return entries
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            full = Path(dirpath) / name
            st = full.lstat()
            kind = "dir" if full.is_dir() else "file"
            entries[full.relative_to(root).as_posix()] = (kind, st.st_size, st.st_mtime)
    return entries


@pytest.fixture
def attachments(tmp_path: Path) -> Path:
    """Attachment tree with a.mov=30MB, b.jpg=10MB and c.heic=60MB."""
    root = tmp_path / "Attachments"
    make_file(root / "a.mov", 30 * MIB)
    make_file(root / "b.jpg", 10 * MIB)
    make_file(root / "c.heic", 60 * MIB)
    return root
