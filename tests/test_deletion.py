from __future__ import annotations

from pathlib import Path

import pytest

from offload.deletion import delete_files, prune_empty_dirs
from offload.models import BackupManifest, FilterSpec
from offload.scanner import scan


def _write(path: Path, content: str = "data") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


def test_only_backed_up_files_are_deleted(tmp_path: Path) -> None:
    _write(tmp_path / "a.mov")
    _write(tmp_path / "b.mov")
    records = scan(tmp_path, FilterSpec(threshold_bytes=0))
    manifest = BackupManifest(destination=tmp_path / "unused")
    manifest.add(records[0])

    outcome = delete_files(records, manifest)

    assert [r.rel_path for r in outcome.deleted] == ["a.mov"]
    assert [f.record.rel_path for f in outcome.failures] == ["b.mov"]
    assert not (tmp_path / "a.mov").exists()
    assert (tmp_path / "b.mov").exists()


def test_failure_does_not_stop_other_deletions(tmp_path: Path) -> None:
    _write(tmp_path / "a.mov")
    _write(tmp_path / "b.mov")
    _write(tmp_path / "c.mov")
    records = scan(tmp_path, FilterSpec(threshold_bytes=0))
    (tmp_path / "a.mov").unlink()
    progress: list[int] = []

    outcome = delete_files(
        records,
        None,
        on_progress=lambda current, total, name: progress.append(current),
        allow_without_backup=True,
    )

    assert [f.record.rel_path for f in outcome.failures] == ["a.mov"]
    assert isinstance(outcome.failures[0].cause, FileNotFoundError)
    assert [r.rel_path for r in outcome.deleted] == ["b.mov", "c.mov"]
    assert progress == [1, 2, 3]


def test_deleting_without_manifest_needs_authorization(tmp_path: Path) -> None:
    _write(tmp_path / "a.mov")
    records = scan(tmp_path, FilterSpec(threshold_bytes=0))

    with pytest.raises(ValueError):
        delete_files(records, None)
    assert (tmp_path / "a.mov").exists()


def test_prune_removes_nested_empty_dirs_bottom_up(tmp_path: Path) -> None:
    (tmp_path / "a" / "b" / "c").mkdir(parents=True)
    (tmp_path / "empty").mkdir()
    _write(tmp_path / "keep" / "sub" / "file.txt")
    (tmp_path / "keep" / "sub" / "gone").mkdir()

    removed = prune_empty_dirs(tmp_path)

    assert tmp_path.is_dir()
    assert not (tmp_path / "a").exists()
    assert not (tmp_path / "empty").exists()
    assert not (tmp_path / "keep" / "sub" / "gone").exists()
    assert (tmp_path / "keep" / "sub" / "file.txt").exists()
    assert tmp_path / "a" / "b" / "c" in removed
    assert removed.index(tmp_path / "a" / "b" / "c") < removed.index(tmp_path / "a")
    for dirpath in tmp_path.rglob("*"):
        if dirpath.is_dir():
            assert any(dirpath.iterdir())


def test_prune_keeps_empty_root(tmp_path: Path) -> None:
    assert prune_empty_dirs(tmp_path) == []
    assert tmp_path.is_dir()
