from __future__ import annotations

from pathlib import Path

import pytest

from offload.errors import ConfigError
from offload.models import BackupManifest, FileRecord, FilterSpec, extension_of

MIB = 1024 * 1024


@pytest.mark.parametrize(
    ("name", "expected"),
    [
        ("clip.MOV", "mov"),
        ("photo.backup.HEIC", "heic"),
        (".heic", "heic"),
        ("README", None),
        ("trailing.", None),
    ],
)
def test_extension_of(name: str, expected: str | None) -> None:
    assert extension_of(name) == expected


def test_from_options_converts_megabytes() -> None:
    spec = FilterSpec.from_options("25", "mov MP4 .heic")
    assert spec.threshold_bytes == 25 * MIB
    assert spec.extensions == frozenset({"mov", "mp4", "heic"})
    assert spec.describe_types() == "heic mov mp4"


def test_empty_types_match_all() -> None:
    spec = FilterSpec.from_options(1.5, "   ")
    assert spec.match_all
    assert spec.threshold_bytes == int(1.5 * MIB)
    assert spec.describe_types() == "all"


@pytest.mark.parametrize("threshold", ["-1", "abc", "nan", "inf"])
def test_invalid_threshold(threshold: str) -> None:
    with pytest.raises(ConfigError):
        FilterSpec.from_options(threshold, None)


@pytest.mark.parametrize("types", ["mov ../x", "tar.gz", "."])
def test_invalid_types(types: str) -> None:
    with pytest.raises(ConfigError):
        FilterSpec.from_options("1", types)


def test_matches_applies_threshold_and_extension() -> None:
    spec = FilterSpec(threshold_bytes=100, extensions=frozenset({"mov"}))
    assert spec.matches("a/clip.MOV", 100)
    assert not spec.matches("a/clip.mov", 99)
    assert not spec.matches("a/clip.mp4", 500)


def test_files_without_extension_only_match_all() -> None:
    restricted = FilterSpec(threshold_bytes=0, extensions=frozenset({"none"}))
    assert not restricted.matches("dir/README", 10)
    assert FilterSpec(threshold_bytes=0).matches("dir/README", 10)


def test_manifest_membership() -> None:
    first = FileRecord(path=Path("/r/a.mov"), rel_path="a.mov", size=1, extension="mov")
    second = FileRecord(path=Path("/r/b.mov"), rel_path="b.mov", size=1, extension="mov")
    manifest = BackupManifest(destination=Path("/backups/backup_1"), records=[first])

    assert first in manifest
    assert second not in manifest
    manifest.add(second)
    assert second in manifest
    assert len(manifest) == 2
