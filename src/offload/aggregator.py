from __future__ import annotations

from typing import Sequence

from offload.models import ExtensionStats, FileRecord, Summary

PREVIEW_LIMIT = 10


def summarize(candidates: Sequence[FileRecord]) -> Summary:
    counts: dict[str, int] = {}
    sizes: dict[str, int] = {}
    for record in candidates:
        counts[record.extension] = counts.get(record.extension, 0) + 1
        sizes[record.extension] = sizes.get(record.extension, 0) + record.size
    by_extension = {
        ext: ExtensionStats(count=counts[ext], total_bytes=sizes[ext])
        for ext in sorted(counts)
    }
    return Summary(
        by_extension=by_extension,
        total_count=len(candidates),
        total_bytes=sum(sizes.values()),
    )


def top_files(candidates: Sequence[FileRecord], limit: int = PREVIEW_LIMIT) -> list[FileRecord]:
    ordered = sorted(candidates, key=lambda r: (-r.size, r.rel_path))
    return ordered[: max(limit, 0)]
