from __future__ import annotations

import shlex
from pathlib import Path

from offload.models import (
    BYTES_PER_MIB,
    NO_EXTENSION,
    FileRecord,
    RunResult,
    SessionState,
    Summary,
)
from offload.session import SessionObserver

PROGRESS_NAME_WIDTH = 50
PHASE_LABELS = {"backup": "Copying", "delete": "Deleting"}


def format_mib(num_bytes: int) -> str:
    return f"{num_bytes / BYTES_PER_MIB:.2f}"


def render_header(count: int, threshold_bytes: int, types: str) -> str:
    threshold_mb = threshold_bytes / BYTES_PER_MIB
    return f"Found {count} files >= {threshold_mb:g} MB matching types '{types}'."


def render_preview(top: list[FileRecord]) -> str:
    lines = [f"Preview ({len(top)} largest):"]
    for record in top:
        lines.append(f" {format_mib(record.size):>8} MiB  {record.path}")
    return "\n".join(lines)


def render_summary(summary: Summary) -> str:
    lines = [
        "Summary by file type:",
        f"  {'EXT':<8} {'COUNT':>8} {'SIZE (MiB)':>12}",
        f"  {'-' * 8} {'-' * 8} {'-' * 11:>12}",
    ]
    for ext, stats in summary.rows():
        label = f"({NO_EXTENSION})" if ext == NO_EXTENSION else ext
        lines.append(f"  {label:<8} {stats.count:>8d} {format_mib(stats.total_bytes):>12}")
    lines.append("")
    lines.append(f"Approx total size to process: {format_mib(summary.total_bytes)} MiB")
    return "\n".join(lines)


def render_restore_hint(backup_dir: Path, root: Path) -> str:
    """Manual restore procedure; printed for the user, never run."""
    return "\n".join(
        [
            "To restore the originals later, run:",
            f"  cp -a {shlex.quote(str(backup_dir))}/. {shlex.quote(str(root))}/",
        ]
    )


class ConsoleObserver(SessionObserver):
    def __init__(self, threshold_bytes: int, types: str) -> None:
        self.threshold_bytes = threshold_bytes
        self.types = types
        self.count = 0

    def on_state(self, state: SessionState) -> None:
        if state is SessionState.BACKING_UP:
            print(f"Backing up {self.count} files...")
        elif state is SessionState.DELETING:
            print("Deleting originals...")

    def on_preview(self, result: RunResult) -> None:
        self.count = len(result.candidates)
        if not result.candidates or result.summary is None:
            return
        print(render_header(len(result.candidates), self.threshold_bytes, self.types))
        print()
        print(render_preview(result.top_files))
        print()
        print(render_summary(result.summary))
        print()

    def on_progress(self, phase: str, current: int, total: int, name: str) -> None:
        label = PHASE_LABELS.get(phase, phase)
        shown = name[:PROGRESS_NAME_WIDTH]
        print(f"\r  [{current}/{total}] {label}: {shown:<{PROGRESS_NAME_WIDTH}}", end="")
        if current == total:
            print()
