from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable, Iterable
from pathlib import Path
from typing import NoReturn

from offload import __version__
from offload.errors import ConfigError, NoCandidatesError, OffloadError
from offload.models import FilterSpec, Session, SessionState, total_size
from offload.report import ConsoleObserver, format_mib, render_restore_hint
from offload.session import CONFIRM_TOKEN, Orchestrator

DEFAULT_THRESHOLD_MB = 25
DEFAULT_ROOT = "~/Library/Messages/Attachments"
DEFAULT_BACKUP_ROOT = (
    "~/Library/Mobile Documents/com~apple~CloudDocs/Archive/Backup_Exports/Messages_Media"
)


class _ArgumentParser(argparse.ArgumentParser):
    """Reports usage errors as ConfigError instead of exiting with status 2."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        raise ConfigError(f"{self.prog}: error: {message}")


def build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="offload",
        description=(
            "Find large local files (by default Messages attachments), back them up "
            "and delete the local copies. Remote copies are never touched. "
            "Runs as a dry-run preview unless --delete is given."
        ),
        epilog=(
            "Examples:\n"
            "  offload --threshold 50 --types \"mov mp4 heic\"\n"
            "  offload --delete --types \"mov mp4\" --threshold 100"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--threshold",
        default=str(DEFAULT_THRESHOLD_MB),
        metavar="MB",
        help=f"Minimum file size in MB to target (default: {DEFAULT_THRESHOLD_MB})",
    )
    parser.add_argument(
        "--types",
        default="",
        metavar='"EXT EXT"',
        help="Only match these extensions (space-separated, no dots). Default: all types",
    )
    parser.add_argument(
        "--delete",
        action="store_true",
        help=f"Back up, then delete local files (asks you to type {CONFIRM_TOKEN})",
    )
    parser.add_argument(
        "--no-backup",
        action="store_true",
        help=(
            "HIGHER RISK: with --delete, remove files without making a backup first. "
            "Only safe if every file is known to exist in the synced store"
        ),
    )
    parser.add_argument("--root", default=DEFAULT_ROOT, help="Directory to scan")
    parser.add_argument(
        "--backup-root",
        default=DEFAULT_BACKUP_ROOT,
        help="Directory that receives backup_<timestamp> folders",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def build_session(args: argparse.Namespace) -> Session:
    file_filter = FilterSpec.from_options(args.threshold, args.types)
    if args.no_backup and not args.delete:
        raise ConfigError("--no-backup only makes sense together with --delete.")

    root = Path(args.root).expanduser().resolve()
    backup_root = Path(args.backup_root).expanduser().resolve()
    if backup_root == root or root in backup_root.parents:
        raise ConfigError(f"Backup root {backup_root} must be outside the scanned root {root}")

    return Session(
        root_dir=root,
        backup_root=backup_root,
        filter=file_filter,
        dry_run=not args.delete,
        do_backup=not args.no_backup,
        do_delete=args.delete,
    )


def main(
    argv: Iterable[str] | None = None,
    prompt: Callable[[str], str] = input,
) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(list(argv) if argv is not None else None)
    except ConfigError as exc:
        print(exc, file=sys.stderr)
        return exc.exit_code
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    try:
        session = build_session(args)
        observer = ConsoleObserver(
            session.filter.threshold_bytes, session.filter.describe_types()
        )
        orchestrator = Orchestrator(session, prompt=prompt, observer=observer)
        if session.do_delete and not session.do_backup:
            print("WARNING: --no-backup is set; files will be deleted without a backup.")
        result = orchestrator.run()
    except NoCandidatesError as exc:
        print(exc)
        return exc.exit_code
    except OffloadError as exc:
        print(exc, file=sys.stderr)
        return exc.exit_code
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return 1

    if result.state is SessionState.EXIT:
        print("Dry-run only. Re-run with --delete to back up and remove these files.")
        return 0

    if result.manifest is not None:
        print(f"Backup complete -> {result.manifest.destination}")
        print(render_restore_hint(result.manifest.destination, session.root_dir))
    print(
        f"Deletion done: removed {len(result.deleted)} file(s), "
        f"{format_mib(total_size(result.deleted))} MiB freed."
    )
    if result.failures:
        for failure in result.failures:
            print(f"  {failure}", file=sys.stderr)
        print(f"Completed with {len(result.failures)} deletion error(s); see log for details.")
        return result.failures[0].exit_code
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
