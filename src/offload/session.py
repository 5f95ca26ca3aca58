"""Sequencing of one offload run.

``Orchestrator.run`` walks the session through
IDLE -> SCANNING -> PREVIEWING, then either stops (no candidates, dry run)
or waits at the confirmation gate before BACKING_UP and DELETING. Nothing
on disk changes before the gate accepts the literal CONFIRM_TOKEN, and no
original is removed unless its backup completed (or backups were disabled).
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Callable

from offload.aggregator import summarize, top_files
from offload.backup import backup_files, make_backup_dir, new_run_id
from offload.deletion import delete_files, prune_empty_dirs
from offload.errors import (
    ConfigError,
    ConfirmationMismatch,
    NoCandidatesError,
    NotFoundError,
    ScanError,
)
from offload.models import BYTES_PER_MIB, RunResult, Session, SessionState
from offload.scanner import scan

logger = logging.getLogger(__name__)

CONFIRM_TOKEN = "YES"


class SessionObserver:
    """Receives run events. The default implementation ignores them."""

    def on_state(self, state: SessionState) -> None:
        pass

    def on_preview(self, result: RunResult) -> None:
        pass

    def on_progress(self, phase: str, current: int, total: int, name: str) -> None:
        pass


class Orchestrator:
    def __init__(
        self,
        session: Session,
        prompt: Callable[[str], str] = input,
        observer: SessionObserver | None = None,
        run_id_factory: Callable[[], str] = new_run_id,
    ) -> None:
        if not session.dry_run and not (session.do_backup or session.do_delete):
            raise ConfigError("Nothing to do: backup and deletion are both disabled.")
        self.session = session
        self.prompt = prompt
        self.observer = observer or SessionObserver()
        self.run_id_factory = run_id_factory
        self.state = SessionState.IDLE
        self.result = RunResult(state=self.state)

    def run(self) -> RunResult:
        result = self.scan()
        if not result.candidates:
            self._transition(SessionState.EXIT)
            threshold_mb = self.session.filter.threshold_bytes / BYTES_PER_MIB
            raise NoCandidatesError(
                f"No matching files found for >= {threshold_mb:g} MB "
                f"and types '{self.session.filter.describe_types()}'."
            )
        if self.session.dry_run:
            self._transition(SessionState.EXIT)
            return result

        self.confirm()
        if self.session.do_backup:
            self._back_up()
        if self.session.do_delete:
            self._delete()
        self._transition(SessionState.DONE)
        return result

    def scan(self) -> RunResult:
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"Cannot scan from state {self.state.value}")
        self._transition(SessionState.SCANNING)
        try:
            candidates = scan(self.session.root_dir, self.session.filter)
        except (NotFoundError, ScanError):
            self._transition(SessionState.FAILED)
            raise
        self.result.candidates = candidates
        self.result.summary = summarize(candidates)
        self.result.top_files = top_files(candidates)
        self._transition(SessionState.PREVIEWING)
        self.observer.on_preview(self.result)
        return self.result

    def confirm(self) -> Session:
        self._transition(SessionState.AWAITING_CONFIRMATION)
        if not self.session.do_delete:
            actions = "back up"
        elif self.session.do_backup:
            actions = "back up and delete"
        else:
            actions = "delete WITHOUT BACKUP"
        try:
            answer: str | None = self.prompt(
                f"Type {CONFIRM_TOKEN} to {actions} these files: "
            )
        except (EOFError, KeyboardInterrupt):
            answer = None
        if answer is None or answer.strip() != CONFIRM_TOKEN:
            self._transition(SessionState.ABORTED)
            raise ConfirmationMismatch(answer)
        self.session = dataclasses.replace(self.session, confirmed=True)
        return self.session

    def _back_up(self) -> None:
        self._require_confirmed()
        self._transition(SessionState.BACKING_UP)
        destination = make_backup_dir(self.session.backup_root, self.run_id_factory())
        logger.info("Backup directory: %s", destination)
        try:
            self.result.manifest = backup_files(
                self.result.candidates,
                destination,
                on_progress=self._progress("backup"),
            )
        except BaseException:
            self._transition(SessionState.FAILED)
            raise

    def _delete(self) -> None:
        self._require_confirmed()
        self._transition(SessionState.DELETING)
        outcome = delete_files(
            self.result.candidates,
            self.result.manifest,
            on_progress=self._progress("delete"),
            allow_without_backup=not self.session.do_backup,
        )
        self.result.deleted = outcome.deleted
        self.result.failures = outcome.failures
        self.result.pruned_dirs = prune_empty_dirs(self.session.root_dir.resolve())

    def _require_confirmed(self) -> None:
        if not self.session.confirmed:
            raise RuntimeError("Destructive step reached without confirmation")

    def _progress(self, phase: str) -> Callable[[int, int, str], None]:
        def report(current: int, total: int, name: str) -> None:
            self.observer.on_progress(phase, current, total, name)

        return report

    def _transition(self, state: SessionState) -> None:
        logger.debug("Session state %s -> %s", self.state.value, state.value)
        self.state = state
        self.result.state = state
        self.observer.on_state(state)
