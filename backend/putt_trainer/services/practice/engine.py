"""Progression engine: applies putt outcomes to the active session.

Every mutating call is a short critical section guarded by a gate lock.
Readers such as the autosaver take the same gate through
:meth:`ProgressionEngine.snapshot`, and a putt arriving during a read
waits for it. A ``record_putt`` that arrives while another ``record_putt``
is still being applied is dropped rather than interleaved.
"""

import enum
import logging
import threading
from typing import Callable, List, Optional

from .errors import ArchiveError
from .integrity import repair_session
from .ledger import UndoLedger
from .positions import (
    POSITION_COUNT,
    SINKS_REQUIRED,
    Position,
    PositionStatus,
    Putt,
    PuttResult,
    calculate_accuracy_rate,
    calculate_carryover,
    calculate_position_score,
    create_position,
    now_ms,
)
from .sessions import Session, calculate_session_score, create_session, create_session_summary

logger = logging.getLogger(__name__)


class PuttOutcome(str, enum.Enum):
    RECORDED = 'recorded'
    CHOICE_REQUIRED = 'choice-required'
    POSITION_COMPLETED = 'position-completed'
    SESSION_COMPLETED = 'session-completed'
    IGNORED = 'ignored'


class ProgressionEngine:
    def __init__(self, session: Optional[Session] = None, storage=None,
                 clock: Callable[[], int] = now_ms, undo_limit: int = 10):
        self.clock = clock
        self.session = session if session is not None else create_session(clock())
        self.storage = storage
        self.ledger = UndoLedger(undo_limit)
        self.archive_pending = False
        self.diagnostics: List[str] = []
        self._gate = threading.Lock()
        self._processing = threading.Lock()

    @property
    def current_position(self) -> Position:
        return self.session.current_position

    @property
    def awaiting_choice(self) -> bool:
        """Budget spent without three sinks and no penalty election yet."""
        pos = self.session.current_position
        return (
            not self.session.is_finished
            and not self.session.penalty_mode
            and not pos.completed
            and pos.budget_exhausted
        )

    @property
    def can_undo(self) -> bool:
        return not self.session.is_finished and self.ledger.can_undo(self.session)

    @property
    def can_redo(self) -> bool:
        return not self.session.is_finished and self.ledger.can_redo()

    def record_putt(self, result) -> PuttOutcome:
        """Record one putt against the current position.

        Raises :class:`ArchiveError` when this putt finishes the session and
        archiving fails; the session stays finished locally and
        :meth:`finalize_session` can be called again.
        """
        result = PuttResult(result)
        if not self._processing.acquire(blocking=False):
            logger.debug("[record-skip] putt dropped, previous putt still processing")
            return PuttOutcome.IGNORED
        try:
            with self._gate:
                return self._apply_putt(result)
        finally:
            self._processing.release()

    def _apply_putt(self, result: PuttResult) -> PuttOutcome:
        if self.session.is_finished or self.awaiting_choice:
            return PuttOutcome.IGNORED

        self.ledger.record(self.session)
        pos = self.session.current_position
        pos.putts.append(Putt(result, self.clock()))
        pos.attempts_used += 1
        if result == PuttResult.SINK:
            pos.putts_in_sunk += 1
        if pos.status == PositionStatus.NOT_STARTED:
            pos.status = PositionStatus.IN_PROGRESS

        if pos.putts_in_sunk >= SINKS_REQUIRED:
            return self._complete_position(pos)
        if self.awaiting_choice:
            logger.info(
                f"[choice] session={self.session.session_id} position={pos.number} "
                f"budget={pos.total_attempts_available} exhausted"
            )
            return PuttOutcome.CHOICE_REQUIRED
        return PuttOutcome.RECORDED

    def continue_with_penalty(self) -> bool:
        with self._gate:
            if not self.awaiting_choice:
                return False
            self.session.penalty_mode = True
            self.session.current_position.status = PositionStatus.CONTINUED_PENALTY
            logger.info(
                f"[penalty] session={self.session.session_id} position={self.session.current_position_number}"
            )
            self._save()
            return True

    def restart(self) -> Session:
        """Discard the current session and start a fresh one.

        A finished session that is still waiting to be archived is archived
        first; if that fails the current session is kept.
        """
        with self._gate:
            if self.archive_pending:
                self._archive()
            old_id = self.session.session_id
            self.session = create_session(self.clock())
            self.ledger.clear()
            self.diagnostics = []
            logger.info(f"[restart] session={old_id} -> {self.session.session_id}")
            self._save()
            return self.session

    def start_new_session(self) -> Optional[Session]:
        """Begin the next round once the current one is finished and archived.

        Returns None while the session is still in play or its archive is
        pending; use :meth:`restart` to abandon an unfinished round.
        """
        with self._gate:
            if not self.session.is_finished or self.archive_pending:
                return None
            old_id = self.session.session_id
            self.session = create_session(self.clock())
            self.ledger.clear()
            self.diagnostics = []
            logger.info(f"[new-session] session={old_id} -> {self.session.session_id}")
            self._save()
            return self.session

    def undo(self) -> bool:
        with self._gate:
            if self.session.is_finished:
                return False
            return self.ledger.undo(self.session)

    def redo(self) -> bool:
        with self._gate:
            if self.session.is_finished:
                return False
            return self.ledger.redo(self.session)

    def finalize_session(self) -> bool:
        """Retry archiving a finished session. Returns True once archived."""
        with self._gate:
            if not self.session.is_finished:
                return False
            if self.archive_pending:
                self._archive()
            return True

    def snapshot(self) -> Session:
        """Detached copy of the session, safe to serialize off-thread."""
        with self._gate:
            return Session.from_dict(self.session.to_dict())

    def _complete_position(self, pos: Position) -> PuttOutcome:
        if pos.status != PositionStatus.CONTINUED_PENALTY:
            pos.status = PositionStatus.SUCCESS
        pos.completed = True
        pos.position_score = calculate_position_score(pos, self.session.penalty_mode)
        pos.accuracy_rate = calculate_accuracy_rate(pos)
        self.ledger.clear()
        logger.info(
            f"[position] session={self.session.session_id} position={pos.number} status={pos.status.value} "
            f"used={pos.attempts_used}/{pos.total_attempts_available} score={pos.position_score}"
        )

        if pos.number < POSITION_COUNT:
            carryover = calculate_carryover(pos)
            self.session.positions[pos.number] = create_position(pos.number + 1, carryover)
            self.session.current_position_number = pos.number + 1
            self._save()
            return PuttOutcome.POSITION_COMPLETED

        self._finish()
        return PuttOutcome.SESSION_COMPLETED

    def _finish(self) -> None:
        session = self.session
        self.diagnostics = repair_session(session)
        session.end_time = self.clock()
        session.final_score = calculate_session_score(session)
        session.session_summary = create_session_summary(session)
        logger.info(f"[finish] session={session.session_id} score={session.final_score}")
        self.archive_pending = True
        # storage holds the finished copy even if archiving fails below
        self._save()
        self._archive()

    def _archive(self) -> None:
        if self.storage is None:
            self.archive_pending = False
            return
        session = self.session
        try:
            self.storage.archive(session)
        except ArchiveError:
            logger.error(f"[archive] session={session.session_id} failed, keeping current pointer")
            raise
        except Exception as exc:
            logger.error(f"[archive] session={session.session_id} failed: {exc}")
            raise ArchiveError(f"failed to archive session {session.session_id}") from exc
        self.archive_pending = False
        self.storage.clear_current(session.session_id)

    def _save(self) -> None:
        if self.storage is None:
            return
        try:
            self.storage.save(self.session)
        except Exception as exc:
            logger.warning(f"[save] session={self.session.session_id} failed: {exc}")


def resume_or_start(storage, clock: Callable[[], int] = now_ms, undo_limit: int = 10) -> ProgressionEngine:
    """Build the engine at startup, resuming an unfinished stored session.

    A stored session that finished but was never archived is archived now;
    if that still fails the engine keeps it with ``archive_pending`` set.
    """
    stored = None
    if storage is not None:
        try:
            stored = storage.load_current()
        except Exception as exc:
            logger.warning(f"[resume] could not load current session: {exc}")
    if stored is not None and not stored.is_finished:
        engine = ProgressionEngine(stored, storage, clock=clock, undo_limit=undo_limit)
        engine.diagnostics = repair_session(stored)
        logger.info(
            f"[resume] session={stored.session_id} position={stored.current_position_number}"
        )
        return engine
    if stored is not None:
        engine = ProgressionEngine(stored, storage, clock=clock, undo_limit=undo_limit)
        engine.archive_pending = True
        try:
            engine.finalize_session()
        except ArchiveError:
            logger.warning(f"[resume] session={stored.session_id} finished but still unarchived")
            return engine
        engine.start_new_session()
        return engine
    return ProgressionEngine(None, storage, clock=clock, undo_limit=undo_limit)
