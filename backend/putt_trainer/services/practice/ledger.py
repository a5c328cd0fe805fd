"""Bounded undo/redo history for putt recording.

Entries are snapshots of a single position plus the session's penalty flag.
The engine clears the ledger whenever a position finishes, so undo never
reaches back into an earlier position.
"""

from collections import deque
from dataclasses import dataclass
from typing import Deque, List

from .positions import Position
from .sessions import Session


@dataclass(frozen=True)
class LedgerEntry:
    position_index: int
    position: Position
    penalty_mode: bool

    @classmethod
    def snapshot(cls, position_index: int, position: Position, penalty_mode: bool) -> 'LedgerEntry':
        return cls(position_index=position_index, position=position.clone(), penalty_mode=penalty_mode)

    def restore(self, session: Session) -> None:
        # clone again so the live position never aliases a stored entry
        session.positions[self.position_index] = self.position.clone()
        session.penalty_mode = self.penalty_mode


class UndoLedger:
    def __init__(self, limit: int = 10):
        self.limit = limit
        self._undo: Deque[LedgerEntry] = deque(maxlen=limit)
        self._redo: List[LedgerEntry] = []

    def __len__(self):
        return len(self._undo)

    def record(self, session: Session) -> None:
        """Push the pre-mutation state of the current position."""
        index = session.current_position_number - 1
        self._undo.append(LedgerEntry.snapshot(index, session.positions[index], session.penalty_mode))
        self._redo.clear()

    def can_undo(self, session: Session) -> bool:
        return bool(self._undo) and not session.current_position.completed

    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo(self, session: Session) -> bool:
        if not self.can_undo(session):
            return False
        entry = self._undo.pop()
        self._redo.append(
            LedgerEntry.snapshot(entry.position_index, session.positions[entry.position_index], session.penalty_mode)
        )
        entry.restore(session)
        return True

    def redo(self, session: Session) -> bool:
        if not self.can_redo():
            return False
        entry = self._redo.pop()
        self._undo.append(
            LedgerEntry.snapshot(entry.position_index, session.positions[entry.position_index], session.penalty_mode)
        )
        entry.restore(session)
        return True

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()
