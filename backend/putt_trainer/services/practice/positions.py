"""Position model: one of the nine putting stations in a session.

Each position needs three sinks within its attempt budget. The budget is a
fixed base per station plus whatever a cleanly finished previous station
carried over.
"""

import enum
import time
from dataclasses import dataclass, field
from typing import List


POSITION_COUNT = 9
SINKS_REQUIRED = 3
BASE_ATTEMPTS = {1: 3, 2: 4, 3: 5, 4: 6, 5: 7, 6: 8, 7: 9, 8: 10, 9: 11}


def now_ms() -> int:
    return int(time.time() * 1000)


class PuttResult(str, enum.Enum):
    SINK = 'sink'
    MISS = 'miss'


class PositionStatus(str, enum.Enum):
    NOT_STARTED = 'not-started'
    IN_PROGRESS = 'in-progress'
    SUCCESS = 'success'
    # Only produced by discarding a session; kept so stored data can carry it
    FAILED_RESTART = 'failed-restart'
    CONTINUED_PENALTY = 'continued-penalty'


@dataclass(frozen=True)
class Putt:
    result: PuttResult
    timestamp: int

    def to_dict(self):
        return {'result': self.result.value, 'timestamp': self.timestamp}

    @classmethod
    def from_dict(cls, data):
        return cls(result=PuttResult(data['result']), timestamp=int(data['timestamp']))


@dataclass
class Position:
    number: int
    base_attempts_allocated: int
    attempts_carried_over: int = 0
    total_attempts_available: int = 0
    attempts_used: int = 0
    putts_in_sunk: int = 0
    putts: List[Putt] = field(default_factory=list)
    status: PositionStatus = PositionStatus.NOT_STARTED
    completed: bool = False
    position_score: int = 0
    accuracy_rate: int = 0

    @property
    def remaining_attempts(self) -> int:
        return max(0, self.total_attempts_available - self.attempts_used)

    @property
    def overage(self) -> int:
        return max(0, self.attempts_used - self.total_attempts_available)

    @property
    def budget_exhausted(self) -> bool:
        return self.attempts_used >= self.total_attempts_available

    def clone(self) -> 'Position':
        """Return a value-independent copy (the putt log is not shared)."""
        return Position(
            number=self.number,
            base_attempts_allocated=self.base_attempts_allocated,
            attempts_carried_over=self.attempts_carried_over,
            total_attempts_available=self.total_attempts_available,
            attempts_used=self.attempts_used,
            putts_in_sunk=self.putts_in_sunk,
            putts=list(self.putts),
            status=self.status,
            completed=self.completed,
            position_score=self.position_score,
            accuracy_rate=self.accuracy_rate,
        )

    def to_dict(self):
        return {
            'positionNumber': self.number,
            'baseAttemptsAllocated': self.base_attempts_allocated,
            'attemptsCarriedOver': self.attempts_carried_over,
            'totalAttemptsAvailable': self.total_attempts_available,
            'attemptsUsed': self.attempts_used,
            'puttsInSunk': self.putts_in_sunk,
            'positionScore': self.position_score,
            'accuracyRate': self.accuracy_rate,
            'status': self.status.value,
            'putts': [p.to_dict() for p in self.putts],
            'completed': self.completed,
        }

    @classmethod
    def from_dict(cls, data):
        number = int(data['positionNumber'])
        base = data.get('baseAttemptsAllocated')
        if base is None:
            base = BASE_ATTEMPTS.get(number, 0)
        carried = int(data.get('attemptsCarriedOver') or 0)
        total = data.get('totalAttemptsAvailable')
        return cls(
            number=number,
            base_attempts_allocated=int(base),
            attempts_carried_over=carried,
            total_attempts_available=int(total) if total is not None else int(base) + carried,
            attempts_used=int(data.get('attemptsUsed') or 0),
            putts_in_sunk=int(data.get('puttsInSunk') or 0),
            putts=[Putt.from_dict(p) for p in data.get('putts') or []],
            status=PositionStatus(data.get('status') or PositionStatus.NOT_STARTED.value),
            completed=bool(data.get('completed')),
            position_score=int(data.get('positionScore') or 0),
            accuracy_rate=int(data.get('accuracyRate') or 0),
        )


def create_position(number: int, carryover: int = 0) -> Position:
    if number not in BASE_ATTEMPTS:
        raise ValueError(f'position number must be 1..{POSITION_COUNT}, got {number!r}')
    if carryover < 0:
        raise ValueError(f'carryover must be >= 0, got {carryover!r}')
    base = BASE_ATTEMPTS[number]
    return Position(
        number=number,
        base_attempts_allocated=base,
        attempts_carried_over=carryover,
        total_attempts_available=base + carryover,
    )


def calculate_carryover(position: Position) -> int:
    """Unused attempts passed to the next position.

    Only a clean success carries anything forward.
    """
    if position.status != PositionStatus.SUCCESS:
        return 0
    return max(0, position.total_attempts_available - position.attempts_used)


def calculate_position_score(position: Position, penalty_mode: bool) -> int:
    """Score a position.

    +3 for a success outside penalty mode. Once the session is in penalty
    mode (or the position itself continued under penalty) every completed
    position scores minus its overage instead, so a clean finish is worth 0.
    """
    if position.status == PositionStatus.SUCCESS and not penalty_mode:
        return SINKS_REQUIRED
    if position.status == PositionStatus.CONTINUED_PENALTY or (penalty_mode and position.completed):
        return -position.overage
    return 0


def calculate_accuracy_rate(position: Position) -> int:
    if position.attempts_used == 0:
        return 0
    # round half up
    return int(100 * position.putts_in_sunk / position.attempts_used + 0.5)
