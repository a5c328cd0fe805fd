"""Session model and score aggregation."""

import uuid
from dataclasses import dataclass, field
from typing import List, Optional

from .positions import (
    POSITION_COUNT,
    Position,
    PositionStatus,
    create_position,
    now_ms,
)


@dataclass(frozen=True)
class SessionSummary:
    final_score: int
    position_scores: List[int]
    successful_positions: int
    penalty_positions: List[int]
    duration: float
    timestamp: int

    def to_dict(self):
        return {
            'finalScore': self.final_score,
            'positionScores': list(self.position_scores),
            'successfulPositions': self.successful_positions,
            'penaltyPositions': list(self.penalty_positions),
            'duration': self.duration,
            'timestamp': self.timestamp,
        }

    @classmethod
    def from_dict(cls, data):
        return cls(
            final_score=int(data['finalScore']),
            position_scores=[int(s) for s in data.get('positionScores') or []],
            successful_positions=int(data.get('successfulPositions') or 0),
            penalty_positions=[int(n) for n in data.get('penaltyPositions') or []],
            duration=float(data.get('duration') or 0),
            timestamp=int(data['timestamp']),
        )


@dataclass
class Session:
    session_id: str
    start_time: int
    end_time: Optional[int] = None
    penalty_mode: bool = False
    current_position_number: int = 1
    positions: List[Position] = field(default_factory=list)
    final_score: Optional[int] = None
    session_summary: Optional[SessionSummary] = None

    @property
    def is_finished(self) -> bool:
        return self.end_time is not None

    @property
    def current_position(self) -> Position:
        return self.position(self.current_position_number)

    def position(self, number: int) -> Position:
        return self.positions[number - 1]

    def is_provisional(self, number: int) -> bool:
        """Positions past the current one have not received their carryover yet."""
        return number > self.current_position_number

    def to_dict(self):
        return {
            'sessionId': self.session_id,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'penaltyMode': self.penalty_mode,
            'currentPositionNumber': self.current_position_number,
            'finalScore': self.final_score,
            'positions': [p.to_dict() for p in self.positions],
            'sessionSummary': self.session_summary.to_dict() if self.session_summary else None,
        }

    @classmethod
    def from_dict(cls, data):
        summary = data.get('sessionSummary')
        end_time = data.get('endTime')
        final_score = data.get('finalScore')
        return cls(
            session_id=str(data['sessionId']),
            start_time=int(data['startTime']),
            end_time=int(end_time) if end_time is not None else None,
            penalty_mode=bool(data.get('penaltyMode')),
            current_position_number=int(data.get('currentPositionNumber') or 1),
            positions=[Position.from_dict(p) for p in data.get('positions') or []],
            final_score=int(final_score) if final_score is not None else None,
            session_summary=SessionSummary.from_dict(summary) if summary else None,
        )


def create_session(now: Optional[int] = None) -> Session:
    return Session(
        session_id=str(uuid.uuid4()),
        start_time=now if now is not None else now_ms(),
        positions=[create_position(n, 0) for n in range(1, POSITION_COUNT + 1)],
    )


def calculate_session_score(session: Session) -> int:
    return sum(p.position_score for p in session.positions if p.completed)


def create_session_summary(session: Session) -> SessionSummary:
    if session.end_time is not None:
        duration = (session.end_time - session.start_time) / 1000 / 60
    else:
        duration = 0.0
    return SessionSummary(
        final_score=calculate_session_score(session),
        position_scores=[p.position_score for p in session.positions],
        successful_positions=sum(1 for p in session.positions if p.status == PositionStatus.SUCCESS),
        penalty_positions=[p.number for p in session.positions if p.status == PositionStatus.CONTINUED_PENALTY],
        duration=duration,
        timestamp=session.start_time,
    )


def format_score(score: int) -> str:
    if score > 0:
        return f'+{score}'
    return str(score)


def format_duration(minutes: float) -> str:
    seconds = round(minutes * 60)
    if seconds < 60:
        return f'{seconds}s'
    return f'{seconds // 60}m {seconds % 60}s'
