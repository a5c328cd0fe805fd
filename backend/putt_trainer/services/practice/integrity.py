"""Detection and deterministic repair of malformed session data.

A stored or in-memory session must hold exactly nine positions numbered
1..9 whose counters agree with their putt logs. Repair never raises: it
fixes what it can and reports everything it touched so the caller can log
or surface it.
"""

import logging
from typing import Dict, List

from .positions import (
    BASE_ATTEMPTS,
    POSITION_COUNT,
    Position,
    PositionStatus,
    PuttResult,
    calculate_accuracy_rate,
    calculate_position_score,
    create_position,
)
from .sessions import Session

logger = logging.getLogger(__name__)


def _sunk(position: Position) -> int:
    return sum(1 for p in position.putts if p.result == PuttResult.SINK)


def check_session(session: Session) -> List[str]:
    """Return diagnostics for every integrity fault; empty when healthy."""
    problems: List[str] = []
    if len(session.positions) != POSITION_COUNT:
        problems.append(f'expected {POSITION_COUNT} positions, found {len(session.positions)}')
    seen = set()
    for pos in session.positions:
        if pos.number not in BASE_ATTEMPTS:
            problems.append(f'position number {pos.number} out of range')
            continue
        if pos.number in seen:
            problems.append(f'duplicate position number {pos.number}')
        seen.add(pos.number)
        if pos.attempts_used != len(pos.putts):
            problems.append(
                f'position {pos.number}: attempts_used={pos.attempts_used} but {len(pos.putts)} putts logged'
            )
        if pos.putts_in_sunk != _sunk(pos):
            problems.append(
                f'position {pos.number}: putts_in_sunk={pos.putts_in_sunk} but {_sunk(pos)} sinks logged'
            )
    for missing in sorted(set(BASE_ATTEMPTS) - seen):
        problems.append(f'missing position number {missing}')
    return problems


def _preferred(current: Position, candidate: Position) -> Position:
    # completed beats open, then the longer putt log, then first seen
    if candidate.completed != current.completed:
        return candidate if candidate.completed else current
    if len(candidate.putts) > len(current.putts):
        return candidate
    return current


def repair_session(session: Session) -> List[str]:
    """Repair ``session`` in place and return the diagnostics found."""
    problems = check_session(session)
    if not problems:
        return problems

    by_number: Dict[int, Position] = {}
    for pos in session.positions:
        if pos.number not in BASE_ATTEMPTS:
            continue
        kept = by_number.get(pos.number)
        by_number[pos.number] = pos if kept is None else _preferred(kept, pos)

    for number in range(1, POSITION_COUNT + 1):
        if number not in by_number:
            by_number[number] = create_position(number, 0)

    session.positions = [by_number[n] for n in range(1, POSITION_COUNT + 1)]

    # penalty mode switches on at the first continued-penalty position and stays on
    penalty_active = False
    for pos in session.positions:
        penalty_active = penalty_active or pos.status == PositionStatus.CONTINUED_PENALTY
        if pos.attempts_used == len(pos.putts) and pos.putts_in_sunk == _sunk(pos):
            continue
        pos.attempts_used = len(pos.putts)
        pos.putts_in_sunk = _sunk(pos)
        if pos.completed:
            pos.position_score = calculate_position_score(pos, penalty_active)
            pos.accuracy_rate = calculate_accuracy_rate(pos)

    if not 1 <= session.current_position_number <= POSITION_COUNT:
        session.current_position_number = min(max(session.current_position_number, 1), POSITION_COUNT)

    for problem in problems:
        logger.warning(f"[integrity] session={session.session_id} {problem}")
    return problems
