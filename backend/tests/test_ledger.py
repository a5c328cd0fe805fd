import pytest

from conftest import MISS, SINK, clear_position, play
from putt_trainer.services.practice.engine import ProgressionEngine, PuttOutcome
from putt_trainer.services.practice.ledger import LedgerEntry, UndoLedger
from putt_trainer.services.practice.positions import PositionStatus, create_position
from putt_trainer.services.practice.sessions import create_session


@pytest.fixture()
def engine(clock):
    return ProgressionEngine(clock=clock)


def test_undo_restores_pre_recording_state(engine):
    clear_position(engine)
    play(engine, SINK, MISS, SINK)
    assert engine.can_undo
    for _ in range(3):
        assert engine.undo()
    pos = engine.current_position
    assert pos.putts == []
    assert pos.attempts_used == 0
    assert pos.putts_in_sunk == 0
    assert pos.status == PositionStatus.NOT_STARTED
    assert not engine.can_undo
    assert not engine.undo()


def test_redo_reapplies_undone_putts(engine):
    play(engine, MISS, SINK)
    engine.undo()
    engine.undo()
    assert engine.can_redo
    assert engine.redo()
    assert engine.redo()
    assert not engine.redo()
    pos = engine.current_position
    assert [p.result for p in pos.putts] == [MISS, SINK]
    assert pos.attempts_used == 2


def test_new_putt_clears_redo(engine):
    play(engine, MISS, MISS)
    engine.undo()
    assert engine.can_redo
    engine.record_putt(SINK)
    assert not engine.can_redo


def test_undo_never_crosses_position_boundary(engine):
    play(engine, SINK, SINK)
    assert engine.record_putt(SINK) == PuttOutcome.POSITION_COMPLETED
    assert not engine.can_undo
    assert not engine.undo()
    assert engine.session.positions[0].completed


def test_undo_reverts_penalty_choice_point(engine):
    play(engine, MISS, MISS, MISS)
    assert engine.awaiting_choice
    engine.undo()
    assert not engine.awaiting_choice
    assert engine.record_putt(SINK) == PuttOutcome.CHOICE_REQUIRED


def test_undo_restores_penalty_flag(engine):
    play(engine, MISS, MISS, MISS)
    engine.continue_with_penalty()
    engine.record_putt(MISS)
    engine.undo()
    # the snapshot was taken after the penalty election
    assert engine.session.penalty_mode
    engine.undo()
    assert not engine.session.penalty_mode
    assert engine.current_position.attempts_used == 2


def test_undo_stack_is_bounded(clock):
    engine = ProgressionEngine(clock=clock)
    play(engine, MISS, MISS, MISS)
    engine.continue_with_penalty()
    play(engine, *([MISS] * 12))
    undone = 0
    while engine.undo():
        undone += 1
    assert undone == 10
    assert engine.current_position.attempts_used == 5


def test_can_undo_false_once_position_completed():
    session = create_session(now=0)
    ledger = UndoLedger()
    ledger.record(session)
    session.positions[0].completed = True
    assert not ledger.can_undo(session)
    assert not ledger.undo(session)


def test_snapshot_is_independent_of_live_position():
    pos = create_position(1)
    entry = LedgerEntry.snapshot(0, pos, False)
    pos.attempts_used = 2
    pos.putts.append(object())
    assert entry.position.attempts_used == 0
    assert entry.position.putts == []
