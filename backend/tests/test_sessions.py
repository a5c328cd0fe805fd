from putt_trainer.services.practice.integrity import check_session, repair_session
from putt_trainer.services.practice.positions import (
    PositionStatus,
    Putt,
    PuttResult,
    create_position,
)
from putt_trainer.services.practice.sessions import (
    Session,
    calculate_session_score,
    create_session,
    create_session_summary,
    format_duration,
    format_score,
)


def _complete(pos, score, status=PositionStatus.SUCCESS):
    pos.status = status
    pos.completed = True
    pos.position_score = score
    return pos


def test_create_session_defaults():
    session = create_session(now=1000)
    assert session.start_time == 1000
    assert session.end_time is None
    assert not session.penalty_mode
    assert session.current_position_number == 1
    assert [p.number for p in session.positions] == list(range(1, 10))
    assert all(p.attempts_carried_over == 0 for p in session.positions)
    assert session.final_score is None
    assert session.session_summary is None
    assert session.is_provisional(2)
    assert not session.is_provisional(1)


def test_session_ids_are_unique():
    assert create_session().session_id != create_session().session_id


def test_session_score_ignores_incomplete_positions():
    session = create_session(now=0)
    _complete(session.positions[0], 3)
    _complete(session.positions[1], -2, PositionStatus.CONTINUED_PENALTY)
    session.positions[2].position_score = 3  # not completed
    assert calculate_session_score(session) == 1
    assert calculate_session_score(session) == 1


def test_session_summary():
    session = create_session(now=0)
    for pos in session.positions:
        _complete(pos, 3)
    _complete(session.positions[3], -1, PositionStatus.CONTINUED_PENALTY)
    _complete(session.positions[6], 0)
    session.end_time = 90_000

    summary = create_session_summary(session)
    assert summary.final_score == 3 * 7 - 1
    assert summary.position_scores == [3, 3, 3, -1, 3, 3, 0, 3, 3]
    assert summary.successful_positions == 8
    assert summary.penalty_positions == [4]
    assert summary.duration == 1.5
    assert summary.timestamp == 0


def test_session_round_trip():
    session = create_session(now=5)
    pos = session.positions[0]
    pos.putts = [Putt(PuttResult.SINK, 10), Putt(PuttResult.MISS, 11)]
    pos.attempts_used = 2
    pos.putts_in_sunk = 1
    pos.status = PositionStatus.IN_PROGRESS
    session.penalty_mode = True
    session.end_time = 60_005
    session.final_score = -4
    session.session_summary = create_session_summary(session)

    restored = Session.from_dict(session.to_dict())
    assert restored == session
    assert restored.to_dict() == session.to_dict()


def test_format_helpers():
    assert format_score(3) == '+3'
    assert format_score(0) == '0'
    assert format_score(-2) == '-2'
    assert format_duration(0.75) == '45s'
    assert format_duration(12.5) == '12m 30s'
    # seconds that round up to a full minute roll over into the minutes
    assert format_duration(1.995) == '2m 0s'
    assert format_duration(0.999) == '1m 0s'


def test_check_session_healthy():
    assert check_session(create_session()) == []


def test_repair_fills_missing_and_drops_duplicates():
    session = create_session(now=0)
    done = _complete(create_position(3), 3)
    done.putts = [Putt(PuttResult.SINK, i) for i in range(3)]
    done.attempts_used = done.putts_in_sunk = 3
    session.positions = [session.positions[0], session.positions[2], done, session.positions[4]]

    problems = repair_session(session)

    assert 'duplicate position number 3' in problems
    assert 'missing position number 2' in problems
    assert [p.number for p in session.positions] == list(range(1, 10))
    assert session.positions[2] is done
    assert check_session(session) == []


def test_repair_recounts_counters_from_putt_log():
    session = create_session(now=0)
    pos = session.positions[0]
    pos.putts = [Putt(PuttResult.SINK, 1), Putt(PuttResult.MISS, 2)]
    pos.attempts_used = 5
    pos.putts_in_sunk = 0

    problems = repair_session(session)

    assert len(problems) == 2
    assert pos.attempts_used == 2
    assert pos.putts_in_sunk == 1


def test_repair_drops_out_of_range_numbers():
    session = create_session(now=0)
    bogus = create_position(1)
    bogus.number = 12
    session.positions.append(bogus)

    problems = repair_session(session)

    assert 'position number 12 out of range' in problems
    assert len(session.positions) == 9


def _logged(pos, results):
    pos.putts = [Putt(PuttResult(r), i) for i, r in enumerate(results)]
    pos.attempts_used = len(results)
    pos.putts_in_sunk = results.count('sink')
    return pos


def test_repair_rescores_penalty_position_with_bad_counter():
    session = create_session(now=0)
    session.penalty_mode = True
    pos = _complete(_logged(session.positions[0], ['miss', 'sink', 'sink', 'sink']), -3,
                    PositionStatus.CONTINUED_PENALTY)
    pos.attempts_used = 6
    pos.accuracy_rate = 50

    repair_session(session)

    assert pos.attempts_used == 4
    assert pos.position_score == -1
    assert pos.accuracy_rate == 75
    assert calculate_session_score(session) == -1


def test_repair_keeps_reward_for_positions_before_penalty_election():
    session = create_session(now=0)
    session.penalty_mode = True
    early = _complete(_logged(session.positions[0], ['sink', 'sink', 'sink']), 3)
    early.attempts_used = 5
    early.accuracy_rate = 60
    _complete(_logged(session.positions[1], ['miss'] * 4 + ['sink'] * 3), -3, PositionStatus.CONTINUED_PENALTY)
    late = _complete(_logged(session.positions[2], ['miss', 'sink', 'sink', 'sink']), 0)
    late.putts_in_sunk = 2

    repair_session(session)

    assert early.position_score == 3
    assert early.accuracy_rate == 100
    # a success after the election is scored by overage: 4 of 5 attempts is no overage
    assert late.position_score == 0
    assert late.accuracy_rate == 75
    assert calculate_session_score(session) == 0
