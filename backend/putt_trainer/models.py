from putt_trainer import db
import json
import time


def _now_ms():
    return int(time.time() * 1000)


class SessionRecord(db.Model):
    __tablename__ = 'practice_session'
    session_id = db.Column(db.String(64), primary_key=True)
    start_time = db.Column(db.BigInteger, nullable=False, index=True)
    end_time = db.Column(db.BigInteger, nullable=True)
    penalty_mode = db.Column(db.Boolean, nullable=False, default=False)
    current_position_number = db.Column(db.Integer, nullable=False, default=1)
    final_score = db.Column(db.Integer, nullable=True)
    session_summary = db.Column(db.Text, nullable=True)  # JSON-encoded summary
    created_at = db.Column(db.BigInteger, nullable=False, default=_now_ms, index=True)
    positions = db.relationship(
        'PositionRecord',
        back_populates='session',
        cascade='all, delete-orphan',
        order_by='PositionRecord.position_number',
    )

    def to_dict(self):
        return {
            'sessionId': self.session_id,
            'startTime': self.start_time,
            'endTime': self.end_time,
            'penaltyMode': bool(self.penalty_mode),
            'currentPositionNumber': self.current_position_number,
            'finalScore': self.final_score,
            'positions': [p.to_dict() for p in self.positions],
            'sessionSummary': json.loads(self.session_summary) if self.session_summary else None,
        }


class PositionRecord(db.Model):
    __tablename__ = 'position'
    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(
        db.String(64), db.ForeignKey('practice_session.session_id', ondelete='CASCADE'), nullable=False, index=True
    )
    position_number = db.Column(db.Integer, nullable=False)
    base_attempts_allocated = db.Column(db.Integer, nullable=False)
    attempts_carried_over = db.Column(db.Integer, nullable=False, default=0)
    total_attempts_available = db.Column(db.Integer, nullable=False)
    attempts_used = db.Column(db.Integer, nullable=False, default=0)
    putts_in_sunk = db.Column(db.Integer, nullable=False, default=0)
    position_score = db.Column(db.Integer, nullable=False, default=0)
    accuracy_rate = db.Column(db.Integer, nullable=False, default=0)
    status = db.Column(db.String(32), nullable=False, default='not-started')
    completed = db.Column(db.Boolean, nullable=False, default=False)
    session = db.relationship('SessionRecord', back_populates='positions')
    putts = db.relationship(
        'PuttRecord',
        back_populates='position',
        cascade='all, delete-orphan',
        order_by='PuttRecord.sequence',
    )

    def to_dict(self):
        return {
            'positionNumber': self.position_number,
            'baseAttemptsAllocated': self.base_attempts_allocated,
            'attemptsCarriedOver': self.attempts_carried_over,
            'totalAttemptsAvailable': self.total_attempts_available,
            'attemptsUsed': self.attempts_used,
            'puttsInSunk': self.putts_in_sunk,
            'positionScore': self.position_score,
            'accuracyRate': self.accuracy_rate,
            'status': self.status,
            'putts': [p.to_dict() for p in self.putts],
            'completed': bool(self.completed),
        }


class PuttRecord(db.Model):
    __tablename__ = 'putt'
    id = db.Column(db.Integer, primary_key=True)
    position_id = db.Column(db.Integer, db.ForeignKey('position.id', ondelete='CASCADE'), nullable=False, index=True)
    sequence = db.Column(db.Integer, nullable=False)  # order within the position's log
    result = db.Column(db.String(8), nullable=False)  # sink, miss
    timestamp = db.Column(db.BigInteger, nullable=False)
    position = db.relationship('PositionRecord', back_populates='putts')

    __table_args__ = (
        db.CheckConstraint("result IN ('sink', 'miss')", name='ck_putt_result'),
    )

    def to_dict(self):
        return {'result': self.result, 'timestamp': self.timestamp}
