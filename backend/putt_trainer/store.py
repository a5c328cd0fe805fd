"""Database-backed session store.

Holds both the in-progress session (``end_time`` is NULL) and the archived
history. Sessions are written whole: the session row is upserted and its
positions and putt logs are replaced.
"""

import json
from typing import List, Optional

from putt_trainer import db
from putt_trainer.models import SessionRecord, PositionRecord, PuttRecord
from putt_trainer.services.practice.sessions import Session


class SessionStore:
    def save_current(self, session: Session) -> None:
        record = db.session.get(SessionRecord, session.session_id)
        if record is None:
            record = SessionRecord(session_id=session.session_id)
            db.session.add(record)
        record.start_time = session.start_time
        record.end_time = session.end_time
        record.penalty_mode = session.penalty_mode
        record.current_position_number = session.current_position_number
        record.final_score = session.final_score
        record.session_summary = json.dumps(session.session_summary.to_dict()) if session.session_summary else None

        record.positions = []
        db.session.flush()
        for pos in session.positions:
            record.positions.append(PositionRecord(
                position_number=pos.number,
                base_attempts_allocated=pos.base_attempts_allocated,
                attempts_carried_over=pos.attempts_carried_over,
                total_attempts_available=pos.total_attempts_available,
                attempts_used=pos.attempts_used,
                putts_in_sunk=pos.putts_in_sunk,
                position_score=pos.position_score,
                accuracy_rate=pos.accuracy_rate,
                status=pos.status.value,
                completed=pos.completed,
                putts=[
                    PuttRecord(sequence=i, result=p.result.value, timestamp=p.timestamp)
                    for i, p in enumerate(pos.putts)
                ],
            ))
        db.session.commit()

    def archive(self, session: Session) -> None:
        self.save_current(session)

    def load_current(self) -> Optional[Session]:
        record = (
            SessionRecord.query.filter(SessionRecord.end_time.is_(None))
            .order_by(SessionRecord.start_time.desc())
            .first()
        )
        return Session.from_dict(record.to_dict()) if record else None

    def get(self, session_id: str) -> Optional[Session]:
        record = db.session.get(SessionRecord, session_id)
        return Session.from_dict(record.to_dict()) if record else None

    def clear_current(self, session_id: str, now: int) -> bool:
        record = db.session.get(SessionRecord, session_id)
        if record is None or record.end_time is not None:
            return False
        record.end_time = now
        db.session.commit()
        return True

    def history(self, limit: int = 50) -> List[Session]:
        records = (
            SessionRecord.query.filter(SessionRecord.end_time.isnot(None))
            .order_by(SessionRecord.start_time.desc())
            .limit(limit)
            .all()
        )
        return [Session.from_dict(r.to_dict()) for r in records]

    def delete_oldest(self, count: int) -> int:
        records = (
            SessionRecord.query.filter(SessionRecord.end_time.isnot(None))
            .order_by(SessionRecord.start_time.asc())
            .limit(count)
            .all()
        )
        for record in records:
            db.session.delete(record)
        db.session.commit()
        return len(records)

    def count_finished(self) -> int:
        return SessionRecord.query.filter(SessionRecord.end_time.isnot(None)).count()
