from flask import Blueprint, jsonify, request, current_app
import time
from putt_trainer import db
from putt_trainer.store import SessionStore
from putt_trainer.services.practice.integrity import check_session
from putt_trainer.services.practice.sessions import Session


sessions = Blueprint('sessions', __name__)
store = SessionStore()


def _parse_session(data):
    """Build a Session from a request body, or return an error message."""
    if not isinstance(data, dict) or not data.get('sessionId'):
        return None, 'A session with a sessionId is required'
    try:
        session = Session.from_dict(data)
    except (KeyError, TypeError, ValueError) as exc:
        return None, f'Malformed session: {exc}'
    for problem in check_session(session):
        current_app.logger.warning(f"[integrity] session={session.session_id} {problem}")
    return session, None


@sessions.route('/current', methods=['GET'])
def get_current_session():
    try:
        session = store.load_current()
    except Exception:
        current_app.logger.exception("[load] failed to load current session")
        return jsonify({'error': 'Failed to load current session'}), 500
    return jsonify(session.to_dict() if session else None)


@sessions.route('/current', methods=['POST'])
def save_current_session():
    session, error = _parse_session(request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400
    try:
        store.save_current(session)
    except Exception:
        db.session.rollback()
        current_app.logger.exception(f"[save] session={session.session_id} failed")
        return jsonify({'error': 'Failed to save current session'}), 500
    return jsonify({'success': True})


@sessions.route('/current', methods=['DELETE'])
def clear_current_session():
    data = request.get_json(silent=True) or {}
    session_id = data.get('sessionId')
    if not session_id:
        return jsonify({'error': 'sessionId is required'}), 400
    try:
        cleared = store.clear_current(session_id, int(time.time() * 1000))
    except Exception:
        db.session.rollback()
        current_app.logger.exception(f"[clear] session={session_id} failed")
        return jsonify({'error': 'Failed to clear current session'}), 500
    return jsonify({'success': True, 'cleared': cleared})


@sessions.route('/archive', methods=['POST'])
def archive_session():
    session, error = _parse_session(request.get_json(silent=True))
    if error:
        return jsonify({'error': error}), 400
    if not session.is_finished:
        return jsonify({'error': 'Only finished sessions can be archived'}), 400
    try:
        store.archive(session)
    except Exception:
        db.session.rollback()
        current_app.logger.exception(f"[archive] session={session.session_id} failed")
        return jsonify({'error': 'Failed to archive session'}), 500
    current_app.logger.info(f"[archive] session={session.session_id} score={session.final_score}")
    return jsonify({'success': True})


@sessions.route('/history', methods=['GET'])
def get_session_history():
    default_limit = int(current_app.config.get('HISTORY_DEFAULT_LIMIT', 50))
    limit = request.args.get('limit', default_limit, type=int)
    if limit is None or limit <= 0:
        return jsonify({'error': 'Invalid limit parameter'}), 400
    try:
        history = store.history(limit)
    except Exception:
        current_app.logger.exception("[history] failed to load session history")
        return jsonify({'error': 'Failed to load session history'}), 500
    return jsonify([s.to_dict() for s in history])


@sessions.route('/oldest/<string:count>', methods=['DELETE'])
def delete_oldest_sessions(count):
    try:
        count = int(count)
    except ValueError:
        count = 0
    if count <= 0:
        return jsonify({'error': 'Invalid count parameter'}), 400
    try:
        deleted = store.delete_oldest(count)
    except Exception:
        db.session.rollback()
        current_app.logger.exception(f"[delete-oldest] count={count} failed")
        return jsonify({'error': 'Failed to delete oldest sessions'}), 500
    return jsonify({'success': True, 'deleted': deleted})


@sessions.route('/<string:session_id>', methods=['GET'])
def get_session(session_id):
    try:
        session = store.get(session_id)
    except Exception:
        current_app.logger.exception(f"[get] session={session_id} failed")
        return jsonify({'error': 'Failed to load session'}), 500
    if session is None:
        return jsonify({'error': 'Session not found'}), 404
    return jsonify(session.to_dict())
