"""Storage collaborator that talks to the session REST API.

Only archive and delete failures propagate. Everything else is logged and
degrades to a harmless default so putting can continue while the backend
is unreachable.
"""

import logging
from typing import List, Optional

import requests

from .errors import ArchiveError, StorageError
from .sessions import Session

logger = logging.getLogger(__name__)


class HttpStorageClient:
    def __init__(self, base_url: str = 'http://localhost:8080', http=None, timeout: float = 5.0):
        self.base_url = base_url.rstrip('/')
        self.http = http or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs):
        response = self.http.request(method, f"{self.base_url}{path}", timeout=self.timeout, **kwargs)
        response.raise_for_status()
        return response

    def health(self) -> bool:
        try:
            self._request('GET', '/health')
        except requests.RequestException as exc:
            logger.error(f"[health] backend unavailable: {exc}")
            return False
        return True

    def save(self, session: Session) -> None:
        try:
            self._request('POST', '/api/session/current', json=session.to_dict())
        except requests.RequestException as exc:
            logger.error(f"[save] session={session.session_id} failed: {exc}")

    def load_current(self) -> Optional[Session]:
        try:
            data = self._request('GET', '/api/session/current').json()
        except (requests.RequestException, ValueError) as exc:
            logger.error(f"[load] current session failed: {exc}")
            return None
        return Session.from_dict(data) if data else None

    def clear_current(self, session_id: str) -> None:
        try:
            self._request('DELETE', '/api/session/current', json={'sessionId': session_id})
        except requests.RequestException as exc:
            logger.error(f"[clear] session={session_id} failed: {exc}")

    def archive(self, session: Session) -> None:
        try:
            self._request('POST', '/api/session/archive', json=session.to_dict())
        except requests.RequestException as exc:
            logger.error(f"[archive] session={session.session_id} failed: {exc}")
            raise ArchiveError(f"failed to archive session {session.session_id}") from exc

    def history(self, limit: int = 50) -> List[Session]:
        try:
            rows = self._request('GET', '/api/session/history', params={'limit': limit}).json()
        except (requests.RequestException, ValueError) as exc:
            logger.error(f"[history] failed: {exc}")
            return []
        return [Session.from_dict(row) for row in rows]

    def get(self, session_id: str) -> Optional[Session]:
        try:
            data = self._request('GET', f'/api/session/{session_id}').json()
        except (requests.RequestException, ValueError) as exc:
            logger.error(f"[get] session={session_id} failed: {exc}")
            return None
        return Session.from_dict(data)

    def delete_oldest(self, count: int) -> None:
        try:
            self._request('DELETE', f'/api/session/oldest/{count}')
        except requests.RequestException as exc:
            logger.error(f"[delete-oldest] count={count} failed: {exc}")
            raise StorageError(f"failed to delete {count} oldest sessions") from exc
