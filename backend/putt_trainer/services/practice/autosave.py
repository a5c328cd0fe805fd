import logging
import threading
from typing import Optional

logger = logging.getLogger(__name__)


class Autosaver:
    """Periodically persist the in-progress session.

    - Runs in a daemon thread; ``tick`` can also be called directly
    - Reads the session through the engine gate, so it never observes a
      half-applied putt
    - Stops saving once the session is finished (archival takes over)
    - Storage errors are logged and retried on the next tick
    """

    def __init__(self, engine, storage, interval: float = 10.0):
        self.engine = engine
        self.storage = storage
        self.interval = interval
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def tick(self) -> bool:
        session = self.engine.snapshot()
        if session.is_finished:
            return False
        try:
            self.storage.save(session)
        except Exception as exc:
            logger.warning(f"[autosave] session={session.session_id} failed: {exc}")
            return False
        return True

    def _run(self) -> None:
        while not self._stop.wait(self.interval):
            self.tick()

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name='autosave', daemon=True)
        self._thread.start()
        logger.info(f"[autosave] started interval={self.interval}s")

    def stop(self, timeout: Optional[float] = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None
