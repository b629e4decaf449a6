"""In-process fan-out of payloads to connected viewer sessions.

Each session owns a bounded FIFO queue; ``publish`` offers the payload to
every session registered at the moment of the call. Nothing is retained:
a session that registers later only sees later payloads.
"""

from __future__ import annotations

import asyncio
import threading
import uuid

from .logging import get_logger

_log = get_logger(__name__)


class Session:
    """One viewer connection.

    ``queue`` yields payload strings in publish order, then ``None`` once the
    broadcaster closes the session.
    """

    __slots__ = ("id", "queue")

    def __init__(self, queue_size: int) -> None:
        self.id = uuid.uuid4().hex
        self.queue: asyncio.Queue[str | None] = asyncio.Queue(maxsize=queue_size)

    async def next_payload(self, timeout: float | None = None) -> str | None:
        """Wait for the next payload; None means the session was closed.

        Raises TimeoutError when nothing arrived within ``timeout`` seconds.
        """
        if timeout is None:
            return await self.queue.get()
        return await asyncio.wait_for(self.queue.get(), timeout=timeout)

    def _offer(self, payload: str) -> bool:
        try:
            self.queue.put_nowait(payload)
        except asyncio.QueueFull:
            return False
        return True

    def _end(self) -> None:
        # Make room for the end marker if the viewer stopped reading.
        while True:
            try:
                self.queue.put_nowait(None)
                return
            except asyncio.QueueFull:
                self.queue.get_nowait()


class Broadcaster:
    """Registry of live sessions with best-effort fan-out.

    The session map is guarded by a lock and ``publish`` iterates over a
    snapshot, so registrations racing a publish never corrupt the map or
    receive a payload published before they registered. Queue operations
    are not thread-safe: call ``publish`` and ``close`` from the event loop.
    """

    def __init__(self, queue_size: int = 100) -> None:
        if queue_size < 1:
            raise ValueError("queue_size must be >= 1")
        self._queue_size = queue_size
        self._lock = threading.Lock()
        self._sessions: dict[str, Session] = {}
        self._closed = False
        self._dropped = 0
        self._last_payload: str | None = None

    def open_session(self) -> Session:
        """Create and register a new session."""
        session = Session(self._queue_size)
        self.register(session)
        return session

    def register(self, session: Session) -> None:
        with self._lock:
            if self._closed:
                session._end()
                return
            self._sessions[session.id] = session
            count = len(self._sessions)
        _log.info("session connected", extra={"session_id": session.id, "sessions": count})

    def deregister(self, session: Session) -> None:
        """Remove ``session``; removing an absent session is a no-op."""
        with self._lock:
            removed = self._sessions.pop(session.id, None)
            count = len(self._sessions)
        if removed is not None:
            _log.info(
                "session disconnected", extra={"session_id": session.id, "sessions": count}
            )

    def publish(self, payload: str) -> int:
        """Offer ``payload`` to every registered session.

        Returns the number of sessions whose queue accepted it. Sessions with
        a full queue miss this payload; they are counted in ``dropped``.
        """
        with self._lock:
            targets = list(self._sessions.values())
            self._last_payload = payload
        delivered = 0
        dropped = 0
        for session in targets:
            if session._offer(payload):
                delivered += 1
            else:
                dropped += 1
        if dropped:
            with self._lock:
                self._dropped += dropped
            _log.warning(
                "payload dropped for slow sessions",
                extra={"delivered": delivered, "dropped": dropped},
            )
        return delivered

    def close(self) -> None:
        """End every open session; later registrations end immediately."""
        with self._lock:
            self._closed = True
            sessions = list(self._sessions.values())
            self._sessions.clear()
        for session in sessions:
            session._end()

    @property
    def session_count(self) -> int:
        with self._lock:
            return len(self._sessions)

    @property
    def dropped(self) -> int:
        with self._lock:
            return self._dropped

    @property
    def last_payload(self) -> str | None:
        with self._lock:
            return self._last_payload

    @property
    def closed(self) -> bool:
        with self._lock:
            return self._closed

    def is_registered(self, session: Session) -> bool:
        with self._lock:
            return session.id in self._sessions


__all__ = ["Broadcaster", "Session"]
