"""
Session Store
=============
In-memory OTP session storage with per-session locks.
"""

import asyncio
from typing import Dict, Iterator, Optional

from .otp.models import OTPSession


class SessionStore:
    """
    In-memory session store owned by one OTPSessionManager.

    Every mutation of a session must happen while holding `lock(session_id)`.
    Callers re-read the session after acquiring the lock, since a waiter may
    find it deleted by whoever held the lock before.
    """

    def __init__(self):
        self._sessions: Dict[str, OTPSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock(self, session_id: str) -> asyncio.Lock:
        lock = self._locks.get(session_id)
        if lock is None:
            lock = self._locks[session_id] = asyncio.Lock()
        return lock

    def get(self, session_id: str) -> Optional[OTPSession]:
        return self._sessions.get(session_id)

    def add(self, session: OTPSession) -> None:
        self._sessions[session.session_id] = session

    def delete(self, session_id: str) -> bool:
        """Remove a session. Returns False if it was already gone."""
        removed = self._sessions.pop(session_id, None) is not None
        lock = self._locks.get(session_id)
        if lock is not None and not lock.locked():
            del self._locks[session_id]
        return removed

    def release(self, session_id: str) -> None:
        """Drop the lock of a deleted session once nobody holds it."""
        lock = self._locks.get(session_id)
        if session_id not in self._sessions and lock is not None and not lock.locked():
            del self._locks[session_id]

    def __iter__(self) -> Iterator[OTPSession]:
        return iter(list(self._sessions.values()))

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        return session_id in self._sessions
