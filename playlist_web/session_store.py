"""
Server-side per-browser-session state (code_verifier, access_token).
The signed cookie only carries an opaque session id; the state itself lives in _sessions, so
popping a verifier or clearing a token holds even against an old copy of the cookie.
"""
import secrets
import threading
import time
from dataclasses import dataclass, field

from fastapi import Request

from playlist_web import config

SESSION_ID_KEY = "sid"


@dataclass
class SessionState:
    code_verifier: str | None = None
    access_token: str | None = None
    touched_at: float = field(default_factory=time.monotonic)

    @property
    def authenticated(self) -> bool:
        return bool(self.access_token)

    def expired(self) -> bool:
        return (time.monotonic() - self.touched_at) > config.SESSION_MAX_AGE


_sessions: dict[str, SessionState] = {}
_lock = threading.Lock()


def _clean_expired() -> None:
    expired = [sid for sid, s in _sessions.items() if s.expired()]
    for sid in expired:
        del _sessions[sid]


def _lookup(request: Request) -> SessionState | None:
    """State for the cookie's session id, or None if unknown or expired. Caller holds _lock."""
    sid = request.session.get(SESSION_ID_KEY)
    if not sid:
        return None
    state = _sessions.get(sid)
    if state is None or state.expired():
        _sessions.pop(sid, None)
        return None
    state.touched_at = time.monotonic()
    return state


def _new_session(request: Request) -> SessionState:
    """Fresh id in the cookie, fresh state on the server. Caller holds _lock."""
    _clean_expired()
    sid = secrets.token_urlsafe(32)
    state = SessionState()
    _sessions[sid] = state
    request.session[SESSION_ID_KEY] = sid
    return state


def get_session_state(request: Request) -> SessionState:
    """Copy of the current state; an unknown session reads as anonymous."""
    with _lock:
        state = _lookup(request)
        if state is None:
            return SessionState()
        return SessionState(code_verifier=state.code_verifier, access_token=state.access_token)


def store_code_verifier(request: Request, code_verifier: str) -> None:
    with _lock:
        state = _lookup(request) or _new_session(request)
        state.code_verifier = code_verifier


def pop_code_verifier(request: Request) -> str | None:
    """Read and invalidate: a verifier is good for exactly one callback."""
    with _lock:
        state = _lookup(request)
        if state is None:
            return None
        code_verifier, state.code_verifier = state.code_verifier, None
        return code_verifier


def store_access_token(request: Request, access_token: str) -> None:
    """Login succeeded: drop the pre-login session id and issue a new one holding the token."""
    with _lock:
        old_sid = request.session.get(SESSION_ID_KEY)
        if old_sid:
            _sessions.pop(old_sid, None)
        state = _new_session(request)
        state.access_token = access_token


def get_access_token(request: Request) -> str | None:
    with _lock:
        state = _lookup(request)
        return state.access_token if state else None


def clear_access_token(request: Request) -> None:
    with _lock:
        state = _lookup(request)
        if state is not None:
            state.access_token = None
