"""Tests for session_store: per-session verifier and token bookkeeping."""
from types import SimpleNamespace
from unittest.mock import patch

from playlist_web.session_store import (
    clear_access_token,
    get_access_token,
    get_session_state,
    pop_code_verifier,
    store_access_token,
    store_code_verifier,
)


def _request(session=None):
    """Stand-in for a Starlette request; only .session is used."""
    return SimpleNamespace(session={} if session is None else session)


def test_empty_session_is_anonymous():
    state = get_session_state(_request())
    assert state.code_verifier is None
    assert state.access_token is None
    assert state.authenticated is False


def test_verifier_is_consumed_once():
    req = _request()
    store_code_verifier(req, "v" * 64)
    assert get_session_state(req).code_verifier == "v" * 64
    assert pop_code_verifier(req) == "v" * 64
    assert pop_code_verifier(req) is None
    assert "code_verifier" not in req.session


def test_new_verifier_replaces_old():
    req = _request()
    store_code_verifier(req, "first")
    store_code_verifier(req, "second")
    assert pop_code_verifier(req) == "second"


def test_access_token_store_and_clear():
    req = _request()
    store_access_token(req, "at")
    assert get_access_token(req) == "at"
    assert get_session_state(req).authenticated is True
    clear_access_token(req)
    assert get_access_token(req) is None
    clear_access_token(req)  # clearing twice is fine


def test_sessions_are_isolated():
    alice, bob = _request(), _request()
    store_access_token(alice, "alice-token")
    assert get_access_token(bob) is None
    store_access_token(bob, "bob-token")
    assert get_access_token(alice) == "alice-token"


def test_cookie_carries_only_session_id():
    req = _request()
    store_code_verifier(req, "v" * 64)
    assert set(req.session) == {"sid"}
    assert "v" * 64 not in req.session["sid"]
    store_access_token(req, "secret-token")
    assert set(req.session) == {"sid"}
    assert req.session["sid"] != "secret-token"


def test_popped_verifier_stays_gone_for_old_cookie_copy():
    req = _request()
    store_code_verifier(req, "v" * 64)
    saved = _request(dict(req.session))
    assert pop_code_verifier(req) == "v" * 64
    assert pop_code_verifier(saved) is None


def test_cleared_token_stays_gone_for_old_cookie_copy():
    req = _request()
    store_access_token(req, "at")
    saved = _request(dict(req.session))
    clear_access_token(req)
    assert get_access_token(saved) is None


def test_login_rotates_session_id():
    req = _request()
    store_code_verifier(req, "v" * 64)
    pre_login = _request(dict(req.session))
    store_access_token(req, "at")
    assert req.session["sid"] != pre_login.session["sid"]
    assert get_access_token(pre_login) is None
    assert get_access_token(req) == "at"


def test_unknown_session_id_is_anonymous():
    req = _request({"sid": "forged-or-expired"})
    assert get_access_token(req) is None
    assert pop_code_verifier(req) is None


def test_expired_session_is_anonymous():
    req = _request()
    store_access_token(req, "at")
    with patch("playlist_web.session_store.config.SESSION_MAX_AGE", -1):
        assert get_access_token(req) is None
