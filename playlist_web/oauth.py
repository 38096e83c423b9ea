"""
Login flow: GET /login redirects to Spotify, GET /callback exchanges the code for an access token.

ANONYMOUS --/login--> AWAITING_CALLBACK --/callback ok--> AUTHENTICATED
Any failure goes back to /login. Only an upstream 401 leaves AUTHENTICATED (see main.py).
"""
import logging

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from playlist_web import config
from playlist_web.auth_strategy import AuthStrategy, get_auth_strategy
from playlist_web.errors import AuthProtocolError, LoginRequired, UpstreamAuthError
from playlist_web.pkce import build_authorize_url
from playlist_web.session_store import get_access_token, pop_code_verifier, store_access_token

logger = logging.getLogger(__name__)
router = APIRouter()

LOGIN_PATH = "/login"
AFTER_LOGIN_PATH = "/playlist-details"


def redirect_to_login() -> RedirectResponse:
    return RedirectResponse(url=LOGIN_PATH, status_code=302)


def exchange_code(strategy: AuthStrategy, code: str, code_verifier: str | None) -> str:
    """
    One server-to-server authorization_code exchange. Returns the access token.
    Raises UpstreamAuthError on transport failure, non-2xx, or a body without access_token.
    """
    token_request = strategy.token_request(code, code_verifier)
    try:
        r = httpx.post(
            config.TOKEN_URL,
            data=token_request.data,
            auth=token_request.auth,
            headers=token_request.headers,
            timeout=config.HTTP_TIMEOUT,
        )
    except httpx.HTTPError as e:
        raise UpstreamAuthError(f"Token request failed: {e}") from e

    if not r.is_success:
        raise UpstreamAuthError("Token endpoint returned an error", status_code=r.status_code, body=r.text)

    try:
        data = r.json()
    except ValueError as e:
        raise UpstreamAuthError("Token response is not JSON", status_code=r.status_code, body=r.text) from e

    access_token = data.get("access_token") if isinstance(data, dict) else None
    if not access_token or not isinstance(access_token, str):
        raise UpstreamAuthError("Token response has no access_token", status_code=r.status_code, body=r.text)
    return access_token


def require_access_token(request: Request) -> str:
    """Dependency for protected routes: no token in the session means go log in."""
    access_token = get_access_token(request)
    if not access_token:
        raise LoginRequired("No access token in session")
    return access_token


@router.get("/login")
def login(request: Request, strategy: AuthStrategy = Depends(get_auth_strategy)):
    """
    Store PKCE material (pkce strategy) in the session and redirect to the authorization server.
    Pure local work; no outbound call.
    """
    extra = strategy.prepare_login(request)
    url = build_authorize_url(
        authorize_url=config.AUTHORIZE_URL,
        client_id=config.CLIENT_ID,
        redirect_uri=config.REDIRECT_URI,
        scope=config.DEFAULT_SCOPE,
        code_challenge=extra.get("code_challenge"),
    )
    logger.info("Starting login (strategy=%s)", strategy.name)
    return RedirectResponse(url=url, status_code=302)


@router.get("/callback")
def callback(
    request: Request,
    code: str | None = None,
    error: str | None = None,
    strategy: AuthStrategy = Depends(get_auth_strategy),
):
    """
    Handle the redirect back from the authorization server.
    The stored verifier is consumed here whatever happens next.
    """
    code_verifier = pop_code_verifier(request)

    if error:
        raise AuthProtocolError(f"Authorization server returned error={error}")
    if not code:
        raise AuthProtocolError("Callback without code parameter")
    if strategy.requires_verifier and not code_verifier:
        # Expired session, replayed callback, or cookie not sent
        raise AuthProtocolError("No code verifier found in session")

    access_token = exchange_code(strategy, code, code_verifier)
    store_access_token(request, access_token)
    logger.info("Login complete (strategy=%s)", strategy.name)
    return RedirectResponse(url=AFTER_LOGIN_PATH, status_code=302)
