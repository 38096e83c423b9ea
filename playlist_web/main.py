"""
Playlist Web: log in to Spotify (PKCE or client secret), then show one playlist as HTML, JSON, or CSV.
GET /, /health, /login, /callback, /playlist-details, /playlist-details/csv. Port 8888 by default.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse, Response
from starlette.middleware.sessions import SessionMiddleware

from playlist_web import config
from playlist_web.auth_strategy import get_auth_strategy
from playlist_web.errors import AuthProtocolError, LoginRequired, UpstreamApiError, UpstreamAuthError
from playlist_web.oauth import redirect_to_login, require_access_token
from playlist_web.oauth import router as oauth_router
from playlist_web.render import JSON, csv_filename, negotiate, render_csv, render_html, render_json, track_rows
from playlist_web.session_store import clear_access_token
from playlist_web.spotify_api import fetch_playlist_tracks, get_playlist

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Error fetching playlist details"


def configure_logging(level: str = config.LOG_LEVEL) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging and fail fast on a bad AUTH_STRATEGY or a missing client secret."""
    configure_logging()
    try:
        get_auth_strategy()
    except ValueError as e:
        logger.error("Invalid auth configuration: %s", e)
        raise
    logger.info("Playlist Web starting (strategy=%s, playlist=%s)", config.AUTH_STRATEGY, config.PLAYLIST_ID)
    yield


app = FastAPI(title="Playlist Web", version="1.0.0", lifespan=lifespan)
# Signed cookie holds only the session id (see session_store). Always HttpOnly; Secure and SameSite come from config
app.add_middleware(
    SessionMiddleware,
    secret_key=config.SESSION_SECRET,
    session_cookie=config.SESSION_COOKIE,
    max_age=config.SESSION_MAX_AGE,
    same_site=config.SESSION_SAME_SITE,
    https_only=config.SESSION_HTTPS_ONLY,
)
app.include_router(oauth_router, tags=["auth"])


@app.exception_handler(AuthProtocolError)
async def auth_protocol_error_handler(request: Request, exc: AuthProtocolError):
    if isinstance(exc, LoginRequired):
        logger.debug("Redirecting to login: %s", exc)
    else:
        logger.warning("Login flow failed: %s", exc)
    return redirect_to_login()


@app.exception_handler(UpstreamAuthError)
async def upstream_auth_error_handler(request: Request, exc: UpstreamAuthError):
    logger.error("Error retrieving access token: %s (status=%s) %s", exc, exc.status_code, exc.body)
    return redirect_to_login()


@app.exception_handler(UpstreamApiError)
async def upstream_api_error_handler(request: Request, exc: UpstreamApiError):
    """401 means the token expired: back to ANONYMOUS. Anything else is a generic 500."""
    if exc.is_unauthorized:
        clear_access_token(request)
        logger.info("Access token rejected by API; cleared session token")
        return redirect_to_login()
    logger.error("%s: %s (status=%s) %s", GENERIC_ERROR_MESSAGE, exc, exc.status_code, exc.body)
    return HTMLResponse(
        f"""<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Error</title></head>
<body>
  <h1>Error</h1>
  <p>{GENERIC_ERROR_MESSAGE}</p>
  <p><a href="/">Home</a></p>
</body>
</html>""",
        status_code=500,
    )


@app.get("/health")
def health():
    """Health check endpoint."""
    return {"status": "ok", "service": "playlist_web"}


@app.get("/", response_class=HTMLResponse)
def home():
    """Home page with login and playlist links."""
    return HTMLResponse(
        """<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>Playlist Web</title></head>
<body>
  <h1>Hello, Spotify!</h1>
  <p><a href="/login">Log in</a></p>
  <p><a href="/playlist-details">Playlist details</a> (requires login)</p>
  <p><a href="/playlist-details/csv">Playlist CSV</a> (requires login)</p>
</body>
</html>"""
    )


def _load_playlist(access_token: str) -> tuple[str, list]:
    """Playlist name and every track item. Two sequential upstream steps; errors propagate."""
    playlist = get_playlist(config.PLAYLIST_ID, access_token)
    items = fetch_playlist_tracks(config.PLAYLIST_ID, access_token)
    return playlist.get("name") or "", items


@app.get("/playlist-details")
def playlist_details(request: Request, access_token: str = Depends(require_access_token)):
    """
    Configured playlist as HTML (default) or JSON, chosen by the Accept header.
    """
    fmt = negotiate(request.headers.get("accept"))
    if fmt is None:
        return PlainTextResponse("Not Acceptable", status_code=406)

    playlist_name, items = _load_playlist(access_token)
    if fmt == JSON:
        return JSONResponse(render_json(playlist_name, items))
    return HTMLResponse(render_html(playlist_name, track_rows(items)))


@app.get("/playlist-details/csv")
def playlist_details_csv(access_token: str = Depends(require_access_token)):
    """Configured playlist as a CSV attachment named after the playlist."""
    playlist_name, items = _load_playlist(access_token)
    filename = csv_filename(playlist_name)
    return Response(
        content=render_csv(track_rows(items)),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "playlist_web.main:app",
        host=config.HOST,
        port=config.PORT,
        ssl_keyfile=config.SSL_KEYFILE,
        ssl_certfile=config.SSL_CERTFILE,
        reload=True,
    )
