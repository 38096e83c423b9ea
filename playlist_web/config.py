"""
Playlist Web configuration. Everything comes from the environment.
No secrets in this file; client secret and session secret come from env.
"""
import logging
import os
import secrets

logger = logging.getLogger(__name__)


def _env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


# Spotify app credentials (developer dashboard). Secret only needed for AUTH_STRATEGY=client_secret
CLIENT_ID = os.environ.get("SPOTIFY_CLIENT_ID", "")
CLIENT_SECRET = os.environ.get("SPOTIFY_CLIENT_SECRET", "")

# "pkce" (default) or "client_secret" (legacy Basic-auth token exchange)
AUTH_STRATEGY = os.environ.get("AUTH_STRATEGY", "pkce").strip().lower()

# Must exactly match a redirect URI registered for the app
REDIRECT_URI = os.environ.get("SPOTIFY_REDIRECT_URI", "https://localhost:8888/callback")

DEFAULT_SCOPE = os.environ.get(
    "SPOTIFY_SCOPE",
    "user-read-private user-read-email playlist-read-private playlist-read-collaborative",
)

AUTHORIZE_URL = os.environ.get("SPOTIFY_AUTHORIZE_URL", "https://accounts.spotify.com/authorize")
TOKEN_URL = os.environ.get("SPOTIFY_TOKEN_URL", "https://accounts.spotify.com/api/token")
API_BASE_URL = os.environ.get("SPOTIFY_API_BASE_URL", "https://api.spotify.com/v1").rstrip("/")

# One playlist per deployment; never taken from the request
PLAYLIST_ID = os.environ.get("SPOTIFY_PLAYLIST_ID", "7MU4kChv9nIF242QWv8DJz")

# Seconds for every outbound call (token exchange and each page fetch)
HTTP_TIMEOUT = float(os.environ.get("HTTP_TIMEOUT", "10"))

# Session cookie signing key. Unset: random per process, so sessions do not survive a restart.
SESSION_SECRET = os.environ.get("SESSION_SECRET", "")
if not SESSION_SECRET:
    logger.warning("SESSION_SECRET not set; using a random per-process session key")
    SESSION_SECRET = secrets.token_urlsafe(32)

SESSION_COOKIE = os.environ.get("SESSION_COOKIE", "playlist_session")
SESSION_HTTPS_ONLY = _env_bool("SESSION_HTTPS_ONLY", True)
# "strict" drops the cookie on the cross-site redirect back from the authorization server
SESSION_SAME_SITE = os.environ.get("SESSION_SAME_SITE", "lax").strip().lower()
SESSION_MAX_AGE = int(os.environ.get("SESSION_MAX_AGE", "3600"))

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

HOST = os.environ.get("HOST", "127.0.0.1")
PORT = int(os.environ.get("PORT", "8888"))
# Optional PEM files so uvicorn can serve HTTPS locally (secure cookies need it)
SSL_KEYFILE = os.environ.get("SSL_KEYFILE", "").strip() or None
SSL_CERTFILE = os.environ.get("SSL_CERTFILE", "").strip() or None
