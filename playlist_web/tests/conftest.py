"""
Pytest configuration for playlist_web. Fixed env before config.py is imported so tests never
depend on a developer's real Spotify credentials.
"""
import os

os.environ["SPOTIFY_CLIENT_ID"] = "test-client"
os.environ["SPOTIFY_CLIENT_SECRET"] = "test-secret"
os.environ["SPOTIFY_PLAYLIST_ID"] = "test-playlist"
os.environ["SPOTIFY_REDIRECT_URI"] = "https://localhost:8888/callback"
os.environ["SESSION_SECRET"] = "test-session-secret"
os.environ["AUTH_STRATEGY"] = "pkce"
os.environ.pop("SPOTIFY_API_BASE_URL", None)
os.environ.pop("SPOTIFY_TOKEN_URL", None)
os.environ.pop("SPOTIFY_AUTHORIZE_URL", None)
