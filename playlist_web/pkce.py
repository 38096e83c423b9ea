"""
PKCE (RFC 7636) helpers and the authorize URL for login initiation.
S256 only. Verifier is 64 chars from 48 random bytes (384 bits entropy).
"""
import hashlib
import re
import secrets
from base64 import urlsafe_b64encode
from urllib.parse import urlencode

# 48 bytes -> exactly 64 base64url chars, no padding
VERIFIER_ENTROPY_BYTES = 48
VERIFIER_LENGTH = 64

# RFC 7636 section 4.1 bounds
MIN_VERIFIER_LENGTH = 43
MAX_VERIFIER_LENGTH = 128

# unreserved characters, RFC 7636 section 4.1
_VERIFIER_CHARS = re.compile(r"[A-Za-z0-9\-._~]+")


def generate_code_verifier() -> str:
    """Fresh verifier per login attempt; characters in [A-Za-z0-9_-]."""
    raw = secrets.token_bytes(VERIFIER_ENTROPY_BYTES)
    return urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")[:VERIFIER_LENGTH]


def derive_code_challenge(code_verifier: str) -> str:
    """
    S256 challenge: base64url(SHA256(verifier)) without padding.
    Raises ValueError for a verifier outside the RFC length bounds or alphabet.
    """
    if not code_verifier or len(code_verifier) < MIN_VERIFIER_LENGTH:
        raise ValueError("code_verifier must be at least 43 characters")
    if len(code_verifier) > MAX_VERIFIER_LENGTH:
        raise ValueError("code_verifier must be at most 128 characters")
    if not _VERIFIER_CHARS.fullmatch(code_verifier):
        raise ValueError("code_verifier may only contain [A-Za-z0-9-._~]")
    digest = hashlib.sha256(code_verifier.encode("ascii")).digest()
    return urlsafe_b64encode(digest).rstrip(b"=").decode("ascii")


def generate_pkce() -> tuple[str, str]:
    """Returns (code_verifier, code_challenge)."""
    code_verifier = generate_code_verifier()
    return code_verifier, derive_code_challenge(code_verifier)


def build_authorize_url(
    *,
    authorize_url: str,
    client_id: str,
    redirect_uri: str,
    scope: str,
    code_challenge: str | None = None,
) -> str:
    """Build the authorization server URL. PKCE params only when a challenge is given."""
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "scope": scope,
    }
    if code_challenge:
        params["code_challenge_method"] = "S256"
        params["code_challenge"] = code_challenge
    return f"{authorize_url}?{urlencode(params)}"
