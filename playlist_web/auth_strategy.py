"""
Token-exchange strategies. Both share the login/callback state machine and differ only in
what /login adds to the authorize URL and how the authorization_code grant is authenticated.

pkce:          code_challenge on /login, code_verifier + client_id in the token form, no secret.
client_secret: nothing extra on /login, HTTP Basic client_id:client_secret on the token request.
"""
import logging
from dataclasses import dataclass, field

from fastapi import Request

from playlist_web import config
from playlist_web.pkce import generate_pkce
from playlist_web.session_store import store_code_verifier

logger = logging.getLogger(__name__)

STRATEGY_PKCE = "pkce"
STRATEGY_CLIENT_SECRET = "client_secret"


@dataclass
class TokenRequest:
    """Form body plus optional Basic credentials for POST to the token endpoint."""

    data: dict[str, str]
    auth: tuple[str, str] | None = None
    headers: dict[str, str] = field(
        default_factory=lambda: {
            "Accept": "application/json",
            "Content-Type": "application/x-www-form-urlencoded",
        }
    )


class PkceStrategy:
    name = STRATEGY_PKCE
    requires_verifier = True

    def __init__(self, client_id: str, redirect_uri: str):
        self.client_id = client_id
        self.redirect_uri = redirect_uri

    def prepare_login(self, request: Request) -> dict[str, str]:
        """New verifier into the session (replacing any earlier one); challenge for the URL."""
        code_verifier, code_challenge = generate_pkce()
        store_code_verifier(request, code_verifier)
        return {"code_challenge": code_challenge}

    def token_request(self, code: str, code_verifier: str | None) -> TokenRequest:
        if not code_verifier:
            raise ValueError("PKCE token request needs the code_verifier from /login")
        return TokenRequest(
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
                "client_id": self.client_id,
                "code_verifier": code_verifier,
            }
        )


class ClientSecretStrategy:
    name = STRATEGY_CLIENT_SECRET
    requires_verifier = False

    def __init__(self, client_id: str, client_secret: str, redirect_uri: str):
        if not client_secret:
            raise ValueError("client_secret strategy requires SPOTIFY_CLIENT_SECRET")
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri

    def prepare_login(self, request: Request) -> dict[str, str]:
        return {}

    def token_request(self, code: str, code_verifier: str | None) -> TokenRequest:
        return TokenRequest(
            data={
                "grant_type": "authorization_code",
                "code": code,
                "redirect_uri": self.redirect_uri,
            },
            auth=(self.client_id, self.client_secret),
        )


AuthStrategy = PkceStrategy | ClientSecretStrategy


def build_strategy(
    name: str,
    *,
    client_id: str,
    redirect_uri: str,
    client_secret: str = "",
) -> AuthStrategy:
    """Strategy for a configured name. Unknown names are a configuration error."""
    if name == STRATEGY_PKCE:
        return PkceStrategy(client_id=client_id, redirect_uri=redirect_uri)
    if name == STRATEGY_CLIENT_SECRET:
        return ClientSecretStrategy(
            client_id=client_id, client_secret=client_secret, redirect_uri=redirect_uri
        )
    raise ValueError(f"Unknown AUTH_STRATEGY: {name!r} (expected 'pkce' or 'client_secret')")


def get_auth_strategy() -> AuthStrategy:
    """Dependency: strategy from config. Tests override this via app.dependency_overrides."""
    return build_strategy(
        config.AUTH_STRATEGY,
        client_id=config.CLIENT_ID,
        client_secret=config.CLIENT_SECRET,
        redirect_uri=config.REDIRECT_URI,
    )
