"""
Error taxonomy for the login flow and the Spotify API calls.
Auth errors always end in a redirect to /login; API errors are 401 (session expiry) or fatal.
"""


class AuthProtocolError(Exception):
    """Callback arrived without what the flow needs (verifier, code) or with an error param."""


class LoginRequired(AuthProtocolError):
    """Protected route hit without an access token in the session."""


class UpstreamAuthError(Exception):
    """Token endpoint rejected the exchange or returned something unusable."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class UpstreamApiError(Exception):
    """Non-2xx (or unreadable) response from a Web API resource endpoint."""

    def __init__(self, message: str, status_code: int | None = None, body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.body = body

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


class RenderError(Exception):
    """Output could not be produced from the fetched data (e.g. no playlist name for a filename)."""
