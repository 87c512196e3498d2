from fastapi import Request
from google.auth import exceptions as google_exceptions
from google.auth.transport import requests as google_requests
from google.oauth2 import id_token

from app.config import settings


class GoogleTokenVerifier:
    """Validates Google ID tokens issued to the mobile app."""

    def __init__(self, client_id: str | None):
        self.client_id = client_id
        self._transport = google_requests.Request()

    def verify(self, token: str) -> dict:
        """Return the token claims.

        Raises ValueError for any token Google would reject (bad signature,
        wrong audience or issuer, expired). Failures to reach Google's cert
        endpoint propagate as TransportError.
        """
        try:
            return id_token.verify_oauth2_token(token, self._transport, audience=self.client_id)
        except google_exceptions.TransportError:
            raise
        except google_exceptions.GoogleAuthError as exc:
            raise ValueError(str(exc)) from exc


def build_google_verifier(config=settings) -> GoogleTokenVerifier:
    return GoogleTokenVerifier(config.GOOGLE_CLIENT_ID)


def get_google_verifier(request: Request) -> GoogleTokenVerifier:
    verifier = getattr(request.app.state, "google_verifier", None)
    if verifier is None:
        verifier = build_google_verifier()
        request.app.state.google_verifier = verifier
    return verifier
