"""
Service account token provider.

Exchanges a signed JWT assertion for a short-lived OAuth bearer token using
google-auth. Tokens are fetched per call and never cached.
"""

import asyncio
from typing import Protocol

import google.auth.exceptions
from google.auth.transport.requests import Request
from google.oauth2 import service_account
from structlog import get_logger

from play_iap.exceptions import AuthError
from play_iap.models.google_play import DEFAULT_TOKEN_URI

logger = get_logger(__name__)


class TokenProvider(Protocol):
    """Token provider protocol used by GooglePlayProvider."""

    async def get_token(
        self,
        client_email: str,
        private_key: str,
        scope: str,
        token_uri: str | None = None,
    ) -> str:
        """
        Get a bearer token for the given service account and scope.

        Args:
            token_uri: Token endpoint from the key file, if it names one

        Raises:
            AuthError: If the token exchange fails
        """
        ...


class ServiceAccountTokenProvider:
    """Token provider backed by google.oauth2.service_account."""

    def __init__(self, token_uri: str = DEFAULT_TOKEN_URI) -> None:
        self.token_uri = token_uri

    def _resolve_token_uri(self, token_uri: str | None) -> str:
        # The key file's endpoint wins unless it is just the Google default
        if token_uri and token_uri != DEFAULT_TOKEN_URI:
            return token_uri
        return self.token_uri

    async def get_token(
        self,
        client_email: str,
        private_key: str,
        scope: str,
        token_uri: str | None = None,
    ) -> str:
        # google-auth refreshes synchronously over requests
        return await asyncio.to_thread(
            self._fetch_token,
            client_email,
            private_key,
            scope,
            self._resolve_token_uri(token_uri),
        )

    def _fetch_token(self, client_email: str, private_key: str, scope: str, token_uri: str) -> str:
        try:
            credentials = service_account.Credentials.from_service_account_info(  # type: ignore[no-untyped-call]
                {
                    "client_email": client_email,
                    "private_key": private_key,
                    "token_uri": token_uri,
                },
                scopes=[scope],
            )
        except ValueError as exc:
            logger.error("google_service_account_invalid", client_email=client_email)
            raise AuthError(f"Invalid service account key: {exc}") from exc

        try:
            credentials.refresh(Request())  # type: ignore[no-untyped-call]
        except google.auth.exceptions.GoogleAuthError as exc:
            logger.error(
                "google_token_exchange_failed",
                client_email=client_email,
                error=str(exc),
            )
            raise AuthError(f"Token exchange failed: {exc}") from exc

        if not credentials.token:
            raise AuthError("Token exchange returned no access token")

        logger.debug("google_token_acquired", client_email=client_email)
        return str(credentials.token)
