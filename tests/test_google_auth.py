"""
Tests for the service account token provider.
"""

from unittest.mock import MagicMock, patch

import google.auth.exceptions
import pytest

from play_iap.exceptions import AuthError
from play_iap.services.endpoints import PUBLISHER_SCOPE
from play_iap.services.google_auth import ServiceAccountTokenProvider

CREDENTIALS_FACTORY = (
    "play_iap.services.google_auth.service_account.Credentials.from_service_account_info"
)


class TestServiceAccountTokenProvider:
    """Tests for ServiceAccountTokenProvider."""

    @pytest.mark.asyncio
    async def test_returns_refreshed_token(self):
        """The token from the refreshed credentials is returned."""
        credentials = MagicMock()
        credentials.token = "ya29.token"

        with patch(CREDENTIALS_FACTORY, return_value=credentials) as factory:
            token = await ServiceAccountTokenProvider().get_token(
                "svc@example.iam.gserviceaccount.com", "private-key", PUBLISHER_SCOPE
            )

        assert token == "ya29.token"
        info = factory.call_args.args[0]
        assert info["client_email"] == "svc@example.iam.gserviceaccount.com"
        assert info["private_key"] == "private-key"
        assert info["token_uri"] == "https://oauth2.googleapis.com/token"
        assert factory.call_args.kwargs["scopes"] == [PUBLISHER_SCOPE]
        credentials.refresh.assert_called_once()

    @pytest.mark.asyncio
    async def test_custom_token_uri(self):
        """The configured token URI is passed to google-auth."""
        credentials = MagicMock()
        credentials.token = "ya29.token"

        with patch(CREDENTIALS_FACTORY, return_value=credentials) as factory:
            await ServiceAccountTokenProvider(token_uri="https://token.example.test").get_token(
                "svc@example.com", "pk", PUBLISHER_SCOPE
            )

        assert factory.call_args.args[0]["token_uri"] == "https://token.example.test"

    @pytest.mark.asyncio
    async def test_key_file_token_uri_overrides_configured(self):
        """A non-default token_uri from the key file wins."""
        credentials = MagicMock()
        credentials.token = "ya29.token"

        with patch(CREDENTIALS_FACTORY, return_value=credentials) as factory:
            await ServiceAccountTokenProvider(token_uri="https://configured.example.test").get_token(
                "svc@example.com", "pk", PUBLISHER_SCOPE, token_uri="https://key.example.test"
            )

        assert factory.call_args.args[0]["token_uri"] == "https://key.example.test"

    @pytest.mark.asyncio
    async def test_default_key_file_token_uri_keeps_configured(self):
        """The stock Google endpoint in a key file does not mask configuration."""
        credentials = MagicMock()
        credentials.token = "ya29.token"

        with patch(CREDENTIALS_FACTORY, return_value=credentials) as factory:
            await ServiceAccountTokenProvider(token_uri="https://configured.example.test").get_token(
                "svc@example.com",
                "pk",
                PUBLISHER_SCOPE,
                token_uri="https://oauth2.googleapis.com/token",
            )

        assert factory.call_args.args[0]["token_uri"] == "https://configured.example.test"

    @pytest.mark.asyncio
    async def test_invalid_key_raises_auth_error(self):
        """Unparsable private keys become AuthError."""
        with patch(CREDENTIALS_FACTORY, side_effect=ValueError("No key could be detected.")):
            with pytest.raises(AuthError, match="Invalid service account key"):
                await ServiceAccountTokenProvider().get_token("svc@example.com", "pk", "scope")

    @pytest.mark.asyncio
    async def test_refresh_failure_raises_auth_error(self):
        """Token endpoint rejections become AuthError."""
        credentials = MagicMock()
        credentials.refresh.side_effect = google.auth.exceptions.RefreshError("invalid_grant")

        with patch(CREDENTIALS_FACTORY, return_value=credentials):
            with pytest.raises(AuthError, match="invalid_grant"):
                await ServiceAccountTokenProvider().get_token("svc@example.com", "pk", "scope")

    @pytest.mark.asyncio
    async def test_empty_token_raises_auth_error(self):
        """A refresh that yields no token is an error."""
        credentials = MagicMock()
        credentials.token = None

        with patch(CREDENTIALS_FACTORY, return_value=credentials):
            with pytest.raises(AuthError, match="no access token"):
                await ServiceAccountTokenProvider().get_token("svc@example.com", "pk", "scope")
