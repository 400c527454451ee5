"""
Google Play Provider Implementation.

Verifies purchases and manages subscriptions through the Google Play
Developer API. Each operation validates its input, fetches one bearer
token and makes one HTTPS call.
"""

import json
import time
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from typing import Any

from structlog import get_logger

from play_iap.exceptions import (
    ReceiptValidationError,
    ResponseParseError,
    UnexpectedStatusError,
)
from play_iap.models.google_play import (
    DeferralInfo,
    Payment,
    ServiceAccountKey,
    VerificationResult,
)
from play_iap.observability.metrics import metrics
from play_iap.services import endpoints
from play_iap.services.google_auth import ServiceAccountTokenProvider, TokenProvider
from play_iap.services.transport import HttpResponse, HttpxTransport, Transport
from play_iap.services.validation import validate_deferral_info, validate_payment

logger = get_logger(__name__)


def _redact(receipt: str) -> str:
    return receipt[:20] + "..." if len(receipt) > 20 else receipt


def _parse_json(body: str) -> Any:
    try:
        return json.loads(body)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Invalid JSON body: {exc}") from exc


def _parse_millis(value: Any, field_name: str) -> int | None:
    if not value:
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ResponseParseError(f"{field_name} is not an integer: {value!r}") from exc


def parse_result(body: str, payment: Payment) -> VerificationResult:
    """
    Normalize a purchases.products or purchases.subscriptions resource.

    Subscriptions report startTimeMillis, products purchaseTimeMillis.
    A missing expiryTimeMillis means the purchase does not expire.
    """
    result = _parse_json(body)
    if not isinstance(result, dict):
        raise ResponseParseError("Purchase resource must be a JSON object")

    if result.get("startTimeMillis"):
        purchase_date = _parse_millis(result["startTimeMillis"], "startTimeMillis")
    else:
        purchase_date = _parse_millis(result.get("purchaseTimeMillis"), "purchaseTimeMillis")

    return VerificationResult(
        receipt=result,
        transaction_id=payment.receipt,
        product_id=payment.product_id,
        purchase_date=purchase_date,
        expiration_date=_parse_millis(result.get("expiryTimeMillis"), "expiryTimeMillis"),
    )


@contextmanager
def _track_operation(operation: str) -> Iterator[None]:
    start_time = time.perf_counter()
    try:
        yield
    except ReceiptValidationError as exc:
        metrics.record_error(type(exc).__name__, operation)
        metrics.record_operation(operation, "failure", time.perf_counter() - start_time)
        raise
    metrics.record_operation(operation, "success", time.perf_counter() - start_time)


class GooglePlayProvider:
    """
    Google Play receipt validation provider.

    Handles purchase verification, subscription cancellation and deferral.
    Holds no per-call state, so one instance can serve concurrent calls.
    """

    def __init__(
        self,
        token_provider: TokenProvider | None = None,
        transport: Transport | None = None,
        base_url: str = endpoints.API_BASE_URL,
    ) -> None:
        """
        Initialize Google Play provider.

        Args:
            token_provider: Bearer token source (defaults to google-auth service accounts)
            transport: HTTPS transport (defaults to httpx)
            base_url: Android Publisher applications endpoint
        """
        self.token_provider = token_provider or ServiceAccountTokenProvider()
        self.transport = transport or HttpxTransport()
        self.base_url = base_url

    async def _get_token(self, key: ServiceAccountKey) -> str:
        return await self.token_provider.get_token(
            key.client_email,
            key.private_key,
            endpoints.PUBLISHER_SCOPE,
            token_uri=key.token_uri,
        )

    def _check_status(
        self, operation: str, response: HttpResponse, expected_status: int
    ) -> None:
        metrics.record_upstream_status(operation, response.status_code)
        if response.status_code != expected_status:
            logger.error(
                "google_play_unexpected_status",
                operation=operation,
                status=response.status_code,
                expected=expected_status,
                body=response.body[:500],
            )
            raise UnexpectedStatusError(response.status_code, response.body)

    async def verify_payment(self, payment: Payment) -> VerificationResult:
        """
        Verify a one-time product or subscription purchase.

        Args:
            payment: Purchase to look up

        Returns:
            Normalized verification result

        Raises:
            PaymentValidationError: If the payment is malformed (no network call is made)
            AuthError: If the token exchange fails
            TransportError: If the HTTPS call fails
            UnexpectedStatusError: If Google Play does not answer 200
            ResponseParseError: If the response body is not a purchase resource
        """
        with _track_operation("verify"):
            key = validate_payment(payment)

            logger.info(
                "verifying_google_play_payment",
                product_id=payment.product_id,
                package_name=payment.package_name,
                subscription=payment.subscription,
            )

            token = await self._get_token(key)

            if payment.subscription:
                build_url = endpoints.purchases_subscriptions_get
            else:
                build_url = endpoints.purchases_products_get
            url = build_url(
                payment.package_name,
                payment.product_id,
                payment.receipt,
                token,
                base_url=self.base_url,
            )

            response = await self.transport.get(url)
            self._check_status("verify", response, 200)

            result = parse_result(response.body, payment)

            logger.info(
                "google_play_payment_verified",
                product_id=result.product_id,
                transaction_id=_redact(result.transaction_id),
                purchase_date=result.purchase_date,
                expiration_date=result.expiration_date,
            )
            return result

    async def cancel_subscription(self, payment: Payment) -> None:
        """
        Cancel a subscription. The user keeps access until the paid period ends.

        Raises:
            PaymentValidationError: If the payment is malformed
            UnexpectedStatusError: If Google Play does not answer 204
        """
        with _track_operation("cancel"):
            key = validate_payment(payment)

            logger.info(
                "cancelling_google_play_subscription",
                product_id=payment.product_id,
                package_name=payment.package_name,
            )

            token = await self._get_token(key)
            url = endpoints.purchases_subscriptions_cancel(
                payment.package_name,
                payment.product_id,
                payment.receipt,
                token,
                base_url=self.base_url,
            )

            response = await self.transport.post(url)
            self._check_status("cancel", response, 204)

            logger.info(
                "google_play_subscription_cancelled",
                product_id=payment.product_id,
                transaction_id=_redact(payment.receipt),
            )

    async def defer_subscription(
        self,
        payment: Payment,
        deferral_info: DeferralInfo | Mapping[str, Any],
    ) -> Any:
        """
        Defer a subscription's expiry to a later time.

        Args:
            payment: Subscription purchase to defer
            deferral_info: Expected and desired expiry times in millis

        Returns:
            Parsed Google Play response (contains newExpiryTimeMillis)

        Raises:
            PaymentValidationError: If the payment or deferral info is malformed
            UnexpectedStatusError: If Google Play does not answer 200
            ResponseParseError: If the response body is not JSON
        """
        with _track_operation("defer"):
            key = validate_payment(payment)
            deferral = validate_deferral_info(deferral_info)

            logger.info(
                "deferring_google_play_subscription",
                product_id=payment.product_id,
                package_name=payment.package_name,
                expected_expiry_time_millis=deferral.expected_expiry_time_millis,
                desired_expiry_time_millis=deferral.desired_expiry_time_millis,
            )

            token = await self._get_token(key)
            url = endpoints.purchases_subscriptions_defer(
                payment.package_name,
                payment.product_id,
                payment.receipt,
                token,
                base_url=self.base_url,
            )

            response = await self.transport.post(url, json_body=deferral.to_request_body())
            self._check_status("defer", response, 200)

            result = _parse_json(response.body)

            logger.info(
                "google_play_subscription_deferred",
                product_id=payment.product_id,
                transaction_id=_redact(payment.receipt),
            )
            return result
