"""
API Routes - FastAPI endpoints for Google Play receipt operations.
"""

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from structlog import get_logger

from play_iap.api.dependencies import build_payment, get_google_play_provider
from play_iap.config import Settings, get_settings
from play_iap.exceptions import (
    PaymentValidationError,
    ReceiptValidationError,
    UnexpectedStatusError,
)
from play_iap.models.api import (
    CancelSubscriptionRequest,
    CancelSubscriptionResponse,
    DeferSubscriptionRequest,
    DeferSubscriptionResponse,
    HealthResponse,
    VerifyPaymentRequest,
    VerifyPaymentResponse,
)
from play_iap.models.google_play import DeferralInfo
from play_iap.observability.metrics import render_latest
from play_iap.services.google_play_provider import GooglePlayProvider

logger = get_logger(__name__)

router = APIRouter()


def _to_http_error(exc: ReceiptValidationError) -> HTTPException:
    """Map provider errors onto HTTP errors."""
    if isinstance(exc, PaymentValidationError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message)
    if isinstance(exc, UnexpectedStatusError):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail={"upstream_status": exc.status_code, "upstream_body": exc.body[:1000]},
        )
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc))


@router.post(
    "/v1/google-play/purchases/verify",
    response_model=VerifyPaymentResponse,
    status_code=status.HTTP_200_OK,
)
async def verify_payment(
    request: VerifyPaymentRequest,
    provider: GooglePlayProvider = Depends(get_google_play_provider),
) -> VerifyPaymentResponse:
    """
    Verify a Google Play purchase.

    Looks up purchases.subscriptions when subscription is true,
    purchases.products otherwise.
    """
    payment = build_payment(request, subscription=request.subscription)
    try:
        result = await provider.verify_payment(payment)
    except ReceiptValidationError as exc:
        logger.warning("verify_payment_rejected", error_type=type(exc).__name__)
        raise _to_http_error(exc) from exc

    return VerifyPaymentResponse(
        transaction_id=result.transaction_id,
        product_id=result.product_id,
        purchase_date=result.purchase_date,
        expiration_date=result.expiration_date,
        receipt=result.receipt,
    )


@router.post(
    "/v1/google-play/subscriptions/cancel",
    response_model=CancelSubscriptionResponse,
)
async def cancel_subscription(
    request: CancelSubscriptionRequest,
    provider: GooglePlayProvider = Depends(get_google_play_provider),
) -> CancelSubscriptionResponse:
    """Cancel a Google Play subscription."""
    payment = build_payment(request, subscription=True)
    try:
        await provider.cancel_subscription(payment)
    except ReceiptValidationError as exc:
        logger.warning("cancel_subscription_rejected", error_type=type(exc).__name__)
        raise _to_http_error(exc) from exc

    return CancelSubscriptionResponse(cancelled=True)


@router.post(
    "/v1/google-play/subscriptions/defer",
    response_model=DeferSubscriptionResponse,
)
async def defer_subscription(
    request: DeferSubscriptionRequest,
    provider: GooglePlayProvider = Depends(get_google_play_provider),
) -> DeferSubscriptionResponse:
    """Defer a Google Play subscription's expiry."""
    payment = build_payment(request, subscription=True)
    deferral_info = DeferralInfo(
        expected_expiry_time_millis=request.expected_expiry_time_millis,
        desired_expiry_time_millis=request.desired_expiry_time_millis,
    )
    try:
        result = await provider.defer_subscription(payment, deferral_info)
    except ReceiptValidationError as exc:
        logger.warning("defer_subscription_rejected", error_type=type(exc).__name__)
        raise _to_http_error(exc) from exc

    return DeferSubscriptionResponse(result=result)


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)) -> HealthResponse:
    """Health check endpoint."""
    return HealthResponse(
        status="healthy",
        version=settings.api_version,
        credentials_configured=settings.service_account_json is not None,
    )


@router.get("/metrics")
async def prometheus_metrics(settings: Settings = Depends(get_settings)) -> Response:
    """Prometheus scrape endpoint."""
    if not settings.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Metrics disabled")
    return Response(content=render_latest(), media_type="text/plain; version=0.0.4")
