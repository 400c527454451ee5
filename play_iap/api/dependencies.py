"""
API Dependencies - provider construction and request-to-domain mapping.
"""

from functools import lru_cache
from typing import Any

from play_iap.config import settings
from play_iap.models.api import PurchaseRequest
from play_iap.models.google_play import Payment
from play_iap.services.google_auth import ServiceAccountTokenProvider
from play_iap.services.google_play_provider import GooglePlayProvider
from play_iap.services.transport import HttpxTransport


@lru_cache(maxsize=1)
def get_google_play_provider() -> GooglePlayProvider:
    """Shared provider built from settings (stateless, safe to reuse)."""
    return GooglePlayProvider(
        token_provider=ServiceAccountTokenProvider(token_uri=settings.google_token_uri),
        transport=HttpxTransport(timeout=settings.http_timeout_seconds),
        base_url=settings.google_api_base_url,
    )


def build_payment(request: PurchaseRequest, subscription: bool = False) -> Payment:
    """
    Map a request body onto a Payment, filling gaps from settings.

    Missing values stay None so the validator reports them.
    """
    key_object: Any
    if request.key_object is not None:
        key_object = request.key_object.model_dump(exclude_none=True)
    else:
        key_object = settings.service_account_json

    return Payment.from_dict(
        {
            "packageName": request.package_name or settings.ANDROID_PACKAGE_NAME or None,
            "productId": request.product_id,
            "receipt": request.receipt,
            "keyObject": key_object,
            "subscription": subscription,
        }
    )
