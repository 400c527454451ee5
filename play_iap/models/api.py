"""
API Models - Pydantic models for request/response validation.
"""

from typing import Any

from pydantic import BaseModel, Field

# ============================================================================
# Shared Request Fields
# ============================================================================


class ServiceAccountKeyModel(BaseModel):
    """Google service account key (extra JSON fields are ignored)."""

    client_email: str = Field(..., min_length=1, max_length=255)
    private_key: str = Field(..., min_length=1)
    token_uri: str | None = Field(None, max_length=2048)


class PurchaseRequest(BaseModel):
    """Purchase identity shared by all Google Play endpoints."""

    package_name: str | None = Field(None, min_length=1, max_length=255)
    product_id: str = Field(..., min_length=1, max_length=255)
    receipt: str = Field(..., min_length=1, max_length=4096, description="Purchase token")
    key_object: ServiceAccountKeyModel | None = Field(
        None, description="Service account key; falls back to configured credentials"
    )


# ============================================================================
# Verify Models
# ============================================================================


class VerifyPaymentRequest(PurchaseRequest):
    """POST /v1/google-play/purchases/verify request body."""

    subscription: bool = False


class VerifyPaymentResponse(BaseModel):
    """POST /v1/google-play/purchases/verify response."""

    transaction_id: str
    product_id: str
    purchase_date: int | None = None
    expiration_date: int | None = None
    receipt: dict[str, Any]


# ============================================================================
# Subscription Models
# ============================================================================


class CancelSubscriptionRequest(PurchaseRequest):
    """POST /v1/google-play/subscriptions/cancel request body."""

    pass


class CancelSubscriptionResponse(BaseModel):
    """POST /v1/google-play/subscriptions/cancel response."""

    cancelled: bool = True


class DeferSubscriptionRequest(PurchaseRequest):
    """POST /v1/google-play/subscriptions/defer request body."""

    expected_expiry_time_millis: int = Field(..., ge=0)
    desired_expiry_time_millis: int = Field(..., ge=0)


class DeferSubscriptionResponse(BaseModel):
    """POST /v1/google-play/subscriptions/defer response (raw Google Play JSON)."""

    result: Any


# ============================================================================
# Health Models
# ============================================================================


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    version: str
    credentials_configured: bool
