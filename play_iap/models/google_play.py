"""
Google Play domain models - Immutable dataclasses for receipt validation.

Field types describe what a well-formed payment carries. Callers hand us
untrusted input, so the validator re-checks every type at runtime.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"

KeyObjectInput = Mapping[str, Any] | str | bytes | None


@dataclass(frozen=True)
class ServiceAccountKey:
    """Normalized Google service account credential."""

    client_email: str
    private_key: str
    token_uri: str = DEFAULT_TOKEN_URI

    def to_info(self) -> dict[str, str]:
        """Service account info in the shape google-auth expects."""
        return {
            "client_email": self.client_email,
            "private_key": self.private_key,
            "token_uri": self.token_uri,
        }


@dataclass(frozen=True)
class Payment:
    """A purchase to verify, cancel or defer."""

    package_name: str
    product_id: str
    receipt: str  # purchase token issued by Google Play
    key_object: KeyObjectInput = field(default=None, repr=False)
    subscription: bool = False

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Payment":
        """Build a payment from the camelCase wire shape used by mobile clients."""
        return cls(
            package_name=data.get("packageName"),  # type: ignore[arg-type]
            product_id=data.get("productId"),  # type: ignore[arg-type]
            receipt=data.get("receipt"),  # type: ignore[arg-type]
            key_object=data.get("keyObject"),
            subscription=bool(data.get("subscription", False)),
        )


@dataclass(frozen=True)
class DeferralInfo:
    """Requested move of a subscription's expiry time."""

    expected_expiry_time_millis: int
    desired_expiry_time_millis: int

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DeferralInfo":
        """Build deferral info from the camelCase wire shape."""
        return cls(
            expected_expiry_time_millis=data.get("expectedExpiryTimeMillis"),  # type: ignore[arg-type]
            desired_expiry_time_millis=data.get("desiredExpiryTimeMillis"),  # type: ignore[arg-type]
        )

    def to_request_body(self) -> dict[str, dict[str, str]]:
        """Render as a SubscriptionPurchasesDeferRequest (int64 values are strings)."""
        return {
            "deferralInfo": {
                "expectedExpiryTimeMillis": str(self.expected_expiry_time_millis),
                "desiredExpiryTimeMillis": str(self.desired_expiry_time_millis),
            }
        }


@dataclass(frozen=True)
class VerificationResult:
    """Normalized result of a purchase lookup."""

    receipt: dict[str, Any]  # raw purchase resource returned by Google Play
    transaction_id: str
    product_id: str
    purchase_date: int | None
    expiration_date: int | None  # None: the purchase does not expire

    def is_expired(self, now_millis: int) -> bool:
        """Check if the purchase expired before ``now_millis``."""
        if self.expiration_date is None:
            return False
        return self.expiration_date <= now_millis
