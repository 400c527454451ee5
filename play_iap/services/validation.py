"""
Payment Validator.

Checks payments, service account credentials and deferral requests before
any network call is made. All checks raise PaymentValidationError.
"""

import json
from collections.abc import Mapping
from typing import Any

from play_iap.exceptions import PaymentValidationError
from play_iap.models.google_play import (
    DEFAULT_TOKEN_URI,
    DeferralInfo,
    KeyObjectInput,
    Payment,
    ServiceAccountKey,
)


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise PaymentValidationError(message)


def _is_int(value: Any) -> bool:
    # bool is an int subclass; True is not a timestamp
    return isinstance(value, int) and not isinstance(value, bool)


def parse_key_object(key_object: KeyObjectInput | ServiceAccountKey) -> Any:
    """
    Deserialize a key object that arrived as JSON text.

    Mappings and ServiceAccountKey instances are returned unchanged.
    """
    if isinstance(key_object, (str, bytes, bytearray)):
        try:
            return json.loads(key_object)
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise PaymentValidationError("Google API key object is not valid JSON") from exc
    return key_object


def validate_key_object(key_object: KeyObjectInput | ServiceAccountKey) -> ServiceAccountKey:
    """Validate a service account credential and return it normalized."""
    if isinstance(key_object, ServiceAccountKey):
        parsed: Any = key_object.to_info()
    else:
        parsed = parse_key_object(key_object)

    _require(parsed is not None and parsed != "", "Google API key object must be provided")
    _require(isinstance(parsed, Mapping), "Google API key object must be an object")
    _require(
        isinstance(parsed.get("client_email"), str),
        "Google API client_email must be a string",
    )
    _require(
        isinstance(parsed.get("private_key"), str),
        "Google API private_key must be a string",
    )

    token_uri = parsed.get("token_uri")
    return ServiceAccountKey(
        client_email=parsed["client_email"],
        private_key=parsed["private_key"],
        token_uri=token_uri if isinstance(token_uri, str) and token_uri else DEFAULT_TOKEN_URI,
    )


def validate_payment(payment: Payment) -> ServiceAccountKey:
    """
    Validate a payment and its credential.

    Returns:
        The normalized service account key

    Raises:
        PaymentValidationError: If any required field is missing or mistyped
    """
    _require(isinstance(payment, Payment), "Payment must be a Payment")
    _require(isinstance(payment.package_name, str), "Package name must be a string")
    _require(isinstance(payment.product_id, str), "Product ID must be a string")
    _require(isinstance(payment.receipt, str), "Receipt must be a string")

    return validate_key_object(payment.key_object)


def validate_deferral_info(deferral_info: DeferralInfo | Mapping[str, Any]) -> DeferralInfo:
    """Validate a deferral request; accepts a DeferralInfo or its camelCase mapping."""
    if isinstance(deferral_info, Mapping):
        deferral_info = DeferralInfo.from_dict(deferral_info)

    _require(isinstance(deferral_info, DeferralInfo), "deferralInfo must be an object")
    _require(
        _is_int(deferral_info.expected_expiry_time_millis),
        "expectedExpiryTimeMillis must be a number",
    )
    _require(
        _is_int(deferral_info.desired_expiry_time_millis),
        "desiredExpiryTimeMillis must be a number",
    )
    _require(
        deferral_info.desired_expiry_time_millis > deferral_info.expected_expiry_time_millis,
        "desiredExpiryTimeMillis must be greater than expectedExpiryTimeMillis",
    )
    return deferral_info
