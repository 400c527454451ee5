"""
Exception Classes - Strongly typed exception hierarchy.

Every failure of a receipt operation surfaces as one of these.
"""


class ReceiptValidationError(Exception):
    """Base exception for all receipt validation errors."""

    pass


class PaymentValidationError(ReceiptValidationError):
    """Raised when a payment, credential or deferral request is malformed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class AuthError(ReceiptValidationError):
    """Raised when the service account token exchange fails."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Authentication failed: {message}")


class TransportError(ReceiptValidationError):
    """Raised when the HTTPS call to Google Play cannot be completed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Transport error: {message}")


class UnexpectedStatusError(ReceiptValidationError):
    """Raised when Google Play answers with a non-success status code."""

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Received {status_code} status code with body: {body}")


class ResponseParseError(ReceiptValidationError):
    """Raised when a Google Play response body cannot be parsed."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Response parse error: {message}")
