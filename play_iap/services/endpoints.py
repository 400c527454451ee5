"""
Google Play Developer API endpoint builders.

https://developers.google.com/android-publisher/api-ref/rest/v3/purchases
"""

from urllib.parse import quote, urlencode

PUBLISHER_SCOPE = "https://www.googleapis.com/auth/androidpublisher"

API_BASE_URL = "https://androidpublisher.googleapis.com/androidpublisher/v3/applications"


def _build(
    package_name: str,
    kind: str,
    product_id: str,
    receipt: str,
    token: str,
    action: str | None = None,
    base_url: str = API_BASE_URL,
) -> str:
    path = "/".join(
        [
            base_url.rstrip("/"),
            quote(package_name, safe=""),
            "purchases",
            kind,
            quote(product_id, safe=""),
            "tokens",
            quote(receipt, safe=""),
        ]
    )
    if action:
        path = f"{path}:{action}"
    return f"{path}?{urlencode({'access_token': token})}"


def purchases_products_get(
    package_name: str, product_id: str, receipt: str, token: str, base_url: str = API_BASE_URL
) -> str:
    """URL for purchases.products.get (one-time products)."""
    return _build(package_name, "products", product_id, receipt, token, base_url=base_url)


def purchases_subscriptions_get(
    package_name: str, product_id: str, receipt: str, token: str, base_url: str = API_BASE_URL
) -> str:
    """URL for purchases.subscriptions.get."""
    return _build(package_name, "subscriptions", product_id, receipt, token, base_url=base_url)


def purchases_subscriptions_cancel(
    package_name: str, product_id: str, receipt: str, token: str, base_url: str = API_BASE_URL
) -> str:
    """URL for purchases.subscriptions.cancel."""
    return _build(
        package_name, "subscriptions", product_id, receipt, token, "cancel", base_url=base_url
    )


def purchases_subscriptions_defer(
    package_name: str, product_id: str, receipt: str, token: str, base_url: str = API_BASE_URL
) -> str:
    """URL for purchases.subscriptions.defer."""
    return _build(
        package_name, "subscriptions", product_id, receipt, token, "defer", base_url=base_url
    )
