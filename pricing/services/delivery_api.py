# pricing/services/delivery_api.py

"""
Remote delivery-fee service.

The backend can quote delivery itself (it knows real road distances and
vendor overrides). When it answers, its quote replaces the local one for that
call; when it doesn't (not configured, network error, timeout, non-2xx, or a
payload we can't read) we price locally. An unavailable API never means
"not eligible".
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import requests
from django.conf import settings

from pricing.exceptions import DeliveryApiUnavailable
from pricing.services.delivery import DeliveryQuote, calculate_delivery
from pricing.utils.money import to_decimal

logger = logging.getLogger(__name__)


def _api_headers(api_key: str) -> Dict[str, str]:
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if api_key:
        headers["Authorization"] = f"Bearer {api_key}"
    return headers


def _json_number(value) -> Optional[float]:
    d = to_decimal(value, default=None)
    return float(d) if d is not None else None


def parse_remote_quote(data: Dict[str, Any]) -> DeliveryQuote:
    """
    Read the endpoint's camelCase response into a DeliveryQuote.
    Raises DeliveryApiUnavailable when required fields are missing or invalid.
    """
    if isinstance(data, dict) and isinstance(data.get("data"), dict):
        data = data["data"]
    if not isinstance(data, dict):
        raise DeliveryApiUnavailable(f"Unexpected delivery API payload: {data!r}")

    missing = [key for key in ("fee", "eligible") if key not in data]
    if missing:
        raise DeliveryApiUnavailable(f"Delivery API response missing {', '.join(missing)}")

    fee = to_decimal(data.get("fee"), default=None)
    if fee is None:
        raise DeliveryApiUnavailable(f"Delivery API returned an invalid fee: {data.get('fee')!r}")

    eligible = bool(data.get("eligible"))
    return DeliveryQuote(
        fee=fee,
        eligible=eligible,
        range=str(data.get("range") or "N/A"),
        reason=str(data.get("reason") or ""),
        minimum_required=to_decimal(data.get("minimumRequired"), default=None),
        distance_eligible=bool(data.get("distanceEligible", eligible)),
        minimum_eligible=bool(data.get("minimumEligible", eligible)),
        source="api",
    )


class ApiDeliveryCalculator:
    """Delivery quotes from the remote endpoint, falling back to local rules."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
    ) -> None:
        self.base_url = base_url if base_url is not None else getattr(settings, "DELIVERY_API_URL", "")
        self.api_key = api_key if api_key is not None else getattr(settings, "DELIVERY_API_KEY", "")
        self.timeout = timeout if timeout is not None else getattr(settings, "DELIVERY_API_TIMEOUT", 10)

    def _request_quote(
        self,
        delivery_address: str,
        order_subtotal,
        service_id: str | None,
        vendor_id: str | None,
        distance_miles,
    ) -> DeliveryQuote:
        if not self.base_url:
            raise DeliveryApiUnavailable("Delivery API URL is not configured")

        payload: Dict[str, Any] = {
            "deliveryAddress": delivery_address,
            "orderSubtotal": _json_number(order_subtotal) or 0.0,
        }
        if service_id:
            payload["serviceId"] = service_id
        if vendor_id:
            payload["vendorId"] = vendor_id
        if distance_miles is not None:
            payload["distanceMiles"] = _json_number(distance_miles)

        try:
            response = requests.post(
                self.base_url,
                headers=_api_headers(self.api_key),
                json=payload,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout as e:
            raise DeliveryApiUnavailable("Delivery API request timed out") from e
        except requests.exceptions.RequestException as e:
            raise DeliveryApiUnavailable(f"Delivery API request failed: {e}") from e

        if not 200 <= response.status_code < 300:
            raise DeliveryApiUnavailable(f"Delivery API returned HTTP {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise DeliveryApiUnavailable("Delivery API returned invalid JSON") from e

        if isinstance(data, dict) and data.get("success") is False:
            raise DeliveryApiUnavailable(data.get("error") or data.get("message") or "Delivery API reported failure")

        return parse_remote_quote(data)

    def fetch_quote(
        self,
        delivery_address: str,
        order_subtotal,
        service_id: str | None = None,
        vendor_id: str | None = None,
        distance_miles=None,
    ) -> Dict[str, Any]:
        """
        Ask the remote endpoint for a quote.

        Returns:
            {
                'success': bool,
                'quote': DeliveryQuote | None,
                'message': str,
            }
        """
        try:
            quote = self._request_quote(delivery_address, order_subtotal, service_id, vendor_id, distance_miles)
        except DeliveryApiUnavailable as e:
            logger.warning(f"Delivery API unavailable for service {service_id}: {e}")
            return {"success": False, "quote": None, "message": str(e)}

        logger.info(f"Delivery API quote for service {service_id}: fee={quote.fee} eligible={quote.eligible}")
        return {"success": True, "quote": quote, "message": "ok"}

    def calculate(
        self,
        delivery_address: str,
        options,
        order_subtotal,
        distance_miles=None,
        service_id: str | None = None,
        vendor_id: str | None = None,
    ) -> DeliveryQuote:
        """Remote quote when available, otherwise the local calculation."""
        result = self.fetch_quote(delivery_address, order_subtotal, service_id, vendor_id, distance_miles)
        if result["success"]:
            return result["quote"]
        return calculate_delivery(delivery_address, options, order_subtotal, distance_miles)
