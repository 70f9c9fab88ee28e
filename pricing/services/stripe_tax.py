# pricing/services/stripe_tax.py

"""
Sales-tax estimation for an order.

Line items go to Stripe Tax with the delivery fee as `shipping_cost`. When the
platform is configured for manual tax, or Stripe reports zero tax for an
address we have a local rate for, the local ZIP/state table is used instead.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional

import stripe
from django.conf import settings

from pricing.constants import TAX_METHOD_MANUAL
from pricing.services.tax_line_items import TaxableLineItem, build_tax_line_items
from pricing.services.tax_rates import calculate_local_tax
from pricing.utils.money import from_cents, to_cents, to_decimal

logger = logging.getLogger(__name__)


def address_to_string(address) -> str:
    """Flatten a Stripe-style address dict for the local rate lookup."""
    if not address:
        return ""
    if isinstance(address, str):
        return address.strip()
    line1 = address.get("line1") or ""
    city = address.get("city") or ""
    state = address.get("state") or ""
    postal_code = address.get("postal_code") or ""
    return f"{line1} {city}, {state} {postal_code}".strip()


def _stripe_line_items(line_items: List[TaxableLineItem]) -> List[Dict[str, Any]]:
    # Stripe Tax calculations take amount/reference/tax_code only
    payload = []
    for item in line_items:
        entry: Dict[str, Any] = {"amount": item.amount, "reference": item.reference}
        if item.tax_code:
            entry["tax_code"] = item.tax_code
        payload.append(entry)
    return payload


def _breakdown_entry(entry) -> Dict[str, Any]:
    details = entry.get("tax_rate_details") or {}
    return {
        "amount": from_cents(entry.get("amount") or 0),
        "taxable_amount": from_cents(entry.get("taxable_amount") or 0),
        "tax_rate": to_decimal(details.get("percentage_decimal")),
        "jurisdiction": details.get("state") or details.get("country") or "",
        "tax_type": details.get("tax_type") or "",
        "taxability_reason": entry.get("taxability_reason") or "",
    }


def estimate_tax(
    line_items: List[TaxableLineItem],
    address: Dict[str, Any],
    delivery_fee=0,
    currency: str | None = None,
    address_source: str = "shipping",
) -> Dict[str, Any]:
    """
    Create a Stripe Tax calculation.

    Returns:
        {
            'success': bool,
            'tax_amount': Decimal,
            'total_amount': Decimal,
            'breakdown': list,
            'calculation_id': str | None,
            'message': str,
        }
    """
    stripe.api_key = getattr(settings, "STRIPE_SECRET_KEY", "")
    currency = (currency or getattr(settings, "TAX_CURRENCY", "usd")).lower()

    params: Dict[str, Any] = {
        "currency": currency,
        "line_items": _stripe_line_items(line_items),
        "customer_details": {
            "address": address,
            "address_source": address_source,
        },
    }

    delivery_cents = to_cents(delivery_fee)
    if delivery_cents > 0:
        params["shipping_cost"] = {"amount": delivery_cents}

    try:
        calculation = stripe.tax.Calculation.create(**params)
    except stripe.StripeError as e:
        logger.error(f"Stripe Tax calculation failed: {e}")
        return {
            "success": False,
            "tax_amount": Decimal("0.00"),
            "total_amount": Decimal("0.00"),
            "breakdown": [],
            "calculation_id": None,
            "message": str(e),
        }

    tax_amount = from_cents(calculation["tax_amount_exclusive"] or 0)
    total_amount = from_cents(calculation["amount_total"] or 0)
    breakdown = [_breakdown_entry(entry) for entry in (calculation.get("tax_breakdown") or [])]

    logger.info(f"Stripe Tax calculation {calculation['id']}: tax={tax_amount} total={total_amount}")

    return {
        "success": True,
        "tax_amount": tax_amount,
        "total_amount": total_amount,
        "breakdown": breakdown,
        "calculation_id": calculation["id"],
        "message": "ok",
    }


def _local_result(pre_tax_total: Decimal, location: str) -> Dict[str, Any]:
    local = calculate_local_tax(pre_tax_total, location)
    return {
        "success": True,
        "tax_amount": local["amount"],
        "total_amount": pre_tax_total + local["amount"],
        "breakdown": [{
            "amount": local["amount"],
            "tax_rate": local["rate"],
            "jurisdiction": local["description"],
        }],
        "calculation_id": None,
        "message": f"Local tax rate for {local['jurisdiction']}",
    }


def calculate_order_tax(
    services: List[Any],
    selected_items: Dict[str, Any],
    address,
    service_fee=0,
    delivery_fee=0,
    adjustments_total=0,
    method: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Estimate tax for a whole order.

    `address` is a Stripe address dict (line1, city, state, postal_code,
    country) or, for manual mode, a plain location string.
    """
    method = method or getattr(settings, "TAX_CALCULATION_METHOD", "stripe_automatic")
    line_items = build_tax_line_items(services, selected_items, service_fee, delivery_fee, adjustments_total)

    pre_tax_total = from_cents(sum(item.amount for item in line_items)) + to_decimal(delivery_fee)
    location = address_to_string(address)

    if method == TAX_METHOD_MANUAL or isinstance(address, str):
        result = _local_result(pre_tax_total, location)
    else:
        result = estimate_tax(line_items, address, delivery_fee)
        if result["success"] and result["tax_amount"] == 0 and location:
            fallback = _local_result(pre_tax_total, location)
            if fallback["tax_amount"] > 0:
                logger.warning(
                    f"Stripe returned $0 tax (calculation {result['calculation_id']}), "
                    f"using local rate: {fallback['message']}"
                )
                result = fallback

    result["line_items"] = [item.as_dict() for item in line_items]
    return result
