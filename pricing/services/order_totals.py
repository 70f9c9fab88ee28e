# pricing/services/order_totals.py

"""
Order totals across every service in a booking.

    subtotal      = sum of per-service totals
    service fee   = percentage / fixed / hybrid of the subtotal (waivable)
    delivery fee  = sum of the band fees of services that deliver to the address
    adjustments   = custom surcharges and discounts (fixed or % of subtotal)
    tax           = local rate on subtotal + service fee + delivery + taxable adjustments
    total         = subtotal + service fee + delivery + adjustments + tax

Per-service subtotals are kept so each vendor's delivery minimum is checked
against what the customer actually ordered from that vendor.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pricing.constants import (
    ADJUSTMENT_MODE_DISCOUNT,
    ADJUSTMENT_TYPE_PERCENTAGE,
    DEFAULT_SERVICE_FEE_PERCENTAGE,
    SERVICE_FEE_FIXED,
    SERVICE_FEE_HYBRID,
    SERVICE_FEE_PERCENTAGE,
)
from pricing.exceptions import PricingConfigurationError
from pricing.service_details import CateringDetails, ServiceRecord, normalize_service
from pricing.services.catering import calculate_catering_from_selections
from pricing.services.delivery import calculate_delivery
from pricing.services.tax_line_items import service_line_items
from pricing.services.tax_rates import calculate_local_tax
from pricing.utils.distance import get_service_address
from pricing.utils.money import from_cents, quantize_money, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class ServiceFeeSettings:
    fee_type: str = SERVICE_FEE_PERCENTAGE
    percentage: Decimal = DEFAULT_SERVICE_FEE_PERCENTAGE
    fixed: Decimal = Decimal("0")

    @classmethod
    def from_dict(cls, raw: Optional[Dict[str, Any]]) -> "ServiceFeeSettings":
        raw = raw or {}
        percentage = to_decimal(raw.get("percentage", raw.get("serviceFeePercentage")), default=None)
        return cls(
            fee_type=str(raw.get("type") or raw.get("serviceFeeType") or SERVICE_FEE_PERCENTAGE).lower(),
            percentage=percentage if percentage is not None else DEFAULT_SERVICE_FEE_PERCENTAGE,
            fixed=to_decimal(raw.get("fixed", raw.get("serviceFeeFixed"))),
        )

    def fee_for(self, subtotal: Decimal) -> Decimal:
        percentage_fee = subtotal * self.percentage / Decimal("100")
        if self.fee_type == SERVICE_FEE_FIXED:
            return self.fixed
        if self.fee_type == SERVICE_FEE_HYBRID:
            return percentage_fee + self.fixed
        return percentage_fee


@dataclass
class OrderTotals:
    subtotal: Decimal
    service_subtotals: Dict[str, Decimal]
    service_fee: Decimal
    delivery_fee: Decimal
    delivery_details: Dict[str, Any]
    delivery_quotes: Dict[str, Dict[str, Any]]
    adjustments: List[Dict[str, Any]]
    adjustments_total: Decimal
    taxable_adjustments_total: Decimal
    tax: Decimal
    tax_data: Dict[str, Any]
    total: Decimal
    is_tax_exempt: bool = False
    is_service_fee_waived: bool = False
    skipped_services: List[str] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": self.subtotal,
            "service_subtotals": dict(self.service_subtotals),
            "service_fee": self.service_fee,
            "delivery_fee": self.delivery_fee,
            "delivery_details": self.delivery_details,
            "delivery_quotes": self.delivery_quotes,
            "adjustments": self.adjustments,
            "adjustments_total": self.adjustments_total,
            "taxable_adjustments_total": self.taxable_adjustments_total,
            "tax": self.tax,
            "tax_data": self.tax_data,
            "total": self.total,
            "is_tax_exempt": self.is_tax_exempt,
            "is_service_fee_waived": self.is_service_fee_waived,
            "skipped_services": list(self.skipped_services),
        }


def _precomputed_total(raw) -> Optional[Decimal]:
    if not isinstance(raw, dict):
        return None
    total = to_decimal(raw.get("totalPrice", raw.get("total_price")), default=None)
    return total if total is not None and total > 0 else None


def calculate_service_total(service, selected_items: Dict[str, Any] | None = None, guest_count=1) -> Decimal:
    """
    Total for one service.

    A positive `totalPrice` already on the record wins. Catering with matching
    selections is priced per guest; everything else is the sum of its item
    line amounts, or its base price by price type when nothing is selected.
    Raises PricingConfigurationError for malformed records.
    """
    precomputed = _precomputed_total(service)
    if precomputed is not None:
        return precomputed

    record = service if isinstance(service, ServiceRecord) else normalize_service(service)
    selected_items = selected_items or {}

    if isinstance(record.details, CateringDetails) and selected_items:
        calculation = calculate_catering_from_selections(selected_items, record.details, guest_count, record.id)
        if calculation.additional_charges or calculation.included_items or calculation.base_price_per_person > 0:
            return calculation.final_total

    lines = service_line_items(record, selected_items, guest_count)
    return sum((from_cents(line.amount) for line in lines), Decimal("0"))


def _delivery_options_for(raw: Dict[str, Any]):
    details = raw.get("service_details", raw.get("serviceDetails"))
    if isinstance(details, dict):
        catering = details.get("catering") if isinstance(details.get("catering"), dict) else {}
        options = details.get("deliveryOptions") or catering.get("deliveryOptions") or details.get("delivery_options")
        if options is not None:
            return options
    return raw.get("delivery_options", raw.get("deliveryOptions"))


def apply_adjustments(adjustments: List[Dict[str, Any]] | None, subtotal: Decimal) -> List[Dict[str, Any]]:
    """
    Resolve custom adjustments to signed amounts.

    Percentage adjustments apply to the service subtotal only. Entries without
    a numeric value are ignored.
    """
    breakdown: List[Dict[str, Any]] = []
    for index, adjustment in enumerate(adjustments or []):
        if not isinstance(adjustment, dict):
            continue
        value = to_decimal(adjustment.get("value"), default=None)
        if value is None:
            logger.warning(f"Ignoring adjustment #{index} without a numeric value: {adjustment!r}")
            continue

        adjustment_type = adjustment.get("type") or "fixed"
        mode = adjustment.get("mode") or "surcharge"
        amount = subtotal * value / Decimal("100") if adjustment_type == ADJUSTMENT_TYPE_PERCENTAGE else value
        if mode == ADJUSTMENT_MODE_DISCOUNT:
            amount = -amount

        breakdown.append({
            "id": str(adjustment.get("id") or f"adjustment_{index}"),
            "label": str(adjustment.get("label") or ""),
            "amount": quantize_money(amount),
            "taxable": adjustment.get("taxable") is not False,
            "mode": mode,
            "type": adjustment_type,
            "value": value,
        })
    return breakdown


def calculate_order_totals(
    services: List[Dict[str, Any]],
    selected_items: Dict[str, Any] | None = None,
    delivery_address: str = "",
    fee_settings: ServiceFeeSettings | Dict[str, Any] | None = None,
    distance_miles=None,
    adjustments: List[Dict[str, Any]] | None = None,
    distances_by_service: Dict[str, Any] | None = None,
    tax_exempt: bool = False,
    service_fee_waived: bool = False,
    guest_count=1,
) -> OrderTotals:
    """
    Subtotal, service fee, delivery, adjustments, tax and total for an order.

    Delivery is only quoted when a delivery address is given. A service that
    is distance-eligible adds its band fee even when its minimum is not met;
    the shortfall is reported in `delivery_details['minimum_warnings']`.
    Malformed service records are logged and left out of the totals.
    """
    selected_items = selected_items or {}
    distances_by_service = distances_by_service or {}
    if not isinstance(fee_settings, ServiceFeeSettings):
        fee_settings = ServiceFeeSettings.from_dict(fee_settings)

    subtotal = Decimal("0")
    service_subtotals: Dict[str, Decimal] = {}
    priced: List[tuple] = []
    skipped: List[str] = []

    for index, raw in enumerate(services or []):
        try:
            record = normalize_service(raw, index)
            service_total = calculate_service_total(raw if _precomputed_total(raw) else record, selected_items, guest_count)
        except PricingConfigurationError as e:
            logger.error(f"Service #{index} left out of order totals: {e}")
            skipped.append(str(raw.get("id") or f"service_{index}") if isinstance(raw, dict) else f"service_{index}")
            continue

        service_subtotals[record.id] = service_subtotals.get(record.id, Decimal("0")) + service_total
        subtotal += service_total
        priced.append((raw, record))

    service_fee = Decimal("0") if service_fee_waived else quantize_money(fee_settings.fee_for(subtotal))

    breakdown = apply_adjustments(adjustments, subtotal)
    taxable_adjustments = sum((a["amount"] for a in breakdown if a["taxable"]), Decimal("0"))
    adjustments_total = sum((a["amount"] for a in breakdown), Decimal("0"))

    delivery_fee = Decimal("0")
    delivery_quotes: Dict[str, Dict[str, Any]] = {}
    delivery_details: Dict[str, Any] = {
        "eligible": False,
        "range": "N/A",
        "reason": "No delivery services selected",
        "minimum_warnings": [],
    }

    if (delivery_address or "").strip():
        any_delivery = False
        distance_eligible = True
        noted_range = None
        noted_reason = None
        minimum_warnings: List[Dict[str, Any]] = []

        for raw, record in priced:
            options = _delivery_options_for(raw)
            if not isinstance(options, dict) or not options.get("delivery"):
                continue
            any_delivery = True

            service_subtotal = service_subtotals.get(record.id, Decimal("0"))
            distance = distances_by_service.get(record.id, distance_miles)
            quote = calculate_delivery(delivery_address, options, service_subtotal, distance)
            delivery_quotes[record.id] = {**quote.as_dict(), "origin": get_service_address(raw)}

            noted_range = noted_range or quote.range
            if quote.distance_eligible:
                delivery_fee += quote.fee
                if not quote.minimum_eligible and quote.minimum_required:
                    minimum_warnings.append({
                        "vendor": raw.get("vendorName") or record.name,
                        "required": quote.minimum_required,
                        "current": service_subtotal,
                    })
            else:
                distance_eligible = False
                noted_reason = quote.reason or noted_reason

        if any_delivery:
            delivery_details = {
                "eligible": distance_eligible,
                "range": noted_range or "varies",
                "reason": None if distance_eligible else noted_reason or "Delivery not available to this location",
                "minimum_warnings": minimum_warnings,
            }

    if tax_exempt:
        tax = Decimal("0.00")
        tax_data = {"rate": Decimal("0"), "description": "Tax Exempt - No tax applicable", "jurisdiction": "Tax Exempt"}
    elif (delivery_address or "").strip():
        taxable_base = subtotal + service_fee + delivery_fee + taxable_adjustments
        local = calculate_local_tax(taxable_base, delivery_address)
        tax = local["amount"]
        tax_data = {"rate": local["rate"], "description": local["description"], "jurisdiction": local["jurisdiction"]}
    else:
        tax = Decimal("0.00")
        tax_data = {"rate": Decimal("0"), "description": "No tax", "jurisdiction": "None"}

    total = subtotal + service_fee + delivery_fee + adjustments_total + tax
    logger.info(
        f"Order totals: subtotal={subtotal} fee={service_fee} delivery={delivery_fee} "
        f"adjustments={adjustments_total} tax={tax} total={total}"
    )

    return OrderTotals(
        subtotal=subtotal,
        service_subtotals=service_subtotals,
        service_fee=service_fee,
        delivery_fee=delivery_fee,
        delivery_details=delivery_details,
        delivery_quotes=delivery_quotes,
        adjustments=breakdown,
        adjustments_total=adjustments_total,
        taxable_adjustments_total=taxable_adjustments,
        tax=tax,
        tax_data=tax_data,
        total=total,
        is_tax_exempt=tax_exempt,
        is_service_fee_waived=service_fee_waived,
        skipped_services=skipped,
    )
