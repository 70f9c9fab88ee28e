# pricing/services/tax_line_items.py

"""
Line items for the external tax calculation (Stripe Tax).

Each selected catalog item becomes one line item tagged with the tax code of
its service type. A service with nothing itemized is sent as one line item
for the service itself. The service fee is sent untaxed, adjustments are
taxed as goods, and the delivery fee is never a line item (it travels as the
calculation's shipping cost).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pricing.constants import (
    ADJUSTMENTS_REFERENCE,
    ADJUSTMENTS_TAX_CODE,
    DEFAULT_TAX_CODE,
    DURATION_SUFFIX,
    SERVICE_FEE_REFERENCE,
    SERVICE_TYPE_STAFF,
    TAX_CODES_BY_SERVICE_TYPE,
)
from pricing.exceptions import PricingConfigurationError
from pricing.service_details import (
    CatalogItem,
    ServiceRecord,
    StaffDetails,
    normalize_service,
    normalize_service_type,
    pricing_input_for,
)
from pricing.utils.money import to_cents, to_decimal

logger = logging.getLogger(__name__)


@dataclass
class TaxableLineItem:
    amount: int
    reference: str
    tax_code: Optional[str] = None
    product_data: Optional[Dict[str, str]] = None

    def as_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"amount": self.amount, "reference": self.reference}
        if self.tax_code:
            data["tax_code"] = self.tax_code
        if self.product_data:
            data["product_data"] = dict(self.product_data)
        return data


def get_tax_code(service_type: str | None) -> str:
    """Stripe Tax code for a service type; unknown types are taxed as services."""
    return TAX_CODES_BY_SERVICE_TYPE.get(normalize_service_type(service_type), DEFAULT_TAX_CODE)


def _resolve_item(service: ServiceRecord, item_key: str):
    """
    Match a selected-item key to a catalog entry.

    Tries the key with a "{service_id}_" prefix stripped, then the bare key.
    Returns (item_id, CatalogItem) or (None, None).
    """
    catalog = service.details.catalog
    prefix = f"{service.id}_"

    if item_key.startswith(prefix):
        stripped = item_key[len(prefix):]
        item = next((entry for entry in catalog if entry.matches(stripped)), None)
        if item is not None:
            return stripped, item

    item = next((entry for entry in catalog if entry.matches(item_key)), None)
    if item is not None:
        return item_key, item
    return None, None


def _staff_duration(
    service: ServiceRecord,
    selected_items: Dict[str, Any],
    item_key: str,
    item_id: str,
) -> Decimal:
    """Hours to bill for a staff item, never below the service's minimum hours."""
    minimum_hours = service.details.minimum_hours if isinstance(service.details, StaffDetails) else Decimal("1")

    duration = None
    for key in (f"{item_key}{DURATION_SUFFIX}", f"{item_id}{DURATION_SUFFIX}"):
        duration = to_decimal(selected_items.get(key), default=None)
        if duration:
            break

    if not duration:
        duration = service.duration or minimum_hours
    return max(duration, minimum_hours)


def _item_line(
    service: ServiceRecord,
    item: CatalogItem,
    item_id: str,
    quantity: Decimal,
    duration: Optional[Decimal],
    tax_code: str,
) -> Optional[TaxableLineItem]:
    effective_quantity = max(quantity, Decimal(item.min_quantity or 1))
    amount = item.price * effective_quantity * (duration or Decimal("1"))
    if amount <= 0:
        return None

    return TaxableLineItem(
        amount=to_cents(amount),
        reference=f"{service.id}_{item_id}",
        tax_code=tax_code,
        product_data={
            "name": (item.display_name or f"{service.name} - {item_id}").strip(),
            "description": (item.description or f"{service.service_type} item from {service.name}").strip(),
        },
    )


def _service_line(service: ServiceRecord, tax_code: str, guest_count=1) -> Optional[TaxableLineItem]:
    pricing = pricing_input_for(service)
    amount = pricing.amount_for(
        service.quantity,
        service.duration,
        guest_count,
        timed=service.service_type == SERVICE_TYPE_STAFF,
    )
    if amount <= 0:
        return None

    return TaxableLineItem(
        amount=to_cents(amount),
        reference=service.id,
        tax_code=tax_code,
        product_data={
            "name": service.name.strip(),
            "description": f"{service.service_type} service".strip(),
        },
    )


def service_line_items(
    service: ServiceRecord,
    selected_items: Dict[str, Any],
    guest_count=1,
) -> List[TaxableLineItem]:
    """Line items for one service: its selected catalog items, or the service itself."""
    tax_code = get_tax_code(service.service_type)
    lines: List[TaxableLineItem] = []

    if service.details.catalog:
        for item_key, raw_quantity in selected_items.items():
            if item_key.endswith(DURATION_SUFFIX):
                continue
            quantity = to_decimal(raw_quantity, default=None)
            if quantity is None or quantity <= 0:
                continue

            item_id, item = _resolve_item(service, item_key)
            if item is None:
                continue

            duration = None
            if service.service_type == SERVICE_TYPE_STAFF:
                duration = _staff_duration(service, selected_items, item_key, item_id)

            line = _item_line(service, item, item_id, quantity, duration, tax_code)
            if line is not None:
                lines.append(line)

    if not lines:
        line = _service_line(service, tax_code, guest_count)
        if line is not None:
            lines.append(line)

    return lines


def validate_line_items(line_items: List[TaxableLineItem]) -> List[TaxableLineItem]:
    """Drop line items Stripe Tax would reject: negative or non-integer amounts, blank references."""
    valid: List[TaxableLineItem] = []
    for item in line_items:
        amount_ok = isinstance(item.amount, int) and not isinstance(item.amount, bool) and item.amount >= 0
        reference_ok = isinstance(item.reference, str) and bool(item.reference.strip())
        if amount_ok and reference_ok:
            valid.append(item)
        else:
            logger.warning(f"Dropping invalid tax line item: amount={item.amount!r} reference={item.reference!r}")
    return valid


def build_tax_line_items(
    services: List[Any],
    selected_items: Dict[str, Any] | None,
    service_fee=0,
    delivery_fee=0,
    adjustments_total=0,
    guest_count=1,
) -> List[TaxableLineItem]:
    """
    Build the taxable line items for an order.

    `services` may hold raw service records or ServiceRecord instances.
    `delivery_fee` is accepted for symmetry with the order totals but never
    becomes a line item. `guest_count` only affects per-person services
    priced as a whole.
    """
    selected_items = selected_items or {}
    line_items: List[TaxableLineItem] = []

    for index, raw in enumerate(services or []):
        try:
            service = raw if isinstance(raw, ServiceRecord) else normalize_service(raw, index)
        except PricingConfigurationError as e:
            logger.error(f"Service #{index} left out of tax line items: {e}")
            continue
        line_items.extend(service_line_items(service, selected_items, guest_count))

    service_fee = to_decimal(service_fee)
    if service_fee > 0:
        line_items.append(TaxableLineItem(amount=to_cents(service_fee), reference=SERVICE_FEE_REFERENCE))

    adjustments_total = to_decimal(adjustments_total)
    if adjustments_total != 0:
        line_items.append(TaxableLineItem(
            amount=to_cents(adjustments_total),
            reference=ADJUSTMENTS_REFERENCE,
            tax_code=ADJUSTMENTS_TAX_CODE,
        ))

    if to_decimal(delivery_fee) > 0:
        logger.debug(f"Delivery fee {delivery_fee} left out of line items (sent as shipping cost)")

    return validate_line_items(line_items)
