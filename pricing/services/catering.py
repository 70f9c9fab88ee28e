# pricing/services/catering.py

"""
Catering order price calculation.

Formula:
    total = base_price_per_person * guests + sum(additional item totals)

Additional items come in two kinds:
- upcharges (additional_charge > 0, or menu items priced per guest):
  additional_charge * guests, whatever quantity was picked. A premium upgrade
  applies to everyone at the event.
- standalone add-ons with their own unit price:
  (unit_price + additional_charge) * quantity * guests.

Combo category items are already bucketed by `extract_catering_items`.
Premium ones are upcharges. Plain ones are covered by the combo's per-person
price and only show up in `included_items`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pricing.exceptions import PricingConfigurationError
from pricing.service_details import CatalogItem, CateringDetails, adapt_catering
from pricing.utils.money import to_decimal

logger = logging.getLogger(__name__)


@dataclass
class CateringItemBreakdown:
    name: str
    quantity: int
    unit_price: Decimal
    additional_charge: Decimal
    total_price: Decimal
    is_menu_item: bool = False

    def as_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "additional_charge": self.additional_charge,
            "total_price": self.total_price,
            "is_menu_item": self.is_menu_item,
        }


@dataclass
class CateringPriceCalculation:
    base_price_per_person: Decimal
    guest_count: int
    base_price_total: Decimal
    additional_charges: List[CateringItemBreakdown] = field(default_factory=list)
    additional_charges_total: Decimal = Decimal("0")
    additional_charges_per_person: Decimal = Decimal("0")
    final_total: Decimal = Decimal("0")
    included_items: List[CateringItemBreakdown] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "base_price_per_person": self.base_price_per_person,
            "guest_count": self.guest_count,
            "base_price_total": self.base_price_total,
            "additional_charges": [item.as_dict() for item in self.additional_charges],
            "additional_charges_total": self.additional_charges_total,
            "additional_charges_per_person": self.additional_charges_per_person,
            "final_total": self.final_total,
            "included_items": [item.as_dict() for item in self.included_items],
        }


def _field(item, *names, default=None):
    """Read the first present attribute/key among `names` (dict or object)."""
    for name in names:
        if isinstance(item, dict):
            if name in item and item[name] is not None:
                return item[name]
        elif getattr(item, name, None) is not None:
            return getattr(item, name)
    return default


def _quantity(raw, default: int = 1) -> int:
    d = to_decimal(raw, default=None)
    if d is None:
        return default
    return max(0, int(d))


def normalize_guest_count(guest_count) -> int:
    """Guests below 1 (or unreadable) count as 1."""
    d = to_decimal(guest_count, default=None)
    if d is None:
        return 1
    return max(1, int(d))


def _additional_item_total(
    unit_price: Decimal,
    additional_charge: Decimal,
    quantity: int,
    guests: int,
    is_menu_item: bool,
) -> Decimal:
    if additional_charge > 0 or is_menu_item:
        return additional_charge * guests
    return (unit_price + additional_charge) * quantity * guests


def calculate_catering_price(
    base_price_per_person,
    additional_charges: Optional[List[Any]] = None,
    guest_count=1,
    combo_category_items: Optional[List[Any]] = None,
) -> CateringPriceCalculation:
    """
    Price a catering order from pre-bucketed items.

    Items may be dicts (snake_case or camelCase keys) or objects with the
    same attribute names. Negative additional charges are treated as
    discounts and reduce the total.
    """
    guests = normalize_guest_count(guest_count)
    base_per_person = max(Decimal("0"), to_decimal(base_price_per_person))
    base_total = base_per_person * guests

    breakdown: List[CateringItemBreakdown] = []
    included: List[CateringItemBreakdown] = []

    for item in additional_charges or []:
        quantity = _quantity(_field(item, "quantity"))
        unit_price = to_decimal(_field(item, "unit_price", "unitPrice", "price"))
        additional_charge = to_decimal(_field(item, "additional_charge", "additionalCharge"))
        is_menu_item = bool(_field(item, "is_menu_item", "isMenuItem", default=False))

        breakdown.append(CateringItemBreakdown(
            name=str(_field(item, "name", default="Item")),
            quantity=quantity,
            unit_price=unit_price,
            additional_charge=additional_charge,
            total_price=_additional_item_total(unit_price, additional_charge, quantity, guests, is_menu_item),
            is_menu_item=is_menu_item,
        ))

    for item in combo_category_items or []:
        quantity = _quantity(_field(item, "quantity"))
        price = to_decimal(_field(item, "price", "unit_price", "unitPrice"))
        additional_charge = to_decimal(_field(item, "additional_charge", "additionalCharge"))
        entry = CateringItemBreakdown(
            name=str(_field(item, "name", default="Item")),
            quantity=quantity,
            unit_price=price,
            additional_charge=additional_charge,
            total_price=additional_charge * guests,
        )
        if additional_charge != 0:
            breakdown.append(entry)
        else:
            entry.total_price = Decimal("0")
            included.append(entry)

    additional_total = sum((item.total_price for item in breakdown), Decimal("0"))

    return CateringPriceCalculation(
        base_price_per_person=base_per_person,
        guest_count=guests,
        base_price_total=base_total,
        additional_charges=breakdown,
        additional_charges_total=additional_total,
        additional_charges_per_person=additional_total / guests,
        final_total=base_total + additional_total,
        included_items=included,
    )


def format_catering_calculation(calculation: CateringPriceCalculation) -> str:
    lines = [
        f"Base Price: ${calculation.base_price_per_person:.2f} x {calculation.guest_count} guests "
        f"= ${calculation.base_price_total:.2f}",
    ]

    if calculation.additional_charges:
        lines.append("")
        lines.append("Additional Charges:")
        for item in calculation.additional_charges:
            lines.append(
                f"  - {item.name} (+${item.additional_charge:.2f}) x {item.quantity} "
                f"x {calculation.guest_count} guests = ${item.total_price:.2f}"
            )

    lines.append("")
    lines.append(f"TOTAL: ${calculation.final_total:.2f}")
    return "\n".join(lines)


# =============================================================================
# SELECTION EXTRACTION
# =============================================================================

def _find(items: List[CatalogItem], key: str) -> Optional[CatalogItem]:
    return next((item for item in items if item.matches(key)), None)


def _candidate_keys(key: str, service_id: Optional[str]) -> List[str]:
    """The key with a "{service_id}_" prefix stripped first, then the bare key."""
    prefix = f"{service_id}_" if service_id else ""
    if prefix and key.startswith(prefix) and len(key) > len(prefix):
        return [key[len(prefix):], key]
    return [key]


def _find_combo_category_item(catalog: List[CatalogItem], key: str) -> Optional[CatalogItem]:
    parts = key.split("_")
    if len(parts) < 3:
        return None
    combo_id, category_id = parts[0], parts[1]
    item_id = "_".join(parts[2:])
    combo = next((c for c in catalog if c.id == combo_id and c.combo_categories), None)
    if combo is None:
        return None
    category = next((c for c in combo.combo_categories if c.id == category_id), None)
    return category.find_item(item_id) if category else None


def _catering_details(service_details) -> CateringDetails:
    if isinstance(service_details, CateringDetails):
        return service_details
    if service_details is None or isinstance(service_details, dict):
        return adapt_catering(service_details or {})
    raise PricingConfigurationError(
        f"Catering service details must be an object, got {type(service_details).__name__}"
    )


def extract_catering_items(
    selected_items: Dict[str, Any],
    service_details,
    service_id: Optional[str] = None,
) -> Dict[str, List[Dict[str, Any]]]:
    """
    Bucket a catering selection into base items (combos), additional charge
    items (individual menu items) and combo category items.

    Keys like "comboId_categoryId_itemId" address an item inside a combo
    category. Any key may carry a "{service_id}_" prefix. Unknown keys and
    non-positive quantities are skipped. Raises PricingConfigurationError
    when the details cannot be read.
    """
    details = _catering_details(service_details)

    catalog = details.menu_items + details.combos
    buckets: Dict[str, List[Dict[str, Any]]] = {
        "base_items": [],
        "additional_charge_items": [],
        "combo_category_items": [],
    }

    for key, raw_quantity in (selected_items or {}).items():
        quantity = _quantity(raw_quantity, default=0)
        if quantity <= 0:
            continue

        for candidate in _candidate_keys(key, service_id):
            category_item = _find_combo_category_item(catalog, candidate)
            if category_item:
                buckets["combo_category_items"].append({
                    "name": category_item.display_name,
                    "quantity": quantity,
                    "price": category_item.price,
                    "additional_charge": category_item.additional_charge,
                })
                break

            item = _find(catalog, candidate)
            if item is None:
                continue

            if item.is_combo:
                buckets["base_items"].append({
                    "id": candidate,
                    "name": item.display_name,
                    "price": item.price,
                    "quantity": quantity,
                    "is_combo": True,
                })
            else:
                charge = item.additional_charge if item.additional_charge > 0 else item.price
                buckets["additional_charge_items"].append({
                    "id": candidate,
                    "name": item.display_name,
                    "unit_price": Decimal("0"),
                    "additional_charge": charge,
                    "quantity": quantity,
                    "is_menu_item": True,
                })
            break

    return buckets


def calculate_catering_from_selections(
    selected_items: Dict[str, Any],
    service_details,
    guest_count=1,
    service_id: Optional[str] = None,
) -> CateringPriceCalculation:
    """
    Extract then price a catering selection. The per-person base is the sum
    of the selected combos' per-person prices.

    Unreadable service details price as an empty order rather than raising.
    """
    try:
        buckets = extract_catering_items(selected_items, service_details, service_id)
    except PricingConfigurationError as e:
        logger.error(f"Catering service {service_id} priced as empty: {e}")
        return calculate_catering_price(Decimal("0"), [], guest_count)

    base_per_person = sum((item["price"] for item in buckets["base_items"]), Decimal("0"))
    return calculate_catering_price(
        base_per_person,
        buckets["additional_charge_items"],
        guest_count,
        buckets["combo_category_items"],
    )
