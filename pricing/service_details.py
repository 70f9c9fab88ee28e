# pricing/service_details.py

"""
Typed views over the loosely shaped service records the booking flow sends.

Vendors' service records nest their catalogs differently per service type
(menuItems vs catering.menuItems vs menu, rentalItems vs items, ...). Each
service type gets one details variant and one adapter that knows where that
type keeps its catalog; the rest of the pricing code only sees the variants.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional, Union

from pricing.constants import (
    DEFAULT_PRICE_TYPE,
    PRICE_TYPE_ALIASES,
    PRICE_TYPE_PER_PERSON,
    PRICE_TYPES,
    SERVICE_TYPE_ALIASES,
    SERVICE_TYPE_CATERING,
    SERVICE_TYPE_PARTY_RENTALS,
    SERVICE_TYPE_STAFF,
    SERVICE_TYPE_VENUES,
    TIMED_PRICE_TYPES,
)
from pricing.exceptions import PricingConfigurationError
from pricing.utils.money import parse_price, to_decimal


def normalize_service_type(service_type: str | None) -> str:
    """'Party-Rentals' -> 'party_rentals'; unknown types pass through normalized."""
    normalized = (service_type or "").strip().lower().replace("-", "_").replace(" ", "_")
    return SERVICE_TYPE_ALIASES.get(normalized, normalized)


def normalize_price_type(price_type: str | None) -> str:
    normalized = (price_type or "").strip().lower().replace("-", "_").replace(" ", "_")
    normalized = PRICE_TYPE_ALIASES.get(normalized, normalized)
    return normalized if normalized in PRICE_TYPES else DEFAULT_PRICE_TYPE


@dataclass
class CatalogItem:
    """One selectable entry in a service's catalog (menu item, rental, staff role...)."""
    id: str
    name: str = ""
    title: str = ""
    price: Decimal = Decimal("0")
    additional_charge: Decimal = Decimal("0")
    min_quantity: Optional[int] = None
    description: str = ""
    is_combo: bool = False
    combo_categories: List["ComboCategory"] = field(default_factory=list)

    def matches(self, key: str) -> bool:
        return bool(key) and key in (self.id, self.name, self.title)

    @property
    def display_name(self) -> str:
        return self.name or self.title or self.id


@dataclass
class ComboCategory:
    id: str
    name: str = ""
    max_selections: Optional[int] = None
    items: List[CatalogItem] = field(default_factory=list)

    def find_item(self, key: str) -> Optional[CatalogItem]:
        return next((item for item in self.items if item.matches(key)), None)


@dataclass
class CateringDetails:
    menu_items: List[CatalogItem] = field(default_factory=list)
    combos: List[CatalogItem] = field(default_factory=list)

    @property
    def catalog(self) -> List[CatalogItem]:
        return self.menu_items


@dataclass
class PartyRentalDetails:
    items: List[CatalogItem] = field(default_factory=list)

    @property
    def catalog(self) -> List[CatalogItem]:
        return self.items


@dataclass
class StaffDetails:
    services: List[CatalogItem] = field(default_factory=list)
    minimum_hours: Decimal = Decimal("1")

    @property
    def catalog(self) -> List[CatalogItem]:
        return self.services


@dataclass
class VenueDetails:
    options: List[CatalogItem] = field(default_factory=list)

    @property
    def catalog(self) -> List[CatalogItem]:
        return self.options


@dataclass
class UnknownDetails:
    @property
    def catalog(self) -> List[CatalogItem]:
        return []


ServiceDetails = Union[CateringDetails, PartyRentalDetails, StaffDetails, VenueDetails, UnknownDetails]


@dataclass
class ServiceRecord:
    id: str
    name: str
    service_type: str
    price: Decimal
    price_type: str
    quantity: Decimal = Decimal("1")
    duration: Optional[Decimal] = None
    details: ServiceDetails = field(default_factory=UnknownDetails)


@dataclass
class PricingInput:
    """A service's pricing configuration, independent of how it was stored."""
    base_price: Decimal
    price_type: str
    additional_items: List[CatalogItem] = field(default_factory=list)
    combo_categories: List[ComboCategory] = field(default_factory=list)

    def amount_for(self, quantity=Decimal("1"), duration=None, guest_count=1, timed: bool = False) -> Decimal:
        """
        Base price for the whole service according to its price type.

        per_person is multiplied by guests; per_hour and per_day (or any
        service billed by time, like staff) by the duration, floored at 1.
        """
        amount = self.base_price * quantity
        if self.price_type == PRICE_TYPE_PER_PERSON:
            amount *= max(1, int(guest_count or 1))
        if (timed or self.price_type in TIMED_PRICE_TYPES) and duration:
            amount *= max(Decimal("1"), duration)
        return amount


# =============================================================================
# CATALOG PARSING
# =============================================================================

def _first_list(details: Dict[str, Any], *paths: str) -> List[Any]:
    """Return the first non-empty list found at the dotted paths, in order."""
    for path in paths:
        node: Any = details
        for part in path.split("."):
            node = node.get(part) if isinstance(node, dict) else None
        if isinstance(node, list) and node:
            return node
    return []


def _parse_min_quantity(raw) -> Optional[int]:
    value = to_decimal(raw, default=None)
    if value is None or value <= 0:
        return None
    return int(value)


def parse_catalog_item(raw: Dict[str, Any], index: int = 0) -> CatalogItem:
    if not isinstance(raw, dict):
        raise PricingConfigurationError(f"Catalog entry #{index} is not an object: {raw!r}")

    item_id = raw.get("id") or raw.get("itemId") or raw.get("name") or raw.get("title")
    if not item_id:
        raise PricingConfigurationError(f"Catalog entry #{index} has no id, name or title")

    raw_categories = raw.get("comboCategories") or raw.get("categories") or []
    categories = [
        parse_combo_category(category, i)
        for i, category in enumerate(raw_categories)
        if isinstance(category, dict)
    ]

    is_combo = bool(
        raw.get("isCombo")
        or raw.get("combo")
        or raw.get("customizable")
        or categories
        or raw.get("options")
        or raw.get("pricePerPerson") is not None
    )

    return CatalogItem(
        id=str(item_id),
        name=str(raw.get("name") or raw.get("itemName") or ""),
        title=str(raw.get("title") or ""),
        price=parse_price(raw.get("price", raw.get("pricePerPerson"))),
        additional_charge=to_decimal(raw.get("additionalCharge")),
        min_quantity=_parse_min_quantity(raw.get("minQuantity")),
        description=str(raw.get("description") or ""),
        is_combo=is_combo,
        combo_categories=categories,
    )


def parse_combo_category(raw: Dict[str, Any], index: int = 0) -> ComboCategory:
    category_id = raw.get("id") or raw.get("categoryId") or raw.get("name") or f"category_{index}"
    max_selections = to_decimal(raw.get("maxSelections"), default=None)
    return ComboCategory(
        id=str(category_id),
        name=str(raw.get("name") or ""),
        max_selections=int(max_selections) if max_selections is not None else None,
        items=[parse_catalog_item(item, i) for i, item in enumerate(raw.get("items") or [])],
    )


def _parse_catalog(entries: List[Any]) -> List[CatalogItem]:
    return [parse_catalog_item(entry, i) for i, entry in enumerate(entries)]


# =============================================================================
# ADAPTERS (one per service type)
# =============================================================================

def adapt_catering(details: Dict[str, Any]) -> CateringDetails:
    return CateringDetails(
        menu_items=_parse_catalog(_first_list(details, "menuItems", "catering.menuItems", "menu")),
        combos=_parse_catalog(_first_list(details, "catering.combos", "combos")),
    )


def adapt_party_rental(details: Dict[str, Any]) -> PartyRentalDetails:
    return PartyRentalDetails(
        items=_parse_catalog(_first_list(details, "rentalItems", "items", "rental.items")),
    )


def adapt_staff(details: Dict[str, Any]) -> StaffDetails:
    source = details.get("staff") if isinstance(details.get("staff"), dict) else details
    minimum_hours = to_decimal(source.get("minimumHours"), default=None)
    if minimum_hours is None or minimum_hours <= 0:
        minimum_hours = Decimal("1")
    return StaffDetails(
        services=_parse_catalog(_first_list(details, "staffServices", "services")),
        minimum_hours=minimum_hours,
    )


def adapt_venue(details: Dict[str, Any]) -> VenueDetails:
    return VenueDetails(
        options=_parse_catalog(_first_list(details, "venueOptions", "options")),
    )


DETAIL_ADAPTERS = {
    SERVICE_TYPE_CATERING: adapt_catering,
    SERVICE_TYPE_PARTY_RENTALS: adapt_party_rental,
    SERVICE_TYPE_STAFF: adapt_staff,
    SERVICE_TYPE_VENUES: adapt_venue,
}


def adapt_details(service_type: str, details: Optional[Dict[str, Any]]) -> ServiceDetails:
    adapter = DETAIL_ADAPTERS.get(service_type)
    if adapter is None:
        return UnknownDetails()
    if details is not None and not isinstance(details, dict):
        raise PricingConfigurationError(f"service_details for {service_type} must be an object")
    return adapter(details or {})


def normalize_service(raw: Dict[str, Any], index: int = 0) -> ServiceRecord:
    """
    Build a ServiceRecord from a raw service/order-line record.

    Accepts both snake_case and camelCase field names. Raises
    PricingConfigurationError when the nested details are malformed.
    """
    if not isinstance(raw, dict):
        raise PricingConfigurationError(f"Service #{index} is not an object")

    service_type = normalize_service_type(raw.get("serviceType") or raw.get("service_type") or raw.get("type"))
    details = raw.get("service_details", raw.get("serviceDetails"))

    quantity = to_decimal(raw.get("quantity"), default=None)
    duration = to_decimal(raw.get("duration"), default=None)

    return ServiceRecord(
        id=str(raw.get("id") or raw.get("serviceId") or f"service_{index}"),
        name=str(raw.get("name") or raw.get("serviceName") or f"Service {index + 1}"),
        service_type=service_type,
        price=parse_price(raw.get("price", raw.get("servicePrice"))),
        price_type=normalize_price_type(raw.get("price_type") or raw.get("priceType")),
        quantity=max(Decimal("1"), quantity) if quantity is not None else Decimal("1"),
        duration=duration if duration is not None and duration > 0 else None,
        details=adapt_details(service_type, details),
    )


def pricing_input_for(service: ServiceRecord) -> PricingInput:
    """Flatten a service into its base price, add-ons and combo categories."""
    additional_items: List[CatalogItem] = []
    combo_categories: List[ComboCategory] = []

    for item in service.details.catalog:
        if item.is_combo:
            combo_categories.extend(item.combo_categories)
        elif item.price != service.price or item.additional_charge:
            additional_items.append(item)

    if isinstance(service.details, CateringDetails):
        for combo in service.details.combos:
            combo_categories.extend(combo.combo_categories)

    return PricingInput(
        base_price=service.price,
        price_type=service.price_type,
        additional_items=additional_items,
        combo_categories=combo_categories,
    )
