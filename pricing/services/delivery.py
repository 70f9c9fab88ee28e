# pricing/services/delivery.py

"""
Delivery eligibility and fee calculation.

A service's delivery options list distance bands ("0-10 miles" -> $0,
"10-25 miles" -> $15) and an optional minimum order subtotal. For a given
order we work out which band the delivery address falls into and whether the
order clears the minimum. The fee of the matched band is always reported so
the booking UI can show what delivery would cost, while `eligible` decides
whether delivery can actually be selected.

Nothing here raises on bad vendor data: malformed options come back as an
ineligible quote with a readable reason.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pricing.constants import (
    DELIVERY_REASON_DEFAULT_RANGE,
    DELIVERY_REASON_DISTANCE_UNAVAILABLE,
    DELIVERY_REASON_MISCONFIGURED,
    DELIVERY_REASON_NO_ADDRESS,
    DELIVERY_REASON_NO_OPTIONS,
    DELIVERY_REASON_NOT_OFFERED,
    DELIVERY_REASON_PICKUP_ONLY,
)
from pricing.exceptions import PricingConfigurationError
from pricing.utils.distance import parse_range_bounds
from pricing.utils.money import to_decimal

logger = logging.getLogger(__name__)


@dataclass
class DeliveryRange:
    range: str
    fee: Decimal
    min_miles: Decimal
    max_miles: Decimal

    def covers(self, distance_miles: Decimal) -> bool:
        return self.min_miles <= distance_miles <= self.max_miles


@dataclass
class DeliveryOptions:
    delivery: bool = False
    pickup: bool = False
    delivery_ranges: Optional[List[DeliveryRange]] = None
    delivery_minimum: Optional[Decimal] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "DeliveryOptions":
        """
        Parse a service's deliveryOptions record (camelCase or snake_case).
        Raises PricingConfigurationError for bands that cannot be priced.
        """
        if not isinstance(raw, dict):
            raise PricingConfigurationError("Delivery options must be an object")

        raw_ranges = raw.get("deliveryRanges", raw.get("delivery_ranges"))
        ranges = None
        if raw_ranges is not None:
            if not isinstance(raw_ranges, list):
                raise PricingConfigurationError("deliveryRanges must be a list")
            ranges = [cls._parse_range(entry, i) for i, entry in enumerate(raw_ranges)]

        minimum = to_decimal(raw.get("deliveryMinimum", raw.get("delivery_minimum")), default=None)

        return cls(
            delivery=bool(raw.get("delivery")),
            pickup=bool(raw.get("pickup")),
            delivery_ranges=ranges,
            delivery_minimum=minimum,
        )

    @staticmethod
    def _parse_range(entry, index: int) -> DeliveryRange:
        if not isinstance(entry, dict) or not entry.get("range"):
            raise PricingConfigurationError(f"Delivery range #{index} has no range label")

        fee = to_decimal(entry.get("fee"), default=None)
        if entry.get("fee") in (None, ""):
            fee = Decimal("0")
        if fee is None:
            raise PricingConfigurationError(f"Delivery range #{index} has an invalid fee: {entry.get('fee')!r}")

        low, high = parse_range_bounds(entry["range"])
        return DeliveryRange(range=str(entry["range"]), fee=fee, min_miles=low, max_miles=high)


@dataclass
class DeliveryQuote:
    fee: Decimal = Decimal("0")
    eligible: bool = False
    range: str = "N/A"
    reason: str = ""
    minimum_required: Optional[Decimal] = None
    distance_eligible: bool = False
    minimum_eligible: bool = False
    source: str = field(default="local", compare=False)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "fee": self.fee,
            "eligible": self.eligible,
            "range": self.range,
            "reason": self.reason,
            "minimum_required": self.minimum_required,
            "distance_eligible": self.distance_eligible,
            "minimum_eligible": self.minimum_eligible,
            "source": self.source,
        }


def _format_miles(value: Decimal) -> str:
    text = f"{value:f}"
    return text.rstrip("0").rstrip(".") if "." in text else text


def coerce_delivery_options(options) -> Optional[DeliveryOptions]:
    if options is None or isinstance(options, DeliveryOptions):
        return options
    return DeliveryOptions.from_dict(options)


# =============================================================================
# DISTANCE BANDS
# =============================================================================

def calculate_delivery_fee(
    delivery_ranges: List[DeliveryRange],
    distance_miles: Optional[Decimal] = None,
) -> Dict[str, Any]:
    """
    Match a distance against the delivery bands.

    Bands are checked in their declared order, bounds inclusive, and the first
    band covering the distance wins. Without a distance the first band is used.

    Returns {'fee', 'range', 'eligible', 'reason'}.
    """
    first = delivery_ranges[0]

    if distance_miles is None:
        return {
            "fee": first.fee,
            "range": first.range,
            "eligible": True,
            "reason": DELIVERY_REASON_DISTANCE_UNAVAILABLE,
        }

    for band in delivery_ranges:
        if band.covers(distance_miles):
            logger.debug(f"Distance {distance_miles} mi matched band '{band.range}' (fee {band.fee})")
            return {"fee": band.fee, "range": band.range, "eligible": True, "reason": ""}

    furthest = max(band.max_miles for band in delivery_ranges)
    if distance_miles > furthest:
        miles = _format_miles(furthest)
        return {
            "fee": Decimal("0"),
            "range": f"Beyond {miles} miles",
            "eligible": False,
            "reason": f"Delivery not available beyond {miles} miles",
        }

    # Inside a gap between bands
    return {
        "fee": first.fee,
        "range": first.range,
        "eligible": True,
        "reason": DELIVERY_REASON_DEFAULT_RANGE,
    }


def check_delivery_minimum(order_subtotal, options) -> Dict[str, Any]:
    """
    Check an order subtotal against the service's delivery minimum.

    Returns {'eligible', 'minimum_required', 'reason'}.
    """
    try:
        options = coerce_delivery_options(options)
    except PricingConfigurationError as e:
        logger.warning(f"Delivery minimum check on malformed options: {e}")
        return {"eligible": False, "minimum_required": None, "reason": DELIVERY_REASON_MISCONFIGURED}

    if options is None or not options.delivery:
        return {"eligible": False, "minimum_required": None, "reason": DELIVERY_REASON_NOT_OFFERED}

    minimum = options.delivery_minimum or Decimal("0")
    subtotal = to_decimal(order_subtotal)

    if minimum > 0 and subtotal < minimum:
        return {
            "eligible": False,
            "minimum_required": minimum,
            "reason": f"Order must be at least ${minimum:.2f} for delivery",
        }

    return {"eligible": True, "minimum_required": minimum if minimum > 0 else None, "reason": ""}


# =============================================================================
# ELIGIBILITY
# =============================================================================

def calculate_delivery(
    delivery_address: str,
    options,
    order_subtotal,
    distance_miles=None,
) -> DeliveryQuote:
    """
    Full delivery quote for one service and order.

    `options` may be a DeliveryOptions or the raw record; `distance_miles` is
    the precomputed distance from the vendor, when known.
    """
    if options is None:
        return DeliveryQuote(reason=DELIVERY_REASON_NO_OPTIONS)

    try:
        options = coerce_delivery_options(options)
    except PricingConfigurationError as e:
        logger.warning(f"Malformed delivery options: {e}")
        return DeliveryQuote(reason=DELIVERY_REASON_MISCONFIGURED)

    if not options.delivery:
        reason = DELIVERY_REASON_PICKUP_ONLY if options.pickup else DELIVERY_REASON_NOT_OFFERED
        return DeliveryQuote(reason=reason)

    if not options.delivery_ranges:
        logger.warning("Delivery offered but no delivery ranges are configured")
        return DeliveryQuote(reason=DELIVERY_REASON_MISCONFIGURED)

    distance = to_decimal(distance_miles, default=None)
    if distance is not None and distance < 0:
        distance = None

    if distance is None and not (delivery_address or "").strip():
        return DeliveryQuote(reason=DELIVERY_REASON_NO_ADDRESS)

    band = calculate_delivery_fee(options.delivery_ranges, distance)
    minimum = check_delivery_minimum(order_subtotal, options)

    distance_eligible = band["eligible"]
    minimum_eligible = minimum["eligible"]

    if not distance_eligible:
        reason = band["reason"]
    elif not minimum_eligible:
        reason = minimum["reason"]
    else:
        reason = band["reason"]

    minimum_required = options.delivery_minimum if options.delivery_minimum and options.delivery_minimum > 0 else None

    return DeliveryQuote(
        fee=band["fee"],
        eligible=distance_eligible and minimum_eligible,
        range=band["range"],
        reason=reason,
        minimum_required=minimum_required,
        distance_eligible=distance_eligible,
        minimum_eligible=minimum_eligible,
    )


def delivery_options_display(options) -> List[str]:
    """Human-readable summary lines for a service's delivery options."""
    try:
        options = coerce_delivery_options(options)
    except PricingConfigurationError:
        options = None

    if options is None:
        return ["Contact vendor for delivery options"]

    lines: List[str] = []
    if options.pickup:
        lines.append("Pickup Available")

    if options.delivery:
        if options.delivery_ranges:
            bands = ", ".join(
                f"{band.range}: {'Free' if band.fee == 0 else f'${band.fee:.2f}'}"
                for band in options.delivery_ranges
            )
            lines.append(f"Delivery - {bands}")
        else:
            lines.append("Delivery Available")

        if options.delivery_minimum and options.delivery_minimum > 0:
            lines.append(f"Minimum order: ${options.delivery_minimum:.2f}")

    return lines or ["Contact vendor for delivery options"]
