# pricing/utils/__init__.py

# Money helpers
from pricing.utils.money import (
    to_decimal,
    quantize_money,
    to_cents,
    from_cents,
    parse_price,
)

# Distance helpers
from pricing.utils.distance import (
    parse_range_bounds,
    distance_miles_between,
    get_service_address,
)

__all__ = [
    # Money
    'to_decimal',
    'quantize_money',
    'to_cents',
    'from_cents',
    'parse_price',
    # Distance
    'parse_range_bounds',
    'distance_miles_between',
    'get_service_address',
]
