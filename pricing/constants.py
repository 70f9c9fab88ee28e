# pricing/constants.py

from decimal import Decimal

# Stripe Tax codes (https://stripe.com/docs/tax/tax-codes)
TAX_CODE_GENERAL_TANGIBLE_GOODS = "txcd_99999999"
TAX_CODE_GENERAL_SERVICES = "txcd_20030000"

# Canonical service types
SERVICE_TYPE_CATERING = "catering"
SERVICE_TYPE_PARTY_RENTALS = "party_rentals"
SERVICE_TYPE_STAFF = "staff"
SERVICE_TYPE_VENUES = "venues"

# Spellings seen in service records -> canonical type
SERVICE_TYPE_ALIASES = {
    "catering": SERVICE_TYPE_CATERING,
    "party_rentals": SERVICE_TYPE_PARTY_RENTALS,
    "party_rental": SERVICE_TYPE_PARTY_RENTALS,
    "rental": SERVICE_TYPE_PARTY_RENTALS,
    "rentals": SERVICE_TYPE_PARTY_RENTALS,
    "staff": SERVICE_TYPE_STAFF,
    "staffing": SERVICE_TYPE_STAFF,
    "venue": SERVICE_TYPE_VENUES,
    "venues": SERVICE_TYPE_VENUES,
}

TAX_CODES_BY_SERVICE_TYPE = {
    SERVICE_TYPE_CATERING: TAX_CODE_GENERAL_TANGIBLE_GOODS,
    SERVICE_TYPE_PARTY_RENTALS: TAX_CODE_GENERAL_TANGIBLE_GOODS,
    SERVICE_TYPE_STAFF: TAX_CODE_GENERAL_SERVICES,
    SERVICE_TYPE_VENUES: TAX_CODE_GENERAL_SERVICES,
}
DEFAULT_TAX_CODE = TAX_CODE_GENERAL_SERVICES

# Ad hoc order adjustments are taxed as goods
ADJUSTMENTS_TAX_CODE = TAX_CODE_GENERAL_TANGIBLE_GOODS

SERVICE_FEE_REFERENCE = "service_fee"
ADJUSTMENTS_REFERENCE = "adjustments"

# Selected-item keys carrying a staff duration rather than a quantity
DURATION_SUFFIX = "_duration"

# Price types a service can declare
PRICE_TYPES = ("per_person", "flat_rate", "per_hour", "per_day", "per_item")
PRICE_TYPE_ALIASES = {
    "per_guest": "per_person",
    "hourly": "per_hour",
    "daily": "per_day",
    "fixed": "flat_rate",
    "one_time": "flat_rate",
    "per_event": "flat_rate",
}
DEFAULT_PRICE_TYPE = "flat_rate"
PRICE_TYPE_PER_PERSON = "per_person"
TIMED_PRICE_TYPES = ("per_hour", "per_day")

# Delivery
MAX_DELIVERY_MILES = Decimal("100")
MILES_PER_KM = Decimal("0.621371")

DELIVERY_REASON_NO_OPTIONS = "No delivery information provided"
DELIVERY_REASON_PICKUP_ONLY = "Pickup only"
DELIVERY_REASON_NOT_OFFERED = "Delivery not offered"
DELIVERY_REASON_MISCONFIGURED = "Delivery is misconfigured for this service"
DELIVERY_REASON_NO_ADDRESS = "No delivery address provided"
DELIVERY_REASON_DISTANCE_UNAVAILABLE = "Distance calculation unavailable - using first delivery range"
DELIVERY_REASON_DEFAULT_RANGE = "Using default delivery range"

# Local tax fallback
DEFAULT_TAX_RATE = Decimal("0.08")
TAX_METHOD_STRIPE = "stripe_automatic"
TAX_METHOD_MANUAL = "manual"

# Service fee (charged on the service subtotal)
SERVICE_FEE_PERCENTAGE = "percentage"
SERVICE_FEE_FIXED = "fixed"
SERVICE_FEE_HYBRID = "hybrid"
DEFAULT_SERVICE_FEE_PERCENTAGE = Decimal("5")

# Custom order adjustments
ADJUSTMENT_TYPE_PERCENTAGE = "percentage"
ADJUSTMENT_MODE_DISCOUNT = "discount"
