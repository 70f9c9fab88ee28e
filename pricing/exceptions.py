# pricing/exceptions.py


class PricingConfigurationError(Exception):
    """A service or delivery record is malformed and cannot be priced."""
    pass


class DeliveryApiUnavailable(Exception):
    """The remote delivery-fee service could not produce a usable quote."""
    pass
