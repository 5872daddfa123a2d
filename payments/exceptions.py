class PayfastError(Exception):
    pass


class ConfigurationError(PayfastError):
    """Merchant credentials are missing or unusable."""


class ValidationError(PayfastError):
    """The order cannot be turned into a payment request (bad amount, missing fields)."""


class UnknownOrder(PayfastError):
    pass


class ConflictingState(PayfastError):
    """A settlement would move an order out of a status it cannot leave."""
