"""Checkout error taxonomy."""


class CheckoutError(Exception):
    """Base class for checkout failures."""


class EmptySelectionError(CheckoutError):
    """Raised when a checkout has no selected photos."""


class InvalidContactError(CheckoutError):
    """Raised when the client e-mail is malformed."""


class InvalidSelectionError(CheckoutError):
    """Raised when selected photos do not belong to the album."""


class AlbumNotFoundError(CheckoutError):
    """Raised when the album does not exist."""


class OrderNotFoundError(CheckoutError):
    """Raised when an order id is unknown."""


class GatewayConfigError(CheckoutError):
    """Raised when the payment gateway is not configured."""


class GatewayRequestError(CheckoutError):
    """Raised when the payment gateway rejects or fails a request."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class DuplicateIntentError(CheckoutError):
    """Raised when an order already exists for a payment intent."""

    def __init__(self, intent_id: str) -> None:
        super().__init__(f"Order already exists for payment intent {intent_id}")
        self.intent_id = intent_id


class InvalidStatusTransitionError(CheckoutError):
    """Raised when an order status change is not allowed."""
