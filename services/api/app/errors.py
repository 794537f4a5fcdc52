from __future__ import annotations

from typing import Any


class FoodieError(Exception):
    """Base class for errors that map to a user-facing API response."""

    status_code = 500
    error_code = "INTERNAL_ERROR"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def extra(self) -> dict[str, Any]:
        return {}


class ValidationError(FoodieError):
    status_code = 400
    error_code = "VALIDATION_ERROR"


class NotFoundError(FoodieError):
    status_code = 404
    error_code = "NOT_FOUND"


class AuthError(FoodieError):
    status_code = 401
    error_code = "UNAUTHORIZED"


class ForbiddenError(FoodieError):
    status_code = 403
    error_code = "FORBIDDEN"


class DuplicateEmailError(FoodieError):
    status_code = 409
    error_code = "DUPLICATE_EMAIL"

    def __init__(self) -> None:
        super().__init__("User already exists with this email")


class EmptyCartError(FoodieError):
    status_code = 400
    error_code = "EMPTY_CART"

    def __init__(self) -> None:
        super().__init__("Cart is empty")


class InvalidAmountError(FoodieError):
    status_code = 400
    error_code = "INVALID_AMOUNT"

    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(
            f"Order amount must be at least {minimum} minor units. "
            "Please add items to your cart."
        )
        self.amount = amount
        self.minimum = minimum


class SignatureMismatchError(FoodieError):
    status_code = 400
    error_code = "SIGNATURE_MISMATCH"

    def __init__(self) -> None:
        super().__init__("Payment verification failed")


class InvalidStatusError(FoodieError):
    status_code = 400
    error_code = "INVALID_STATUS"

    def __init__(self, status: object) -> None:
        super().__init__(f"Invalid order status: {status!r}")
        self.status = status


class InvalidTransitionError(FoodieError):
    status_code = 409
    error_code = "INVALID_TRANSITION"

    def __init__(self, current: str, requested: str) -> None:
        super().__init__(f"Cannot move order from {current} to {requested}")
        self.current = current
        self.requested = requested
