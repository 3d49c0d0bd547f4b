"""Domain errors raised by the billing services.

Every error carries a machine-readable ``code`` and the HTTP status the API
layer renders it with. Persistence errors (``SQLAlchemyError``) are not
wrapped; they propagate unchanged after the service rolls back.
"""

from typing import Optional


class BillingError(Exception):
    """Base class for billing domain errors"""

    code = "BILLING_ERROR"
    status_code = 400

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message()
        super().__init__(self.message)

    @classmethod
    def default_message(cls) -> str:
        return cls.code.replace("_", " ").capitalize()


class AccessDeniedError(BillingError):
    code = "ACCESS_DENIED"
    status_code = 403

    @classmethod
    def default_message(cls) -> str:
        return "access denied to shop"


class NotFoundError(BillingError):
    code = "RESOURCE_NOT_FOUND"
    status_code = 404


class BillNotFoundError(NotFoundError):
    code = "BILL_NOT_FOUND"

    @classmethod
    def default_message(cls) -> str:
        return "bill not found"


class ItemNotFoundError(NotFoundError):
    code = "ITEM_NOT_FOUND"

    @classmethod
    def default_message(cls) -> str:
        return "item not found"


class CustomerNotFoundError(NotFoundError):
    code = "CUSTOMER_NOT_FOUND"

    @classmethod
    def default_message(cls) -> str:
        return "customer not found"


class InvalidInputError(BillingError):
    code = "INVALID_INPUT"
    status_code = 400


class InvalidDateError(InvalidInputError):
    code = "INVALID_DATE"

    @classmethod
    def default_message(cls) -> str:
        return "invalid date format, expected YYYY-MM-DD"


class InvalidStateError(BillingError):
    code = "INVALID_STATE"
    status_code = 409


class AllocationExhaustedError(BillingError):
    code = "ALLOCATION_EXHAUSTED"
    status_code = 503

    @classmethod
    def default_message(cls) -> str:
        return "could not allocate a unique bill number"
