# khata_pos/database/errors.py
"""
Domain errors surfaced to the operator. Controllers catch DomainError and
show the message; nothing below this layer talks to the UI.
"""


class DomainError(Exception):
    """Domain-level error the controller/UI can surface (message box)."""
    pass


class ValidationError(DomainError):
    pass


class InvalidCodeError(ValidationError):
    pass


class SplitMismatchError(ValidationError):
    def __init__(self, split_total: float, bill_total: float):
        super().__init__(
            f"Split total ({split_total:g}) must match bill total ({bill_total:g})"
        )
        self.split_total = split_total
        self.bill_total = bill_total


class OutOfStockError(DomainError):
    pass


class AuthorizationError(DomainError):
    pass


class NotFoundError(DomainError):
    pass


class PendingReasonRequired(DomainError):
    """
    A manual stock-quantity edit is held until the operator picks a reason.
    Carries the signed difference so the prompt can show it.
    """

    def __init__(self, product_id: str, change: int):
        super().__init__(
            f"Stock changed by {change:+d}. Please select a mandatory reason for this adjustment."
        )
        self.product_id = product_id
        self.change = change


class ImportFormatError(DomainError):
    pass
