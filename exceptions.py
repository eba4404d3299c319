from decimal import Decimal


class SplitError(ValueError):
    """Base class for split and settlement validation failures."""


class InvalidAmount(SplitError):
    def __init__(self, message: str = "Total amount must be greater than 0"):
        super().__init__(message)


class InvalidSplitType(SplitError):
    def __init__(self, message: str = 'Split type must be "equal", "percentage" or "exact"'):
        super().__init__(message)


class InvalidParticipants(SplitError):
    def __init__(self, message: str = "At least one participant is required"):
        super().__init__(message)


class InvalidWeight(SplitError):
    def __init__(self, message: str = "Each percentage must be between 0 and 100"):
        super().__init__(message)


class WeightSumMismatch(SplitError):
    def __init__(self, total: Decimal):
        self.total = total
        super().__init__(f"Percentages must sum to 100%. Current total: {total:.2f}%")


class SplitMismatch(SplitError):
    def __init__(self, actual: Decimal, expected: Decimal):
        self.actual = actual
        self.expected = expected
        super().__init__(
            f"Split amounts ({actual:.2f}) must equal total amount ({expected:.2f})"
        )


class LedgerError(Exception):
    """Base class for expense ledger failures."""


class ExpenseNotFound(LedgerError):
    def __init__(self, expense_id: str):
        self.expense_id = expense_id
        super().__init__("Expense not found")


class InvalidExpense(LedgerError):
    pass
