"""Engine error taxonomy.

Error codes:
  1001: invalid price (non-positive or non-finite)
  1002: invalid amount (negative or non-finite)
  1003: degenerate range (lower >= upper)
  1004: insufficient balance (swap amount above wallet balance)

An empty bid or ask side is a valid state, not an error.
"""


class EngineError(Exception):
    """Base engine error."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


class InvalidPriceError(EngineError):
    def __init__(self, price: object) -> None:
        super().__init__(1001, f"Invalid price: {price!r}")


class InvalidAmountError(EngineError):
    def __init__(self, amount: object) -> None:
        super().__init__(1002, f"Invalid amount: {amount!r}")


class DegenerateRangeError(EngineError):
    def __init__(self, lower: float, upper: float) -> None:
        super().__init__(1003, f"Degenerate range: lower {lower} >= upper {upper}")


class InsufficientBalanceError(EngineError):
    def __init__(self, required: float, available: float) -> None:
        super().__init__(
            1004,
            f"Insufficient balance: required {required}, available {available}",
        )
