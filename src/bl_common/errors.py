"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Balance
  2xxx: Balance transaction
  9xxx: System
"""


class AppError(Exception):
    """Base application error."""

    def __init__(self, code: int, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(message)


# --- 1xxx: Balance ---

class BalanceNotFoundError(AppError):
    def __init__(self, balance_id: int) -> None:
        super().__init__(1001, f"Balance not found: {balance_id}")


class BalanceStateTransitionError(AppError):
    def __init__(self, balance_id: int, from_state: str, to_state: str) -> None:
        super().__init__(
            1002,
            f"Balance {balance_id} cannot transition from {from_state} to {to_state}",
        )


class BalanceNotMutableError(AppError):
    def __init__(self, balance_id: int) -> None:
        super().__init__(
            1003, f"Balance {balance_id} is no longer unpaid and cannot be changed"
        )


class BalanceCouldNotBeFoundOrCreatedError(AppError):
    def __init__(self, balance_transaction_id: int) -> None:
        super().__init__(
            1004,
            f"A suitable balance for transaction {balance_transaction_id} "
            "could not be found or created",
        )


# --- 2xxx: Balance transaction ---

class InvalidSourceEventError(AppError):
    def __init__(self) -> None:
        super().__init__(2001, "can only have one of: purchase, dispute, refund, credit")


# --- 9xxx: System ---

class InternalError(AppError):
    def __init__(self, detail: str = "Internal server error") -> None:
        super().__init__(9002, detail)
