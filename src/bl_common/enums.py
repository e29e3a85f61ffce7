"""Global enums — must match DB CHECK constraints exactly."""

from enum import Enum


class BalanceState(str, Enum):
    UNPAID = "unpaid"
    PROCESSING = "processing"
    PAID = "paid"
    FORFEITED = "forfeited"


class MatchingStrategy(str, Enum):
    """How a balance transaction picks an existing unpaid balance."""
    SAME_DAY = "SAME_DAY"
    EARLIEST_UP_TO = "EARLIEST_UP_TO"


class SourceEventType(str, Enum):
    PURCHASE = "purchase"
    REFUND = "refund"
    DISPUTE = "dispute"
    CREDIT = "credit"
