"""Domain models for bl_ledger — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.bl_balance.domain.models import Balance
from src.bl_common.enums import SourceEventType
from src.bl_ledger.domain.source_events import (
    Credit,
    Dispute,
    Purchase,
    Refund,
    SourceEvent,
    source_event_type,
)


@dataclass(frozen=True)
class BalanceTransactionAmount:
    currency: str
    gross_cents: int    # collected before fees, taxes and affiliate portions
    net_cents: int      # what counts towards the user's balance

    def negated(self) -> "BalanceTransactionAmount":
        return BalanceTransactionAmount(
            currency=self.currency,
            gross_cents=-self.gross_cents,
            net_cents=-self.net_cents,
        )


@dataclass(frozen=True)
class BalanceTransaction:
    """Immutable record of one change to a Balance.

    Positive net cents are deposited into the balance, negative ones withdrawn.
    balance_id is the only field filled in after the insert, once the balance
    has been selected.
    """

    id: int
    external_id: str
    user_id: str
    merchant_account_id: str
    source_event: SourceEvent
    issued_amount: BalanceTransactionAmount    # in the currency actually charged/returned
    holding_amount: BalanceTransactionAmount   # in the currency the funds are held in
    balance_id: int | None = None
    balance: Balance | None = None
    created_at: datetime | None = None

    def __post_init__(self) -> None:
        # Raises InvalidSourceEventError for None or any foreign type
        source_event_type(self.source_event)

    @property
    def source_type(self) -> SourceEventType:
        return source_event_type(self.source_event)

    @property
    def purchase(self) -> Purchase | None:
        return self.source_event if isinstance(self.source_event, Purchase) else None

    @property
    def refund(self) -> Refund | None:
        return self.source_event if isinstance(self.source_event, Refund) else None

    @property
    def dispute(self) -> Dispute | None:
        return self.source_event if isinstance(self.source_event, Dispute) else None

    @property
    def credit(self) -> Credit | None:
        return self.source_event if isinstance(self.source_event, Credit) else None

    def source_column(self) -> tuple[str, str]:
        """Foreign key column and id of the source event, e.g. ("refund_id", "r-1")."""
        return f"{self.source_type.value}_id", self.source_event.id

    @property
    def issued_amount_currency(self) -> str:
        return self.issued_amount.currency

    @property
    def issued_amount_gross_cents(self) -> int:
        return self.issued_amount.gross_cents

    @property
    def issued_amount_net_cents(self) -> int:
        return self.issued_amount.net_cents

    @property
    def holding_amount_currency(self) -> str:
        return self.holding_amount.currency

    @property
    def holding_amount_gross_cents(self) -> int:
        return self.holding_amount.gross_cents

    @property
    def holding_amount_net_cents(self) -> int:
        return self.holding_amount.net_cents
