"""Domain models for bl_balance — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import date, datetime

from src.bl_common.enums import BalanceState, MatchingStrategy

# Payout code moves balances forward; failed or returned payouts move them back.
_ALLOWED_TRANSITIONS: dict[BalanceState, frozenset[BalanceState]] = {
    BalanceState.UNPAID: frozenset({BalanceState.PROCESSING, BalanceState.FORFEITED}),
    BalanceState.PROCESSING: frozenset({BalanceState.PAID, BalanceState.UNPAID}),
    BalanceState.PAID: frozenset({BalanceState.UNPAID}),
    BalanceState.FORFEITED: frozenset(),
}


def can_transition(from_state: str, to_state: str) -> bool:
    return BalanceState(to_state) in _ALLOWED_TRANSITIONS[BalanceState(from_state)]


def states_transitioning_to(to_state: str) -> list[str]:
    """States from which `to_state` may be reached, as plain strings for SQL."""
    target = BalanceState(to_state)
    return [s.value for s, allowed in _ALLOWED_TRANSITIONS.items() if target in allowed]


@dataclass
class Balance:
    id: int
    user_id: str
    merchant_account_id: str
    date: date
    state: str                       # BalanceState value
    currency: str                    # issued currency
    amount_cents: int                # running sum of issued net cents, may go negative
    holding_currency: str
    holding_amount_cents: int        # running sum of holding net cents
    reopened_at: datetime | None = None   # set when a payout moved it back to unpaid
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def is_unpaid(self) -> bool:
        return self.state == BalanceState.UNPAID


@dataclass(frozen=True)
class BalanceTarget:
    """Where a balance transaction should land.

    occurred_on is the date a new balance is created on when nothing matches.
    anchor_date, when set, is tried as an exact-date match before the strategy.
    """

    occurred_on: date
    strategy: MatchingStrategy
    anchor_date: date | None = None

