"""Pure balance matching — picks which unpaid balance a transaction adjusts."""

from collections.abc import Iterable

from src.bl_balance.domain.models import Balance, BalanceTarget
from src.bl_common.enums import MatchingStrategy


def _earliest(balances: Iterable[Balance]) -> Balance | None:
    # Same date: lowest id wins so the choice is deterministic
    return min(balances, key=lambda b: (b.date, b.id), default=None)


def select_unpaid_balance(
    candidates: Iterable[Balance], target: BalanceTarget
) -> Balance | None:
    """Return the unpaid balance to adjust, or None when a new one is needed.

    Only unpaid balances are eligible; processing, paid and forfeited rows are
    frozen from the ledger's point of view.
    """
    unpaid = [b for b in candidates if b.is_unpaid]

    if target.anchor_date is not None:
        anchored = _earliest(b for b in unpaid if b.date == target.anchor_date)
        if anchored is not None:
            return anchored

    if target.strategy == MatchingStrategy.SAME_DAY:
        return None

    return _earliest(b for b in unpaid if b.date <= target.occurred_on)
