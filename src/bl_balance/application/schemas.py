"""Pydantic read models for the user's money balance.

Cents of different currencies are never added together here; the summary
carries one total per issued currency.
"""

from pydantic import BaseModel

from src.bl_common.cents import cents_to_display


class CurrencyTotal(BaseModel):
    currency: str
    unpaid_balance_cents: int
    unpaid_balance_display: str
    held_by_platform_cents: int
    held_by_platform_display: str

    @classmethod
    def from_cents(cls, currency: str, unpaid: int, held_by_platform: int) -> "CurrencyTotal":
        return cls(
            currency=currency,
            unpaid_balance_cents=unpaid,
            unpaid_balance_display=cents_to_display(unpaid, currency),
            held_by_platform_cents=held_by_platform,
            held_by_platform_display=cents_to_display(held_by_platform, currency),
        )


class UnpaidBalanceSummary(BaseModel):
    user_id: str
    balance_count: int
    totals: list[CurrencyTotal]
