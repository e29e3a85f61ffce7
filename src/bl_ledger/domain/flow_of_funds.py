"""FlowOfFunds — how much money moved, in each currency frame of one event."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FlowOfFundsAmount:
    currency: str
    cents: int


@dataclass(frozen=True)
class FlowOfFunds:
    issued_amount: FlowOfFundsAmount     # charged to / returned to the buyer
    settled_amount: FlowOfFundsAmount    # cleared after processor conversion
    gumroad_amount: FlowOfFundsAmount    # platform accounting currency
    merchant_account_gross_amount: FlowOfFundsAmount | None = None
    merchant_account_net_amount: FlowOfFundsAmount | None = None

    def __post_init__(self) -> None:
        if (self.merchant_account_gross_amount is None) != (
            self.merchant_account_net_amount is None
        ):
            raise ValueError(
                "merchant_account_gross_amount and merchant_account_net_amount "
                "must be provided together"
            )

    @property
    def has_merchant_account_amounts(self) -> bool:
        return self.merchant_account_gross_amount is not None

    @classmethod
    def build_simple(cls, currency: str, cents: int) -> "FlowOfFunds":
        """Same amount in every frame, no merchant account involved."""
        amount = FlowOfFundsAmount(currency=currency, cents=cents)
        return cls(issued_amount=amount, settled_amount=amount, gumroad_amount=amount)
