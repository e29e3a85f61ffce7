"""BalanceTransactionAmount factories.

Affiliates are credited in the platform's own currency with their already
computed share; sellers are credited in the issued currency, or in the
merchant account's currency when a merchant account holds the funds.
"""

from src.bl_ledger.domain.flow_of_funds import FlowOfFunds
from src.bl_ledger.domain.models import BalanceTransactionAmount


def create_issued_amount_for_affiliate(
    flow_of_funds: FlowOfFunds, issued_affiliate_cents: int
) -> BalanceTransactionAmount:
    return BalanceTransactionAmount(
        currency=flow_of_funds.gumroad_amount.currency,
        gross_cents=issued_affiliate_cents,
        net_cents=issued_affiliate_cents,
    )


def create_holding_amount_for_affiliate(
    flow_of_funds: FlowOfFunds, issued_affiliate_cents: int
) -> BalanceTransactionAmount:
    # Affiliate funds are never converted, so holding equals issued
    return BalanceTransactionAmount(
        currency=flow_of_funds.gumroad_amount.currency,
        gross_cents=issued_affiliate_cents,
        net_cents=issued_affiliate_cents,
    )


def create_issued_amount_for_seller(
    flow_of_funds: FlowOfFunds, issued_net_cents: int
) -> BalanceTransactionAmount:
    return BalanceTransactionAmount(
        currency=flow_of_funds.issued_amount.currency,
        gross_cents=flow_of_funds.issued_amount.cents,
        net_cents=issued_net_cents,
    )


def create_holding_amount_for_seller(
    flow_of_funds: FlowOfFunds, issued_net_cents: int
) -> BalanceTransactionAmount:
    """Seller holding amount; the merchant account's own figures win when present.

    With merchant-account amounts, issued_net_cents is ignored.
    """
    if not flow_of_funds.has_merchant_account_amounts:
        return create_issued_amount_for_seller(flow_of_funds, issued_net_cents)
    gross = flow_of_funds.merchant_account_gross_amount
    net = flow_of_funds.merchant_account_net_amount
    return BalanceTransactionAmount(
        currency=gross.currency,  # type: ignore[union-attr]
        gross_cents=gross.cents,  # type: ignore[union-attr]
        net_cents=net.cents,  # type: ignore[union-attr]
    )
