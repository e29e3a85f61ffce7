"""Tests for the BalanceTransactionAmount factories."""

import pytest

from src.bl_ledger.domain.amounts import (
    create_holding_amount_for_affiliate,
    create_holding_amount_for_seller,
    create_issued_amount_for_affiliate,
    create_issued_amount_for_seller,
)
from src.bl_ledger.domain.flow_of_funds import FlowOfFunds, FlowOfFundsAmount
from src.bl_ledger.domain.models import BalanceTransactionAmount

SAME_NO_MERCHANT_ACCOUNT = FlowOfFunds(
    issued_amount=FlowOfFundsAmount("usd", 100_00),
    settled_amount=FlowOfFundsAmount("usd", 100_00),
    gumroad_amount=FlowOfFundsAmount("usd", 100_00),
)

SAME_WITH_MERCHANT_ACCOUNT = FlowOfFunds(
    issued_amount=FlowOfFundsAmount("usd", 100_00),
    settled_amount=FlowOfFundsAmount("usd", 100_00),
    gumroad_amount=FlowOfFundsAmount("usd", 30_00),
    merchant_account_gross_amount=FlowOfFundsAmount("usd", 100_00),
    merchant_account_net_amount=FlowOfFundsAmount("usd", 70_00),
)

CROSS_CURRENCY_WITH_MERCHANT_ACCOUNT = FlowOfFunds(
    issued_amount=FlowOfFundsAmount("usd", 100_00),
    settled_amount=FlowOfFundsAmount("cad", 110_00),
    gumroad_amount=FlowOfFundsAmount("usd", 30_00),
    merchant_account_gross_amount=FlowOfFundsAmount("cad", 110_00),
    merchant_account_net_amount=FlowOfFundsAmount("cad", 80_00),
)

# Issued, settled and merchant account each in a different currency
THREE_CURRENCIES = FlowOfFunds(
    issued_amount=FlowOfFundsAmount("eur", 50_00),
    settled_amount=FlowOfFundsAmount("usd", 54_00),
    gumroad_amount=FlowOfFundsAmount("usd", 5_40),
    merchant_account_gross_amount=FlowOfFundsAmount("gbp", 43_00),
    merchant_account_net_amount=FlowOfFundsAmount("gbp", 41_20),
)

ALL_FLOWS = [
    SAME_NO_MERCHANT_ACCOUNT,
    SAME_WITH_MERCHANT_ACCOUNT,
    CROSS_CURRENCY_WITH_MERCHANT_ACCOUNT,
    THREE_CURRENCIES,
]


class TestAffiliateAmounts:
    @pytest.mark.parametrize("fof", ALL_FLOWS)
    def test_issued_amount_uses_gumroad_currency(self, fof: FlowOfFunds) -> None:
        amount = create_issued_amount_for_affiliate(fof, 10_00)
        assert amount.currency == fof.gumroad_amount.currency
        assert amount.gross_cents == 10_00
        assert amount.net_cents == 10_00

    @pytest.mark.parametrize("fof", ALL_FLOWS)
    def test_holding_amount_uses_gumroad_currency(self, fof: FlowOfFunds) -> None:
        amount = create_holding_amount_for_affiliate(fof, 10_00)
        assert amount.currency == fof.gumroad_amount.currency
        assert amount.gross_cents == 10_00
        assert amount.net_cents == 10_00

    @pytest.mark.parametrize("fof", ALL_FLOWS)
    @pytest.mark.parametrize("cents", [0, 1, 10_00, -3_33])
    def test_holding_equals_issued(self, fof: FlowOfFunds, cents: int) -> None:
        assert create_holding_amount_for_affiliate(fof, cents) == create_issued_amount_for_affiliate(
            fof, cents
        )


class TestSellerIssuedAmount:
    @pytest.mark.parametrize("fof", ALL_FLOWS)
    def test_uses_issued_frame(self, fof: FlowOfFunds) -> None:
        amount = create_issued_amount_for_seller(fof, 70_00)
        assert amount.currency == fof.issued_amount.currency
        assert amount.gross_cents == fof.issued_amount.cents
        assert amount.net_cents == 70_00


class TestSellerHoldingAmount:
    def test_no_merchant_account_matches_issued(self) -> None:
        amount = create_holding_amount_for_seller(SAME_NO_MERCHANT_ACCOUNT, 70_00)
        assert amount == create_issued_amount_for_seller(SAME_NO_MERCHANT_ACCOUNT, 70_00)
        assert amount == BalanceTransactionAmount(currency="usd", gross_cents=100_00, net_cents=70_00)

    def test_same_currency_merchant_account(self) -> None:
        amount = create_holding_amount_for_seller(SAME_WITH_MERCHANT_ACCOUNT, 70_00)
        assert amount.currency == "usd"
        assert amount.gross_cents == 100_00
        assert amount.net_cents == 70_00

    def test_cross_currency_uses_merchant_account_amounts(self) -> None:
        fof = CROSS_CURRENCY_WITH_MERCHANT_ACCOUNT
        amount = create_holding_amount_for_seller(fof, 70_00)
        assert amount.currency == fof.merchant_account_gross_amount.currency  # type: ignore[union-attr]
        assert amount.currency == fof.merchant_account_net_amount.currency  # type: ignore[union-attr]
        assert amount.gross_cents == 110_00
        assert amount.net_cents == 80_00

    def test_merchant_account_net_overrides_argument(self) -> None:
        amount = create_holding_amount_for_seller(THREE_CURRENCIES, 1)
        assert amount == BalanceTransactionAmount(currency="gbp", gross_cents=43_00, net_cents=41_20)


class TestNegated:
    def test_flips_both_cents(self) -> None:
        amount = BalanceTransactionAmount(currency="cad", gross_cents=110_00, net_cents=97_79)
        assert amount.negated() == BalanceTransactionAmount(
            currency="cad", gross_cents=-110_00, net_cents=-97_79
        )
