"""Source events a balance transaction can belong to.

Snapshots of the collaborator records, carrying only the timestamps and links
the ledger needs. A balance transaction belongs to exactly one of them.
"""

from dataclasses import dataclass
from datetime import datetime

from src.bl_balance.domain.models import BalanceTarget
from src.bl_common.enums import MatchingStrategy, SourceEventType
from src.bl_common.errors import InvalidSourceEventError


@dataclass(frozen=True)
class Purchase:
    id: str
    succeeded_at: datetime


@dataclass(frozen=True)
class Refund:
    id: str
    created_at: datetime
    purchase: Purchase


@dataclass(frozen=True)
class Charge:
    """One processor charge covering several purchases (e.g. a cart checkout)."""

    id: str
    created_at: datetime
    purchases: tuple[Purchase, ...] = ()


@dataclass(frozen=True)
class Dispute:
    id: str
    formalized_at: datetime
    purchase: Purchase | None = None
    charge: Charge | None = None

    def __post_init__(self) -> None:
        if (self.purchase is None) == (self.charge is None):
            raise ValueError("A dispute must reference exactly one of purchase or charge")


@dataclass(frozen=True)
class Credit:
    id: str
    created_at: datetime
    financing_paydown_purchase: Purchase | None = None


SourceEvent = Purchase | Refund | Dispute | Credit

_EVENT_TYPES: dict[type, SourceEventType] = {
    Purchase: SourceEventType.PURCHASE,
    Refund: SourceEventType.REFUND,
    Dispute: SourceEventType.DISPUTE,
    Credit: SourceEventType.CREDIT,
}


def source_event_type(event: object) -> SourceEventType:
    event_type = _EVENT_TYPES.get(type(event))
    if event_type is None:
        raise InvalidSourceEventError()
    return event_type


def source_event_from(
    purchase: Purchase | None = None,
    refund: Refund | None = None,
    dispute: Dispute | None = None,
    credit: Credit | None = None,
) -> SourceEvent:
    """Return the one event that is set. Zero or several raise InvalidSourceEventError."""
    present = [e for e in (purchase, refund, dispute, credit) if e is not None]
    if len(present) != 1:
        raise InvalidSourceEventError()
    source_event_type(present[0])
    return present[0]


def balance_target_for(event: SourceEvent) -> BalanceTarget:
    """Date and matching rule used to place the event's transaction on a balance.

    Purchases only ever join the unpaid balance of their own success date.
    Everything else lands on the earliest unpaid balance up to the event's own
    date, optionally preferring an anchor date first.
    """
    if isinstance(event, Purchase):
        succeeded_on = event.succeeded_at.date()
        return BalanceTarget(
            occurred_on=succeeded_on,
            strategy=MatchingStrategy.SAME_DAY,
            anchor_date=succeeded_on,
        )
    if isinstance(event, Refund):
        return BalanceTarget(
            occurred_on=event.created_at.date(),
            strategy=MatchingStrategy.EARLIEST_UP_TO,
        )
    if isinstance(event, Dispute):
        return BalanceTarget(
            occurred_on=event.formalized_at.date(),
            strategy=MatchingStrategy.EARLIEST_UP_TO,
            anchor_date=event.charge.created_at.date() if event.charge else None,
        )
    if isinstance(event, Credit):
        paydown = event.financing_paydown_purchase
        return BalanceTarget(
            occurred_on=event.created_at.date(),
            strategy=MatchingStrategy.EARLIEST_UP_TO,
            anchor_date=paydown.succeeded_at.date() if paydown else None,
        )
    raise InvalidSourceEventError()
