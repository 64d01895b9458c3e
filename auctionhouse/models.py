"""Stored auction and bid records and their conversion to messages."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, fields
from datetime import datetime
from decimal import Decimal
from uuid import UUID

from auctionhouse.domain import datetime_to_timestamp
from auctionhouse.messages import Auction, Bid

AUCTION_TABLE = "auction"
BID_TABLE = "bid"


@dataclass
class AuctionRecord:
    """One row of the auction table."""

    id: UUID
    user_id: str
    item_id: str
    title: str
    description: str | None
    start_time: datetime
    end_time: datetime
    base_price: Decimal
    min_bid_increment: Decimal
    highest_bid: Decimal | None
    status: str
    currency: str
    category: str


@dataclass
class BidRecord:
    """One row of the bid table; belongs to an auction."""

    id: UUID
    auction_id: UUID
    user_id: str
    amount: Decimal
    created_at: datetime
    status: str


AUCTION_COLUMNS = tuple(f.name for f in fields(AuctionRecord))
BID_COLUMNS = tuple(f.name for f in fields(BidRecord))


def _decimal_text(value: Decimal) -> str:
    return format(value, "f")


def bid_to_message(record: BidRecord) -> Bid:
    """Convert a stored bid to its message form."""
    return Bid(
        id=str(record.id),
        auction_id=str(record.auction_id),
        user_id=record.user_id,
        amount=_decimal_text(record.amount),
        created_at=datetime_to_timestamp(record.created_at),
        status=record.status,
    )


def auction_to_message(record: AuctionRecord, bids: Iterable[BidRecord] = ()) -> Auction:
    """Convert a stored auction, with the given bids in order, to its message form."""
    return Auction(
        id=str(record.id),
        user_id=record.user_id,
        item_id=record.item_id,
        title=record.title,
        description=record.description or "",
        category=record.category,
        start_time=datetime_to_timestamp(record.start_time),
        end_time=datetime_to_timestamp(record.end_time),
        base_price=_decimal_text(record.base_price),
        min_bid_increment=_decimal_text(record.min_bid_increment),
        highest_bid="0" if record.highest_bid is None else _decimal_text(record.highest_bid),
        status=record.status,
        currency=record.currency,
        bids=[bid_to_message(bid) for bid in bids],
    )