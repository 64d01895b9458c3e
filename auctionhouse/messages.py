"""Request, response and entity messages exchanged with service callers."""

from __future__ import annotations

from dataclasses import dataclass, field

from auctionhouse.domain import Timestamp


@dataclass(kw_only=True)
class Bid:
    """A bid as seen by callers; amounts travel as decimal strings."""

    id: str = ""
    auction_id: str = ""
    user_id: str = ""
    amount: str = ""
    created_at: Timestamp | None = None
    status: str = ""


@dataclass(kw_only=True)
class Auction:
    """An auction as seen by callers, optionally with its bids."""

    id: str = ""
    user_id: str = ""
    item_id: str = ""
    title: str = ""
    description: str = ""
    category: str = ""
    start_time: Timestamp | None = None
    end_time: Timestamp | None = None
    base_price: str = ""
    min_bid_increment: str = ""
    highest_bid: str = ""
    status: str = ""
    currency: str = ""
    bids: list[Bid] = field(default_factory=list)


@dataclass(kw_only=True)
class CreateAuctionRequest:
    """Fields for a new auction; empty strings mean "not given"."""

    user_id: str = ""
    item_id: str = ""
    title: str = ""
    description: str = ""
    category: str = ""
    start_time: Timestamp | None = None
    end_time: Timestamp | None = None
    base_price: str = ""
    min_bid_increment: str = ""
    highest_bid: str = ""
    currency: str = ""


@dataclass(kw_only=True)
class CreateAuctionResponse:
    """The auction that was created."""

    auction: Auction | None = None


@dataclass(kw_only=True)
class ListAuctionsRequest:
    """Request for every auction."""


@dataclass(kw_only=True)
class ListAuctionsResponse:
    """Every auction, each with its bids."""

    auctions: list[Auction] = field(default_factory=list)


@dataclass(kw_only=True)
class GetAuctionRequest:
    """Request for one auction by id."""

    id: str = ""


@dataclass(kw_only=True)
class GetAuctionResponse:
    """The requested auction with its bids."""

    auction: Auction | None = None


@dataclass(kw_only=True)
class UpdateAuctionRequest:
    """Partial update of an auction; empty or missing fields are left alone."""

    id: str = ""
    title: str = ""
    description: str = ""
    category: str = ""
    start_time: Timestamp | None = None
    end_time: Timestamp | None = None
    base_price: str = ""
    min_bid_increment: str = ""
    highest_bid: str = ""
    status: str = ""
    currency: str = ""


@dataclass(kw_only=True)
class UpdateAuctionResponse:
    """The auction after the update."""

    auction: Auction | None = None


@dataclass(kw_only=True)
class DeleteAuctionRequest:
    """Request to delete one auction by id."""

    id: str = ""


@dataclass(kw_only=True)
class Empty:
    """A reply that carries no data."""


@dataclass(kw_only=True)
class CreateBidRequest:
    """A bid placed on an auction."""

    auction_id: str = ""
    user_id: str = ""
    amount: str = ""


@dataclass(kw_only=True)
class CreateBidResponse:
    """The bid that was recorded."""

    bid: Bid | None = None


@dataclass(kw_only=True)
class ListBidsRequest:
    """Request for the bids of one auction."""

    auction_id: str = ""


@dataclass(kw_only=True)
class ListBidsResponse:
    """The bids of one auction."""

    bids: list[Bid] = field(default_factory=list)


@dataclass(kw_only=True)
class GetHighestBidRequest:
    """Request for the highest bid of one auction."""

    auction_id: str = ""


@dataclass(kw_only=True)
class GetHighestBidResponse:
    """The highest bid of an auction."""

    bid: Bid | None = None