"""The auction service: auctions, bids and the rules that govern them."""

from __future__ import annotations

import logging
import sqlite3
import uuid
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID

from auctionhouse.domain import (
    AuctionCurrency,
    AuctionStatus,
    parse_currency,
    parse_status,
    timestamp_to_datetime,
    validate_date_range,
    validate_numeric_string,
)
from auctionhouse.errors import FailedPrecondition, InternalError, InvalidArgument, NotFound
from auctionhouse.messages import (
    CreateAuctionRequest,
    CreateAuctionResponse,
    CreateBidRequest,
    CreateBidResponse,
    DeleteAuctionRequest,
    Empty,
    GetAuctionRequest,
    GetAuctionResponse,
    GetHighestBidRequest,
    GetHighestBidResponse,
    ListAuctionsRequest,
    ListAuctionsResponse,
    ListBidsRequest,
    ListBidsResponse,
    UpdateAuctionRequest,
    UpdateAuctionResponse,
)
from auctionhouse.models import (
    AUCTION_COLUMNS,
    AUCTION_TABLE,
    BID_COLUMNS,
    BID_TABLE,
    AuctionRecord,
    BidRecord,
    auction_to_message,
    bid_to_message,
)

_log = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _column_list(columns: tuple[str, ...]) -> str:
    return ", ".join(f'"{column}"' for column in columns)


def _placeholders(columns: tuple[str, ...]) -> str:
    return ", ".join("?" for _ in columns)


def _time_text(value: datetime) -> str:
    return value.isoformat(sep=" ", timespec="microseconds")


def _amount_text(value: Decimal) -> str:
    return format(value, "f")


def _parse_uuid(value: str, field_name: str) -> UUID:
    try:
        return UUID(value)
    except (ValueError, AttributeError, TypeError):
        raise InvalidArgument(f"{field_name} inválido") from None


def _auction_values(record: AuctionRecord) -> tuple:
    return (
        str(record.id),
        record.user_id,
        record.item_id,
        record.title,
        record.description,
        _time_text(record.start_time),
        _time_text(record.end_time),
        _amount_text(record.base_price),
        _amount_text(record.min_bid_increment),
        None if record.highest_bid is None else _amount_text(record.highest_bid),
        record.status,
        record.currency,
        record.category,
    )


def _auction_from_row(row: tuple) -> AuctionRecord:
    (
        id_, user_id, item_id, title, description, start_time, end_time,
        base_price, min_bid_increment, highest_bid, status, currency, category,
    ) = row
    return AuctionRecord(
        id=UUID(id_),
        user_id=user_id,
        item_id=item_id,
        title=title,
        description=description,
        start_time=datetime.fromisoformat(start_time),
        end_time=datetime.fromisoformat(end_time),
        base_price=Decimal(base_price),
        min_bid_increment=Decimal(min_bid_increment),
        highest_bid=None if highest_bid is None else Decimal(highest_bid),
        status=status,
        currency=currency,
        category=category,
    )


def _bid_values(record: BidRecord) -> tuple:
    return (
        str(record.id),
        str(record.auction_id),
        record.user_id,
        _amount_text(record.amount),
        _time_text(record.created_at),
        record.status,
    )


def _bid_from_row(row: tuple) -> BidRecord:
    id_, auction_id, user_id, amount, created_at, status = row
    return BidRecord(
        id=UUID(id_),
        auction_id=UUID(auction_id),
        user_id=user_id,
        amount=Decimal(amount),
        created_at=datetime.fromisoformat(created_at),
        status=status,
    )


class AuctionService:
    """Handles auction and bid requests against a SQL connection."""

    def __init__(
        self,
        connection: sqlite3.Connection,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._db = connection
        self._clock = clock or _utc_now

    # -- storage helpers -------------------------------------------------

    @contextmanager
    def _storage(self) -> Iterator[sqlite3.Connection]:
        try:
            with self._db:
                yield self._db
        except sqlite3.Error as exc:
            raise InternalError(f"DB error: {exc}") from exc

    def _find_auction(self, db: sqlite3.Connection, auction_id: UUID) -> AuctionRecord | None:
        row = db.execute(
            f'SELECT {_column_list(AUCTION_COLUMNS)} FROM "{AUCTION_TABLE}" WHERE "id" = ?',
            (str(auction_id),),
        ).fetchone()
        return None if row is None else _auction_from_row(row)

    def _bids_of(self, db: sqlite3.Connection, auction_id: UUID) -> list[BidRecord]:
        rows = db.execute(
            f'SELECT {_column_list(BID_COLUMNS)} FROM "{BID_TABLE}" '
            'WHERE "auction_id" = ? ORDER BY rowid',
            (str(auction_id),),
        )
        return [_bid_from_row(row) for row in rows]

    def _bids_newest_first(self, db: sqlite3.Connection, auction_id: UUID) -> list[BidRecord]:
        return sorted(self._bids_of(db, auction_id), key=lambda bid: bid.created_at, reverse=True)

    def _save_auction(self, db: sqlite3.Connection, record: AuctionRecord) -> None:
        columns = AUCTION_COLUMNS[1:]
        assignments = ", ".join(f'"{column}" = ?' for column in columns)
        values = _auction_values(record)
        cursor = db.execute(
            f'UPDATE "{AUCTION_TABLE}" SET {assignments} WHERE "id" = ?',
            (*values[1:], values[0]),
        )
        if cursor.rowcount == 0:
            raise InternalError("DB error: None of the records are updated")

    # -- auctions --------------------------------------------------------

    def create_auction(self, request: CreateAuctionRequest) -> CreateAuctionResponse:
        """Validate and store a new auction in the pending state."""
        _log.info("Creando subasta: user_id=%s item_id=%s", request.user_id, request.item_id)
        start_time = timestamp_to_datetime(request.start_time)
        end_time = timestamp_to_datetime(request.end_time)
        validate_date_range(start_time, end_time, self._clock())

        if not request.user_id:
            raise InvalidArgument("user_id no puede estar vacío")
        if not request.item_id:
            raise InvalidArgument("item_id no puede estar vacío")
        if not request.category:
            raise InvalidArgument("category no puede estar vacía")
        if not request.category.strip():
            raise InvalidArgument("category no puede contener solo espacios en blanco")

        base_price = validate_numeric_string(request.base_price, "base_price")
        min_bid_increment = validate_numeric_string(
            request.min_bid_increment, "min_bid_increment"
        )
        currency = (
            parse_currency(request.currency) if request.currency else AuctionCurrency.USD
        )

        record = AuctionRecord(
            id=uuid.uuid4(),
            user_id=request.user_id,
            item_id=request.item_id,
            title=request.title,
            description=request.description,
            start_time=start_time,
            end_time=end_time,
            base_price=base_price,
            min_bid_increment=min_bid_increment,
            highest_bid=None,
            status=AuctionStatus.PENDING.value,
            currency=currency.value,
            category=request.category.strip(),
        )
        try:
            with self._db:
                self._db.execute(
                    f'INSERT INTO "{AUCTION_TABLE}" ({_column_list(AUCTION_COLUMNS)}) '
                    f"VALUES ({_placeholders(AUCTION_COLUMNS)})",
                    _auction_values(record),
                )
        except sqlite3.Error as exc:
            _log.error("Error al insertar subasta en base de datos: %s", exc)
            raise InternalError(
                f"Error de base de datos: {exc}. Verifique que la tabla 'auction' exista "
                "y tenga todas las columnas requeridas."
            ) from exc
        _log.info("Subasta creada con ID: %s", record.id)
        return CreateAuctionResponse(auction=auction_to_message(record))

    def list_auctions(self, request: ListAuctionsRequest) -> ListAuctionsResponse:
        """Return every auction with its bids, newest bid first."""
        with self._storage() as db:
            rows = db.execute(
                f'SELECT {_column_list(AUCTION_COLUMNS)} FROM "{AUCTION_TABLE}" ORDER BY rowid'
            ).fetchall()
            auctions = [
                auction_to_message(record, self._bids_newest_first(db, record.id))
                for record in map(_auction_from_row, rows)
            ]
        _log.info("Retornando %d subastas", len(auctions))
        return ListAuctionsResponse(auctions=auctions)

    def get_auction(self, request: GetAuctionRequest) -> GetAuctionResponse:
        """Return one auction with its bids, newest bid first."""
        auction_id = _parse_uuid(request.id, "id")
        with self._storage() as db:
            record = self._find_auction(db, auction_id)
            if record is None:
                raise NotFound("Subasta no encontrada")
            bids = self._bids_newest_first(db, auction_id)
        return GetAuctionResponse(auction=auction_to_message(record, bids))

    def update_auction(self, request: UpdateAuctionRequest) -> UpdateAuctionResponse:
        """Apply the non-empty fields of the request to an auction."""
        auction_id = _parse_uuid(request.id, "id")
        with self._storage() as db:
            record = self._find_auction(db, auction_id)
            if record is None:
                raise NotFound("Subasta no encontrada")

            changes: dict = {}
            if request.title:
                changes["title"] = request.title
            if request.description:
                changes["description"] = request.description
            if request.category:
                changes["category"] = request.category
            if request.start_time is not None:
                changes["start_time"] = timestamp_to_datetime(request.start_time)
            if request.end_time is not None:
                changes["end_time"] = timestamp_to_datetime(request.end_time)
            if request.base_price:
                changes["base_price"] = validate_numeric_string(request.base_price, "base_price")
            if request.min_bid_increment:
                changes["min_bid_increment"] = validate_numeric_string(
                    request.min_bid_increment, "min_bid_increment"
                )
            if request.highest_bid:
                changes["highest_bid"] = validate_numeric_string(
                    request.highest_bid, "highest_bid"
                )
            if request.currency:
                changes["currency"] = parse_currency(request.currency).value
            if request.status:
                status = parse_status(request.status)
                if status is AuctionStatus.ACTIVE:
                    _log.info("Activando subasta - start_time al momento actual")
                    changes["start_time"] = self._clock()
                changes["status"] = status.value

            updated = replace(record, **changes)
            self._save_auction(db, updated)
        _log.info("Subasta actualizada con ID: %s", updated.id)
        return UpdateAuctionResponse(auction=auction_to_message(updated))

    def delete_auction(self, request: DeleteAuctionRequest) -> Empty:
        """Delete an auction; its bids go with it."""
        auction_id = _parse_uuid(request.id, "id")
        with self._storage() as db:
            db.execute(f'DELETE FROM "{AUCTION_TABLE}" WHERE "id" = ?', (str(auction_id),))
        return Empty()

    # -- bids ------------------------------------------------------------

    def create_bid(self, request: CreateBidRequest) -> CreateBidResponse:
        """Record a bid on an active auction and raise its highest bid."""
        auction_id = _parse_uuid(request.auction_id, "auction_id")
        if not request.user_id:
            raise InvalidArgument("user_id no puede estar vacío")
        amount = validate_numeric_string(request.amount, "amount")

        with self._storage() as db:
            auction = self._find_auction(db, auction_id)
            if auction is None:
                raise NotFound("Subasta no encontrada")
            if parse_status(auction.status) is not AuctionStatus.ACTIVE:
                raise FailedPrecondition(
                    "La subasta debe estar en estado 'active'. "
                    f"Estado actual: '{auction.status}'"
                )
            now = self._clock()
            if now > auction.end_time:
                raise FailedPrecondition("La subasta ha terminado")
            if now < auction.start_time:
                raise FailedPrecondition("La subasta aún no ha comenzado")

            current_highest = auction.highest_bid if auction.highest_bid is not None else Decimal(0)
            if amount <= current_highest:
                raise FailedPrecondition("La puja debe ser mayor que la puja más alta actual")
            if amount < auction.base_price:
                raise FailedPrecondition("La puja debe ser mayor o igual al precio base")
            min_required = current_highest + auction.min_bid_increment
            if amount < min_required:
                raise FailedPrecondition(f"La puja debe ser al menos {_amount_text(min_required)}")

            bid = BidRecord(
                id=uuid.uuid4(),
                auction_id=auction_id,
                user_id=request.user_id,
                amount=amount,
                created_at=self._clock(),
                status="active",
            )
            db.execute(
                f'INSERT INTO "{BID_TABLE}" ({_column_list(BID_COLUMNS)}) '
                f"VALUES ({_placeholders(BID_COLUMNS)})",
                _bid_values(bid),
            )
            self._save_auction(db, replace(auction, highest_bid=amount))
        _log.info("Puja creada con id %s", bid.id)
        return CreateBidResponse(bid=bid_to_message(bid))

    def list_bids(self, request: ListBidsRequest) -> ListBidsResponse:
        """Return the bids of one auction in the order they were stored."""
        auction_id = _parse_uuid(request.auction_id, "auction_id")
        with self._storage() as db:
            bids = self._bids_of(db, auction_id)
        return ListBidsResponse(bids=[bid_to_message(bid) for bid in bids])

    def get_highest_bid(self, request: GetHighestBidRequest) -> GetHighestBidResponse:
        """Return the bid with the largest amount on one auction."""
        auction_id = _parse_uuid(request.auction_id, "auction_id")
        with self._storage() as db:
            bids = self._bids_of(db, auction_id)
        if not bids:
            raise NotFound("No hay pujas para esta subasta")
        highest = max(bids, key=lambda bid: bid.amount)
        return GetHighestBidResponse(bid=bid_to_message(highest))