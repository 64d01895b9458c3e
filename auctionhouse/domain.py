"""Auction domain values: statuses, currencies, timestamps and amounts."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum

from auctionhouse.errors import InvalidArgument

_log = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1)
_NANOS_PER_SECOND = 1_000_000_000
_MAX_DECIMAL = Decimal("79228162514264337593543950335")

_RFC3339 = re.compile(
    r"(\d{4})-(\d{2})-(\d{2})[Tt ](\d{2}):(\d{2}):(\d{2})(?:\.(\d+))?"
    r"(?:([Zz])|([+-])(\d{2}):(\d{2}))"
)
_NUMBER = re.compile(r"[+-]?[0-9_]*(?:\.[0-9_]*)?")


class AuctionStatus(str, Enum):
    """Life-cycle states of an auction."""

    PENDING = "pending"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"

    def __str__(self) -> str:
        return self.value


class AuctionCurrency(str, Enum):
    """Currencies an auction may be priced in."""

    USD = "USD"
    EUR = "EUR"
    CLP = "CLP"
    ARS = "ARS"
    BRL = "BRL"
    MXN = "MXN"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Timestamp:
    """Seconds and nanoseconds since the Unix epoch, in UTC."""

    seconds: int
    nanos: int = 0


def valid_statuses() -> list[str]:
    """Return the accepted status names in their canonical order."""
    return [status.value for status in AuctionStatus]


def valid_currencies() -> list[str]:
    """Return the accepted currency codes in their canonical order."""
    return [currency.value for currency in AuctionCurrency]


def parse_status(value: str) -> AuctionStatus:
    """Parse a status name, ignoring case."""
    try:
        return AuctionStatus(value.lower())
    except ValueError:
        raise InvalidArgument(
            "Status inválido. Valores permitidos: " + ", ".join(valid_statuses())
        ) from None


def parse_currency(value: str) -> AuctionCurrency:
    """Parse a currency code, ignoring case."""
    try:
        return AuctionCurrency(value.upper())
    except ValueError:
        raise InvalidArgument(
            "Moneda inválida. Valores permitidos: " + ", ".join(valid_currencies())
        ) from None


def timestamp_to_datetime(ts: Timestamp | None) -> datetime:
    """Convert a timestamp to a naive UTC datetime (microsecond precision)."""
    if ts is None:
        raise InvalidArgument("timestamp faltante")
    if not 0 <= ts.nanos < _NANOS_PER_SECOND:
        raise InvalidArgument("timestamp inválido")
    try:
        return _EPOCH + timedelta(seconds=ts.seconds, microseconds=ts.nanos // 1000)
    except OverflowError:
        raise InvalidArgument("timestamp inválido") from None


def datetime_to_timestamp(dt: datetime) -> Timestamp:
    """Convert a datetime to a timestamp; naive values are taken as UTC."""
    if dt.tzinfo is not None:
        dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
    delta = dt - _EPOCH
    return Timestamp(
        seconds=delta.days * 86_400 + delta.seconds,
        nanos=delta.microseconds * 1000,
    )


def validate_date_range(
    start: datetime, end: datetime, now: datetime | None = None
) -> None:
    """Check that start precedes end and does not lie in the past."""
    if start >= end:
        raise InvalidArgument("La fecha de inicio debe ser anterior a la fecha de fin")
    if now is None:
        now = datetime.now(timezone.utc).replace(tzinfo=None)
    if start < now:
        raise InvalidArgument("La fecha de inicio no puede ser en el pasado")


def iso_string_to_timestamp(iso_string: str) -> Timestamp:
    """Parse an RFC 3339 date-time string into a timestamp."""
    invalid = InvalidArgument("Formato de fecha ISO inválido")
    match = _RFC3339.fullmatch(iso_string)
    if match is None:
        raise invalid
    year, month, day, hour, minute, second, fraction, zulu, sign, off_h, off_m = (
        match.groups()
    )
    try:
        local = datetime(
            int(year), int(month), int(day), int(hour), int(minute), int(second)
        )
    except ValueError:
        raise invalid from None
    offset = 0
    if not zulu:
        hours, minutes = int(off_h), int(off_m)
        if hours > 23 or minutes > 59:
            raise invalid
        offset = (hours * 3600 + minutes * 60) * (1 if sign == "+" else -1)
    delta = local - _EPOCH
    seconds = delta.days * 86_400 + delta.seconds - offset
    nanos = int(fraction[:9].ljust(9, "0")) if fraction else 0
    return Timestamp(seconds=seconds, nanos=nanos)


def validate_numeric_string(value: str, field_name: str) -> Decimal:
    """Parse a decimal amount, keeping its written scale."""
    if not value:
        raise InvalidArgument(f"{field_name} no puede estar vacío")
    invalid = InvalidArgument(f"{field_name} debe ser un número válido")
    if not _NUMBER.fullmatch(value) or not re.search(r"[0-9]", value):
        _log.error("Error al parsear %s '%s': formato inválido", field_name, value)
        raise invalid
    try:
        amount = Decimal(value.replace("_", ""))
    except InvalidOperation:
        _log.error("Error al parsear %s '%s': formato inválido", field_name, value)
        raise invalid from None
    if abs(amount) > _MAX_DECIMAL:
        _log.error("Error al parsear %s '%s': fuera de rango", field_name, value)
        raise invalid
    return amount