from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from auctionhouse.domain import (
    AuctionCurrency,
    AuctionStatus,
    Timestamp,
    datetime_to_timestamp,
    iso_string_to_timestamp,
    parse_currency,
    parse_status,
    timestamp_to_datetime,
    valid_currencies,
    valid_statuses,
    validate_date_range,
    validate_numeric_string,
)
from auctionhouse.errors import InvalidArgument


def test_auction_status_validation():
    assert AuctionStatus.PENDING.value == "pending"
    assert AuctionStatus.ACTIVE.value == "active"
    assert AuctionStatus.COMPLETED.value == "completed"
    assert AuctionStatus.CANCELLED.value == "cancelled"

    assert parse_status("pending") is AuctionStatus.PENDING
    assert parse_status("active") is AuctionStatus.ACTIVE
    assert parse_status("completed") is AuctionStatus.COMPLETED
    assert parse_status("cancelled") is AuctionStatus.CANCELLED
    with pytest.raises(InvalidArgument):
        parse_status("invalid")


def test_status_parse_ignores_case():
    assert parse_status("ACTIVE") is AuctionStatus.ACTIVE
    assert str(AuctionStatus.PENDING) == "pending"


def test_invalid_status_message():
    with pytest.raises(InvalidArgument) as info:
        parse_status("invalid")
    assert info.value.message == (
        "Status inválido. Valores permitidos: pending, active, completed, cancelled"
    )


def test_currency_validation():
    assert AuctionCurrency.USD.value == "USD"
    assert AuctionCurrency.EUR.value == "EUR"
    assert AuctionCurrency.CLP.value == "CLP"

    assert parse_currency("USD") is AuctionCurrency.USD
    assert parse_currency("eur") is AuctionCurrency.EUR
    assert parse_currency("clp") is AuctionCurrency.CLP
    with pytest.raises(InvalidArgument) as info:
        parse_currency("INVALID")
    assert info.value.message == (
        "Moneda inválida. Valores permitidos: USD, EUR, CLP, ARS, BRL, MXN"
    )


def test_valid_lists():
    assert valid_statuses() == ["pending", "active", "completed", "cancelled"]
    assert valid_currencies() == ["USD", "EUR", "CLP", "ARS", "BRL", "MXN"]


def test_timestamp_round_trip():
    ts = Timestamp(seconds=1_600_000_000, nanos=0)
    dt = timestamp_to_datetime(ts)
    assert dt.tzinfo is None
    assert datetime_to_timestamp(dt) == ts


def test_epoch_timestamp():
    assert timestamp_to_datetime(Timestamp(0, 0)) == datetime(1970, 1, 1)
    assert datetime_to_timestamp(datetime(1970, 1, 1)) == Timestamp(0, 0)


def test_timestamp_interval_preserved():
    start = timestamp_to_datetime(Timestamp(1_600_000_000, 0))
    end = timestamp_to_datetime(Timestamp(1_600_000_100, 0))
    assert end - start == timedelta(seconds=100)


def test_missing_timestamp():
    with pytest.raises(InvalidArgument, match="timestamp faltante"):
        timestamp_to_datetime(None)


@pytest.mark.parametrize("ts", [Timestamp(0, -1), Timestamp(10**15, 0)])
def test_invalid_timestamp(ts):
    with pytest.raises(InvalidArgument, match="timestamp inválido"):
        timestamp_to_datetime(ts)


def test_aware_datetime_converted_to_utc():
    aware = datetime(1970, 1, 1, 2, tzinfo=timezone(timedelta(hours=2)))
    assert datetime_to_timestamp(aware) == Timestamp(0, 0)


def test_date_range_ok():
    now = datetime(2030, 1, 1)
    validate_date_range(now + timedelta(seconds=100), now + timedelta(hours=1), now)
    assert True  # reaching here means no exception
    with pytest.raises(InvalidArgument):
        validate_date_range(now + timedelta(hours=1), now, now)


def test_date_range_start_after_end():
    now = datetime(2030, 1, 1)
    with pytest.raises(InvalidArgument) as info:
        validate_date_range(now + timedelta(hours=2), now + timedelta(hours=1), now)
    assert info.value.message == "La fecha de inicio debe ser anterior a la fecha de fin"


def test_date_range_equal_is_rejected():
    moment = datetime(2030, 1, 1)
    with pytest.raises(InvalidArgument, match="anterior"):
        validate_date_range(moment, moment, datetime(2020, 1, 1))


def test_date_range_in_past():
    now = datetime(2030, 1, 1)
    with pytest.raises(InvalidArgument) as info:
        validate_date_range(now - timedelta(seconds=1), now + timedelta(hours=1), now)
    assert info.value.message == "La fecha de inicio no puede ser en el pasado"


def test_date_range_default_now_rejects_past():
    with pytest.raises(InvalidArgument, match="pasado"):
        validate_date_range(
            timestamp_to_datetime(Timestamp(1_600_000_000)),
            timestamp_to_datetime(Timestamp(1_600_000_100)),
        )


def test_iso_epoch():
    assert iso_string_to_timestamp("1970-01-01T00:00:00Z") == Timestamp(0, 0)


def test_iso_round_trip_with_datetime():
    ts = iso_string_to_timestamp("2024-01-01T00:00:00Z")
    assert timestamp_to_datetime(ts) == datetime(2024, 1, 1)


def test_iso_offset_matches_utc():
    assert iso_string_to_timestamp("2024-01-01T02:00:00+02:00") == (
        iso_string_to_timestamp("2024-01-01T00:00:00Z")
    )


def test_iso_fraction():
    ts = iso_string_to_timestamp("1970-01-01T00:00:00.5Z")
    assert ts == Timestamp(0, 500_000_000)


@pytest.mark.parametrize(
    "text", ["", "2024-01-01", "2024-13-01T00:00:00Z", "2024-01-01T00:00:00", "tomorrow"]
)
def test_iso_invalid(text):
    with pytest.raises(InvalidArgument, match="Formato de fecha ISO inválido"):
        iso_string_to_timestamp(text)


def test_numeric_keeps_scale():
    amount = validate_numeric_string("100.00", "base_price")
    assert amount == Decimal("100")
    assert str(amount) == "100.00"


def test_numeric_negative_and_integer():
    assert validate_numeric_string("-5", "amount") == Decimal("-5")
    assert validate_numeric_string("120", "amount") == Decimal("120")


def test_numeric_empty():
    with pytest.raises(InvalidArgument) as info:
        validate_numeric_string("", "base_price")
    assert info.value.message == "base_price no puede estar vacío"


@pytest.mark.parametrize("text", ["abc", "1e5", " 1", "NaN", "inf", ".", "1.2.3"])
def test_numeric_invalid(text):
    with pytest.raises(InvalidArgument) as info:
        validate_numeric_string(text, "amount")
    assert info.value.message == "amount debe ser un número válido"