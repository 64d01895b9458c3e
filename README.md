# auctionhouse

An auction service. It creates, lists, updates and deletes auctions and
accepts bids on them. It checks every request before it reaches the database,
and bids must follow the auction's rules. Data is stored in SQLite.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Rules

- A new auction always starts as `pending`. Its start time must come before
  its end time and must not be in the past. `user_id`, `item_id` and
  `category` must not be empty, and the category is stored with the
  surrounding whitespace removed.
- The statuses are `pending`, `active`, `completed` and `cancelled`. When an
  update sets an auction to `active`, its start time becomes the current time.
- The currencies are `USD`, `EUR`, `CLP`, `ARS`, `BRL` and `MXN`. Statuses and
  currencies are accepted in any case. `USD` is used when a new auction names
  no currency.
- Prices are decimal strings such as `"100.00"`. They are parsed as `Decimal`
  and keep the scale they were written with.
- A bid is accepted only if all of these hold:
  - the auction is `active`, has started and has not ended;
  - the amount is greater than the current highest bid;
  - the amount is at least the base price;
  - the amount is at least the highest bid plus the minimum increment.

  An accepted bid raises the auction's highest bid to its amount. An auction
  with no bids reports its highest bid as `"0"`.

## Configuration

`auctionhouse.config.init()` loads a `.env` file from the working directory,
if there is one, without overriding variables that are already set. It then
configures logging. The level comes from `LOG_LEVEL` (`trace`, `debug`,
`info`, `warn`, `warning`, `error` or `off`) and defaults to `error`.

`auctionhouse.db.connect(url=None)` opens the database named by `url`, or by
the `DATABASE_URL` environment variable. Only `sqlite:` URLs are supported,
for example `sqlite://auction.db?mode=rwc` or `sqlite::memory:`. Foreign keys
are switched on for every connection.

## Creating the schema

```
auctionhouse-migrate
```

This command applies the pending migrations, which create the `auction` and
`bid` tables, to the database named by `DATABASE_URL` or by
`-u/--database-url`. It also has these subcommands:

- `up [-n N]` applies pending migrations. This is the default.
- `down [-n N]` rolls back the last N migrations. N defaults to 1.
- `status` lists each migration as `Applied` or `Pending`.
- `fresh` drops every table, then applies all migrations.
- `refresh` rolls back every migration, then applies them all again.
- `reset` rolls back every applied migration.

To do the same from code, `auctionhouse.schema.migrate_up(connection)`
applies every pending migration and `migrate_down(connection)` rolls back the
most recent one. Each returns the names of the migrations it handled.

## Using the service

```python
from auctionhouse.db import connect
from auctionhouse.schema import migrate_up
from auctionhouse.service import AuctionService
from auctionhouse.messages import CreateAuctionRequest
from auctionhouse.domain import iso_string_to_timestamp

connection = connect("sqlite::memory:")
migrate_up(connection)
service = AuctionService(connection)

response = service.create_auction(CreateAuctionRequest(
    user_id="seller-1",
    item_id="item-1",
    title="Old clock",
    category="Antiques",
    start_time=iso_string_to_timestamp("2030-01-01T10:00:00Z"),
    end_time=iso_string_to_timestamp("2030-01-02T10:00:00Z"),
    base_price="100.00",
    min_bid_increment="10.00",
    currency="eur",
))
print(response.auction.id, response.auction.status, response.auction.currency)
```

`AuctionService(connection, clock=None)` takes an optional `clock`, a function
that returns the current naive UTC `datetime`. It defaults to the system
clock. Its operations, each taking a request message from
`auctionhouse.messages` and returning the matching response, are:

- `create_auction` returns a `CreateAuctionResponse`.
- `list_auctions` returns every auction, each with its bids, newest first.
- `get_auction` returns one auction with its bids, newest first.
- `update_auction` applies the non-empty fields of the request.
- `delete_auction` deletes an auction and its bids, and returns `Empty`.
- `create_bid` returns a `CreateBidResponse`.
- `list_bids` returns an auction's bids in the order they were stored.
- `get_highest_bid` returns the bid with the largest amount.

Times are `auctionhouse.domain.Timestamp` values, which hold seconds and
nanoseconds since the epoch. `iso_string_to_timestamp` builds one from an
RFC 3339 string.

## Errors

Failures raise subclasses of `auctionhouse.errors.ServiceError`, each with a
`code` from `StatusCode` and a `message`. The messages are in Spanish.

- `InvalidArgument`: malformed ids, empty fields, bad numbers, unknown
  statuses or currencies, missing timestamps and bad date ranges.
- `NotFound`: a missing auction, or an auction with no bids in
  `get_highest_bid`.
- `FailedPrecondition`: a bid that breaks the auction's rules.
- `InternalError`: a database failure.

## What it does not do

The service is a Python class used in-process. The package has no network
server and no command that starts one. To expose the operations to remote
clients you have to write the transport yourself. Only SQLite databases are
supported.