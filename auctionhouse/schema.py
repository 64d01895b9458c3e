"""Database schema migrations and their command-line runner."""

from __future__ import annotations

import argparse
import os
import sqlite3
import sys
import time
from contextlib import closing
from dataclasses import dataclass

from auctionhouse.db import connect
from auctionhouse.domain import valid_currencies, valid_statuses

_TRACKING_TABLE = "seaql_migrations"


def _in_list(values: list[str]) -> str:
    return ", ".join(f"'{value}'" for value in values)


@dataclass(frozen=True)
class _Migration:
    name: str
    up: tuple[str, ...]
    down: tuple[str, ...]


_MIGRATIONS = (
    _Migration(
        name="m20250619_044136_create_auction_table",
        up=(
            f"""
            CREATE TABLE IF NOT EXISTS "auction" (
                "id" TEXT NOT NULL PRIMARY KEY,
                "user_id" TEXT NOT NULL,
                "item_id" TEXT NOT NULL,
                "title" TEXT NOT NULL,
                "description" TEXT NULL,
                "start_time" TEXT NOT NULL,
                "end_time" TEXT NOT NULL,
                "base_price" TEXT NOT NULL,
                "min_bid_increment" TEXT NOT NULL,
                "highest_bid" TEXT NULL,
                "status" TEXT NOT NULL DEFAULT 'pending'
                    CHECK ("status" IN ({_in_list(valid_statuses())})),
                "currency" TEXT NOT NULL DEFAULT 'USD'
                    CHECK ("currency" IN ({_in_list(valid_currencies())})),
                "category" TEXT NOT NULL
            )
            """,
        ),
        down=('DROP TABLE "auction"',),
    ),
    _Migration(
        name="m20250621_220711_create_bid_table",
        up=(
            """
            CREATE TABLE IF NOT EXISTS "bid" (
                "id" TEXT NOT NULL PRIMARY KEY,
                "auction_id" TEXT NOT NULL,
                "user_id" TEXT NOT NULL,
                "amount" TEXT NOT NULL,
                "created_at" TEXT NOT NULL,
                "status" TEXT NOT NULL DEFAULT 'active',
                CONSTRAINT "fk_bid_auction" FOREIGN KEY ("auction_id")
                    REFERENCES "auction" ("id") ON DELETE CASCADE
            )
            """,
        ),
        down=('DROP TABLE "bid"',),
    ),
)

MIGRATION_NAMES = tuple(migration.name for migration in _MIGRATIONS)


def _applied_versions(connection: sqlite3.Connection) -> list[str]:
    connection.execute(
        f'CREATE TABLE IF NOT EXISTS "{_TRACKING_TABLE}" '
        '("version" TEXT NOT NULL PRIMARY KEY, "applied_at" INTEGER NOT NULL)'
    )
    rows = connection.execute(
        f'SELECT "version" FROM "{_TRACKING_TABLE}" ORDER BY "version"'
    )
    return [version for (version,) in rows]


def _apply_up(connection: sqlite3.Connection, limit: int | None) -> list[str]:
    applied = set(_applied_versions(connection))
    pending = [m for m in _MIGRATIONS if m.name not in applied]
    if limit is not None:
        pending = pending[:limit]
    for migration in pending:
        for statement in migration.up:
            connection.execute(statement)
        connection.execute(
            f'INSERT INTO "{_TRACKING_TABLE}" ("version", "applied_at") VALUES (?, ?)',
            (migration.name, int(time.time())),
        )
        connection.commit()
    return [migration.name for migration in pending]


def _apply_down(connection: sqlite3.Connection, steps: int | None) -> list[str]:
    by_name = {migration.name: migration for migration in _MIGRATIONS}
    applied = list(reversed(_applied_versions(connection)))
    if steps is not None:
        applied = applied[:steps]
    for name in applied:
        migration = by_name.get(name)
        if migration is None:
            raise RuntimeError(f"Migration file of version '{name}' is missing")
        for statement in migration.down:
            connection.execute(statement)
        connection.execute(f'DELETE FROM "{_TRACKING_TABLE}" WHERE "version" = ?', (name,))
        connection.commit()
    return applied


def _drop_all_tables(connection: sqlite3.Connection) -> None:
    tables = [
        name
        for (name,) in connection.execute(
            "SELECT name FROM sqlite_master WHERE type = 'table' AND name NOT LIKE 'sqlite_%'"
        )
    ]
    connection.execute("PRAGMA foreign_keys = OFF")
    try:
        for table in tables:
            connection.execute(f'DROP TABLE "{table}"')
        connection.commit()
    finally:
        connection.execute("PRAGMA foreign_keys = ON")


def migrate_up(connection: sqlite3.Connection) -> list[str]:
    """Apply every pending migration in order; return the names applied."""
    return _apply_up(connection, None)


def migrate_down(connection: sqlite3.Connection) -> list[str]:
    """Roll back the most recently applied migration; return the names rolled back."""
    return _apply_down(connection, 1)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="migration", description="Manage the database schema.")
    parser.add_argument("-u", "--database-url", help="database URL (default: DATABASE_URL)")
    commands = parser.add_subparsers(dest="command")
    up = commands.add_parser("up", help="apply pending migrations")
    up.add_argument("-n", "--num", type=int, default=None, help="number of migrations to apply")
    down = commands.add_parser("down", help="roll back applied migrations")
    down.add_argument("-n", "--num", type=int, default=1, help="number of migrations to roll back")
    commands.add_parser("status", help="show the state of every migration")
    commands.add_parser("fresh", help="drop all tables, then apply every migration")
    commands.add_parser("refresh", help="roll back every migration, then apply them again")
    commands.add_parser("reset", help="roll back every applied migration")
    return parser


def main(argv: list[str] | None = None) -> int:
    """Run a migration command against the configured database."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    url = args.database_url or os.environ.get("DATABASE_URL")
    if not url:
        parser.error("DATABASE_URL no seteado")
    try:
        connection = connect(url)
    except RuntimeError as exc:
        print(exc, file=sys.stderr)
        return 1
    command = args.command or "up"
    with closing(connection):
        try:
            if command == "up":
                done = _apply_up(connection, getattr(args, "num", None))
                _report("Applied", done)
            elif command == "down":
                done = _apply_down(connection, args.num)
                _report("Rolled back", done)
            elif command == "status":
                applied = set(_applied_versions(connection))
                for name in MIGRATION_NAMES:
                    print(f"{name}\t{'Applied' if name in applied else 'Pending'}")
            elif command == "fresh":
                _drop_all_tables(connection)
                _report("Applied", _apply_up(connection, None))
            elif command == "refresh":
                _report("Rolled back", _apply_down(connection, None))
                _report("Applied", _apply_up(connection, None))
            elif command == "reset":
                _report("Rolled back", _apply_down(connection, None))
        except (sqlite3.Error, RuntimeError) as exc:
            print(f"Migration failed: {exc}", file=sys.stderr)
            return 1
    return 0


def _report(verb: str, names: list[str]) -> None:
    if not names:
        print("No migrations to run")
    for name in names:
        print(f"{verb} '{name}'")