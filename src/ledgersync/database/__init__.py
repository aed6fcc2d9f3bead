"""Database layer for ledgersync."""

from ledgersync.database.base import LedgerGateway, SourceRegister
from ledgersync.database.change_feed import ChangeEvent, ChangeFeed, ChangeFeedHub, ChangeType
from ledgersync.database.factories import create_sqlite_store

__all__ = [
    "LedgerGateway",
    "SourceRegister",
    "ChangeEvent",
    "ChangeFeed",
    "ChangeFeedHub",
    "ChangeType",
    "create_sqlite_store",
]
