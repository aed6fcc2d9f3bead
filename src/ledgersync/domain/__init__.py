"""Domain layer for ledgersync.

Services live in their own modules (sync, deduplication, scheduler,
consistency, ledger, summary) and are imported from there.
"""
