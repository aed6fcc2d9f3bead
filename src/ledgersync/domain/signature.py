"""Duplicate-detection signature for ledger entries."""

from decimal import Decimal, ROUND_HALF_UP

from ledgersync.domain.entities import LedgerEntry


def _text(value) -> str:
    if value is None:
        return ""
    # str enums render as their value
    return str(getattr(value, "value", value)).strip()


def signature(entry: LedgerEntry) -> str:
    """Return the signature two duplicate entries share.

    Built from kind, category, description, amount rounded to a whole unit,
    date and payment method. Origin metadata is not part of it, so a manual
    re-entry of a synced movement collides with the synced entry.
    """
    amount = Decimal(entry.amount or 0).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
    entry_date = entry.date.isoformat() if entry.date is not None else ""
    return "|".join(
        [
            _text(entry.kind),
            _text(entry.category),
            _text(entry.description),
            str(amount),
            entry_date,
            _text(entry.payment_method),
        ]
    )
