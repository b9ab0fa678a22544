"""Checkpoint reconciliation — which "since" time to check from, and what to record after."""

from __future__ import annotations

from datetime import datetime


def now() -> datetime:
    """Current wall-clock time as an aware datetime in the local timezone."""
    return datetime.now().astimezone()


def effective_checkpoint(
    global_checkpoint: datetime | None,
    item_checkpoint: datetime | None,
) -> datetime | None:
    """Return the checkpoint an item should be checked from.

    The earlier of the two when both are present, so that overriding the
    global checkpoint with an older time re-checks every item from there.
    None means "since the beginning of time".
    """
    if global_checkpoint is not None and item_checkpoint is not None:
        return min(global_checkpoint, item_checkpoint)
    if item_checkpoint is not None:
        return item_checkpoint
    return global_checkpoint


def reconcile_checkpoint(
    item_checkpoint: datetime | None,
    global_checkpoint: datetime | None,
    *,
    found_updates: bool,
    checked_at: datetime,
) -> datetime | None:
    """Return an item's checkpoint after a check.

    An item that produced updates moves to the time of the check. An item
    that was never checked before takes the global checkpoint even when it
    produced nothing, so it is not re-scanned from the beginning next run.
    Anything else keeps its checkpoint.
    """
    if found_updates:
        return checked_at
    if item_checkpoint is None:
        return global_checkpoint
    return item_checkpoint


def parse_timestamp(raw: str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp from the sources file.

    Naive values are taken to be local time. Raises ValueError on bad input.
    """
    if raw is None:
        return None
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    value = datetime.fromisoformat(raw)
    if value.tzinfo is None:
        value = value.astimezone()
    return value


def format_timestamp(value: datetime | None) -> str | None:
    """Serialize a checkpoint for the sources file."""
    return value.isoformat() if value is not None else None
