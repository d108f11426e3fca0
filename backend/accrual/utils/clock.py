from datetime import datetime, timezone


def now_utc() -> datetime:
    return datetime.now(tz=timezone.utc)


def now_ts() -> int:
    """Ledger clock: whole unix seconds."""
    return int(now_utc().timestamp())
