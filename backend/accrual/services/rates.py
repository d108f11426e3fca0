from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from accrual.core.config import settings
from accrual.core.errors import RateIncreaseRejected
from accrual.models.account import Account
from accrual.models.rate_change import RateChange
from accrual.models.registry import RateRegistry, REGISTRY_ROW_ID

logger = logging.getLogger(__name__)


def get_registry(s: Session, for_update: bool = False) -> RateRegistry | None:
    return s.get(RateRegistry, REGISTRY_ROW_ID, with_for_update=True if for_update else None)


def ensure_registry(s: Session, for_update: bool = False) -> RateRegistry:
    row = get_registry(s, for_update=for_update)
    if row is None:
        row = RateRegistry(id=REGISTRY_ROW_ID, global_rate=int(settings.initial_global_rate))
        s.add(row)
        s.flush()
    return row


def get_global_rate(s: Session) -> int:
    row = get_registry(s)
    if row is None:
        return int(settings.initial_global_rate)
    return int(row.global_rate)


def set_global_rate(s: Session, new_rate: int, actor: str, now: int) -> RateChange:
    """Lower (or keep) the global rate.

    Only a strict increase is rejected, so any non-increasing sequence of
    updates succeeds. Each accepted update is recorded as a RateChange row,
    which is what observers read as the rate-changed notification.
    """
    new_rate = int(new_rate)
    if new_rate < 0:
        raise ValueError("rate must be non-negative")

    row = ensure_registry(s, for_update=True)
    old_rate = int(row.global_rate)
    if new_rate > old_rate:
        raise RateIncreaseRejected(old_rate, new_rate)

    row.global_rate = new_rate
    change = RateChange(old_rate=old_rate, new_rate=new_rate, changed_by=actor, changed_at=int(now))
    s.add(change)
    s.flush()

    logger.info("global rate changed %s -> %s by %s", old_rate, new_rate, actor)
    return change


def get_account_rate(s: Session, account: str) -> int:
    row = s.get(Account, account)
    if row is None:
        return 0
    return int(row.rate)


def assign_account_rate(row: Account, rate: int) -> None:
    # Per-account rates carry no monotonicity constraint.
    rate = int(rate)
    if rate < 0:
        raise ValueError("rate must be non-negative")
    row.rate = rate


def rate_history(s: Session, limit: int = 200) -> list[RateChange]:
    return (
        s.execute(select(RateChange).order_by(RateChange.id.desc()).limit(limit))
        .scalars()
        .all()
    )
