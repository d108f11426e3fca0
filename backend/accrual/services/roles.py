from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from accrual.core.config import settings
from accrual.core.errors import Unauthorized
from accrual.models.role import LedgerRole, LEDGER_MUTATOR

logger = logging.getLogger(__name__)


def is_owner(actor: str | None) -> bool:
    return bool(actor) and actor == settings.owner_account


def require_owner(actor: str | None, action: str) -> None:
    if not is_owner(actor):
        logger.warning("rejected %s by non-owner %r", action, actor)
        raise Unauthorized(actor, action)


def has_role(s: Session, account: str | None, role: str = LEDGER_MUTATOR) -> bool:
    if not account:
        return False
    return s.get(LedgerRole, (account, role)) is not None


def require_role(s: Session, actor: str | None, action: str, role: str = LEDGER_MUTATOR) -> None:
    if not has_role(s, actor, role):
        logger.warning("rejected %s by %r without role %s", action, actor, role)
        raise Unauthorized(actor, action)


def grant_role(s: Session, actor: str, account: str, role: str = LEDGER_MUTATOR) -> bool:
    """Returns False when the account already holds the role."""
    require_owner(actor, "grant_role")
    if has_role(s, account, role):
        return False
    s.add(LedgerRole(account=account, role=role, granted_by=actor))
    s.flush()
    logger.info("granted %s to %s", role, account)
    return True


def revoke_role(s: Session, actor: str, account: str, role: str = LEDGER_MUTATOR) -> bool:
    require_owner(actor, "revoke_role")
    row = s.get(LedgerRole, (account, role))
    if row is None:
        return False
    s.delete(row)
    s.flush()
    logger.info("revoked %s from %s", role, account)
    return True


def list_role_holders(s: Session, role: str = LEDGER_MUTATOR) -> list[LedgerRole]:
    return (
        s.execute(select(LedgerRole).where(LedgerRole.role == role).order_by(LedgerRole.account.asc()))
        .scalars()
        .all()
    )
