from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from typing import Callable

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from accrual.core.constants import MAX_AMOUNT, PRECISION
from accrual.core.errors import InsufficientAllowance, InsufficientPrincipal, SupplyCapExceeded
from accrual.models.account import Account
from accrual.models.allowance import Allowance
from accrual.models.rate_change import RateChange
from accrual.models.role import LedgerRole
from accrual.services import rates, roles
from accrual.services.audit import log_event
from accrual.utils.clock import now_ts

logger = logging.getLogger(__name__)

# Every mutating operation in this process runs under this lock, so no
# operation can observe an account between its settlement and the principal
# change that follows.
_write_lock = threading.RLock()


def accrued_balance(principal: int, rate: int, last_settled_at: int, now: int) -> int:
    """Linear accrual: principal * (PRECISION + elapsed * rate) / PRECISION."""
    if principal == 0:
        return 0
    elapsed = max(0, int(now) - int(last_settled_at))
    factor = PRECISION + elapsed * int(rate)
    # stored principal must stay below the sentinel, so accrual saturates there
    return min(int(principal) * factor // PRECISION, MAX_AMOUNT)


def _check_amount(amount: int) -> int:
    amount = int(amount)
    if amount < 0 or amount > MAX_AMOUNT:
        raise ValueError("amount out of range")
    return amount


class Ledger:
    """Principal store plus lazily realized interest.

    Stored principal only changes when an operation touches an account; the
    live balance is derived from it on every read. Mutating methods are
    atomic: they commit on success and roll the session back on any error.
    """

    def __init__(self, s: Session, clock: Callable[[], int] = now_ts):
        self.s = s
        self.clock = clock

    @contextmanager
    def _atomic(self):
        with _write_lock:
            try:
                yield
                self.s.commit()
            except Exception:
                self.s.rollback()
                raise

    def _load(self, account: str, for_update: bool = False) -> Account | None:
        return self.s.get(Account, account, with_for_update=True if for_update else None)

    def _touch(self, account: str) -> Account:
        row = self._load(account, for_update=True)
        if row is None:
            self._insert_missing(account)
            row = self._load(account, for_update=True)
        return row

    def _insert_missing(self, account: str) -> None:
        # Another process may create the same row between our load and insert;
        # the conflict clause turns that race into a no-op.
        values = {"address": account, "principal": 0, "rate": 0, "last_settled_at": 0}
        dialect = self.s.get_bind().dialect.name
        if dialect == "postgresql":
            stmt = pg_insert(Account).values(values).on_conflict_do_nothing(index_elements=["address"])
        elif dialect == "sqlite":
            stmt = sqlite_insert(Account).values(values).on_conflict_do_nothing(index_elements=["address"])
        else:
            self.s.add(Account(**values))
            self.s.flush()
            return
        self.s.execute(stmt)

    def _live(self, row: Account | None, now: int) -> int:
        if row is None:
            return 0
        return accrued_balance(row.principal, row.rate, row.last_settled_at, now)

    def _settle(self, row: Account, now: int) -> int:
        delta = self._live(row, now) - int(row.principal)
        if delta > 0:
            row.principal = int(row.principal) + delta
            logger.debug("settled %s: realized %s at rate %s", row.address, delta, row.rate)
        # never move the clock backwards, or interest would be realized twice
        row.last_settled_at = max(int(row.last_settled_at or 0), int(now))
        return max(delta, 0)

    # reads

    def computed_balance(self, account: str, now: int | None = None) -> int:
        if now is None:
            now = self.clock()
        return self._live(self._load(account), now)

    def balance_of(self, account: str) -> int:
        return self.computed_balance(account, self.clock())

    def principal_balance_of(self, account: str) -> int:
        row = self._load(account)
        return int(row.principal) if row is not None else 0

    def last_settled_at(self, account: str) -> int:
        row = self._load(account)
        return int(row.last_settled_at) if row is not None else 0

    def get_account_rate(self, account: str) -> int:
        return rates.get_account_rate(self.s, account)

    def get_global_rate(self) -> int:
        return rates.get_global_rate(self.s)

    def total_supply(self) -> int:
        # Realized principal only; interest not yet settled is not supply.
        values = self.s.execute(select(Account.principal)).scalars().all()
        return sum((int(v) for v in values), 0)

    def allowance(self, owner: str, spender: str) -> int:
        row = self._allowance_row(owner, spender)
        return int(row.amount) if row is not None else 0

    def _allowance_row(self, owner: str, spender: str, for_update: bool = False) -> Allowance | None:
        q = select(Allowance).where(Allowance.owner == owner, Allowance.spender == spender)
        if for_update:
            q = q.with_for_update()
        return self.s.execute(q).scalar_one_or_none()

    def rate_history(self, limit: int = 200) -> list[RateChange]:
        return rates.rate_history(self.s, limit)

    def role_holders(self) -> list[LedgerRole]:
        return roles.list_role_holders(self.s)

    def has_role(self, account: str) -> bool:
        return roles.has_role(self.s, account)

    # mutations

    def settle(self, account: str, now: int | None = None) -> int:
        """Realize interest owed to ``account``; returns the amount realized."""
        with self._atomic():
            if now is None:
                now = self.clock()
            return self._settle(self._touch(account), now)

    def set_global_rate(self, actor: str, new_rate: int) -> RateChange:
        with self._atomic():
            roles.require_owner(actor, "set_global_rate")
            change = rates.set_global_rate(self.s, new_rate, actor, self.clock())
            log_event(
                self.s,
                actor=actor,
                action="rate.set",
                entity_type="rate_registry",
                details={"old_rate": str(change.old_rate), "new_rate": str(change.new_rate)},
            )
            return change

    def grant_role(self, actor: str, account: str) -> bool:
        with self._atomic():
            granted = roles.grant_role(self.s, actor, account)
            if granted:
                log_event(self.s, actor=actor, action="role.grant", entity_type="account", entity_id=account)
            return granted

    def revoke_role(self, actor: str, account: str) -> bool:
        with self._atomic():
            revoked = roles.revoke_role(self.s, actor, account)
            if revoked:
                log_event(self.s, actor=actor, action="role.revoke", entity_type="account", entity_id=account)
            return revoked

    def mint(self, actor: str, to: str, amount: int, rate: int | None = None) -> int:
        """Settle ``to`` under its old rate, freeze ``rate`` on it, add ``amount``.

        ``rate`` defaults to the current global rate. Returns the new principal.
        """
        amount = _check_amount(amount)
        with self._atomic():
            roles.require_role(self.s, actor, "mint")
            if rate is None:
                rate = rates.get_global_rate(self.s)
            now = self.clock()

            row = self._touch(to)
            self._settle(row, now)
            rates.assign_account_rate(row, rate)

            self.s.flush()
            supply = self.total_supply()
            if supply + amount > MAX_AMOUNT:
                logger.warning("mint of %s to %s rejected, supply %s", amount, to, supply)
                raise SupplyCapExceeded(to, amount, supply)
            row.principal = int(row.principal) + amount

            log_event(
                self.s,
                actor=actor,
                action="ledger.mint",
                entity_type="account",
                entity_id=to,
                details={"amount": str(amount), "rate": str(rate)},
            )
            logger.info("minted %s to %s at rate %s", amount, to, rate)
            return int(row.principal)

    def burn(self, actor: str, from_: str, amount: int) -> int:
        """Burn ``amount`` (or the whole live balance for MAX_AMOUNT). Returns the burned amount."""
        amount = _check_amount(amount)
        with self._atomic():
            roles.require_role(self.s, actor, "burn")
            now = self.clock()

            available = self._live(self._load(from_, for_update=True), now)
            if amount == MAX_AMOUNT:
                amount = available
            if amount > available:
                logger.warning("burn of %s from %s rejected, available %s", amount, from_, available)
                raise InsufficientPrincipal(from_, amount, available)

            row = self._touch(from_)
            self._settle(row, now)
            row.principal = int(row.principal) - amount

            log_event(
                self.s,
                actor=actor,
                action="ledger.burn",
                entity_type="account",
                entity_id=from_,
                details={"amount": str(amount)},
            )
            logger.info("burned %s from %s", amount, from_)
            return amount

    def transfer(self, sender: str, recipient: str, amount: int) -> int:
        """Move principal from ``sender``; returns the amount moved."""
        amount = _check_amount(amount)
        with self._atomic():
            now = self.clock()
            amount = self._resolve_transfer_amount(sender, amount, now)
            self._move(sender, recipient, amount, now)
            log_event(
                self.s,
                actor=sender,
                action="ledger.transfer",
                entity_type="account",
                entity_id=sender,
                details={"recipient": recipient, "amount": str(amount)},
            )
            return amount

    def transfer_from(self, spender: str, sender: str, recipient: str, amount: int) -> int:
        amount = _check_amount(amount)
        with self._atomic():
            now = self.clock()
            amount = self._resolve_transfer_amount(sender, amount, now)

            allowed_row = self._allowance_row(sender, spender, for_update=True)
            allowed = int(allowed_row.amount) if allowed_row is not None else 0
            if allowed != MAX_AMOUNT:
                if amount > allowed:
                    logger.warning("transfer_from by %s rejected, allowance %s < %s", spender, allowed, amount)
                    raise InsufficientAllowance(sender, spender, amount, allowed)
                if allowed_row is not None:
                    allowed_row.amount = allowed - amount

            self._move(sender, recipient, amount, now)
            log_event(
                self.s,
                actor=spender,
                action="ledger.transfer_from",
                entity_type="account",
                entity_id=sender,
                details={"recipient": recipient, "amount": str(amount)},
            )
            return amount

    def approve(self, owner: str, spender: str, amount: int) -> int:
        amount = _check_amount(amount)
        with self._atomic():
            row = self._allowance_row(owner, spender, for_update=True)
            if row is None:
                row = Allowance(owner=owner, spender=spender, amount=amount)
                self.s.add(row)
            else:
                row.amount = amount
            log_event(
                self.s,
                actor=owner,
                action="ledger.approve",
                entity_type="account",
                entity_id=owner,
                details={"spender": spender, "amount": str(amount)},
            )
            return amount

    def _resolve_transfer_amount(self, sender: str, amount: int, now: int) -> int:
        available = self._live(self._load(sender, for_update=True), now)
        if amount == MAX_AMOUNT:
            amount = available
        if amount > available:
            logger.warning("transfer of %s from %s rejected, available %s", amount, sender, available)
            raise InsufficientPrincipal(sender, amount, available)
        return amount

    def _move(self, sender: str, recipient: str, amount: int, now: int) -> None:
        # lock rows in a stable order
        touched = {a: self._touch(a) for a in sorted({sender, recipient})}
        src = touched[sender]
        dst = touched[recipient]

        self._settle(src, now)
        self._settle(dst, now)

        # a recipient with no funds takes the sender's frozen rate, not the global one
        if int(dst.principal) == 0:
            rates.assign_account_rate(dst, src.rate)

        src.principal = int(src.principal) - amount
        dst.principal = int(dst.principal) + amount
        logger.info("transferred %s from %s to %s", amount, sender, recipient)
