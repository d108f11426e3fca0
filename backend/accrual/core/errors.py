from __future__ import annotations

from typing import Any


class LedgerError(Exception):
    """Base for every rejected ledger operation.

    ``code`` is stable and safe to return to clients; ``details`` carries the
    offending values for diagnostics.
    """

    code = "ledger_error"
    status_code = 400

    def __init__(self, **details: Any):
        self.details = details
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if not self.details:
            return self.code
        parts = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.code}({parts})"


class RateIncreaseRejected(LedgerError):
    code = "rate_increase_rejected"
    status_code = 409

    def __init__(self, old: int, new: int):
        super().__init__(old=old, new=new)
        self.old = old
        self.new = new


class Unauthorized(LedgerError):
    code = "unauthorized"
    status_code = 403

    def __init__(self, actor: str | None, action: str):
        super().__init__(actor=actor, action=action)
        self.actor = actor
        self.action = action


class InsufficientPrincipal(LedgerError):
    code = "insufficient_principal"

    def __init__(self, account: str, requested: int, available: int):
        super().__init__(account=account, requested=requested, available=available)
        self.account = account
        self.requested = requested
        self.available = available


class InsufficientAllowance(LedgerError):
    code = "insufficient_allowance"

    def __init__(self, owner: str, spender: str, requested: int, available: int):
        super().__init__(owner=owner, spender=spender, requested=requested, available=available)
        self.owner = owner
        self.spender = spender
        self.requested = requested
        self.available = available


class SupplyCapExceeded(LedgerError):
    code = "supply_cap_exceeded"

    def __init__(self, account: str, amount: int, supply: int):
        super().__init__(account=account, amount=amount, supply=supply)
        self.account = account
        self.amount = amount
        self.supply = supply
