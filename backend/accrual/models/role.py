from sqlalchemy import String, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from accrual.db.base import Base

LEDGER_MUTATOR = "ledger_mutator"

class LedgerRole(Base):
    __tablename__ = "ledger_roles"

    account: Mapped[str] = mapped_column(String(64), primary_key=True)
    role: Mapped[str] = mapped_column(String(32), primary_key=True, default=LEDGER_MUTATOR)
    granted_by: Mapped[str] = mapped_column(String(64))
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
