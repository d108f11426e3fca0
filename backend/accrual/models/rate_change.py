from sqlalchemy import Integer, String, BigInteger, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from accrual.db.base import Base
from accrual.db.types import BigUint

class RateChange(Base):
    __tablename__ = "rate_changes"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    old_rate: Mapped[int] = mapped_column(BigUint)
    new_rate: Mapped[int] = mapped_column(BigUint)
    changed_by: Mapped[str] = mapped_column(String(64))
    # ledger clock time of the change, unix seconds
    changed_at: Mapped[int] = mapped_column(BigInteger, index=True)
    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
