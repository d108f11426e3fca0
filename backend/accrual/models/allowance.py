from sqlalchemy import Integer, String, DateTime, func, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from accrual.db.base import Base
from accrual.db.types import BigUint

class Allowance(Base):
    __tablename__ = "allowances"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    owner: Mapped[str] = mapped_column(String(64), index=True)
    spender: Mapped[str] = mapped_column(String(64), index=True)
    amount: Mapped[int] = mapped_column(BigUint, default=0)

    updated_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())

    __table_args__ = (
        UniqueConstraint("owner", "spender", name="uq_allowances_owner_spender"),
    )
