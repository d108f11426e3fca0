from sqlalchemy import String, BigInteger, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from accrual.db.base import Base
from accrual.db.types import BigUint

class Account(Base):
    __tablename__ = "accounts"

    address: Mapped[str] = mapped_column(String(64), primary_key=True)

    principal: Mapped[int] = mapped_column(BigUint, default=0)
    rate: Mapped[int] = mapped_column(BigUint, default=0)
    # unix seconds of the last settlement
    last_settled_at: Mapped[int] = mapped_column(BigInteger, default=0)

    created_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now())
