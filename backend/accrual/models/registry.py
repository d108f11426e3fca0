from sqlalchemy import Integer, DateTime, func
from sqlalchemy.orm import Mapped, mapped_column
from accrual.db.base import Base
from accrual.db.types import BigUint

REGISTRY_ROW_ID = 1

class RateRegistry(Base):
    __tablename__ = "rate_registry"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, default=REGISTRY_ROW_ID)
    global_rate: Mapped[int] = mapped_column(BigUint)
    updated_at: Mapped[DateTime] = mapped_column(DateTime, server_default=func.now(), onupdate=func.now())
