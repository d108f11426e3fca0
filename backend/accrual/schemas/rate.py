from pydantic import BaseModel, Field
from datetime import datetime

class GlobalRateIn(BaseModel):
    rate: int = Field(ge=0)

class GlobalRateOut(BaseModel):
    rate: int

class RateChangeOut(BaseModel):
    id: int
    old_rate: int
    new_rate: int
    changed_by: str
    changed_at: int
    created_at: datetime

    class Config:
        from_attributes = True

class AccountRateOut(BaseModel):
    account: str
    rate: int
