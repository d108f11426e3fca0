from pydantic import BaseModel, field_validator
from datetime import datetime

class RoleGrant(BaseModel):
    account: str

    @field_validator("account")
    @classmethod
    def account_trim(cls, v: str):
        v = v.strip()
        if not v:
            raise ValueError("account is required")
        return v

class RoleOut(BaseModel):
    account: str
    role: str
    granted_by: str
    created_at: datetime

    class Config:
        from_attributes = True
