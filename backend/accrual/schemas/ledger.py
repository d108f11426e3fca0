from pydantic import BaseModel, field_validator

from accrual.core.constants import MAX_AMOUNT


def parse_amount(v):
    """Accept a non-negative integer, its decimal string, or "max"."""
    if isinstance(v, str):
        vv = v.strip().lower()
        if vv == "max":
            return MAX_AMOUNT
        if not vv.isdigit():
            raise ValueError("amount must be an integer or 'max'")
        v = int(vv)
    if isinstance(v, bool) or not isinstance(v, int):
        raise ValueError("amount must be an integer")
    if v < 0:
        raise ValueError("amount must be non-negative")
    if v > MAX_AMOUNT:
        raise ValueError("amount too large")
    return v


def clean_account(v: str) -> str:
    v = (v or "").strip()
    if not v:
        raise ValueError("account is required")
    if len(v) > 64:
        raise ValueError("account too long")
    return v


class AmountIn(BaseModel):
    amount: int

    @field_validator("amount", mode="before")
    @classmethod
    def amount_or_max(cls, v):
        return parse_amount(v)

class MintIn(BaseModel):
    amount: int
    to: str
    rate: int | None = None

    # "max" means "everything held", which has no meaning for new supply
    @field_validator("amount", mode="before")
    @classmethod
    def amount_not_max(cls, v):
        if isinstance(v, str) and v.strip().lower() == "max":
            raise ValueError("mint amount must be an explicit integer")
        return parse_amount(v)

    @field_validator("to")
    @classmethod
    def to_trim(cls, v: str):
        return clean_account(v)

    @field_validator("rate")
    @classmethod
    def rate_non_negative(cls, v: int | None):
        if v is not None and v < 0:
            raise ValueError("rate must be non-negative")
        return v

class BurnIn(AmountIn):
    account: str

    @field_validator("account")
    @classmethod
    def account_trim(cls, v: str):
        return clean_account(v)

class TransferIn(AmountIn):
    recipient: str

    @field_validator("recipient")
    @classmethod
    def recipient_trim(cls, v: str):
        return clean_account(v)

class TransferFromIn(AmountIn):
    sender: str
    recipient: str

    @field_validator("sender", "recipient")
    @classmethod
    def parties_trim(cls, v: str):
        return clean_account(v)

class ApproveIn(AmountIn):
    spender: str

    @field_validator("spender")
    @classmethod
    def spender_trim(cls, v: str):
        return clean_account(v)

class SettleIn(BaseModel):
    account: str

    @field_validator("account")
    @classmethod
    def account_trim(cls, v: str):
        return clean_account(v)

class AmountOut(BaseModel):
    account: str
    amount: int

class MintOut(BaseModel):
    account: str
    amount: int
    rate: int
    principal: int

class AccountOut(BaseModel):
    address: str
    balance: int
    principal: int
    rate: int
    last_settled_at: int

class AllowanceOut(BaseModel):
    owner: str
    spender: str
    amount: int

class SupplyOut(BaseModel):
    total_supply: int
