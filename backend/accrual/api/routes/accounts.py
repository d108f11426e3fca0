from fastapi import APIRouter, Depends
from accrual.api.deps import ledger
from accrual.schemas.ledger import AccountOut, AmountOut, AllowanceOut
from accrual.schemas.rate import AccountRateOut
from accrual.services.ledger import Ledger

router = APIRouter(prefix="/accounts/{account}", tags=["accounts"])

@router.get("", response_model=AccountOut)
def get_account(account: str, lg: Ledger = Depends(ledger)):
    now = lg.clock()
    return {
        "address": account,
        "balance": lg.computed_balance(account, now),
        "principal": lg.principal_balance_of(account),
        "rate": lg.get_account_rate(account),
        "last_settled_at": lg.last_settled_at(account),
    }

@router.get("/balance", response_model=AmountOut)
def balance_of(account: str, lg: Ledger = Depends(ledger)):
    return {"account": account, "amount": lg.balance_of(account)}

@router.get("/principal", response_model=AmountOut)
def principal_balance_of(account: str, lg: Ledger = Depends(ledger)):
    return {"account": account, "amount": lg.principal_balance_of(account)}

@router.get("/rate", response_model=AccountRateOut)
def account_rate(account: str, lg: Ledger = Depends(ledger)):
    return {"account": account, "rate": lg.get_account_rate(account)}

@router.get("/allowances/{spender}", response_model=AllowanceOut)
def allowance(account: str, spender: str, lg: Ledger = Depends(ledger)):
    return {"owner": account, "spender": spender, "amount": lg.allowance(account, spender)}
