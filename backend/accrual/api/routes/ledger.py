from fastapi import APIRouter, Depends
from accrual.api.deps import ledger, current_account
from accrual.schemas.ledger import (
    AllowanceOut,
    AmountOut,
    ApproveIn,
    BurnIn,
    MintIn,
    MintOut,
    SettleIn,
    SupplyOut,
    TransferFromIn,
    TransferIn,
)
from accrual.services.ledger import Ledger

router = APIRouter(prefix="/ledger", tags=["ledger"])


@router.post("/mint", response_model=MintOut)
def mint(body: MintIn, lg: Ledger = Depends(ledger), actor: str = Depends(current_account)):
    principal = lg.mint(actor, body.to, body.amount, body.rate)
    rate = lg.get_account_rate(body.to)
    return {"account": body.to, "amount": body.amount, "rate": rate, "principal": principal}


@router.post("/burn", response_model=AmountOut)
def burn(body: BurnIn, lg: Ledger = Depends(ledger), actor: str = Depends(current_account)):
    burned = lg.burn(actor, body.account, body.amount)
    return {"account": body.account, "amount": burned}


@router.post("/transfer", response_model=AmountOut)
def transfer(body: TransferIn, lg: Ledger = Depends(ledger), sender: str = Depends(current_account)):
    moved = lg.transfer(sender, body.recipient, body.amount)
    return {"account": sender, "amount": moved}


@router.post("/transfer-from", response_model=AmountOut)
def transfer_from(body: TransferFromIn, lg: Ledger = Depends(ledger), spender: str = Depends(current_account)):
    moved = lg.transfer_from(spender, body.sender, body.recipient, body.amount)
    return {"account": body.sender, "amount": moved}


@router.post("/approve", response_model=AllowanceOut)
def approve(body: ApproveIn, lg: Ledger = Depends(ledger), owner: str = Depends(current_account)):
    amount = lg.approve(owner, body.spender, body.amount)
    return {"owner": owner, "spender": body.spender, "amount": amount}


@router.post("/settle", response_model=AmountOut)
def settle(body: SettleIn, lg: Ledger = Depends(ledger), u: str = Depends(current_account)):
    realized = lg.settle(body.account)
    return {"account": body.account, "amount": realized}


@router.get("/total-supply", response_model=SupplyOut)
def total_supply(lg: Ledger = Depends(ledger)):
    return {"total_supply": lg.total_supply()}
