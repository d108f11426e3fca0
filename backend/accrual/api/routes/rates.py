from fastapi import APIRouter, Depends, Query
from accrual.api.deps import ledger, current_account
from accrual.schemas.rate import GlobalRateIn, GlobalRateOut, RateChangeOut
from accrual.services.ledger import Ledger

router = APIRouter(prefix="/rates", tags=["rates"])

@router.get("/global", response_model=GlobalRateOut)
def get_global_rate(lg: Ledger = Depends(ledger)):
    return {"rate": lg.get_global_rate()}

@router.put("/global", response_model=RateChangeOut)
def set_global_rate(body: GlobalRateIn, lg: Ledger = Depends(ledger), account: str = Depends(current_account)):
    # ownership and the decrease-only rule are enforced by the ledger
    change = lg.set_global_rate(account, body.rate)
    return RateChangeOut.model_validate(change)

@router.get("/history", response_model=list[RateChangeOut])
def rate_history(
    lg: Ledger = Depends(ledger),
    limit: int = Query(default=200, ge=1, le=1000),
):
    # Newest first; each row is one accepted global rate change.
    return lg.rate_history(limit)
