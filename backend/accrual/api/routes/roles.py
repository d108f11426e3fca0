from fastapi import APIRouter, Depends
from accrual.api.deps import ledger, require_owner
from accrual.schemas.role import RoleGrant, RoleOut
from accrual.services.ledger import Ledger

router = APIRouter(prefix="/roles", tags=["roles"])

@router.get("", response_model=list[RoleOut])
def list_roles(lg: Ledger = Depends(ledger), owner: str = Depends(require_owner)):
    return lg.role_holders()

@router.post("")
def grant_role(body: RoleGrant, lg: Ledger = Depends(ledger), owner: str = Depends(require_owner)):
    granted = lg.grant_role(owner, body.account)
    return {"ok": True, "granted": granted}

@router.delete("/{account}")
def revoke_role(account: str, lg: Ledger = Depends(ledger), owner: str = Depends(require_owner)):
    revoked = lg.revoke_role(owner, account)
    return {"ok": True, "revoked": revoked}
