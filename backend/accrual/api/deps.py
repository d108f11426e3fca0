from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session
from accrual.core.errors import Unauthorized
from accrual.core.security import decode_token
from accrual.db.session import SessionLocal
from accrual.services import roles
from accrual.services.ledger import Ledger
from accrual.utils.clock import now_ts

bearer = HTTPBearer()

def db():
    s = SessionLocal()
    try:
        yield s
    finally:
        s.close()

def clock():
    return now_ts

def ledger(s: Session = Depends(db), now=Depends(clock)) -> Ledger:
    return Ledger(s, clock=now)

def current_user(creds: HTTPAuthorizationCredentials = Depends(bearer)):
    try:
        return decode_token(creds.credentials)
    except Exception:
        raise HTTPException(status_code=401, detail="invalid_token")

def current_account(u=Depends(current_user)) -> str:
    sub = u.get("sub")
    if not sub:
        raise HTTPException(status_code=401, detail="invalid_token")
    return sub

def require_owner(account: str = Depends(current_account)) -> str:
    if not roles.is_owner(account):
        raise Unauthorized(account, "owner_only")
    return account
