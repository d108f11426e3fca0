from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import select
from accrual.api.deps import db
from accrual.schemas.auth import LoginIn, TokenOut
from accrual.models.user import User
from accrual.core.security import verify_password, create_access_token
from accrual.services import roles

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/login", response_model=TokenOut)
def login(body: LoginIn, s: Session = Depends(db)):
    u = s.execute(select(User).where(User.username == body.username)).scalar_one_or_none()
    if not u or not verify_password(body.password, u.password_hash):
        raise HTTPException(status_code=401, detail="bad_credentials")
    token = create_access_token(sub=u.username)
    return {
        "access_token": token,
        "account": u.username,
        "is_owner": roles.is_owner(u.username),
        "is_mutator": roles.has_role(s, u.username),
    }
