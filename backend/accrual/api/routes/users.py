from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from sqlalchemy import select
from accrual.api.deps import db, require_owner
from accrual.schemas.user import UserCreate, UserUpdate, UserOut
from accrual.models.user import User
from accrual.core.security import hash_password
from accrual.services.audit import log_event

router = APIRouter(prefix="/users", tags=["users"])

@router.get("", response_model=list[UserOut])
def list_users(s: Session = Depends(db), owner: str = Depends(require_owner)):
    return s.execute(select(User).order_by(User.username.asc())).scalars().all()

@router.post("", response_model=UserOut)
def create_user(body: UserCreate, s: Session = Depends(db), owner: str = Depends(require_owner)):
    exists = s.execute(select(User).where(User.username == body.username)).scalar_one_or_none()
    if exists:
        raise HTTPException(status_code=409, detail="user_exists")
    user = User(username=body.username, password_hash=hash_password(body.password))
    s.add(user)
    log_event(s, actor=owner, action="user.create", entity_type="user", entity_id=body.username)
    s.commit()
    s.refresh(user)
    return user

@router.patch("/{user_id}", response_model=UserOut)
def update_user(user_id: int, body: UserUpdate, s: Session = Depends(db), owner: str = Depends(require_owner)):
    user = s.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="user_not_found")
    user.password_hash = hash_password(body.password)
    s.add(user)
    s.commit()
    s.refresh(user)
    return user

@router.delete("/{user_id}")
def delete_user(user_id: int, s: Session = Depends(db), owner: str = Depends(require_owner)):
    user = s.execute(select(User).where(User.id == user_id)).scalar_one_or_none()
    if not user:
        raise HTTPException(status_code=404, detail="user_not_found")
    if user.username == owner:
        raise HTTPException(status_code=409, detail="cannot_delete_self")
    # ledger state for the account is kept; only the login goes away
    log_event(s, actor=owner, action="user.delete", entity_type="user", entity_id=user.username)
    s.delete(user)
    s.commit()
    return {"ok": True}
