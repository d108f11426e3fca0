import logging
import os
from sqlalchemy import select
from accrual.core.config import settings
from accrual.core.security import hash_password
from accrual.db.session import SessionLocal
from accrual.models.user import User
from accrual.services.rates import ensure_registry

logger = logging.getLogger(__name__)

def main():
    username = settings.owner_account
    password = os.environ.get("SEED_OWNER_PASS", "owner123")

    db = SessionLocal()
    try:
        ensure_registry(db)
        existing = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
        if existing is None:
            db.add(User(username=username, password_hash=hash_password(password)))
            logger.info("seeded owner %s", username)
        db.commit()
    finally:
        db.close()

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
