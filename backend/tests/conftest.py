import os

# keep the app off the default Postgres URL when it is imported under test
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from accrual.core.config import settings
from accrual.db.base import Base
from accrual.models.account import Account  # noqa: F401
from accrual.models.allowance import Allowance  # noqa: F401
from accrual.models.audit_log import AuditLog  # noqa: F401
from accrual.models.rate_change import RateChange  # noqa: F401
from accrual.models.registry import RateRegistry  # noqa: F401
from accrual.models.role import LedgerRole  # noqa: F401
from accrual.models.user import User  # noqa: F401
from accrual.services.ledger import Ledger

OWNER = settings.owner_account
VAULT = "vault"

T0 = 1_700_000_000


class FakeClock:
    def __init__(self, t: int = T0):
        self.t = t

    def __call__(self) -> int:
        return self.t

    def warp(self, seconds: int) -> None:
        self.t += seconds


@pytest.fixture()
def engine():
    # The ledger commits and rolls back on its own, so every test gets a fresh database.
    eng = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(eng)
    yield eng
    eng.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)


@pytest.fixture()
def session(session_factory):
    s = session_factory()
    try:
        yield s
    finally:
        s.close()


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def lg(session, clock):
    ledger = Ledger(session, clock=clock)
    ledger.grant_role(OWNER, VAULT)
    return ledger
