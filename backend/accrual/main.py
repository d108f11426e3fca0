import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from accrual.core.config import settings
from accrual.core.errors import LedgerError
from accrual.api.routes.auth import router as auth_router
from accrual.api.routes.rates import router as rates_router
from accrual.api.routes.accounts import router as accounts_router
from accrual.api.routes.ledger import router as ledger_router
from accrual.api.routes.roles import router as roles_router
from accrual.api.routes.users import router as users_router
from accrual.api.routes.audit import router as audit_router

logging.basicConfig(
    level=getattr(logging, str(settings.log_level).upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="accrual-ledger")

origins = [o.strip() for o in (settings.cors_origins or "").split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=origins or ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.exception_handler(LedgerError)
async def _ledger_error(request: Request, exc: LedgerError):
    # amounts stay JSON integers, as in successful responses
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.code, "context": exc.details})

@app.get("/health")
@app.get("/api/health")
def health():
    return {"status": "ok"}

app.include_router(auth_router)
app.include_router(rates_router)
app.include_router(accounts_router)
app.include_router(ledger_router)
app.include_router(roles_router)
app.include_router(users_router)
app.include_router(audit_router)
