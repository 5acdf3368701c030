"""Entry point. Wires the ledger repository into routes.

Persistence strategy:
  - If DATABASE_URL is set  -> SQL repository (PostgreSQL, or any SQLAlchemy URL).
  - Otherwise               -> JSON file repository (development only).
"""
import logging
import os

from dotenv import load_dotenv

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_DIR = os.path.dirname(BASE_DIR)
load_dotenv(os.path.join(PROJECT_DIR, ".env"))

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from greenmove.api.routes.ledger_routes import router as ledger_router, init_routes
from greenmove.application.ledger import DEFAULT_USER_ID, UserLedger

DATA_DIR = os.path.join(BASE_DIR, "data")

DATABASE_URL = os.environ.get("DATABASE_URL", "")
DEFAULT_USER = os.environ.get("GREENMOVE_DEFAULT_USER_ID", DEFAULT_USER_ID)

logging.basicConfig(format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logging.getLogger("greenmove").setLevel(os.environ.get("GREENMOVE_LOG_LEVEL", "INFO").upper())
log = logging.getLogger("greenmove.startup")

app = FastAPI(
    title="GreenMove",
    description="Sustainability activity ledger with points, levels and rewards.",
    version="1.0.0",
)

_allowed = os.environ.get("ALLOWED_ORIGINS", "").strip()
if _allowed:
    allow_origins = [o.strip() for o in _allowed.split(",") if o.strip()]
else:
    allow_origins = ["*"]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allow_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------------------------------
# Persistence wiring
# ---------------------------------------------------------------------------

if DATABASE_URL:
    from greenmove.infrastructure.database.connection import (
        init_engine, create_tables, get_session_factory,
    )
    from greenmove.infrastructure.repositories.pg_ledger_repository import PgLedgerRepository

    init_engine(DATABASE_URL)
    create_tables()
    repository = PgLedgerRepository(get_session_factory())
    _persistence = "sql"
else:
    from greenmove.infrastructure.repositories.ledger_repository import LedgerRepository

    repository = LedgerRepository(data_path=os.path.join(DATA_DIR, "ledger.json"))
    _persistence = "json"

log.info("Ledger persistence: %s", _persistence)
ledger = UserLedger(repository, default_user_id=DEFAULT_USER)
init_routes(ledger)
app.include_router(ledger_router)


@app.get("/health")
def health():
    result = {
        "status": "online",
        "system": "GreenMove ledger v1.0.0",
        "persistence": _persistence,
    }
    if DATABASE_URL:
        from greenmove.infrastructure.database.connection import check_health
        result["database"] = "connected" if check_health() else "disconnected"
    return result


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("greenmove.main:app", host="0.0.0.0", port=8000, reload=True)
