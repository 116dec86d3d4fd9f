import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from lokal.core.config import CORS_ORIGINS, ENV, SUPER_ADMIN_EMAILS
from lokal.core.database import engine
from lokal.core.logging_setup import configure_logging
from lokal.core.startup_checks import ensure_migrations_applied, validate_database_environment
from lokal.middleware.observability import ObservabilityMiddleware
import lokal.models  # registers every model on Base.metadata

from lokal.routers.admin_ai import router as admin_ai_router
from lokal.routers.admin_contracts import router as admin_contracts_router
from lokal.routers.catalog import router as catalog_router
from lokal.routers.discover import router as discover_router
from lokal.routers.internal_metrics import router as internal_metrics_router
from lokal.routers.local_state import router as local_state_router
from lokal.routers.profile import router as profile_router

configure_logging()

logger = logging.getLogger(__name__)
REPO_ROOT = Path(__file__).resolve().parents[1]
ALEMBIC_CONFIG_PATH = Path(os.getenv("ALEMBIC_CONFIG", str(REPO_ROOT / "alembic.ini")))


def _startup_tasks() -> None:
    validate_database_environment()
    ensure_migrations_applied(engine=engine, alembic_config_path=ALEMBIC_CONFIG_PATH)
    if not SUPER_ADMIN_EMAILS:
        logger.warning("SUPER_ADMIN_EMAILS is empty; new profiles will all be consumers")
    logger.info("Lokal API started env=%s", ENV)


@asynccontextmanager
async def lifespan(_: FastAPI):
    _startup_tasks()
    yield


app = FastAPI(
    title="Lokal API",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(ObservabilityMiddleware)


@app.get("/")
def health():
    return {"status": "ok"}


app.include_router(profile_router)
app.include_router(catalog_router)
app.include_router(admin_contracts_router)
app.include_router(discover_router)
app.include_router(admin_ai_router)
app.include_router(local_state_router)
app.include_router(internal_metrics_router)
