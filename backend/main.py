from dotenv import load_dotenv
load_dotenv()

import asyncio
import logging
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from database import get_db

# ENV
from config.env import (
    ENV,
    CORS_ALLOWED_ORIGINS,
    LOG_LEVEL,
    WORKERS_ENABLED,
    validate_production_env,
)

# ROUTES
from routes.admin import router as admin_router

# WORKERS
from workers.seller_enforcement_worker import seller_enforcement_worker
from workers.audit_cleanup_worker import audit_cleanup_worker

from utils.indexes import ensure_indexes

logging.basicConfig(
    level=LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
)
logger = logging.getLogger(__name__)
logger.info("ENV: %s", ENV)

app = FastAPI(
    title="Hobbydork Seller Enforcement API",
    version="1.0.0",
    docs_url=None if ENV == "production" else "/docs",
    redoc_url=None if ENV == "production" else "/redoc",
    openapi_url=None if ENV == "production" else "/openapi.json",
)

# -----------------------------
# CORS
# -----------------------------

allowed_origins = [origin.strip() for origin in CORS_ALLOWED_ORIGINS if origin.strip()]
if not allowed_origins:
    allowed_origins = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# -----------------------------
# ROUTES
# -----------------------------

app.include_router(admin_router)

# -----------------------------
# HEALTH CHECKS
# -----------------------------

@app.get("/api/health")
async def health():

    return {"status": "ok"}

@app.get("/api/health/db")
async def health_db():
    db = get_db()
    await db.command("ping")
    return {"status": "mongodb connected"}

# -----------------------------
# STARTUP WORKERS (ONE PLACE ONLY)
# -----------------------------

_background_tasks = set()


@app.on_event("startup")
async def start_background_workers():
    validate_production_env()
    await ensure_indexes(get_db())

    if not WORKERS_ENABLED:
        logger.info("Background workers disabled")
        return

    for worker in (seller_enforcement_worker, audit_cleanup_worker):
        task = asyncio.create_task(worker())
        _background_tasks.add(task)
        task.add_done_callback(_background_tasks.discard)
