"""
Business Onboarding — FastAPI Backend
Persistence service for the onboarding wizard
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from onboarding_api.config import settings
from onboarding_api.db.database import engine, Base
from onboarding_api.routers import businesses, users

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown events."""
    logger.info("🚀 Onboarding API starting...")
    if settings.create_tables:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()
    logger.info("🛑 Onboarding API shut down.")


app = FastAPI(
    title="Business Onboarding API",
    description="Create and update business profiles collected by the onboarding wizard",
    version="1.0.0",
    lifespan=lifespan,
)

# ── CORS ───────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routers ────────────────────────────────────────────────
app.include_router(users.router, prefix="/api/users", tags=["Users"])
app.include_router(businesses.router, prefix="/api/businesses", tags=["Businesses"])


@app.get("/health")
async def health_check():
    return {"status": "healthy", "service": "Business Onboarding API"}
