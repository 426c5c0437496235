"""
Entry point for the Space Inbound Rules API.

Run locally:
    uvicorn app.main:app --reload

Interactive docs available at:
    http://localhost:8000/docs  (Swagger UI)
"""

import logging

from fastapi import FastAPI

from app.apis.auth import router as auth_router
from app.apis.inbound_rule import router as inbound_rule_router
from app.config import settings

# ── Logging ───────────────────────────────────────────────────────────────────
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
)

# ── FastAPI app ───────────────────────────────────────────────────────────────
app = FastAPI(
    title="Space Inbound Rules API",
    description=(
        "Manages inbound rules on Heroku private spaces. All endpoints (except "
        "`/auth/token` and `/health`) require a valid JWT Bearer token."
    ),
    version="1.0.0",
    contact={"name": "Platform Engineering"},
    license_info={"name": "MIT"},
)

# ── Routers ───────────────────────────────────────────────────────────────────
app.include_router(auth_router)
app.include_router(inbound_rule_router)


@app.get("/health", tags=["Health"], summary="Health check")
def health() -> dict:
    return {"status": "ok"}
