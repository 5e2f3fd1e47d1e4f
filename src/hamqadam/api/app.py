# src/hamqadam/api/app.py
"""
FastAPI application wiring.

This file creates the `FastAPI` instance and the CORS policy for a local map front end.
Interaction logic lives in `hamqadam.interaction`; routes only project it.

Run with: `hamqadam serve` (see `hamqadam.cli`) or `uvicorn hamqadam.api.app:app`
"""

from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.middleware.cors import CORSMiddleware

from hamqadam.core.logging import configure_logging

from . import routes

configure_logging()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI) -> AsyncIterator[None]:
    yield
    logger.info("Shutting down map session.")
    routes.shutdown_session()


app = FastAPI(title="Hamqadam API", version="0.1.0", lifespan=lifespan)

# CORS (dev-friendly): allow a local front end (e.g. http://localhost:5173) to call this API.
# Configure via env:
# - HAMQADAM_CORS_ORIGINS="http://localhost:5173,http://127.0.0.1:5173"
# - HAMQADAM_CORS_ALLOW_LOCAL=0 to disable the default localhost allowance
cors_origins = [s.strip() for s in os.getenv("HAMQADAM_CORS_ORIGINS", "").split(",") if s.strip()]
cors_allow_local = os.getenv("HAMQADAM_CORS_ALLOW_LOCAL", "1").strip().lower() in {"1", "true", "yes", "y"}
cors_origin_regex = r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$" if cors_allow_local and not cors_origins else ""
if cors_origins or cors_origin_regex:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins,
        allow_origin_regex=cors_origin_regex or None,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

app.include_router(routes.router)
