"""
API routes.

Endpoints (all thin projections of `SelectionMachine`):
- GET  `/api/health`: liveness + configured provider.
- GET  `/api/session`: current snapshot and overlays.
- POST `/api/session/click`: a map click at `{"lat", "lng"}`.
- POST `/api/session/confirm`, `/reset`, `/cancel`, `/end`: button presses.

An event the current phase ignores answers 409 with the unchanged state as `detail`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from hamqadam.config.settings import get_settings
from hamqadam.domain.models import Coordinate
from hamqadam.interaction.session import MapSession, build_session

router = APIRouter()


class ClickRequest(BaseModel):
    lat: float = Field(..., ge=-90, le=90, allow_inf_nan=False)
    lng: float = Field(..., ge=-180, le=180, allow_inf_nan=False)


_current: MapSession | None = None


def _session() -> MapSession:
    """Return the process-wide session, building it on first use."""
    global _current
    if _current is None:
        _current = build_session(get_settings())
    return _current


def shutdown_session() -> None:
    """Cancel background work of the process-wide session, if one was built."""
    if _current is not None:
        _current.machine.shutdown()


def _answer(session: MapSession, accepted: bool) -> dict[str, Any]:
    state = session.state()
    if not accepted:
        raise HTTPException(status_code=409, detail=state)
    return state


@router.get("/api/health")
def get_health() -> dict:
    settings = get_settings()
    return {"status": "ok", "provider": settings.directions.provider, "locale": settings.app.locale}


@router.get("/api/session")
async def get_session_state() -> dict:
    return _session().state()


@router.post("/api/session/click")
async def post_click(req: ClickRequest, wait: bool = False) -> dict:
    """Deliver a map click. With `?wait=true`, respond after the route fetch settles."""
    session = _session()
    accepted = session.board.click(Coordinate(lat=req.lat, lng=req.lng))
    if accepted and wait:
        await session.machine.wait_idle()
    return _answer(session, accepted)


@router.post("/api/session/confirm")
async def post_confirm() -> dict:
    session = _session()
    return _answer(session, session.machine.confirm())


@router.post("/api/session/reset")
async def post_reset() -> dict:
    session = _session()
    return _answer(session, session.machine.reset())


@router.post("/api/session/cancel")
async def post_cancel() -> dict:
    session = _session()
    return _answer(session, session.machine.cancel())


@router.post("/api/session/end")
async def post_end() -> dict:
    session = _session()
    return _answer(session, session.machine.end())
