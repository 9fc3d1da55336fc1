from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from fresq.canvas.errors import CanvasConflictError, CanvasError, CanvasValidationError
from fresq.canvas.service import CanvasService
from fresq.canvas.types import CodeValidation, EmptyCell, PaintedCell
from fresq.core.validators import COLOR_MAX, COLOR_MIN
from fresq.db.models.grid_config import GridConfig
from fresq.db.session import SessionLocal
from fresq.grid.service import TierService
from fresq.grid.types import tier_as_dict
from fresq.services import live_state
from fresq.services.live_state import publish_event

router = APIRouter(prefix="/api", tags=["canvas"])


class CodeRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)


class CellClaimRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    x: int = Field(ge=0)
    y: int = Field(ge=0)
    state_version: int | None = Field(default=None, ge=0)


class CellPaintRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)
    color: int = Field(ge=COLOR_MIN, le=COLOR_MAX)


def _config_as_dict(config: GridConfig) -> dict[str, Any]:
    return {
        "grid_w": config.width,
        "grid_h": config.height,
        "palette": list(config.palette),
        "state_version": config.state_version,
    }


def _code_as_dict(validation: CodeValidation) -> dict[str, Any]:
    state = validation.state
    payload: dict[str, Any] = {"code": validation.code, "assigned": not isinstance(state, EmptyCell)}
    if not isinstance(state, EmptyCell):
        payload["x"], payload["y"] = state.position
        payload["color"] = state.color if isinstance(state, PaintedCell) else None
    return payload


def _rejected(exc: CanvasError, *, status_code: int = 200) -> JSONResponse:
    # Conflicts stay 200; clients branch on the error code.
    return JSONResponse(status_code=status_code, content={"ok": False, "error": exc.code})


@router.get("/config")
async def get_config() -> dict[str, Any]:
    async with SessionLocal() as session:
        config = await CanvasService.get_config(session)
    return _config_as_dict(config)


@router.get("/state")
async def get_state() -> dict[str, Any]:
    async with SessionLocal() as session:
        snapshot = await CanvasService.get_canvas_state(session)
    return {
        "config": {
            "grid_w": snapshot.width,
            "grid_h": snapshot.height,
            "palette": snapshot.palette,
            "state_version": snapshot.state_version,
        },
        "cells": [{"x": cell.x, "y": cell.y, "color": cell.color} for cell in snapshot.cells],
    }


@router.post("/code/validate")
async def validate_code(payload: CodeRequest) -> JSONResponse:
    try:
        async with SessionLocal() as session:
            validation = await CanvasService.validate_code(session, code=payload.code)
    except CanvasConflictError as exc:
        return _rejected(exc)
    return JSONResponse(content={"ok": True, **_code_as_dict(validation)})


@router.post("/cell/claim")
async def claim_cell(payload: CellClaimRequest) -> JSONResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await CanvasService.claim_cell(
                session,
                code=payload.code,
                x=payload.x,
                y=payload.y,
                now_utc=now_utc,
                expected_state_version=payload.state_version,
            )
    except CanvasValidationError as exc:
        return _rejected(exc, status_code=400)
    except CanvasConflictError as exc:
        return _rejected(exc)

    if not result.idempotent_replay:
        await publish_event(live_state.cell_claimed(x=result.x, y=result.y))
    return JSONResponse(content={"ok": True, "x": result.x, "y": result.y})


@router.post("/cell/paint")
async def paint_cell(payload: CellPaintRequest) -> JSONResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await CanvasService.paint_cell(
                session,
                code=payload.code,
                color=payload.color,
                now_utc=now_utc,
            )
    except CanvasValidationError as exc:
        return _rejected(exc, status_code=400)
    except CanvasConflictError as exc:
        return _rejected(exc)

    await publish_event(live_state.cell_painted(x=result.x, y=result.y, color=result.color))
    return JSONResponse(content={"ok": True, "x": result.x, "y": result.y, "color": result.color})


@router.get("/codes")
async def list_codes(email: str = Query(min_length=3, max_length=254)) -> dict[str, Any]:
    async with SessionLocal() as session:
        codes = await CanvasService.list_user_codes(session, email=email)
    return {"codes": [_code_as_dict(code) for code in codes]}


@router.get("/tiers")
async def list_tiers() -> dict[str, Any]:
    async with SessionLocal() as session:
        tiers = await TierService.get_all_tiers(session)
    return {"tiers": [tier_as_dict(tier) for tier in tiers]}


@router.get("/tiers/current")
async def current_tier() -> dict[str, Any]:
    async with SessionLocal() as session:
        tier = await TierService.get_current_tier(session)
        tickets_sold = await TierService.count_paid_tickets(session)
    return {"tier": tier_as_dict(tier), "ticketsSold": tickets_sold}


@router.get("/tiers/progress")
async def tier_progress() -> dict[str, Any]:
    async with SessionLocal() as session:
        progress = await TierService.get_tier_progress(session)
    return progress.as_dict()
