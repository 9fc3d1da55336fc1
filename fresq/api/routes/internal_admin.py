from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import structlog
from fastapi import APIRouter, HTTPException, Query, Request
from pydantic import BaseModel, Field

from fresq.canvas.errors import (
    InvalidCodeCountError,
    InvalidCodeError,
    InvalidPaletteError,
    NotClaimedError,
)
from fresq.canvas.service import CanvasService
from fresq.canvas.types import cell_state_of
from fresq.core.config import get_settings
from fresq.db.models.codes import Code
from fresq.db.repo.codes_repo import CodesRepo
from fresq.db.session import SessionLocal
from fresq.economy.tickets.errors import (
    CodeGenerationError,
    PackRefundNotAllowedError,
    RefundBlockedError,
    TicketAlreadyPaidError,
    TicketNotFoundError,
    TicketNotPendingError,
)
from fresq.economy.tickets.service import TicketService
from fresq.grid.service import TierService
from fresq.grid.types import TierUpgradeResult
from fresq.services import live_state
from fresq.services.internal_auth import (
    extract_client_ip,
    is_admin_request_authenticated,
    is_client_ip_allowed,
)
from fresq.services.live_state import publish_event

router = APIRouter(prefix="/internal", tags=["internal", "admin"])
logger = structlog.get_logger(__name__)


class CodeGenerateRequest(BaseModel):
    count: int


class CodeActionRequest(BaseModel):
    code: str = Field(min_length=1, max_length=32)


class PaletteUpdateRequest(BaseModel):
    palette: list[str]


class TicketConfirmResponse(BaseModel):
    order_id: str
    status: str
    codes: list[str]
    purchased_codes: list[str]
    bonus_codes: list[str]
    tier_upgrade: dict[str, Any]


class TicketCancelResponse(BaseModel):
    order_id: str
    previous_status: str
    status: str
    deleted_code: str | None = None


class CodeResponse(BaseModel):
    code: str
    source: str
    user_id: int | None = None
    x: int | None = None
    y: int | None = None
    color: int | None = None
    created_at: datetime


def _assert_internal_access(request: Request) -> None:
    settings = get_settings()
    client_ip = extract_client_ip(
        request,
        trusted_proxies=settings.internal_api_trusted_proxies,
    )

    if not is_client_ip_allowed(client_ip=client_ip, allowlist=settings.internal_api_allowlist):
        logger.warning("internal_admin_auth_failed", reason="ip_not_allowed", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})

    if not is_admin_request_authenticated(request, expected_token=settings.internal_api_token):
        logger.warning("internal_admin_auth_failed", reason="invalid_credentials", client_ip=client_ip)
        raise HTTPException(status_code=403, detail={"code": "E_FORBIDDEN"})


def _code_as_response(row: Code) -> CodeResponse:
    state = cell_state_of(row)
    x, y = state.position if state.position is not None else (None, None)
    return CodeResponse(
        code=row.code,
        source=row.source,
        user_id=row.user_id,
        x=x,
        y=y,
        color=row.color,
        created_at=row.created_at,
    )


async def _broadcast_upgrade(result: TierUpgradeResult) -> None:
    if result.upgraded:
        await publish_event(live_state.tier_upgrade(result))


@router.post("/tickets/{order_id}/confirm", response_model=TicketConfirmResponse)
async def confirm_ticket(order_id: str, request: Request) -> TicketConfirmResponse:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await TicketService.confirm_pack_purchase(
                session,
                order_id=order_id,
                now_utc=now_utc,
            )
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_TICKET_NOT_FOUND"}) from exc
    except TicketAlreadyPaidError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_TICKET_ALREADY_PAID"}) from exc
    except TicketNotPendingError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_TICKET_NOT_PENDING"}) from exc
    except CodeGenerationError as exc:
        logger.error("ticket_confirm_code_generation_failed", order_id=order_id)
        raise HTTPException(status_code=503, detail={"code": "E_CODE_GENERATION_FAILED"}) from exc

    await _broadcast_upgrade(result.tier_upgrade)
    return TicketConfirmResponse(
        order_id=result.order_id,
        status=result.status,
        codes=result.codes,
        purchased_codes=result.purchased_codes,
        bonus_codes=result.bonus_codes,
        tier_upgrade=result.tier_upgrade.as_dict(),
    )


@router.post("/tickets/{order_id}/cancel", response_model=TicketCancelResponse)
async def cancel_ticket(order_id: str, request: Request) -> TicketCancelResponse:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await TicketService.cancel_ticket(session, order_id=order_id, now_utc=now_utc)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_TICKET_NOT_FOUND"}) from exc
    except TicketNotPendingError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_TICKET_NOT_PENDING"}) from exc
    except PackRefundNotAllowedError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_PACK_REFUND_NOT_ALLOWED"}) from exc
    except RefundBlockedError as exc:
        raise HTTPException(
            status_code=409,
            detail={"code": "E_REFUND_BLOCKED", "reason": exc.reason},
        ) from exc

    return TicketCancelResponse(
        order_id=result.order_id,
        previous_status=result.previous_status,
        status=result.status,
        deleted_code=result.deleted_code,
    )


@router.post("/codes/generate")
async def generate_codes(payload: CodeGenerateRequest, request: Request) -> dict[str, Any]:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            codes = await CanvasService.generate_codes(session, count=payload.count, now_utc=now_utc)
    except InvalidCodeCountError as exc:
        raise HTTPException(status_code=400, detail={"code": "E_INVALID_COUNT"}) from exc
    except CodeGenerationError as exc:
        raise HTTPException(status_code=503, detail={"code": "E_CODE_GENERATION_FAILED"}) from exc

    logger.info("codes_generated", count=len(codes))
    return {"codes": codes, "count": len(codes)}


@router.get("/codes", response_model=list[CodeResponse])
async def list_codes(
    request: Request,
    limit: int = Query(default=100, ge=1, le=1000),
) -> list[CodeResponse]:
    _assert_internal_access(request)

    async with SessionLocal() as session:
        rows = await CodesRepo.list_recent(session, limit=limit)
    return [_code_as_response(row) for row in rows]


@router.post("/cells/clear")
async def clear_cell(payload: CodeActionRequest, request: Request) -> dict[str, Any]:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await CanvasService.clear_cell(session, code=payload.code, now_utc=now_utc)
    except InvalidCodeError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_CODE_NOT_FOUND"}) from exc
    except NotClaimedError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_NOT_CLAIMED"}) from exc

    await publish_event(live_state.cell_deleted(x=result.x, y=result.y))
    return {"code": result.code, "x": result.x, "y": result.y, "state_version": result.state_version}


@router.post("/cells/reset-color")
async def reset_cell_color(payload: CodeActionRequest, request: Request) -> dict[str, Any]:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await CanvasService.reset_cell_color(session, code=payload.code, now_utc=now_utc)
    except InvalidCodeError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_CODE_NOT_FOUND"}) from exc
    except NotClaimedError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_NOT_CLAIMED"}) from exc

    await publish_event(live_state.cell_deleted(x=result.x, y=result.y))
    return {"code": result.code, "x": result.x, "y": result.y, "state_version": result.state_version}


@router.post("/canvas/reset")
async def reset_canvas(request: Request) -> dict[str, Any]:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        state_version = await CanvasService.full_reset(session, now_utc=now_utc)

    await publish_event(live_state.full_reset())
    return {"state_version": state_version}


@router.put("/canvas/palette")
async def update_palette(payload: PaletteUpdateRequest, request: Request) -> dict[str, Any]:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            config = await CanvasService.update_palette(session, palette=payload.palette, now_utc=now_utc)
            palette = list(config.palette)
            state_version = config.state_version
    except InvalidPaletteError as exc:
        raise HTTPException(status_code=400, detail={"code": "E_INVALID_PALETTE"}) from exc

    await publish_event(live_state.palette_updated(palette=palette, state_version=state_version))
    return {"palette": palette, "state_version": state_version}


@router.post("/tiers/sync")
async def sync_tiers(request: Request) -> dict[str, Any]:
    _assert_internal_access(request)

    now_utc = datetime.now(timezone.utc)
    async with SessionLocal.begin() as session:
        result = await TierService.sync_grid_to_current_tier(session, now_utc=now_utc)

    await _broadcast_upgrade(result)
    return result.as_dict()


@router.get("/stats")
async def stats(request: Request) -> dict[str, Any]:
    _assert_internal_access(request)

    async with SessionLocal() as session:
        canvas = await CanvasService.get_canvas_stats(session)
        tickets = await TicketService.get_ticket_stats(session)
        progress = await TierService.get_tier_progress(session)
    return {
        "codes": {
            "total": canvas.total_codes,
            "claimed": canvas.claimed_codes,
            "painted": canvas.painted_codes,
        },
        "tickets": {
            "pending": tickets.pending,
            "paid": tickets.paid,
            "refunded": tickets.refunded,
            "cancelled": tickets.cancelled,
            "total": tickets.total,
            "revenue": str(tickets.total_revenue),
        },
        "tier": progress.as_dict(),
    }
