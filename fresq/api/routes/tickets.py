from __future__ import annotations

from datetime import datetime, timezone
from decimal import Decimal

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import BaseModel, Field

from fresq.db.models.tickets import Ticket
from fresq.db.session import SessionLocal
from fresq.economy.tickets.catalog import PackSpec
from fresq.economy.tickets.errors import (
    InvalidEmailError,
    PackNotFoundError,
    TicketNotFoundError,
    TicketValidationError,
)
from fresq.economy.tickets.service import TicketService
from fresq.economy.tickets.types import TicketCreateResult

router = APIRouter(prefix="/api", tags=["tickets"])


class TicketCreateRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)


class PackPurchaseRequest(BaseModel):
    email: str = Field(min_length=3, max_length=254)
    pack_key: str = Field(min_length=1, max_length=32)


class PackResponse(BaseModel):
    pack_key: str
    label: str
    base_tickets: int
    bonus_tickets: int
    total_tickets: int
    price: Decimal
    discount_percent: int


class TicketCreateResponse(BaseModel):
    order_id: str
    email: str
    amount: Decimal
    quantity: int
    base_quantity: int
    bonus_quantity: int
    status: str
    tier_number: int
    pack_key: str | None = None


class TicketResponse(BaseModel):
    order_id: str
    email: str
    amount: Decimal
    quantity: int
    base_quantity: int
    bonus_quantity: int
    status: str
    created_at: datetime
    paid_at: datetime | None = None
    refunded_at: datetime | None = None


def _pack_as_response(pack: PackSpec) -> PackResponse:
    return PackResponse(
        pack_key=pack.pack_key,
        label=pack.label,
        base_tickets=pack.base_tickets,
        bonus_tickets=pack.bonus_tickets,
        total_tickets=pack.total_tickets,
        price=pack.price,
        discount_percent=pack.discount_percent,
    )


def _created_as_response(result: TicketCreateResult) -> TicketCreateResponse:
    return TicketCreateResponse(
        order_id=result.order_id,
        email=result.email,
        amount=result.amount,
        quantity=result.quantity,
        base_quantity=result.base_quantity,
        bonus_quantity=result.bonus_quantity,
        status=result.status,
        tier_number=result.tier_number,
        pack_key=result.pack_key,
    )


def _ticket_as_response(ticket: Ticket) -> TicketResponse:
    return TicketResponse(
        order_id=ticket.order_id,
        email=ticket.email,
        amount=ticket.amount,
        quantity=ticket.quantity,
        base_quantity=ticket.base_quantity,
        bonus_quantity=ticket.bonus_quantity,
        status=ticket.status,
        created_at=ticket.created_at,
        paid_at=ticket.paid_at,
        refunded_at=ticket.refunded_at,
    )


@router.get("/packs", response_model=list[PackResponse])
async def list_packs() -> list[PackResponse]:
    return [_pack_as_response(pack) for pack in TicketService.list_pack_catalog()]


@router.post("/tickets", response_model=TicketCreateResponse, status_code=status.HTTP_201_CREATED)
async def create_ticket(payload: TicketCreateRequest) -> TicketCreateResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await TicketService.create_ticket(session, email=payload.email, now_utc=now_utc)
    except InvalidEmailError as exc:
        raise HTTPException(status_code=400, detail={"code": "E_INVALID_EMAIL"}) from exc
    except TicketValidationError as exc:
        raise HTTPException(status_code=400, detail={"code": "E_INVALID_TICKET"}) from exc

    return _created_as_response(result)


@router.post(
    "/packs/purchase",
    response_model=TicketCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_pack_purchase(payload: PackPurchaseRequest) -> TicketCreateResponse:
    now_utc = datetime.now(timezone.utc)
    try:
        async with SessionLocal.begin() as session:
            result = await TicketService.create_pack_purchase(
                session,
                email=payload.email,
                pack_key=payload.pack_key,
                now_utc=now_utc,
            )
    except InvalidEmailError as exc:
        raise HTTPException(status_code=400, detail={"code": "E_INVALID_EMAIL"}) from exc
    except PackNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_PACK_NOT_FOUND"}) from exc

    return _created_as_response(result)


@router.get("/tickets/{order_id}", response_model=TicketResponse)
async def get_ticket(order_id: str) -> TicketResponse:
    try:
        async with SessionLocal() as session:
            ticket = await TicketService.get_ticket_by_order_id(session, order_id=order_id)
    except TicketNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_TICKET_NOT_FOUND"}) from exc

    return _ticket_as_response(ticket)


@router.get("/tickets", response_model=list[TicketResponse])
async def list_tickets(email: str = Query(min_length=3, max_length=254)) -> list[TicketResponse]:
    async with SessionLocal() as session:
        tickets = await TicketService.list_user_tickets(session, email=email)
    return [_ticket_as_response(ticket) for ticket in tickets]
