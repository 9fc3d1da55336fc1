from __future__ import annotations

import pytest

from fresq.canvas.errors import CellTakenError
from fresq.canvas.service import CanvasService
from fresq.db.session import SessionLocal
from fresq.economy.tickets.service import TicketService
from tests.integration.canvas_fixtures import NOW_UTC, seed_canvas


@pytest.mark.asyncio
async def test_buy_confirm_claim_paint_and_lose_a_race() -> None:
    await seed_canvas()

    async with SessionLocal.begin() as session:
        first_order = await TicketService.create_ticket(session, email="alice@example.com", now_utc=NOW_UTC)
        second_order = await TicketService.create_ticket(session, email="bob@example.com", now_utc=NOW_UTC)
    async with SessionLocal.begin() as session:
        alice = await TicketService.confirm_ticket_payment(session, order_id=first_order.order_id, now_utc=NOW_UTC)
    async with SessionLocal.begin() as session:
        bob = await TicketService.confirm_ticket_payment(session, order_id=second_order.order_id, now_utc=NOW_UTC)

    alice_code = alice.codes[0]
    bob_code = bob.codes[0]

    async with SessionLocal.begin() as session:
        claim = await CanvasService.claim_cell(session, code=alice_code, x=10, y=10, now_utc=NOW_UTC)
    async with SessionLocal.begin() as session:
        paint = await CanvasService.paint_cell(session, code=alice_code, color=4, now_utc=NOW_UTC)

    assert claim.idempotent_replay is False
    assert (paint.x, paint.y, paint.color) == (10, 10, 4)

    with pytest.raises(CellTakenError):
        async with SessionLocal.begin() as session:
            await CanvasService.claim_cell(session, code=bob_code, x=10, y=10, now_utc=NOW_UTC)

    async with SessionLocal() as session:
        snapshot = await CanvasService.get_canvas_state(session)
        validation = await CanvasService.validate_code(session, code=bob_code.lower())

    assert (snapshot.width, snapshot.height) == (200, 200)
    assert [(cell.x, cell.y, cell.color) for cell in snapshot.cells] == [(10, 10, 4)]
    assert validation.state.position is None
