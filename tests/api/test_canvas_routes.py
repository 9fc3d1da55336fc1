from __future__ import annotations

from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

from fresq.api.routes import canvas as canvas_routes
from fresq.canvas.errors import (
    CellTakenError,
    InvalidCodeError,
    InvalidCoordinatesError,
    NotClaimedError,
)
from fresq.canvas.types import (
    CanvasSnapshot,
    CellClaimResult,
    CellPaintResult,
    ClaimedCell,
    CodeValidation,
    PaintedCell,
)
from fresq.main import app


@pytest.fixture(autouse=True)
def _sessions(monkeypatch, fake_sessions) -> None:
    monkeypatch.setattr(canvas_routes, "SessionLocal", fake_sessions)


def _patch_service(monkeypatch, name: str, handler) -> None:
    monkeypatch.setattr(canvas_routes.CanvasService, name, handler)


def test_get_config_returns_grid_and_palette(monkeypatch) -> None:
    async def _get_config(session):
        return SimpleNamespace(width=200, height=200, palette=["#000000"] * 10, state_version=3)

    _patch_service(monkeypatch, "get_config", _get_config)

    response = TestClient(app).get("/api/config")

    assert response.status_code == 200
    assert response.json() == {
        "grid_w": 200,
        "grid_h": 200,
        "palette": ["#000000"] * 10,
        "state_version": 3,
    }


def test_get_state_lists_painted_cells(monkeypatch) -> None:
    async def _get_state(session):
        return CanvasSnapshot(
            width=300,
            height=300,
            state_version=5,
            palette=["#FFFFFF"] * 10,
            cells=[PaintedCell(x=60, y=60, color=4)],
        )

    _patch_service(monkeypatch, "get_canvas_state", _get_state)

    response = TestClient(app).get("/api/state")

    assert response.status_code == 200
    payload = response.json()
    assert payload["config"]["grid_w"] == 300
    assert payload["cells"] == [{"x": 60, "y": 60, "color": 4}]


def test_claim_success_broadcasts_cell_claimed(monkeypatch, published) -> None:
    captured: dict[str, object] = {}

    async def _claim(session, *, code, x, y, now_utc, expected_state_version):
        captured.update(code=code, x=x, y=y, expected_state_version=expected_state_version)
        return CellClaimResult(code="ABCD2345", x=x, y=y, idempotent_replay=False)

    _patch_service(monkeypatch, "claim_cell", _claim)

    response = TestClient(app).post("/api/cell/claim", json={"code": "ABCD2345", "x": 10, "y": 10})

    assert response.status_code == 200
    assert response.json() == {"ok": True, "x": 10, "y": 10}
    assert captured == {"code": "ABCD2345", "x": 10, "y": 10, "expected_state_version": None}
    assert [event.type for event in published] == ["cell:claimed"]


def test_claim_replay_does_not_broadcast_again(monkeypatch, published) -> None:
    async def _claim(session, *, code, x, y, now_utc, expected_state_version):
        return CellClaimResult(code="ABCD2345", x=x, y=y, idempotent_replay=True)

    _patch_service(monkeypatch, "claim_cell", _claim)

    response = TestClient(app).post("/api/cell/claim", json={"code": "ABCD2345", "x": 10, "y": 10})

    assert response.json() == {"ok": True, "x": 10, "y": 10}
    assert published == []


@pytest.mark.parametrize(
    ("error", "code"),
    [
        (CellTakenError, "cell_taken"),
        (InvalidCodeError, "invalid_code"),
    ],
)
def test_claim_conflicts_are_structured_results(monkeypatch, published, error, code) -> None:
    async def _claim(session, **kwargs):
        raise error

    _patch_service(monkeypatch, "claim_cell", _claim)

    response = TestClient(app).post("/api/cell/claim", json={"code": "WXYZ9876", "x": 10, "y": 10})

    assert response.status_code == 200
    assert response.json() == {"ok": False, "error": code}
    assert published == []


def test_claim_out_of_bounds_is_a_validation_failure(monkeypatch) -> None:
    async def _claim(session, **kwargs):
        raise InvalidCoordinatesError

    _patch_service(monkeypatch, "claim_cell", _claim)

    response = TestClient(app).post("/api/cell/claim", json={"code": "ABCD2345", "x": 500, "y": 1})

    assert response.status_code == 400
    assert response.json() == {"ok": False, "error": "out_of_bounds"}


def test_claim_rejects_negative_coordinates_before_the_service(monkeypatch) -> None:
    async def _claim(session, **kwargs):
        raise AssertionError("service must not be called")

    _patch_service(monkeypatch, "claim_cell", _claim)

    response = TestClient(app).post("/api/cell/claim", json={"code": "ABCD2345", "x": -1, "y": 1})

    assert response.status_code == 422


def test_paint_success_broadcasts_cell_painted(monkeypatch, published) -> None:
    async def _paint(session, *, code, color, now_utc):
        return CellPaintResult(code="ABCD2345", x=10, y=10, color=color)

    _patch_service(monkeypatch, "paint_cell", _paint)

    response = TestClient(app).post("/api/cell/paint", json={"code": "ABCD2345", "color": 4})

    assert response.json() == {"ok": True, "x": 10, "y": 10, "color": 4}
    assert published[0].payload == {"x": 10, "y": 10, "color": 4}


def test_paint_without_claim_returns_not_claimed(monkeypatch, published) -> None:
    async def _paint(session, **kwargs):
        raise NotClaimedError

    _patch_service(monkeypatch, "paint_cell", _paint)

    response = TestClient(app).post("/api/cell/paint", json={"code": "ABCD2345", "color": 4})

    assert response.json() == {"ok": False, "error": "not_claimed"}
    assert published == []


def test_paint_rejects_color_outside_palette() -> None:
    response = TestClient(app).post("/api/cell/paint", json={"code": "ABCD2345", "color": 11})
    assert response.status_code == 422


def test_validate_code_reports_assignment(monkeypatch) -> None:
    async def _validate(session, *, code):
        return CodeValidation(code="ABCD2345", state=ClaimedCell(x=3, y=4))

    _patch_service(monkeypatch, "validate_code", _validate)

    response = TestClient(app).post("/api/code/validate", json={"code": "abcd2345"})

    assert response.json() == {
        "ok": True,
        "code": "ABCD2345",
        "assigned": True,
        "x": 3,
        "y": 4,
        "color": None,
    }


def test_validate_unknown_code(monkeypatch) -> None:
    async def _validate(session, *, code):
        raise InvalidCodeError

    _patch_service(monkeypatch, "validate_code", _validate)

    response = TestClient(app).post("/api/code/validate", json={"code": "NOPE2345"})

    assert response.json() == {"ok": False, "error": "invalid_code"}


def test_tier_progress_serializes_camel_case(monkeypatch) -> None:
    tier = SimpleNamespace(
        id=1,
        tier_number=0,
        min_tickets=0,
        max_tickets=999,
        grid_width=200,
        grid_height=200,
        prize_amount="500.00",
    )

    async def _progress(session):
        return SimpleNamespace(
            as_dict=lambda: {
                "currentTier": canvas_routes.tier_as_dict(tier),
                "nextTier": None,
                "ticketsSold": 5,
                "ticketsNeeded": 995,
                "progress": 0.5,
                "maxTierReached": False,
            }
        )

    monkeypatch.setattr(canvas_routes.TierService, "get_tier_progress", _progress)

    response = TestClient(app).get("/api/tiers/progress")

    assert response.status_code == 200
    payload = response.json()
    assert payload["currentTier"]["gridWidth"] == 200
    assert payload["ticketsNeeded"] == 995
