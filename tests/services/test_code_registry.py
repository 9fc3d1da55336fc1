from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone

import pytest
from sqlalchemy.exc import IntegrityError

from fresq.services import code_registry
from fresq.services.code_registry import CodeGenerationError, mint_code

NOW_UTC = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


class _Session:
    @asynccontextmanager
    async def begin_nested(self):
        yield self


def _patch_candidates(monkeypatch, candidates: list[str]) -> None:
    remaining = iter(candidates)
    monkeypatch.setattr(code_registry, "generate_code", lambda: next(remaining))


@pytest.mark.asyncio
async def test_mint_code_regenerates_on_pre_check_collision(monkeypatch) -> None:
    _patch_candidates(monkeypatch, ["TAKEN234", "FRESH234"])
    created: list[object] = []

    async def _exists(session, code: str) -> bool:
        return code == "TAKEN234"

    async def _create(session, *, code):
        created.append(code)
        return code

    monkeypatch.setattr(code_registry.CodesRepo, "exists", _exists)
    monkeypatch.setattr(code_registry.CodesRepo, "create", _create)

    row = await mint_code(_Session(), user_id=42, source="pack_bonus", now_utc=NOW_UTC)

    assert row.code == "FRESH234"
    assert row.user_id == 42
    assert row.source == "pack_bonus"
    assert row.cell_x is None and row.color is None
    assert len(created) == 1


@pytest.mark.asyncio
async def test_mint_code_retries_after_unique_violation(monkeypatch) -> None:
    _patch_candidates(monkeypatch, ["RACED234", "FRESH234"])

    async def _exists(session, code: str) -> bool:
        return False

    async def _create(session, *, code):
        if code.code == "RACED234":
            raise IntegrityError("INSERT INTO codes", {}, Exception("duplicate key"))
        return code

    monkeypatch.setattr(code_registry.CodesRepo, "exists", _exists)
    monkeypatch.setattr(code_registry.CodesRepo, "create", _create)

    row = await mint_code(_Session(), user_id=None, source="purchased", now_utc=NOW_UTC)

    assert row.code == "FRESH234"


@pytest.mark.asyncio
async def test_mint_code_gives_up_after_max_attempts(monkeypatch) -> None:
    monkeypatch.setattr(code_registry, "generate_code", lambda: "TAKEN234")

    async def _exists(session, code: str) -> bool:
        return True

    monkeypatch.setattr(code_registry.CodesRepo, "exists", _exists)

    with pytest.raises(CodeGenerationError):
        await mint_code(_Session(), user_id=None, source="purchased", now_utc=NOW_UTC, max_attempts=3)


@pytest.mark.asyncio
async def test_mint_code_rejects_unknown_source() -> None:
    with pytest.raises(ValueError):
        await mint_code(_Session(), user_id=None, source="gift", now_utc=NOW_UTC)
