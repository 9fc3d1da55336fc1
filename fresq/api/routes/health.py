from __future__ import annotations

import asyncio
from typing import Any

from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from sqlalchemy import text

from fresq.core.config import get_settings
from fresq.db.session import SessionLocal

router = APIRouter(tags=["health"])


def _ok_check(extra: dict[str, Any] | None = None) -> dict[str, Any]:
    payload: dict[str, Any] = {"status": "ok"}
    if extra:
        payload.update(extra)
    return payload


def _failed_check(error: str) -> dict[str, str]:
    return {"status": "failed", "error": error}


async def _check_database() -> dict[str, Any]:
    try:
        async with SessionLocal() as session:
            state_version = (
                await session.execute(text("SELECT state_version FROM grid_config WHERE id = 1"))
            ).scalar_one_or_none()
        if state_version is None:
            return _failed_check("grid_config row is missing")
        return _ok_check({"state_version": int(state_version)})
    except Exception as exc:
        return _failed_check(str(exc))


async def _check_redis() -> dict[str, Any]:
    redis_client: Redis | None = None
    try:
        redis_client = Redis.from_url(get_settings().redis_url)
        pong = await redis_client.ping()
        if pong is not True:
            return _failed_check(f"unexpected redis ping response: {pong!r}")
        return _ok_check()
    except Exception as exc:
        return _failed_check(str(exc))
    finally:
        if redis_client is not None:
            await redis_client.aclose()


async def _collect_checks() -> dict[str, dict[str, Any]]:
    database, redis = await asyncio.gather(_check_database(), _check_redis())
    return {"database": database, "redis": redis}


def _all_checks_ok(checks: dict[str, dict[str, Any]]) -> bool:
    return all(check.get("status") == "ok" for check in checks.values())


@router.get("/health")
async def health() -> JSONResponse:
    checks = await _collect_checks()
    # Redis only carries the live feed; the canvas keeps working without it.
    is_healthy = checks["database"].get("status") == "ok"
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_healthy else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ok" if is_healthy and _all_checks_ok(checks) else "degraded",
            "checks": checks,
        },
    )


@router.get("/ready")
async def ready() -> JSONResponse:
    checks = await _collect_checks()
    is_ready = _all_checks_ok(checks)
    return JSONResponse(
        status_code=status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "status": "ready" if is_ready else "not_ready",
            "checks": checks,
        },
    )


@router.get("/live")
async def live() -> dict[str, str]:
    return {"status": "live"}
