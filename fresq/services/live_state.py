from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog
from redis.asyncio import Redis

from fresq.core.config import get_settings
from fresq.grid.types import TierUpgradeResult

logger = structlog.get_logger(__name__)

_redis_client: Redis | None = None


@dataclass(slots=True)
class LiveEvent:
    type: str
    payload: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        return json.dumps(asdict(self), separators=(",", ":"))


def cell_claimed(*, x: int, y: int) -> LiveEvent:
    return LiveEvent(type="cell:claimed", payload={"x": x, "y": y})


def cell_painted(*, x: int, y: int, color: int) -> LiveEvent:
    return LiveEvent(type="cell:painted", payload={"x": x, "y": y, "color": color})


def cell_deleted(*, x: int, y: int) -> LiveEvent:
    return LiveEvent(type="cell:deleted", payload={"x": x, "y": y})


def tier_upgrade(result: TierUpgradeResult) -> LiveEvent:
    payload = result.as_dict()
    payload.pop("upgraded", None)
    return LiveEvent(type="tier_upgrade", payload=payload)


def full_reset() -> LiveEvent:
    return LiveEvent(type="full_reset")


def palette_updated(*, palette: list[str], state_version: int) -> LiveEvent:
    return LiveEvent(
        type="palette_updated",
        payload={"palette": list(palette), "state_version": state_version},
    )


def get_redis() -> Redis:
    global _redis_client
    if _redis_client is None:
        _redis_client = Redis.from_url(get_settings().redis_url)
    return _redis_client


async def close_redis() -> None:
    global _redis_client
    if _redis_client is None:
        return
    client, _redis_client = _redis_client, None
    await client.aclose()


async def publish_event(event: LiveEvent) -> bool:
    """Publishes an already-committed change to live subscribers.

    Delivery is best effort: a failed publish is logged and reported as
    ``False``, never raised.
    """
    try:
        await get_redis().publish(get_settings().live_channel, event.to_json())
    except Exception as exc:
        logger.warning("live_state_publish_failed", event_type=event.type, error=str(exc))
        return False
    return True
