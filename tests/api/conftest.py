from __future__ import annotations

from contextlib import asynccontextmanager

import pytest


class FakeSessionFactory:
    """Stands in for ``SessionLocal``: both the plain and the ``begin()`` forms yield a dummy session."""

    def __init__(self) -> None:
        self.session = object()
        self.transactions = 0

    @asynccontextmanager
    async def _session(self):
        yield self.session

    def __call__(self):
        return self._session()

    def begin(self):
        self.transactions += 1
        return self._session()


@pytest.fixture
def fake_sessions() -> FakeSessionFactory:
    return FakeSessionFactory()


@pytest.fixture
def published(monkeypatch) -> list[object]:
    events: list[object] = []

    async def _publish(event) -> bool:
        events.append(event)
        return True

    from fresq.api.routes import canvas, internal_admin

    monkeypatch.setattr(canvas, "publish_event", _publish)
    monkeypatch.setattr(internal_admin, "publish_event", _publish)
    return events
