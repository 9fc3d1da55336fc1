from __future__ import annotations

import re
from dataclasses import dataclass

from sqlalchemy.engine import make_url

TEST_DB_NAME_RE = re.compile(r"test", re.IGNORECASE)
LOCAL_TEST_HOSTS = frozenset({"localhost", "127.0.0.1", "::1", "postgres", "fresq_postgres"})


@dataclass(frozen=True, slots=True)
class IntegrationDbTarget:
    database_name: str
    host: str
    backend: str
    unsafe_reason: str | None = None

    @property
    def is_safe(self) -> bool:
        return self.unsafe_reason is None


def inspect_integration_db_target(database_url: str) -> IntegrationDbTarget:
    """Classifies a DB URL as safe (or not) for the truncating integration suite."""
    parsed = make_url(database_url)
    database_name = (parsed.database or "").strip()
    host = (parsed.host or "").strip().lower()
    backend = parsed.get_backend_name()

    reason: str | None = None
    if backend != "postgresql":
        reason = "integration tests run only against PostgreSQL"
    elif not database_name:
        reason = "database name is empty"
    elif TEST_DB_NAME_RE.search(database_name) is None:
        reason = "database name must contain 'test'"
    elif host not in LOCAL_TEST_HOSTS:
        reason = f"host '{host}' is not a local test host"

    return IntegrationDbTarget(
        database_name=database_name,
        host=host,
        backend=backend,
        unsafe_reason=reason,
    )


def assert_safe_integration_db(database_url: str) -> None:
    target = inspect_integration_db_target(database_url)
    if target.is_safe:
        return

    raise RuntimeError(
        "Refusing to truncate canvas tables outside a local test database: "
        f"{target.unsafe_reason} (name='{target.database_name}', host='{target.host}')"
    )
