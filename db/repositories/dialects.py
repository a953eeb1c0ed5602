"""
Dialect-specific INSERT constructs for atomic upserts.

PostgreSQL is the production store; SQLite backs the test suite. Both
support ``INSERT ... ON CONFLICT (...) DO UPDATE`` through SQLAlchemy's
dialect ``insert()``, which the stores use so that a concurrent first insert
of the same key becomes an update instead of a uniqueness error.
"""

from __future__ import annotations

from typing import Any

from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from db.repositories.errors import UnsupportedDialectError

_INSERTS: dict[str, Any] = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_insert(session: Session, model: type) -> Any:
    """Return an ``Insert`` with ``on_conflict_do_update`` for the session's dialect."""
    dialect = session.get_bind().dialect.name
    factory = _INSERTS.get(dialect)
    if factory is None:
        raise UnsupportedDialectError(f"Upserts are not supported for dialect {dialect!r}.")
    return factory(model)
