"""
tests/test_db_config.py

Database URL resolution order and psycopg driver normalization.
``.env`` loading is disabled so only the patched environment is seen.
"""

from __future__ import annotations

import pytest

import db.config
from db.config import normalize_postgres_url, resolve_database_url


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(db.config, "load_env_files", lambda: None)
    for name in ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL"):
        monkeypatch.delenv(name, raising=False)


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("postgres://u:p@db:5432/learning", "postgresql+psycopg://u:p@db:5432/learning"),
        ("postgresql://u:p@db:5432/learning", "postgresql+psycopg://u:p@db:5432/learning"),
        ("postgresql+psycopg://u:p@db/learning", "postgresql+psycopg://u:p@db/learning"),
        ("sqlite:///learning.db", "sqlite:///learning.db"),
    ],
)
def test_normalize_postgres_url(url: str, expected: str) -> None:
    assert normalize_postgres_url(url) == expected


def test_database_url_wins(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "postgres://main/learning")
    monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://cloud/learning")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgres://local/learning")

    assert resolve_database_url() == "postgresql+psycopg://main/learning"


def test_cloud_url_alone_is_enough(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLOUD_DATABASE_URL", "postgres://cloud/learning")

    assert resolve_database_url() == "postgresql+psycopg://cloud/learning"


def test_blank_values_fall_through_to_local(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "   ")
    monkeypatch.setenv("LOCAL_DATABASE_URL", "postgresql://localhost/learning")

    assert resolve_database_url() == "postgresql+psycopg://localhost/learning"


def test_nothing_configured_raises() -> None:
    with pytest.raises(RuntimeError, match="No database URL configured"):
        resolve_database_url()
