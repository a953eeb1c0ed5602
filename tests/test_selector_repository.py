"""
tests/test_selector_repository.py

SelectorRepository against in-memory SQLite.

Coverage
--------
- Upsert creates then increments; keys are normalized
- Heuristic -> discovered upgrade and its limits
- Best-selector rules: discovered tier, thresholds, tie-break
- Admin reset/delete and per-domain stats
"""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from db.models.domain_selector import DomainSelector
from db.repositories.selector_repository import SelectorRepository
from learning.fields import DiscoveryMethod, TrackableField


@pytest.fixture()
def repo(session: Session) -> SelectorRepository:
    return SelectorRepository(session)


def _bump(repo: SelectorRepository, *, success: int = 0, failure: int = 0, **key: str) -> None:
    for _ in range(success):
        repo.record_success(**key)
    for _ in range(failure):
        repo.record_failure(**key)


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


class TestRecord:
    def test_first_success_creates_row(self, repo: SelectorRepository) -> None:
        row = repo.record_success(domain="ikea.pl", field=TrackableField.NAME, selector="h1")

        assert row is not None
        assert (row.success_count, row.failure_count) == (1, 0)
        assert row.discovery_method == DiscoveryMethod.HEURISTIC
        assert row.last_seen_at is not None

    def test_repeated_writes_increment_one_row(self, repo: SelectorRepository, session: Session) -> None:
        _bump(repo, success=3, failure=2, domain="ikea.pl", field="name", selector="h1")

        rows = session.query(DomainSelector).all()
        assert len(rows) == 1
        assert (rows[0].success_count, rows[0].failure_count) == (3, 2)

    def test_www_and_case_share_one_row(self, repo: SelectorRepository, session: Session) -> None:
        repo.record_success(domain="www.IKEA.pl", field="name", selector="h1")
        row = repo.record_success(domain="ikea.pl", field="name", selector="h1")

        assert row is not None
        assert row.domain == "ikea.pl"
        assert row.success_count == 2
        assert session.query(DomainSelector).count() == 1

    def test_thumbnail_alias_stored_as_thumbnail_url(self, repo: SelectorRepository) -> None:
        row = repo.record_failure(domain="ikea.pl", field="thumbnail", selector="img")
        assert row is not None
        assert row.field_name == "thumbnail_url"

    @pytest.mark.parametrize(
        "domain, field, selector",
        [("", "name", "h1"), ("ikea.pl", "description", "h1"), ("ikea.pl", "name", "   ")],
    )
    def test_invalid_keys_are_ignored(
        self, repo: SelectorRepository, session: Session, domain: str, field: str, selector: str
    ) -> None:
        assert repo.record_success(domain=domain, field=field, selector=selector) is None
        assert session.query(DomainSelector).count() == 0

    def test_unknown_discovery_method_raises(self, repo: SelectorRepository) -> None:
        with pytest.raises(ValueError):
            repo.record_success(domain="ikea.pl", field="name", selector="h1", discovery_method="guess")

    def test_confidence_is_derived_from_counts(self, repo: SelectorRepository) -> None:
        _bump(repo, success=10, failure=1, domain="ikea.pl", field="price", selector=".price")
        row = repo.for_domain("ikea.pl", field="price")[0]
        assert row.total_samples == 11
        assert row.confidence == 0.6226


class TestDiscoveryTier:
    def test_success_with_discovered_upgrades_heuristic(self, repo: SelectorRepository) -> None:
        repo.record_success(domain="ikea.pl", field="price", selector=".p")
        row = repo.record_success(
            domain="ikea.pl",
            field="price",
            selector=".p",
            discovery_method=DiscoveryMethod.DISCOVERED,
            discovery_score=72,
        )

        assert row is not None
        assert row.discovery_method == DiscoveryMethod.DISCOVERED
        assert row.discovery_score == 72.0
        assert row.success_count == 2

    def test_success_does_not_downgrade_discovered(self, repo: SelectorRepository) -> None:
        repo.record_discovered(domain="ikea.pl", field="price", selector=".p", score=90)
        row = repo.record_success(domain="ikea.pl", field="price", selector=".p")

        assert row is not None
        assert row.discovery_method == DiscoveryMethod.DISCOVERED
        assert row.discovery_score == 90.0

    def test_failure_never_changes_tier(self, repo: SelectorRepository) -> None:
        repo.record_success(domain="ikea.pl", field="name", selector="h1")
        row = repo.record_failure(
            domain="ikea.pl",
            field="name",
            selector="h1",
            discovery_method=DiscoveryMethod.DISCOVERED,
            discovery_score=50,
        )

        assert row is not None
        assert row.discovery_method == DiscoveryMethod.HEURISTIC
        assert row.discovery_score is None

    def test_record_discovered_starts_with_one_success(self, repo: SelectorRepository) -> None:
        row = repo.record_discovered(domain="ikea.pl", field="name", selector=".title", score=85)

        assert row is not None
        assert (row.success_count, row.failure_count) == (1, 0)
        assert row.discovery_method == DiscoveryMethod.DISCOVERED
        assert row.discovery_score == 85.0

    def test_record_discovered_overwrites_method_and_score(self, repo: SelectorRepository) -> None:
        repo.upsert_manual(domain="ikea.pl", field="name", selector=".title", discovery_score=10)
        row = repo.record_discovered(domain="ikea.pl", field="name", selector=".title", score=60)

        assert row is not None
        assert row.discovery_method == DiscoveryMethod.DISCOVERED
        assert row.discovery_score == 60.0
        assert row.success_count == 1

    def test_manual_upsert_keeps_counters(self, repo: SelectorRepository) -> None:
        _bump(repo, success=4, domain="ikea.pl", field="name", selector="h1")
        row = repo.upsert_manual(domain="ikea.pl", field="name", selector="h1")

        assert row is not None
        assert row.discovery_method == DiscoveryMethod.MANUAL
        assert row.success_count == 4


# ---------------------------------------------------------------------------
# Best selector
# ---------------------------------------------------------------------------


class TestBestForDomain:
    def test_empty_domain_has_no_selectors(self, repo: SelectorRepository) -> None:
        assert repo.best_for_domain("ikea.pl") == {}

    def test_reliable_heuristic_selector_is_returned(self, repo: SelectorRepository) -> None:
        _bump(repo, success=10, domain="ikea.pl", field="name", selector="h1")
        _bump(repo, success=10, failure=1, domain="ikea.pl", field="price", selector=".price")

        assert repo.best_for_domain("www.ikea.pl") == {"name": "h1", "price": ".price"}

    def test_below_min_samples_is_omitted(self, repo: SelectorRepository) -> None:
        repo.record_success(domain="ikea.pl", field="name", selector="h1")
        assert repo.best_for_domain("ikea.pl") == {}

    def test_below_min_confidence_is_omitted(self, repo: SelectorRepository) -> None:
        # 2/0 -> 0.3424
        _bump(repo, success=2, domain="ikea.pl", field="name", selector="h1")
        assert repo.best_for_domain("ikea.pl") == {}
        assert repo.best_for_domain("ikea.pl", min_confidence=0.3) == {"name": "h1"}

    def test_discovered_beats_more_reliable_heuristic(self, repo: SelectorRepository) -> None:
        # discovered 3/0 -> 0.4385, heuristic 40/0 -> 0.9124
        for _ in range(3):
            repo.record_discovered(domain="ikea.pl", field="name", selector=".title", score=80)
        _bump(repo, success=40, domain="ikea.pl", field="name", selector="h1")

        assert repo.best_for_domain("ikea.pl") == {"name": ".title"}

    def test_single_discovered_sample_falls_back_to_heuristic(self, repo: SelectorRepository) -> None:
        # 1/0 -> 0.2065 is under the discovered bar
        repo.record_discovered(domain="ikea.pl", field="name", selector=".title", score=99)
        _bump(repo, success=10, domain="ikea.pl", field="name", selector="h1")

        assert repo.best_for_domain("ikea.pl") == {"name": "h1"}

    def test_discovered_ranked_by_score_when_confidence_ties(self, repo: SelectorRepository) -> None:
        for _ in range(3):
            repo.record_discovered(domain="ikea.pl", field="price", selector=".a", score=40)
            repo.record_discovered(domain="ikea.pl", field="price", selector=".b", score=90)

        assert repo.best_for_domain("ikea.pl") == {"price": ".b"}

    def test_equal_candidates_resolve_to_smallest_selector(self, repo: SelectorRepository) -> None:
        _bump(repo, success=5, domain="ikea.pl", field="name", selector="h1.title")
        _bump(repo, success=5, domain="ikea.pl", field="name", selector="div.name")

        assert repo.best_for_domain("ikea.pl") == {"name": "div.name"}

    def test_rows_stored_with_www_prefix_are_found(self, repo: SelectorRepository, session: Session) -> None:
        legacy = DomainSelector(domain="ikea.pl", field_name="name", selector="h1", success_count=9, failure_count=0)
        session.add(legacy)
        session.flush()
        # bypass the validator to simulate a row written before normalization
        session.execute(
            DomainSelector.__table__.update().values(domain="www.ikea.pl")
        )

        assert repo.best_for_domain("IKEA.pl") == {"name": "h1"}


# ---------------------------------------------------------------------------
# Admin + stats
# ---------------------------------------------------------------------------


class TestAdminAndStats:
    def test_reset_counts(self, repo: SelectorRepository) -> None:
        row = repo.record_success(domain="ikea.pl", field="name", selector="h1")
        assert row is not None

        assert repo.reset_counts([row.id]) == 1
        refreshed = repo.for_domain("ikea.pl")[0]
        assert (refreshed.success_count, refreshed.failure_count) == (0, 0)

    def test_delete(self, repo: SelectorRepository) -> None:
        row = repo.record_success(domain="ikea.pl", field="name", selector="h1")
        assert row is not None

        assert repo.delete([row.id]) == 1
        assert repo.for_domain("ikea.pl") == []

    def test_empty_id_list_is_noop(self, repo: SelectorRepository) -> None:
        assert repo.reset_counts([]) == 0
        assert repo.delete([]) == 0

    def test_domain_stats(self, repo: SelectorRepository) -> None:
        _bump(repo, success=10, domain="ikea.pl", field="name", selector="h1")
        repo.record_discovered(domain="ikea.pl", field="price", selector=".p", score=70)
        repo.upsert_manual(domain="ikea.pl", field="thumbnail", selector="img")

        stats = repo.domain_stats("ikea.pl")

        assert stats.total_selectors == 3
        assert (stats.heuristic_count, stats.discovered_count, stats.manual_count) == (1, 1, 1)
        by_field = {item.field: item for item in stats.fields}
        assert by_field["name"].best_selector == "h1"
        assert by_field["name"].best_confidence == 0.72
        assert by_field["thumbnail_url"].selector_count == 1

    def test_all_for_domain_orders_by_success(self, repo: SelectorRepository) -> None:
        _bump(repo, success=1, domain="ikea.pl", field="name", selector="a")
        _bump(repo, success=3, domain="ikea.pl", field="name", selector="b")

        listings = repo.all_for_domain("ikea.pl")
        assert [item.selector for item in listings] == ["b", "a"]
        assert listings[0].success == 3

    def test_list_domains(self, repo: SelectorRepository) -> None:
        repo.record_success(domain="b.pl", field="name", selector="h1")
        repo.record_success(domain="www.a.pl", field="name", selector="h1")
        assert repo.list_domains() == ["a.pl", "b.pl"]
