"""
Storage Tests - SqlCollection load/save against SQLite

Tests:
1. Records survive a round trip (enums, datetimes, aliases)
2. save() inserts, updates and deletes only loaded rows
3. Stale versioned writes raise ConcurrencyError
4. Unique (employee, month) report index raises DuplicateRecordError
5. Backup replace()
"""
import pytest

import lifecycle
from errors import ConcurrencyError, DuplicateRecordError
from records import Client, MonthlyReport, ReportStatus
from storage import Storage


@pytest.fixture
def other_store(db_engine_and_session):
    """Second, independent unit of work (another request)."""
    _, SessionLocal, _ = db_engine_and_session
    session = SessionLocal()
    yield Storage(session)
    session.rollback()
    session.close()


def test_round_trip_preserves_records(store):
    report = MonthlyReport(employee_id="e-1", month_key="2026-02", status=ReportStatus.SUBMITTED, meta_spend=10.5)
    store.reports.save([report])
    store.commit()

    loaded = store.reports.load()

    assert loaded == [report], "Loaded record should equal the saved one"
    assert loaded[0].created_at.tzinfo is not None, "Datetimes come back timezone-aware"
    assert store.reports.get(report.id) == report
    assert store.reports.get("missing") is None


def test_save_updates_and_deletes_loaded_rows(store):
    acme = Client(name="Acme")
    globex = Client(name="Globex")
    store.clients.save([acme, globex])
    store.commit()

    clients = store.clients.load()
    store.clients.save([clients[0].evolve(company="Acme Ltd")])
    store.commit()

    assert [(c.name, c.company) for c in store.clients.load()] == [("Acme", "Acme Ltd")]


def test_save_leaves_rows_inserted_after_load(store, other_store):
    """Rows another writer added after our load() are not deleted."""
    store.clients.save([Client(name="Acme")])
    store.commit()

    ours = store.clients.load()
    other_store.clients.save([*other_store.clients.load(), Client(name="Globex")])
    other_store.commit()

    store.clients.save(ours)
    store.commit()

    assert {c.name for c in store.clients.load()} == {"Acme", "Globex"}


def test_stale_version_raises_concurrency_error(store, other_store):
    """Two writers start from version 1; the second write loses."""
    report = MonthlyReport(employee_id="e-1", month_key="2026-02")
    store.reports.save([report])
    store.commit()

    first = other_store.reports.load()
    second = store.reports.load()

    other_store.reports.save([r.evolve(meta_spend=5) for r in first])
    other_store.commit()

    with pytest.raises(ConcurrencyError) as exc:
        store.reports.save([r.evolve(meta_spend=7) for r in second])
    assert exc.value.actual == 2, f"Stored version should be 2, got {exc.value.actual}"
    assert exc.value.expected == 1


def test_unchanged_versioned_record_saves_cleanly(store):
    report = MonthlyReport(employee_id="e-1", month_key="2026-02")
    store.reports.save([report])
    store.commit()

    store.reports.save(store.reports.load())
    store.commit()

    assert store.reports.load()[0].version == 1


def test_duplicate_report_rejected_by_unique_index(store, other_store):
    """Racing creators: the loser gets DuplicateRecordError."""
    reports, _ = lifecycle.create_report_if_missing(store.reports.load(), "e-1", "2026-02")
    other_reports, _ = lifecycle.create_report_if_missing(other_store.reports.load(), "e-1", "2026-02")

    store.reports.save(reports)
    store.commit()

    with pytest.raises(DuplicateRecordError):
        other_store.reports.save(other_reports)
        other_store.commit()

    other_store.rollback()
    assert len(other_store.reports.load()) == 1


def test_replace_swaps_whole_collection(store):
    store.clients.save([Client(name="Acme"), Client(name="Globex")])
    store.commit()

    initech = Client(name="Initech", tax_id="BG1")
    store.clients.replace([initech])
    store.commit()

    assert store.clients.load() == [initech]


def test_collections_are_keyed_by_backup_names(store):
    names = store.collections()

    assert names["monthlyReports"] is store.reports
    assert names["timeEntries"] is store.entries
    assert names["editRequests"] is store.edit_requests
    assert names["monthlyReports"].versioned is True
    assert names["clients"].versioned is False
