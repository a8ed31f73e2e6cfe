import pytest

from zeiterfassung.db import Database
from zeiterfassung.errors import NotFound
from zeiterfassung.ledger import Ledger, generate_id
from zeiterfassung.models import Session
from zeiterfassung.store import STORAGE_KEY, Store


def make_ledger() -> tuple[Database, Ledger]:
    db = Database(":memory:")
    db.initialize()
    return db, Ledger(Store(db))


def test_add_appends_in_order() -> None:
    _, ledger = make_ledger()

    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z"))
    ledger.add(Session(id="b", start_utc="2024-01-01T07:00:00Z"))

    assert [session.id for session in ledger.list()] == ["a", "b"]


def test_update_replaces_only_given_fields() -> None:
    _, ledger = make_ledger()
    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z", end_utc="2024-01-01T09:00:00Z"))

    ledger.update("a", notes="x")

    assert ledger.get("a") == Session(
        id="a", start_utc="2024-01-01T08:00:00Z", end_utc="2024-01-01T09:00:00Z", notes="x"
    )


def test_update_missing_id_raises_and_leaves_record_unchanged() -> None:
    db, ledger = make_ledger()
    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z"))
    before = db.get(STORAGE_KEY)

    with pytest.raises(NotFound):
        ledger.update("missing", notes="x")

    assert db.get(STORAGE_KEY) == before


def test_update_refuses_to_change_id() -> None:
    _, ledger = make_ledger()
    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z"))

    with pytest.raises(ValueError):
        ledger.update("a", id="b")


def test_remove_filters_by_id() -> None:
    _, ledger = make_ledger()
    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z"))
    ledger.add(Session(id="b", start_utc="2024-01-01T09:00:00Z"))

    ledger.remove("a")

    assert [session.id for session in ledger.list()] == ["b"]


def test_remove_missing_id_is_noop() -> None:
    db, ledger = make_ledger()
    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z"))
    before = db.get(STORAGE_KEY)

    ledger.remove("missing")

    assert db.get(STORAGE_KEY) == before
    assert len(ledger.list()) == 1


def test_list_returns_snapshot() -> None:
    _, ledger = make_ledger()
    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z"))

    snapshot = ledger.list()
    ledger.add(Session(id="b", start_utc="2024-01-01T09:00:00Z"))

    assert len(snapshot) == 1


def test_user_name_is_independent_of_sessions() -> None:
    _, ledger = make_ledger()
    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z"))

    ledger.set_user_name("Grace")

    assert ledger.get_user_name() == "Grace"
    assert [session.id for session in ledger.list()] == ["a"]


def test_generate_id_is_unique_enough() -> None:
    ids = {generate_id() for _ in range(200)}

    assert len(ids) == 200
    assert all(value.isalnum() for value in ids)


def test_update_with_empty_fields_matches_reloaded_session() -> None:
    _, ledger = make_ledger()
    ledger.add(Session(id="a", start_utc="2024-01-01T08:00:00Z", end_utc="2024-01-01T09:00:00Z", notes="old"))

    updated = ledger.update("a", notes="", end_utc="")

    assert updated.notes is None
    assert updated.end_utc is None
    assert ledger.get("a") == updated
