"""Tests for the persistence gateways and dashboard snapshots."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from finscope.core.config import StorageConfig
from finscope.core.data.storage import DuckDBStore, MemoryStore, create_store
from finscope.core.exceptions import ErrorCode, SourceUnavailableError, StorageError
from finscope.core.models import AggregateView, SourceRole, SourceStatus
from finscope.core.services import PortfolioValuator, TransactionLedger
from finscope.core.services.snapshot import (
    LEDGER_KEY,
    MARKET_STATE_KEY,
    load_ledger,
    load_snapshot,
    save_ledger,
    save_snapshot,
)

T0 = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "duckdb"])
def store(request, tmp_path):
    if request.param == "memory":
        gateway = MemoryStore()
    else:
        gateway = DuckDBStore(str(tmp_path / "state" / "finscope.duckdb"))
    yield gateway
    gateway.close()


class TestGateway:
    def test_missing_key_is_none(self, store):
        assert store.get("absent") is None

    def test_value_round_trips(self, store):
        value = {"assets": [{"id": "bitcoin", "price": "50000"}], "count": 1, "nested": {"ok": True}}

        store.set("blob", value)

        assert store.get("blob") == value

    def test_set_replaces(self, store):
        store.set("blob", [1])
        store.set("blob", [2, 3])

        assert store.get("blob") == [2, 3]

    def test_remove(self, store):
        store.set("blob", "x")

        assert store.remove("blob") is True
        assert store.remove("blob") is False
        assert store.get("blob") is None

    def test_unserializable_value_rejected(self, store):
        with pytest.raises(StorageError) as exc_info:
            store.set("blob", {"when": object()})

        assert exc_info.value.error_code == ErrorCode.STORAGE_ERROR
        assert exc_info.value.key == "blob"

    def test_nan_rejected(self, store):
        with pytest.raises(StorageError):
            store.set("blob", float("nan"))


def test_memory_store_reads_do_not_alias_writes():
    store = MemoryStore()
    value = {"items": [1]}
    store.set("blob", value)

    value["items"].append(2)
    store.get("blob")["items"].append(3)

    assert store.get("blob") == {"items": [1]}
    assert store.keys() == ["blob"]


def test_duckdb_store_persists_across_connections(tmp_path):
    path = str(tmp_path / "finscope.duckdb")
    store = DuckDBStore(path)
    store.set("blob", {"a": 1})
    store.close()

    reopened = DuckDBStore(path)
    try:
        assert reopened.get("blob") == {"a": 1}
    finally:
        reopened.close()


def test_closed_duckdb_store_raises():
    store = DuckDBStore()
    store.close()

    assert not store.is_connected()
    with pytest.raises(StorageError):
        store.get("blob")


def test_create_store(tmp_path):
    assert isinstance(create_store(StorageConfig(backend="memory")), MemoryStore)
    duck = create_store(StorageConfig(backend="duckdb", path=str(tmp_path / "x.duckdb")))
    assert isinstance(duck, DuckDBStore)
    duck.close()
    with pytest.raises(ValueError):
        create_store(StorageConfig(backend="redis"))


class TestSnapshots:
    def test_market_state_round_trip(self, store, asset_factory):
        error = SourceUnavailableError("binance timed out", "binance", reason="timeout")
        statuses = {
            "coingecko": SourceStatus(source="coingecko", role=SourceRole.PRIMARY).begin().succeed(T0),
            "binance": SourceStatus(source="binance").begin().fail(error, T0),
        }
        asset = asset_factory(supplemental_quotes={"cryptocompare": Decimal("50100.25")})
        view = AggregateView(assets=(asset,), source_statuses=statuses, selected=asset, query="bit")
        valuator = PortfolioValuator(clock=lambda: T0)
        valuator.add_holding(asset, "1.5")
        valuator.add_holding(asset, "abc")

        save_snapshot(store, view, valuator.holdings, saved_at=T0)
        snapshot = load_snapshot(store)

        assert snapshot.view == view
        assert snapshot.holdings == valuator.holdings
        assert snapshot.saved_at == T0
        assert snapshot.view.source_statuses["binance"].last_updated == T0
        assert snapshot.view.assets[0].quote("cryptocompare") == Decimal("50100.25")

    def test_nothing_saved(self, store):
        assert load_snapshot(store) is None
        assert load_ledger(store) is None

    def test_unreadable_state_raises(self, store):
        store.set(MARKET_STATE_KEY, {"view": "garbage"})

        with pytest.raises(StorageError):
            load_snapshot(store)

    def test_ledger_round_trip(self, store):
        ledger = TransactionLedger(clock=lambda: T0)
        ledger.add("2500", "Salary", type="income", category="salary")
        ledger.add("42.10", "Dinner", category="food")

        save_ledger(store, ledger)
        restored = load_ledger(store)

        assert restored.transactions == ledger.transactions
        assert store.get(LEDGER_KEY)["transactions"][0]["amount"] == "42.10"
