"""
Tests for storage backends and transaction support
"""

import pytest
from decimal import Decimal
from pathlib import Path

from custodial_ledger.clock import ManualClock
from custodial_ledger.customers import Customer, CustomerRegistry, Defaults
from custodial_ledger.storage import (
    InMemoryStorage, SQLiteStorage, create_storage
)


record = {"id": "rec_001", "name": "Test Record", "amount": "100.50"}


@pytest.fixture(params=["memory", "sqlite"])
def storage(request):
    if request.param == "memory":
        backend = InMemoryStorage()
    else:
        backend = SQLiteStorage(":memory:")
    yield backend
    backend.close()


class TestStorageBackends:
    """Behaviour shared by every backend"""

    def test_basic_operations(self, storage):
        """Save, load, exists, find, count, delete"""
        storage.save("test_table", "rec_001", record)
        storage.save("test_table", "rec_002", {"id": "rec_002", "name": "Other"})

        assert storage.load("test_table", "rec_001") == record
        assert storage.load("test_table", "missing") is None
        assert storage.exists("test_table", "rec_001")
        assert not storage.exists("test_table", "missing")
        assert [r["id"] for r in storage.load_all("test_table")] == ["rec_001", "rec_002"]
        assert storage.find("test_table", {"name": "Other"}) == [{"id": "rec_002", "name": "Other"}]
        assert storage.count("test_table") == 2

        assert storage.delete("test_table", "rec_001")
        assert not storage.delete("test_table", "rec_001")
        assert storage.count("test_table") == 1

    def test_save_replaces(self, storage):
        """Saving an existing id overwrites it"""
        storage.save("test_table", "rec_001", record)
        storage.save("test_table", "rec_001", {"id": "rec_001", "name": "Renamed"})

        assert storage.load("test_table", "rec_001")["name"] == "Renamed"
        assert storage.count("test_table") == 1

    def test_atomic_commit(self, storage):
        """Writes inside a successful block persist"""
        with storage.atomic():
            storage.save("test_table", "rec_001", record)

        assert storage.exists("test_table", "rec_001")

    def test_atomic_rollback(self, storage):
        """A failing block leaves no trace"""
        storage.save("test_table", "rec_001", record)

        with pytest.raises(RuntimeError):
            with storage.atomic():
                storage.save("test_table", "rec_001", {"id": "rec_001", "name": "Changed"})
                storage.save("test_table", "rec_002", {"id": "rec_002"})
                raise RuntimeError("abort")

        assert storage.load("test_table", "rec_001") == record
        assert not storage.exists("test_table", "rec_002")

    def test_invalid_table_name(self, storage):
        """Table names must be identifiers"""
        with pytest.raises(ValueError):
            storage.save("bad table; DROP", "x", {})


class TestInMemoryStorage:
    """In-memory specific behaviour"""

    def test_records_are_copied(self):
        """Mutating loaded or saved dicts does not change storage"""
        storage = InMemoryStorage()
        data = {"id": "rec_001", "nested": {"value": 1}}
        storage.save("test_table", "rec_001", data)

        data["nested"]["value"] = 2
        loaded = storage.load("test_table", "rec_001")
        loaded["nested"]["value"] = 3

        assert storage.load("test_table", "rec_001")["nested"]["value"] == 1


class TestSQLiteStorage:
    """SQLite persistence"""

    def test_registry_survives_reopen(self, tmp_path: Path):
        """Customers written to a database file can be read back"""
        db_path = tmp_path / "ledger.db"
        clock = ManualClock(start=5)
        defaults = Defaults(Decimal('0.01'), Decimal('1000000'), Decimal('0.05'), Decimal('1000'))
        customer = Customer.new(defaults, clock).mark_known(clock)
        customer = customer.with_account(customer.account.post_credit(Decimal('12.5'), clock.now()))

        storage = SQLiteStorage(db_path)
        CustomerRegistry(storage).insert("cust-1", customer)
        storage.close()

        reopened = SQLiteStorage(db_path)
        try:
            assert CustomerRegistry(reopened).get("cust-1") == customer
        finally:
            reopened.close()


class TestCreateStorage:
    """Backend selection from a database URL"""

    def test_memory(self):
        assert isinstance(create_storage("memory"), InMemoryStorage)

    def test_sqlite_file(self, tmp_path: Path):
        storage = create_storage(f"sqlite:///{tmp_path / 'ledger.db'}")
        try:
            assert isinstance(storage, SQLiteStorage)
            assert storage.db_path == str(tmp_path / "ledger.db")
        finally:
            storage.close()

    def test_unsupported(self):
        with pytest.raises(ValueError, match="Unsupported database URL"):
            create_storage("postgresql://localhost/ledger")
