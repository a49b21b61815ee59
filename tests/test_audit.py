"""
Test suite for audit module

Tests hash-chained audit trail, tamper detection and integrity verification.
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from custodial_ledger.storage import InMemoryStorage
from custodial_ledger.audit import AuditTrail, AuditEvent, AuditEventType


@pytest.fixture
def storage():
    return InMemoryStorage()


@pytest.fixture
def audit_trail(storage):
    return AuditTrail(storage)


class TestAuditEvent:
    """Test AuditEvent functionality"""

    def test_metadata_serialization(self):
        """Decimal, datetime and enum metadata become JSON-safe values"""
        now = datetime.now(timezone.utc)

        event = AuditEvent(
            id="AUDIT001",
            created_at=now,
            updated_at=now,
            event_type=AuditEventType.FUNDS_DEPOSITED,
            entity_type="customer",
            entity_id="CUST001",
            previous_hash="",
            current_hash="",
            metadata={
                "amount": Decimal('100.50'),
                "at": now,
                "kind": AuditEventType.CUSTOMER_KNOWN,
                "nested": {"values": [Decimal('1.1')]}
            }
        )

        assert event.metadata["amount"] == "100.50"
        assert event.metadata["at"] == now.isoformat()
        assert event.metadata["kind"] == "customer_known"
        assert event.metadata["nested"]["values"] == ["1.1"]

    def test_hash_is_deterministic(self):
        """Same event, same hash; any change alters it"""
        now = datetime.now(timezone.utc)
        event = AuditEvent(
            id="AUDIT002",
            created_at=now,
            updated_at=now,
            event_type=AuditEventType.CUSTOMER_REGISTERED,
            entity_type="customer",
            entity_id="CUST001",
            previous_hash="prev",
            current_hash="",
            metadata={"full_name": "Satoshi Nakamoto"}
        )

        first = event.calculate_hash()
        assert len(first) == 64
        assert first == event.calculate_hash()

        event.metadata["full_name"] = "Someone Else"
        assert event.calculate_hash() != first

    def test_dict_round_trip(self, audit_trail):
        """Stored events load back identically"""
        event = audit_trail.log_event(
            AuditEventType.CUSTOMER_KNOWN, "customer", "CUST001", {"known_since": 4}
        )

        loaded = AuditEvent.from_dict(event.to_dict())
        assert loaded == event
        assert loaded.verify_hash()


class TestAuditTrail:
    """Test the chained trail"""

    def test_events_are_chained(self, audit_trail):
        """Each event points at the previous one's hash"""
        first = audit_trail.log_event(AuditEventType.BANK_CREATED, "bank", "BANK1")
        second = audit_trail.log_event(AuditEventType.CUSTOMER_REGISTERED, "customer", "CUST001")
        third = audit_trail.log_event(AuditEventType.CUSTOMER_KNOWN, "customer", "CUST001")

        assert first.previous_hash == ""
        assert second.previous_hash == first.current_hash
        assert third.previous_hash == second.current_hash
        assert [e.sequence for e in audit_trail.get_all_events()] == [0, 1, 2]
        assert audit_trail.count_events() == 3

    def test_events_for_entity(self, audit_trail):
        """Events can be filtered by entity"""
        audit_trail.log_event(AuditEventType.CUSTOMER_REGISTERED, "customer", "CUST001")
        audit_trail.log_event(AuditEventType.CUSTOMER_REGISTERED, "customer", "CUST002")
        audit_trail.log_event(AuditEventType.CUSTOMER_KNOWN, "customer", "CUST001")

        events = audit_trail.get_events_for_entity("customer", "CUST001")
        assert [e.event_type for e in events] == [
            AuditEventType.CUSTOMER_REGISTERED, AuditEventType.CUSTOMER_KNOWN
        ]

    def test_integrity_of_untouched_chain(self, audit_trail):
        """An untouched chain verifies"""
        for i in range(4):
            audit_trail.log_event(AuditEventType.FUNDS_DEPOSITED, "customer", "CUST001", {"amount": Decimal(i + 1)})

        result = audit_trail.verify_integrity()
        assert result['valid']
        assert result['total_events'] == 4
        assert result['hash_errors'] == []
        assert result['chain_breaks'] == []

    def test_tampering_is_detected(self, storage, audit_trail):
        """Editing a stored event breaks verification"""
        audit_trail.log_event(AuditEventType.FUNDS_DEPOSITED, "customer", "CUST001", {"amount": "10"})
        event = audit_trail.log_event(AuditEventType.FUNDS_WITHDRAWN, "customer", "CUST001", {"amount": "5"})

        data = storage.load(audit_trail.table_name, event.id)
        data['metadata']['amount'] = "5000"
        storage.save(audit_trail.table_name, event.id, data)

        result = audit_trail.verify_integrity()
        assert not result['valid']
        assert result['hash_errors'][0]['event_id'] == event.id

    def test_removed_event_breaks_chain(self, storage, audit_trail):
        """Deleting an event from the middle is detected"""
        audit_trail.log_event(AuditEventType.BANK_CREATED, "bank", "BANK1")
        middle = audit_trail.log_event(AuditEventType.CUSTOMER_REGISTERED, "customer", "CUST001")
        audit_trail.log_event(AuditEventType.CUSTOMER_KNOWN, "customer", "CUST001")

        storage.delete(audit_trail.table_name, middle.id)

        result = audit_trail.verify_integrity()
        assert not result['valid']
        assert len(result['chain_breaks']) == 1
