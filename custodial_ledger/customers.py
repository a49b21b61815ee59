"""
Customer Management Module

Customer records, the KYC lifecycle (unverified -> known, never back) and
the registry that maps customer identity keys to records.
"""

from decimal import Decimal
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

from .balances import BankAccount
from .clock import EpochClock
from .errors import AlreadyKnown, InvalidName, UnknownIdentity
from .storage import StorageInterface


@dataclass(frozen=True)
class Defaults:
    """Rates and limits copied into every new customer account"""
    credit_interest_rate: Decimal
    credit_limit: Decimal
    debit_interest_rate: Decimal
    debit_limit: Decimal

    def __post_init__(self):
        for name in ('credit_interest_rate', 'credit_limit', 'debit_interest_rate', 'debit_limit'):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))

        if self.credit_interest_rate < Decimal('0') or self.debit_interest_rate < Decimal('0'):
            raise ValueError("Interest rates cannot be negative")
        if self.credit_limit <= Decimal('0') or self.debit_limit <= Decimal('0'):
            raise ValueError("Limits must be positive")


@dataclass(frozen=True)
class CustomerRegistration:
    """Personal data carried by a customer badge"""
    first_name: str
    last_name: str

    def __post_init__(self):
        first_name = (self.first_name or "").strip()
        last_name = (self.last_name or "").strip()

        if not first_name:
            raise InvalidName("First name is required")
        if not last_name:
            raise InvalidName("Last name is required")

        object.__setattr__(self, 'first_name', first_name)
        object.__setattr__(self, 'last_name', last_name)

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class Customer:
    """
    Customer record: KYC state, registration epoch and one bank account.

    ``known_since`` is None until the customer passes KYC and is set exactly
    once. Deposits and withdrawals require it.
    """
    known_since: Optional[int]
    customer_since: int
    account: BankAccount

    @classmethod
    def new(cls, defaults: Defaults, clock: EpochClock) -> 'Customer':
        now = clock.now()
        return cls(
            known_since=None,
            customer_since=now,
            account=BankAccount.new(defaults, now)
        )

    @property
    def is_known(self) -> bool:
        return self.known_since is not None

    def mark_known(self, clock: EpochClock) -> 'Customer':
        """Record that KYC passed at the current epoch"""
        if self.is_known:
            raise AlreadyKnown("Customer already known")
        return replace(self, known_since=clock.now())

    def with_account(self, account: BankAccount) -> 'Customer':
        return replace(self, account=account)

    def describe(self) -> str:
        """Text snapshot of the record for inspection"""
        return (
            f"Customer(known_since={self.known_since}, "
            f"customer_since={self.customer_since}, "
            f"account={self.account})"
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'known_since': self.known_since,
            'customer_since': self.customer_since,
            'account': self.account.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Customer':
        known_since = data.get('known_since')
        return cls(
            known_since=int(known_since) if known_since is not None else None,
            customer_since=int(data['customer_since']),
            account=BankAccount.from_dict(data['account'])
        )


class CustomerRegistry:
    """
    Maps customer identity keys to Customer records in a storage table.

    Records are only ever reachable through their key; callers get copies
    and write changes back with ``replace``.
    """

    def __init__(self, storage: StorageInterface, table_name: str = "customers"):
        self.storage = storage
        self.table_name = table_name

    def get(self, customer_id: str) -> Optional[Customer]:
        data = self.storage.load(self.table_name, customer_id)
        if data is None:
            return None
        return Customer.from_dict(data)

    def require(self, customer_id: str) -> Customer:
        """Get a customer or fail with UnknownIdentity"""
        customer = self.get(customer_id)
        if customer is None:
            raise UnknownIdentity("Customer not found")
        return customer

    def insert(self, customer_id: str, customer: Customer) -> None:
        if self.storage.exists(self.table_name, customer_id):
            raise ValueError(f"Customer {customer_id} already registered")
        self.storage.save(self.table_name, customer_id, customer.to_dict())

    def replace(self, customer_id: str, customer: Customer) -> None:
        if not self.storage.exists(self.table_name, customer_id):
            raise UnknownIdentity("Customer not found")
        self.storage.save(self.table_name, customer_id, customer.to_dict())

    def exists(self, customer_id: str) -> bool:
        return self.storage.exists(self.table_name, customer_id)

    def count(self) -> int:
        return self.storage.count(self.table_name)
