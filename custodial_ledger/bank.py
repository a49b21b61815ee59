"""
Bank Module

The bank owns the customer registry, the pooled fund and the account
defaults. It checks every precondition before touching state: a call either
completes fully or fails leaving the registry and the vault as they were.

The pooled fund amount is kept in the same storage as the registry and is
written in the same transaction as the customer record it balances, so a
bank reopened on existing storage resumes with a consistent pool.

Polarity: a deposit credits the customer's account (the bank owes the
customer more), a withdrawal debits it.
"""

from decimal import Decimal
from typing import Any, Dict, Optional, Tuple
import logging
import uuid

from .audit import AuditTrail, AuditEventType
from .badges import BadgeIssuer
from .clock import EpochClock
from .customers import Customer, CustomerRegistration, CustomerRegistry, Defaults
from .errors import InsufficientFunds, InvalidAmount, NotVerified
from .logging_config import log_action
from .storage import StorageInterface
from .vault import Amount, Funds, Vault, to_amount


logger = logging.getLogger(__name__)

BANK_TABLE = "bank"
BANK_RECORD_ID = "bank"


def load_bank_state(storage: StorageInterface) -> Optional[Dict[str, Any]]:
    """Persisted bank record (issuer id and pooled fund), if the storage holds one"""
    return storage.load(BANK_TABLE, BANK_RECORD_ID)


class Bank:
    """
    Custodial bank: customer lifecycle plus deposits and withdrawals
    against a pooled fund.

    Authorization is not checked here; callers pass already-resolved
    identity keys. See ``BankComponent`` for the gated surface.
    """

    def __init__(
        self,
        initial_fund: Funds,
        defaults: Defaults,
        storage: StorageInterface,
        clock: EpochClock,
        issuer: BadgeIssuer,
        internal_admin_badge: str,
        audit_trail: Optional[AuditTrail] = None
    ):
        self.defaults = defaults
        self.storage = storage
        self.clock = clock
        self.issuer = issuer
        self.customers = CustomerRegistry(storage)
        self.audit_trail = audit_trail
        self._internal_admin_badge = internal_admin_badge

        state = load_bank_state(storage)
        added = initial_fund.amount

        if state is None:
            self.initial_fund_amount = added
            with self.storage.atomic():
                self._save_state(added)
                self._audit(AuditEventType.BANK_CREATED, "bank", issuer.issuer_id, {
                    "initial_fund_amount": added
                })
            self.vault = Vault(initial_fund)
            return

        if state['issuer_id'] != issuer.issuer_id:
            raise ValueError(
                f"Storage belongs to bank {state['issuer_id']}, not {issuer.issuer_id}"
            )

        self.initial_fund_amount = Decimal(state['initial_fund_amount'])
        pooled = Decimal(state['pooled_funds'])

        with self.storage.atomic():
            self._save_state(pooled + added)
            self._audit(AuditEventType.BANK_REOPENED, "bank", issuer.issuer_id, {
                "pooled_funds": pooled,
                "added_funds": added
            })

        self.vault = Vault(Funds(pooled))
        self.vault.put(initial_fund)
        logger.info("Bank %s reopened with pooled funds %s", issuer.issuer_id, self.vault.amount)

    @property
    def pooled_funds(self) -> Decimal:
        return self.vault.amount

    @property
    def internal_admin_badge(self) -> str:
        return self._internal_admin_badge

    def customer_registration(self, first_name: str, last_name: str) -> Tuple[str, str]:
        """
        Register a new, not yet verified customer.

        Args:
            first_name: Customer's first name, trimmed, must not be empty
            last_name: Customer's last name, trimmed, must not be empty

        Returns:
            Tuple of (customer badge token, customer badge type)
        """
        registration = CustomerRegistration(first_name, last_name)
        customer_id = str(uuid.uuid4())

        badge = self.issuer.mint_customer_badge(
            self._internal_admin_badge, customer_id, registration
        )
        customer = Customer.new(self.defaults, self.clock)

        with self.storage.atomic():
            self.customers.insert(customer_id, customer)
            self._audit(AuditEventType.CUSTOMER_REGISTERED, "customer", customer_id, {
                "full_name": registration.full_name,
                "customer_since": customer.customer_since
            })

        log_action(logger, "info", f"Registered customer {registration.full_name}",
                   customer_id=customer_id, operation="register", epoch=customer.customer_since)

        return badge, self.issuer.customer_badge_type

    def deposit(self, customer_id: str, amount: Amount, funds: Funds) -> Funds:
        """
        Move ``amount`` from the caller's funds into the pooled fund and
        credit the customer's account.

        Returns:
            The caller's remaining funds
        """
        customer = self.customers.require(customer_id)
        amount = to_amount(amount)

        if amount > funds.amount:
            raise InsufficientFunds("Insufficient funds")
        self._check_transaction(customer, amount)

        now = self.clock.now()
        updated = customer.with_account(customer.account.post_credit(amount, now))
        pooled = self.vault.amount + amount

        with self.storage.atomic():
            self.customers.replace(customer_id, updated)
            self._save_state(pooled)
            self._audit(AuditEventType.FUNDS_DEPOSITED, "customer", customer_id, {
                "amount": amount,
                "epoch": now,
                "account": str(updated.account),
                "pooled_funds": pooled
            })
        # Cannot fail: amount was checked against funds above
        self.vault.put(funds.take(amount))

        log_action(logger, "info", updated.describe(), customer_id=customer_id,
                   operation="deposit", epoch=now, amount=amount, pooled_funds=pooled)

        return funds

    def withdraw(self, customer_id: str, amount: Amount) -> Funds:
        """
        Take ``amount`` out of the pooled fund and debit the customer's
        account.

        Returns:
            The withdrawn funds
        """
        customer = self.customers.require(customer_id)
        amount = to_amount(amount)

        if amount > self.vault.amount:
            raise InsufficientFunds("Insufficient funds")
        self._check_transaction(customer, amount)

        now = self.clock.now()
        updated = customer.with_account(customer.account.post_debit(amount, now))
        pooled = self.vault.amount - amount

        with self.storage.atomic():
            self.customers.replace(customer_id, updated)
            self._save_state(pooled)
            self._audit(AuditEventType.FUNDS_WITHDRAWN, "customer", customer_id, {
                "amount": amount,
                "epoch": now,
                "account": str(updated.account),
                "pooled_funds": pooled
            })
        withdrawn = self.vault.take(amount)

        log_action(logger, "info", updated.describe(), customer_id=customer_id,
                   operation="withdraw", epoch=now, amount=amount, pooled_funds=pooled)

        return withdrawn

    def customer(self, customer_id: str) -> str:
        """Text snapshot of a customer record"""
        return self.customers.require(customer_id).describe()

    def set_customer_known(self, customer_id: str) -> None:
        """Mark a customer as having passed KYC"""
        customer = self.customers.require(customer_id)
        updated = customer.mark_known(self.clock)

        with self.storage.atomic():
            self.customers.replace(customer_id, updated)
            self._audit(AuditEventType.CUSTOMER_KNOWN, "customer", customer_id, {
                "known_since": updated.known_since
            })

        log_action(logger, "info", "Customer marked as known", customer_id=customer_id,
                   operation="mark_known", epoch=updated.known_since)

    def get_customer(self, customer_id: str) -> Optional[Customer]:
        return self.customers.get(customer_id)

    def _check_transaction(self, customer: Customer, amount: Decimal) -> None:
        if amount <= Decimal('0'):
            raise InvalidAmount("Amount must be greater than zero")
        if not customer.is_known:
            raise NotVerified("Unknown customer")

    def _save_state(self, pooled_funds: Decimal) -> None:
        self.storage.save(BANK_TABLE, BANK_RECORD_ID, {
            "id": BANK_RECORD_ID,
            "issuer_id": self.issuer.issuer_id,
            "initial_fund_amount": str(self.initial_fund_amount),
            "pooled_funds": str(pooled_funds)
        })

    def _audit(self, event_type: AuditEventType, entity_type: str, entity_id: str, metadata: dict) -> None:
        if self.audit_trail is not None:
            self.audit_trail.log_event(event_type, entity_type, entity_id, metadata)
