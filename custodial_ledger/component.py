"""
Bank Component Module

The callable surface of a bank. A call names an operation and presents a
badge; the badge is verified, checked against the access rules, and only
then dispatched to the bank through an explicit method table.
"""

from typing import Any, Callable, Dict, Optional, Tuple
import logging

from .access import AccessRules, Operation, bank_access_rules
from .audit import AuditTrail
from .badges import Badge, BadgeIssuer, BadgeKind
from .bank import Bank, load_bank_state
from .clock import EpochClock, SystemEpochClock
from .config import LedgerConfig, get_config
from .errors import AccessDenied
from .storage import StorageInterface, create_storage
from .vault import Amount, Funds


logger = logging.getLogger(__name__)


class BankComponent:
    """Access-controlled front of a Bank"""

    def __init__(self, bank: Bank, issuer: BadgeIssuer, rules: Optional[AccessRules] = None):
        self.bank = bank
        self.issuer = issuer
        self.rules = rules or bank_access_rules()
        self._methods: Dict[Operation, Callable[..., Any]] = {
            Operation.REGISTER: self._register,
            Operation.DEPOSIT: self._deposit,
            Operation.WITHDRAW: self._withdraw,
            Operation.DESCRIBE: self._describe,
            Operation.MARK_KNOWN: self._mark_known,
        }

    @classmethod
    def instantiate(
        cls,
        initial_fund: Funds,
        config: Optional[LedgerConfig] = None,
        clock: Optional[EpochClock] = None,
        storage: Optional[StorageInterface] = None
    ) -> Tuple['BankComponent', str]:
        """
        Create a bank funded with ``initial_fund``.

        When ``storage`` already holds a bank, that bank is reopened: it keeps
        its issuer id and pooled fund, and ``initial_fund`` is added to the pool.

        Returns:
            Tuple of (component, external admin badge token)
        """
        config = config or get_config()
        clock = clock or SystemEpochClock(config.epoch_length_seconds)
        storage = storage or create_storage(config.database_url)

        state = load_bank_state(storage)
        issuer_id = config.issuer_id or (state['issuer_id'] if state else None)

        issuer = BadgeIssuer(config.jwt_secret, config.jwt_algorithm, issuer_id)
        admin_badge = issuer.mint_admin_badge()
        internal_admin_badge = issuer.mint_internal_admin_badge()

        audit_trail = AuditTrail(storage) if config.enable_audit_logging else None

        bank = Bank(
            initial_fund=initial_fund,
            defaults=config.defaults(),
            storage=storage,
            clock=clock,
            issuer=issuer,
            internal_admin_badge=internal_admin_badge,
            audit_trail=audit_trail
        )
        logger.info("Bank %s ready with pooled funds %s", issuer.issuer_id, bank.pooled_funds)

        return cls(bank, issuer), admin_badge

    def call(self, operation: Operation, credential: Optional[str], *args: Any) -> Any:
        """
        Authorize and dispatch one operation.

        Args:
            operation: Operation to run
            credential: Badge token presented by the caller, or None
            *args: Operation arguments

        Raises:
            InvalidCredential: the badge cannot be verified
            AccessDenied: the badge may not run this operation
        """
        badge = self.issuer.resolve(credential) if credential is not None else None

        if not self.rules.authorize(badge, operation):
            logger.warning("Denied %s for %s badge", operation.value,
                           badge.kind.value if badge else "no")
            raise AccessDenied(f"Not allowed to call {operation.value}")

        return self._methods[operation](badge, *args)

    def register(self, first_name: str, last_name: str) -> Tuple[str, str]:
        return self.call(Operation.REGISTER, None, first_name, last_name)

    def deposit(self, customer_badge: str, amount: Amount, funds: Funds) -> Funds:
        return self.call(Operation.DEPOSIT, customer_badge, amount, funds)

    def withdraw(self, customer_badge: str, amount: Amount) -> Funds:
        return self.call(Operation.WITHDRAW, customer_badge, amount)

    def describe(self, admin_badge: str, customer_id: str) -> str:
        return self.call(Operation.DESCRIBE, admin_badge, customer_id)

    def mark_known(self, admin_badge: str, customer_id: str) -> None:
        return self.call(Operation.MARK_KNOWN, admin_badge, customer_id)

    def _register(self, badge: Optional[Badge], first_name: str, last_name: str) -> Tuple[str, str]:
        return self.bank.customer_registration(first_name, last_name)

    def _deposit(self, badge: Badge, amount: Amount, funds: Funds) -> Funds:
        return self.bank.deposit(self._customer_id(badge), amount, funds)

    def _withdraw(self, badge: Badge, amount: Amount) -> Funds:
        return self.bank.withdraw(self._customer_id(badge), amount)

    def _describe(self, badge: Badge, customer_id: str) -> str:
        return self.bank.customer(customer_id)

    def _mark_known(self, badge: Badge, customer_id: str) -> None:
        self.bank.set_customer_known(customer_id)

    @staticmethod
    def _customer_id(badge: Badge) -> str:
        if badge.kind != BadgeKind.CUSTOMER:
            raise AccessDenied("A customer badge is required")
        return badge.badge_id
