"""
Access Control Module

Decides which badge may invoke which bank operation. The rules are data,
evaluated before dispatch and independent of the bank's business logic.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, Optional

from .badges import Badge, BadgeKind


class Operation(Enum):
    """Operations exposed by a bank component"""
    REGISTER = "customer_registration"
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"
    DESCRIBE = "customer"
    MARK_KNOWN = "set_customer_known"


@dataclass(frozen=True)
class AccessRule:
    """Allow everyone, or require a badge of one of the given kinds"""
    required: FrozenSet[BadgeKind] = field(default_factory=frozenset)
    allow_all: bool = False

    @classmethod
    def allow_everyone(cls) -> 'AccessRule':
        return cls(allow_all=True)

    @classmethod
    def require_any(cls, *kinds: BadgeKind) -> 'AccessRule':
        if not kinds:
            raise ValueError("At least one badge kind is required")
        return cls(required=frozenset(kinds))

    def allows(self, badge: Optional[Badge]) -> bool:
        if self.allow_all:
            return True
        return badge is not None and badge.kind in self.required


class AccessRules:
    """Per-operation rules with a default for everything else"""

    def __init__(self, default: Optional[AccessRule] = None):
        self._rules: Dict[Operation, AccessRule] = {}
        self._default = default or AccessRule.allow_everyone()

    def method(self, operation: Operation, rule: AccessRule) -> 'AccessRules':
        self._rules[operation] = rule
        return self

    def default(self, rule: AccessRule) -> 'AccessRules':
        self._default = rule
        return self

    def rule_for(self, operation: Operation) -> AccessRule:
        return self._rules.get(operation, self._default)

    def authorize(self, badge: Optional[Badge], operation: Operation) -> bool:
        return self.rule_for(operation).allows(badge)


def bank_access_rules() -> AccessRules:
    """
    Standard bank rules: inspection and KYC verification need an admin
    badge (the external one or the bank's own), deposits and withdrawals
    need a customer badge, anything else is open.
    """
    admin_required = AccessRule.require_any(BadgeKind.ADMIN, BadgeKind.INTERNAL_ADMIN)
    customer_required = AccessRule.require_any(BadgeKind.CUSTOMER)

    return (
        AccessRules()
        .method(Operation.MARK_KNOWN, admin_required)
        .method(Operation.DESCRIBE, admin_required)
        .method(Operation.DEPOSIT, customer_required)
        .method(Operation.WITHDRAW, customer_required)
        .default(AccessRule.allow_everyone())
    )


def authorize(badge: Optional[Badge], operation: Operation,
              rules: Optional[AccessRules] = None) -> bool:
    """Return whether ``badge`` may perform ``operation``"""
    return (rules or bank_access_rules()).authorize(badge, operation)
