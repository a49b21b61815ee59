"""
Balance Engine Module

A Balance is one side of a customer position with its own interest rate and
ceiling. A BankAccount pairs a debit and a credit Balance to represent a
single signed position. Both types are immutable: every mutation returns a
new value, so a failed mutation can never leave a half-updated account.

Interest is simple interest on the balance held since the last update,
accrued lazily whenever the balance is touched:

    interest = balance * interest_rate * (now - last_update)

Callers read the clock once per mutation and pass that epoch down, so both
sides of an account are charged and stamped for the same instant.
"""

from decimal import Decimal
from dataclasses import dataclass, replace
from typing import Any, Dict
import logging

from .errors import InvalidAmount, LimitExceeded


logger = logging.getLogger(__name__)

ZERO = Decimal('0')


def format_amount(value: Decimal) -> str:
    """Plain notation without trailing zeros (100.00 renders as 100)"""
    return format(value.normalize(), 'f')


@dataclass(frozen=True)
class Balance:
    """Single-sided monetary position with an interest rate and a ceiling"""
    balance: Decimal
    limit: Decimal
    interest_rate: Decimal
    last_update: int

    def __post_init__(self):
        for name in ('balance', 'limit', 'interest_rate'):
            value = getattr(self, name)
            if not isinstance(value, Decimal):
                object.__setattr__(self, name, Decimal(str(value)))

        if self.balance < ZERO:
            raise ValueError(f"Balance cannot be negative: {self.balance}")
        if self.balance >= self.limit:
            raise ValueError(f"Balance {self.balance} must stay below limit {self.limit}")

    @classmethod
    def new(cls, interest_rate: Decimal, limit: Decimal, now: int) -> 'Balance':
        """Create an empty balance starting at epoch ``now``"""
        return cls(
            balance=ZERO,
            limit=limit,
            interest_rate=interest_rate,
            last_update=now
        )

    def elapsed(self, now: int) -> int:
        """Epochs between the last update and ``now``"""
        elapsed = now - self.last_update
        if elapsed < 0:
            raise ValueError(f"Clock moved backwards: now={now} last_update={self.last_update}")
        return elapsed

    def interest(self, now: int) -> Decimal:
        """Interest accrued on the current balance between the last update and ``now``"""
        return self.balance * self.interest_rate * Decimal(self.elapsed(now))

    def new_balance(self, target: Decimal, now: int) -> 'Balance':
        """
        Accrue interest and move the balance to a new target.

        Interest is computed on the balance held *before* this call and added
        on top of the target, so the resulting balance is ``interest + target``.

        Args:
            target: New balance before interest, must not be negative
            now: Current epoch, read once by the caller for the whole mutation

        Returns:
            New Balance stamped with ``now``

        Raises:
            InvalidAmount: target is negative
            LimitExceeded: resulting balance would reach the limit
        """
        if target < ZERO:
            raise InvalidAmount(f"Balance target cannot be negative: {target}")

        elapsed = self.elapsed(now)
        interest = self.balance * self.interest_rate * Decimal(elapsed)
        result = interest + target

        logger.debug("Elapsed = %s (%s - %s)", elapsed, now, self.last_update)
        logger.debug(
            "Interest = %s (%s * %s * %s)",
            interest, self.balance, self.interest_rate, elapsed
        )

        if result >= self.limit:
            raise LimitExceeded(f"Limit reached: {result} >= {self.limit}")

        return replace(self, balance=result, last_update=now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'balance': str(self.balance),
            'limit': str(self.limit),
            'interest_rate': str(self.interest_rate),
            'last_update': self.last_update
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Balance':
        return cls(
            balance=Decimal(data['balance']),
            limit=Decimal(data['limit']),
            interest_rate=Decimal(data['interest_rate']),
            last_update=int(data['last_update'])
        )


@dataclass(frozen=True)
class BankAccount:
    """
    Signed position split into a debit side and a credit side.

    At most one side is non-zero. A positive signed balance means the
    customer owes the ledger (DR); zero or negative means the ledger owes
    the customer (CR).
    """
    debit: Balance
    credit: Balance

    def __post_init__(self):
        if self.debit.balance > ZERO and self.credit.balance > ZERO:
            raise ValueError(
                f"Debit ({self.debit.balance}) and credit ({self.credit.balance}) "
                f"cannot both be non-zero"
            )

    @classmethod
    def new(cls, defaults, now: int) -> 'BankAccount':
        """Open an empty account configured from the bank defaults"""
        return cls(
            debit=Balance.new(defaults.debit_interest_rate, defaults.debit_limit, now),
            credit=Balance.new(defaults.credit_interest_rate, defaults.credit_limit, now)
        )

    def new_balance(self, signed_target: Decimal, now: int) -> 'BankAccount':
        """
        Move the account to a new signed balance.

        Both sides are always updated so each accrues interest on what it
        held and is stamped with the same ``now``, even when its own target is
        zero.

        Raises:
            LimitExceeded: either side would reach its limit
        """
        debit = self.debit.new_balance(max(signed_target, ZERO), now)
        credit = self.credit.new_balance(abs(min(signed_target, ZERO)), now)

        # Interest left on a side whose target is zero (the position changed
        # sign) is settled against the other side.
        overlap = min(debit.balance, credit.balance)
        if overlap > ZERO:
            logger.debug("Netting %s of residual interest between debit and credit", overlap)
            debit = replace(debit, balance=debit.balance - overlap)
            credit = replace(credit, balance=credit.balance - overlap)

        return BankAccount(debit=debit, credit=credit)

    def signed_balance(self) -> Decimal:
        return self.debit.balance - self.credit.balance

    def balance(self) -> Decimal:
        return abs(self.signed_balance())

    def balance_type(self) -> str:
        """Return "CR" when the ledger owes the customer, "DR" otherwise"""
        if self.signed_balance() <= ZERO:
            return "CR"
        return "DR"

    def post_credit(self, amount: Decimal, now: int) -> 'BankAccount':
        """Move the position toward credit (the ledger owes the customer more)"""
        return self.new_balance(self.signed_balance() - amount, now)

    def post_debit(self, amount: Decimal, now: int) -> 'BankAccount':
        """Move the position toward debit"""
        return self.new_balance(self.signed_balance() + amount, now)

    def __str__(self) -> str:
        return f"{format_amount(self.balance())} {self.balance_type()}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'debit': self.debit.to_dict(),
            'credit': self.credit.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BankAccount':
        return cls(
            debit=Balance.from_dict(data['debit']),
            credit=Balance.from_dict(data['credit'])
        )
