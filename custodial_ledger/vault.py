"""
Funds Custody Module

Funds is a caller-held bucket of money; Vault is the bank's pooled custody.
Money only moves by exact amounts between the two, so the total is conserved.
"""

from decimal import Decimal, InvalidOperation
from typing import Union

from .errors import InsufficientFunds, InvalidAmount


Amount = Union[Decimal, int, str]


def to_amount(value: Amount) -> Decimal:
    """Normalise an amount to Decimal (never via float)"""
    if isinstance(value, float):
        raise InvalidAmount("Monetary amounts must not be floats")
    if not isinstance(value, Decimal):
        try:
            value = Decimal(str(value))
        except InvalidOperation as e:
            raise InvalidAmount(f"Not a monetary amount: {value!r}") from e
    if not value.is_finite():
        raise InvalidAmount(f"Not a monetary amount: {value}")
    return value


class Funds:
    """A bucket of money held by a caller"""

    def __init__(self, amount: Amount = Decimal('0')):
        amount = to_amount(amount)
        if amount < Decimal('0'):
            raise InvalidAmount(f"Funds cannot be negative: {amount}")
        self._amount = amount

    @property
    def amount(self) -> Decimal:
        return self._amount

    def take(self, amount: Amount) -> 'Funds':
        """Split off exactly ``amount`` into a new bucket"""
        amount = to_amount(amount)
        if amount < Decimal('0'):
            raise InvalidAmount(f"Cannot take a negative amount: {amount}")
        if amount > self._amount:
            raise InsufficientFunds("Insufficient funds")
        self._amount -= amount
        return Funds(amount)

    def put(self, funds: 'Funds') -> None:
        """Merge another bucket into this one, emptying it"""
        self._amount += funds.take(funds.amount).amount

    def is_empty(self) -> bool:
        return self._amount == Decimal('0')

    def __repr__(self) -> str:
        return f"Funds({self._amount})"


class Vault:
    """Pooled custody shared by all customers of a bank"""

    def __init__(self, funds: Funds):
        self._funds = Funds()
        self._funds.put(funds)

    @property
    def amount(self) -> Decimal:
        return self._funds.amount

    def put(self, funds: Funds) -> None:
        self._funds.put(funds)

    def take(self, amount: Amount) -> Funds:
        return self._funds.take(amount)
