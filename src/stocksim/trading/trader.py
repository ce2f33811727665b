"""Trader account: cash balance plus an exclusively owned portfolio."""

from decimal import Decimal

from .exceptions import InsufficientFunds
from .portfolio import Portfolio
from ..utils.money import NumericInput, to_money


class Trader:
    """Single trader with a non-negative cash balance."""

    def __init__(self, user_id: int, username: str, initial_balance: NumericInput):
        self._user_id = user_id
        self._username = username
        self._cash_balance = Decimal(0)
        self.set_cash_balance(initial_balance)
        self.portfolio = Portfolio()

    @property
    def user_id(self) -> int:
        return self._user_id

    @property
    def username(self) -> str:
        return self._username

    @property
    def cash_balance(self) -> Decimal:
        return self._cash_balance

    def set_cash_balance(self, balance: NumericInput):
        """Overwrite the balance, used when restoring a snapshot."""
        balance = to_money(balance)
        if balance < 0:
            raise ValueError(f"Cash balance cannot be negative: {balance}")
        self._cash_balance = balance

    def deposit(self, amount: Decimal):
        amount = to_money(amount)
        if amount < 0:
            raise ValueError(f"Deposit amount cannot be negative: {amount}")
        self._cash_balance = to_money(self._cash_balance + amount)

    def withdraw(self, amount: Decimal):
        """Withdraw cash, all or nothing."""
        amount = to_money(amount)
        if amount < 0:
            raise ValueError(f"Withdrawal amount cannot be negative: {amount}")
        if self._cash_balance < amount:
            raise InsufficientFunds(needed=amount, available=self._cash_balance)
        self._cash_balance = to_money(self._cash_balance - amount)

    def __str__(self) -> str:
        return f"User: {self.username} | Cash Balance: ${self.cash_balance:,.2f}"
