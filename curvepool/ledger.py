"""Ledger and Clock collaborators.

The engine never stores token balances itself. It moves them through a
Ledger (withdraw / deposit / mint / burn of fungible balances) and reads time
from a Clock. Both belong to the hosting platform; this module defines the
interfaces plus in-memory implementations used by tests and the HTTP app.

Minting and burning liquidity shares is gated by a LiquidityAuthority issued
once per share asset. Only the accounting layer holds it.
"""

from __future__ import annotations

import time
from collections import defaultdict
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import structlog

from curvepool.errors import AlreadyInitialized, InsufficientBalance, InvalidTokenPair, PrivilegeInsufficient

logger = structlog.get_logger()


@dataclass(frozen=True)
class Balance:
    """An amount of one asset in transit between accounts.

    Attributes:
        asset: Asset identifier
        amount: Raw amount in the asset's native decimals
    """

    asset: str
    amount: int


@runtime_checkable
class Ledger(Protocol):
    """Custody primitives owned by the hosting platform."""

    def withdraw(self, account: str, asset: str, amount: int) -> Balance:
        """Take `amount` of `asset` out of `account`."""
        ...

    def deposit(self, account: str, asset: str, balance: Balance) -> None:
        """Credit `balance` to `account`."""
        ...

    def mint(self, asset: str, amount: int) -> Balance:
        """Create new units of a mintable asset."""
        ...

    def burn(self, balance: Balance) -> None:
        """Destroy a balance of a mintable asset."""
        ...

    def balance_of(self, account: str, asset: str) -> int:
        """Amount of `asset` held by `account`."""
        ...


@runtime_checkable
class Clock(Protocol):
    """Monotonic time source."""

    def now(self) -> int:
        """Current timestamp in seconds."""
        ...


class InMemoryLedger:
    """Dictionary-backed Ledger.

    Assets become mintable only through issue_authority(); minting or
    burning any other asset raises PrivilegeInsufficient.
    """

    def __init__(self) -> None:
        self._balances: dict[tuple[str, str], int] = defaultdict(int)
        self._supply: dict[str, int] = defaultdict(int)
        self._mintable: set[str] = set()

    def withdraw(self, account: str, asset: str, amount: int) -> Balance:
        if amount < 0:
            raise ValueError(f"Withdraw amount must be non-negative, got {amount}")
        held = self._balances[(account, asset)]
        if held < amount:
            raise InsufficientBalance(f"{account} holds {held} {asset}, needs {amount}")
        self._balances[(account, asset)] = held - amount
        return Balance(asset=asset, amount=amount)

    def deposit(self, account: str, asset: str, balance: Balance) -> None:
        if balance.asset != asset:
            raise InvalidTokenPair(f"Cannot deposit {balance.asset} as {asset}")
        self._balances[(account, asset)] += balance.amount

    def mint(self, asset: str, amount: int) -> Balance:
        if asset not in self._mintable:
            raise PrivilegeInsufficient(f"No mint authority for {asset}")
        self._supply[asset] += amount
        return Balance(asset=asset, amount=amount)

    def burn(self, balance: Balance) -> None:
        if balance.asset not in self._mintable:
            raise PrivilegeInsufficient(f"No burn authority for {balance.asset}")
        self._supply[balance.asset] -= balance.amount

    def balance_of(self, account: str, asset: str) -> int:
        return self._balances[(account, asset)]

    def supply_of(self, asset: str) -> int:
        """Outstanding minted supply of a mintable asset."""
        return self._supply[asset]

    def credit(self, account: str, asset: str, amount: int) -> None:
        """Fund an account out of thin air (test and demo helper)."""
        self._balances[(account, asset)] += amount

    def issue_authority(self, asset: str) -> LiquidityAuthority:
        """Make `asset` mintable and return the only authority over it.

        Raises:
            AlreadyInitialized: If an authority was already issued for `asset`
        """
        if asset in self._mintable:
            raise AlreadyInitialized(f"Authority for {asset} already issued")
        self._mintable.add(asset)
        logger.debug("liquidity_authority_issued", asset=asset)
        return LiquidityAuthority(self, asset)


class LiquidityAuthority:
    """Capability to mint and burn one liquidity-share asset."""

    __slots__ = ("_ledger", "asset")

    def __init__(self, ledger: Ledger, asset: str) -> None:
        self._ledger = ledger
        self.asset = asset

    def mint(self, amount: int) -> Balance:
        return self._ledger.mint(self.asset, amount)

    def burn(self, balance: Balance) -> None:
        if balance.asset != self.asset:
            raise PrivilegeInsufficient(f"Authority for {self.asset} cannot burn {balance.asset}")
        self._ledger.burn(balance)

    def __repr__(self) -> str:
        return f"LiquidityAuthority({self.asset!r})"


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: int = 0) -> None:
        self._now = start

    def now(self) -> int:
        return self._now

    def advance(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError("Clock cannot move backwards")
        self._now += seconds

    def set(self, timestamp: int) -> None:
        if timestamp < self._now:
            raise ValueError("Clock cannot move backwards")
        self._now = timestamp


class SystemClock:
    """Wall-clock seconds."""

    def now(self) -> int:
        return int(time.time())
