"""In-memory credit ledger and a short-lived balance cache."""

import logging
import threading
import time
from collections.abc import Callable
from typing import Literal

from .models import CreditBalance, DebitResult

logger = logging.getLogger(__name__)

DEFAULT_STARTING_CREDITS = 5

GrantSource = Literal["purchase", "subscription", "bonus"]


class CreditLedger:
    """Credit balances and lifetime generation counts per user.

    New users start with ``starting_credits``. Unlimited subscribers are
    never charged but still accumulate a generation count.
    """

    def __init__(self, starting_credits: int = DEFAULT_STARTING_CREDITS) -> None:
        if starting_credits < 0:
            msg = f"starting_credits must be >= 0, got {starting_credits}"
            raise ValueError(msg)
        self.starting_credits = starting_credits
        self._accounts: dict[str, CreditBalance] = {}
        self._listeners: list[Callable[[str], None]] = []
        self._lock = threading.Lock()

    def add_listener(self, listener: Callable[[str], None]) -> None:
        """Call ``listener(user_id)`` after every write to an account."""
        self._listeners.append(listener)

    def _notify(self, user_id: str) -> None:
        for listener in self._listeners:
            listener(user_id)

    def _account(self, user_id: str) -> CreditBalance:
        account = self._accounts.get(user_id)
        if account is None:
            account = CreditBalance(credits=self.starting_credits)
            self._accounts[user_id] = account
        return account

    def open_account(
        self,
        user_id: str,
        credits: int,
        *,
        lifetime_generations: int = 0,
        is_unlimited: bool = False,
        tier: str | None = None,
    ) -> CreditBalance:
        """Create or replace an account, e.g. when loading it from storage."""
        account = CreditBalance(
            credits=credits,
            is_unlimited=is_unlimited,
            tier=tier,
            lifetime_generations=lifetime_generations,
        )
        with self._lock:
            self._accounts[user_id] = account
        self._notify(user_id)
        return account.model_copy()

    def balance(self, user_id: str) -> CreditBalance:
        """Current balance of a user."""
        with self._lock:
            return self._account(user_id).model_copy()

    def debit(self, user_id: str, amount: int) -> DebitResult:
        """Charge a user.

        Args:
            user_id: The user to charge.
            amount: Credits to remove.

        Returns:
            DebitResult: ``success`` is False, and nothing changes, when the
            balance is too low. ``remaining`` is None for unlimited accounts.

        Raises:
            ValueError: If the amount is negative.

        """
        if amount < 0:
            msg = f"Debit amount must be >= 0, got {amount}"
            raise ValueError(msg)

        with self._lock:
            account = self._account(user_id)
            if account.is_unlimited:
                return DebitResult(success=True, remaining=None)
            if account.credits < amount:
                logger.info(
                    "Insufficient credits for %s: %d < %d",
                    user_id,
                    account.credits,
                    amount,
                )
                return DebitResult(success=False, remaining=account.credits)
            remaining = account.credits - amount
            self._accounts[user_id] = account.model_copy(update={"credits": remaining})
        self._notify(user_id)
        return DebitResult(success=True, remaining=remaining)

    def grant(
        self,
        user_id: str,
        amount: int | Literal["unlimited"],
        tier: str,
        source: GrantSource = "purchase",
    ) -> CreditBalance:
        """Add credits, or switch the account to unlimited."""
        with self._lock:
            account = self._account(user_id)
            if amount == "unlimited":
                update = {"is_unlimited": True, "tier": tier}
            else:
                if amount < 0:
                    msg = f"Grant amount must be >= 0, got {amount}"
                    raise ValueError(msg)
                update = {"credits": account.credits + amount, "tier": tier}
            account = account.model_copy(update=update)
            self._accounts[user_id] = account
            logger.info("Granted %s credits to %s (%s)", amount, user_id, source)
        self._notify(user_id)
        return account.model_copy()

    def record_generation(self, user_id: str) -> int:
        """Bump the lifetime generation count and return the new value."""
        with self._lock:
            account = self._account(user_id)
            count = account.lifetime_generations + 1
            self._accounts[user_id] = account.model_copy(
                update={"lifetime_generations": count},
            )
        self._notify(user_id)
        return count


class BalanceCache:
    """Time-windowed cache in front of a balance loader.

    Entries expire after ``ttl`` seconds and must be invalidated explicitly
    whenever the underlying balance is written.
    """

    def __init__(
        self,
        loader: Callable[[str], CreditBalance],
        ttl: float = 30.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.loader = loader
        self.ttl = ttl
        self.clock = clock
        self._entries: dict[str, tuple[float, CreditBalance]] = {}
        self._lock = threading.Lock()

    def get(self, user_id: str) -> CreditBalance:
        """Cached balance, loading it when missing or expired."""
        now = self.clock()
        with self._lock:
            entry = self._entries.get(user_id)
            if entry is not None and now - entry[0] < self.ttl:
                return entry[1]

        balance = self.loader(user_id)
        with self._lock:
            self._entries[user_id] = (now, balance)
        return balance

    def invalidate(self, user_id: str) -> None:
        with self._lock:
            self._entries.pop(user_id, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
