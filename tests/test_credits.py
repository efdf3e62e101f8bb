"""Tests for the credit ledger and balance cache."""

from unittest.mock import MagicMock

import pytest

from vaultprompt.credits import BalanceCache, CreditLedger
from vaultprompt.models import CreditBalance


def test_new_users_start_with_default_credits() -> None:
    balance = CreditLedger().balance("alice")
    assert balance.credits == 5
    assert balance.is_unlimited is False
    assert balance.lifetime_generations == 0


def test_starting_credits_must_not_be_negative() -> None:
    with pytest.raises(ValueError, match="starting_credits"):
        CreditLedger(starting_credits=-1)


def test_debit() -> None:
    ledger = CreditLedger(starting_credits=10)

    result = ledger.debit("alice", 4)

    assert result.success is True
    assert result.remaining == 6
    assert ledger.balance("alice").credits == 6


def test_debit_insufficient_leaves_balance_untouched() -> None:
    ledger = CreditLedger()

    result = ledger.debit("alice", 10)

    assert result.success is False
    assert result.remaining == 5
    assert ledger.balance("alice").credits == 5


def test_debit_negative_amount_raises() -> None:
    with pytest.raises(ValueError, match="Debit amount"):
        CreditLedger().debit("alice", -1)


def test_unlimited_accounts_are_not_charged() -> None:
    ledger = CreditLedger()
    ledger.grant("alice", "unlimited", "ceo-access", source="subscription")

    result = ledger.debit("alice", 10)

    assert result.success is True
    assert result.remaining is None
    balance = ledger.balance("alice")
    assert balance.is_unlimited is True
    assert balance.tier == "ceo-access"
    assert balance.credits == 5


def test_grant_adds_credits() -> None:
    ledger = CreditLedger()
    balance = ledger.grant("alice", 50, "viral-starter")
    assert balance.credits == 55
    assert balance.tier == "viral-starter"

    with pytest.raises(ValueError, match="Grant amount"):
        ledger.grant("alice", -5, "viral-starter")


def test_record_generation() -> None:
    ledger = CreditLedger()
    assert ledger.record_generation("alice") == 1
    assert ledger.record_generation("alice") == 2
    assert ledger.balance("alice").lifetime_generations == 2


def test_open_account() -> None:
    ledger = CreditLedger()
    ledger.open_account("bob", 30, lifetime_generations=12, tier="empire-bundle")

    balance = ledger.balance("bob")
    assert balance.credits == 30
    assert balance.lifetime_generations == 12
    assert balance.tier == "empire-bundle"


def test_balance_returns_a_copy() -> None:
    ledger = CreditLedger()
    balance = ledger.balance("alice")
    balance.credits = 100
    assert ledger.balance("alice").credits == 5


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def test_cache_serves_within_ttl() -> None:
    clock = FakeClock()
    loader = MagicMock(return_value=CreditBalance(credits=5))
    cache = BalanceCache(loader, ttl=30, clock=clock)

    assert cache.get("alice").credits == 5
    clock.now = 29.0
    assert cache.get("alice").credits == 5

    loader.assert_called_once_with("alice")


def test_cache_reloads_after_ttl() -> None:
    clock = FakeClock()
    loader = MagicMock(
        side_effect=[CreditBalance(credits=5), CreditBalance(credits=3)],
    )
    cache = BalanceCache(loader, ttl=30, clock=clock)

    cache.get("alice")
    clock.now = 30.0

    assert cache.get("alice").credits == 3
    assert loader.call_count == 2


def test_cache_invalidate_on_write() -> None:
    ledger = CreditLedger()
    cache = BalanceCache(ledger.balance, ttl=60)

    assert cache.get("alice").credits == 5
    ledger.debit("alice", 2)
    assert cache.get("alice").credits == 5

    cache.invalidate("alice")
    assert cache.get("alice").credits == 3


def test_cache_clear() -> None:
    loader = MagicMock(return_value=CreditBalance(credits=1))
    cache = BalanceCache(loader, ttl=60)
    cache.get("alice")
    cache.get("bob")
    cache.clear()
    cache.get("alice")
    assert loader.call_count == 3


def test_listeners_hear_every_write() -> None:
    ledger = CreditLedger()
    listener = MagicMock()
    ledger.add_listener(listener)

    ledger.open_account("alice", 10)
    ledger.grant("alice", 5, "viral-starter")
    ledger.debit("alice", 3)
    ledger.record_generation("alice")
    ledger.debit("alice", 100)

    assert [c.args for c in listener.call_args_list] == [("alice",)] * 4
