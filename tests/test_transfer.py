"""Tests for the transfer engine."""

from decimal import Decimal

import pytest

from atmledger.domain.entities import ActivityType, LedgerEntryType
from atmledger.domain.errors import (
    BalanceCeilingExceededError,
    DailyTransferLimitExceededError,
    DailyWithdrawalLimitExceededError,
    InsufficientFundsError,
    NotFoundError,
    RecipientNotFoundError,
    RecipientTransferFrequencyExceededError,
    SelfTransferError,
    TransactionFailedError,
    ValidationError,
)
from atmledger.domain.policy import LedgerPolicy
from atmledger.domain.transfer import TransferEngine
from atmledger.utils.amount_parser import MAX_AMOUNT


def _total_balance(account_store):
    return sum((a.balance for a in account_store.list_accounts()), Decimal("0.00"))


class TestDeposit:
    """Tests for deposits."""

    def test_deposit_credits_balance(self, engine, account_store, alice):
        result = engine.deposit(alice.id, Decimal("500"))

        assert result.amount == Decimal("500.00")
        assert result.previous_balance == Decimal("0.00")
        assert result.new_balance == Decimal("500.00")
        assert account_store.get(alice.id).balance == Decimal("500.00")

    def test_deposit_appends_ledger_entry(self, engine, ledger_log, alice):
        result = engine.deposit(alice.id, "250.25")

        entries = ledger_log.entries(alice.id)
        assert len(entries) == 1
        assert entries[0].id == result.entry_id
        assert entries[0].entry_type is LedgerEntryType.DEPOSIT
        assert entries[0].amount == Decimal("250.25")
        assert entries[0].balance_after == Decimal("250.25")

    @pytest.mark.parametrize("amount", ["0", "-5", Decimal("-0.01"), "abc", "1.005", 0])
    def test_deposit_rejects_bad_amounts(self, engine, account_store, alice, amount):
        with pytest.raises(ValidationError):
            engine.deposit(alice.id, amount)
        assert account_store.get(alice.id).balance == Decimal("0.00")

    def test_deposit_rejects_float(self, engine, alice):
        with pytest.raises(ValidationError):
            engine.deposit(alice.id, 10.5)

    def test_deposit_to_missing_account(self, engine):
        with pytest.raises(NotFoundError):
            engine.deposit(999, "10")

    def test_deposit_records_activity(self, engine, activity_log, alice):
        engine.deposit(alice.id, "500")

        latest = activity_log.recent(alice.id, limit=1)[0]
        assert latest.activity_type is ActivityType.DEPOSIT
        assert "$500.00" in latest.description

    def test_deposit_above_largest_amount_is_rejected(self, engine, account_store, ledger_log, alice):
        with pytest.raises(ValidationError, match="cannot exceed"):
            engine.deposit(alice.id, "123456789012345678.91")

        assert account_store.get(alice.id).balance == Decimal("0.00")
        assert ledger_log.entries(alice.id) == []

    def test_deposit_past_balance_ceiling_changes_nothing(self, engine, account_store, ledger_log, alice):
        engine.deposit(alice.id, "999999999999.99")

        with pytest.raises(BalanceCeilingExceededError) as excinfo:
            engine.deposit(alice.id, "0.01")

        assert excinfo.value.ceiling == MAX_AMOUNT
        assert account_store.get(alice.id).balance == MAX_AMOUNT
        assert len(ledger_log.entries(alice.id)) == 1
        assert ledger_log.verify(alice.id) == MAX_AMOUNT


class TestWithdraw:
    """Tests for withdrawals."""

    def test_withdraw_debits_balance(self, engine, ledger_log, alice):
        engine.deposit(alice.id, "500")

        result = engine.withdraw(alice.id, "200")

        assert result.new_balance == Decimal("300.00")
        entry = ledger_log.entries(alice.id)[-1]
        assert entry.entry_type is LedgerEntryType.WITHDRAW
        assert entry.amount == Decimal("-200.00")
        assert entry.balance_after == Decimal("300.00")

    def test_withdraw_entire_balance(self, engine, alice):
        engine.deposit(alice.id, "75.50")

        result = engine.withdraw(alice.id, "75.50")

        assert result.new_balance == Decimal("0.00")

    def test_withdraw_more_than_balance(self, engine, account_store, ledger_log, alice):
        engine.deposit(alice.id, "100")

        with pytest.raises(InsufficientFundsError) as excinfo:
            engine.withdraw(alice.id, "100.01")

        assert "Current balance: $100.00" in str(excinfo.value)
        assert account_store.get(alice.id).balance == Decimal("100.00")
        assert len(ledger_log.entries(alice.id)) == 1

    def test_withdraw_over_daily_limit_reports_headroom(self, engine, account_store, alice):
        engine.deposit(alice.id, "2000")
        engine.withdraw(alice.id, "900")

        with pytest.raises(DailyWithdrawalLimitExceededError) as excinfo:
            engine.withdraw(alice.id, "150")

        assert excinfo.value.remaining == Decimal("100.00")
        assert "$100.00" in str(excinfo.value)
        assert account_store.get(alice.id).balance == Decimal("1100.00")

        result = engine.withdraw(alice.id, "100")
        assert result.new_balance == Decimal("1000.00")

    def test_withdraw_limit_resets_after_window(self, engine, clock, alice):
        engine.deposit(alice.id, "3000")
        engine.withdraw(alice.id, "1000")

        with pytest.raises(DailyWithdrawalLimitExceededError) as excinfo:
            engine.withdraw(alice.id, "1")
        assert excinfo.value.limit_reached
        assert "Please try again tomorrow" in str(excinfo.value)

        clock.advance(hours=24, seconds=1)
        assert engine.withdraw(alice.id, "1000").new_balance == Decimal("1000.00")

    def test_withdraw_records_activity(self, engine, activity_log, alice):
        engine.deposit(alice.id, "100")
        engine.withdraw(alice.id, "40")

        latest = activity_log.recent(alice.id, limit=1)[0]
        assert latest.activity_type is ActivityType.WITHDRAW


class TestTransfer:
    """Tests for transfers between accounts."""

    def test_transfer_moves_money(self, engine, account_store, ledger_log, alice, bob):
        engine.deposit(alice.id, "500")

        result = engine.transfer(alice.id, "bob@example.com", "200")

        assert result.sender_new_balance == Decimal("300.00")
        assert result.recipient_new_balance == Decimal("200.00")
        assert account_store.get(alice.id).balance == Decimal("300.00")
        assert account_store.get(bob.id).balance == Decimal("200.00")

        out_entry = ledger_log.entries(alice.id)[-1]
        in_entry = ledger_log.entries(bob.id)[-1]
        assert out_entry.id == result.sender_entry_id
        assert out_entry.entry_type is LedgerEntryType.TRANSFER_OUT
        assert out_entry.amount == Decimal("-200.00")
        assert out_entry.counterparty_id == bob.id
        assert in_entry.id == result.recipient_entry_id
        assert in_entry.entry_type is LedgerEntryType.TRANSFER_IN
        assert in_entry.amount == Decimal("200.00")
        assert in_entry.counterparty_id == alice.id

    def test_deposit_withdraw_transfer_scenario(self, engine, account_store, alice, bob):
        engine.deposit(alice.id, "500")
        engine.withdraw(alice.id, "200")
        engine.transfer(alice.id, "bob@example.com", "100")

        with pytest.raises(InsufficientFundsError):
            engine.transfer(alice.id, "bob@example.com", "750")

        assert account_store.get(alice.id).balance == Decimal("200.00")
        assert account_store.get(bob.id).balance == Decimal("100.00")

    def test_deposit_then_overdraw_scenario(self, engine, account_store, ledger_log, alice):
        engine.deposit(alice.id, "500")

        result = engine.deposit(alice.id, "200")
        entry = ledger_log.entries(alice.id)[-1]
        assert result.new_balance == Decimal("700.00")
        assert (entry.entry_type, entry.amount, entry.balance_after) == (
            LedgerEntryType.DEPOSIT,
            Decimal("200.00"),
            Decimal("700.00"),
        )

        with pytest.raises(InsufficientFundsError):
            engine.withdraw(alice.id, "750")

        assert account_store.get(alice.id).balance == Decimal("700.00")
        assert len(ledger_log.entries(alice.id)) == 2

    def test_transfer_conserves_total_balance(self, engine, account_store, alice, bob):
        engine.deposit(alice.id, "1000")
        engine.deposit(bob.id, "1000")
        before = _total_balance(account_store)

        engine.transfer(alice.id, "bob@example.com", "123.45")
        engine.transfer(bob.id, "alice@example.com", "50")
        engine.transfer(alice.id, "bob@example.com", "0.01")

        assert _total_balance(account_store) == before

    def test_transfer_matches_email_case_insensitively(self, engine, alice, bob):
        engine.deposit(alice.id, "10")

        result = engine.transfer(alice.id, "BOB@Example.com", "5")

        assert result.recipient_id == bob.id

    def test_transfer_to_self(self, engine, alice):
        engine.deposit(alice.id, "100")

        with pytest.raises(SelfTransferError):
            engine.transfer(alice.id, "alice@example.com", "10")

    def test_transfer_to_unknown_recipient(self, engine, alice):
        engine.deposit(alice.id, "100")

        with pytest.raises(RecipientNotFoundError, match="not found"):
            engine.transfer(alice.id, "ghost@example.com", "10")

    def test_transfer_malformed_email(self, engine, alice):
        with pytest.raises(ValidationError, match="valid recipient email"):
            engine.transfer(alice.id, "not-an-email", "10")

    def test_transfer_insufficient_funds_changes_nothing(
        self, engine, account_store, ledger_log, alice, bob
    ):
        engine.deposit(alice.id, "50")

        with pytest.raises(InsufficientFundsError):
            engine.transfer(alice.id, "bob@example.com", "50.01")

        assert account_store.get(alice.id).balance == Decimal("50.00")
        assert account_store.get(bob.id).balance == Decimal("0.00")
        assert ledger_log.entries(bob.id) == []

    def test_sixth_transfer_to_same_recipient_in_an_hour(
        self, engine, account_store, clock, alice, bob
    ):
        engine.deposit(alice.id, "100")
        for _ in range(5):
            engine.transfer(alice.id, "bob@example.com", "1")
            clock.advance(minutes=5)

        with pytest.raises(RecipientTransferFrequencyExceededError) as excinfo:
            engine.transfer(alice.id, "bob@example.com", "1")

        assert excinfo.value.count == 5
        assert account_store.get(bob.id).balance == Decimal("5.00")

        clock.advance(minutes=40)
        engine.transfer(alice.id, "bob@example.com", "1")
        assert account_store.get(bob.id).balance == Decimal("6.00")

    def test_frequency_limit_is_per_recipient(self, engine, account_store, alice, bob):
        carol = account_store.register(name="Carol White", email="carol@example.com", pin="1234")
        engine.deposit(alice.id, "100")
        for _ in range(5):
            engine.transfer(alice.id, "bob@example.com", "1")

        engine.transfer(alice.id, "carol@example.com", "1")

        assert account_store.get(carol.id).balance == Decimal("1.00")

    def test_daily_transfer_limit(self, temp_db, activity_log, clock, account_store, alice, bob):
        policy = LedgerPolicy(daily_transfer_limit=Decimal("300.00"))
        engine = TransferEngine(temp_db, policy=policy, activity=activity_log, clock=clock)
        engine.deposit(alice.id, "1000")
        engine.transfer(alice.id, "bob@example.com", "250")

        with pytest.raises(DailyTransferLimitExceededError) as excinfo:
            engine.transfer(alice.id, "bob@example.com", "60")

        assert excinfo.value.remaining == Decimal("50.00")
        assert account_store.get(bob.id).balance == Decimal("250.00")

    def test_transfer_records_activity_for_both_sides(self, engine, activity_log, alice, bob):
        engine.deposit(alice.id, "100")
        engine.transfer(alice.id, "bob@example.com", "30")

        sent = activity_log.recent(alice.id, limit=1)[0]
        received = activity_log.recent(bob.id, limit=1)[0]
        assert sent.activity_type is ActivityType.TRANSFER_OUT
        assert "Bob Jones" in sent.description
        assert received.activity_type is ActivityType.TRANSFER_IN
        assert "Alice Smith" in received.description

    def test_transfer_past_recipient_ceiling_changes_nothing(
        self, engine, account_store, ledger_log, alice, bob
    ):
        engine.deposit(alice.id, "100")
        engine.deposit(bob.id, "999999999999.99")

        with pytest.raises(BalanceCeilingExceededError):
            engine.transfer(alice.id, "bob@example.com", "0.01")

        assert account_store.get(alice.id).balance == Decimal("100.00")
        assert account_store.get(bob.id).balance == MAX_AMOUNT
        assert ledger_log.verify(alice.id) == Decimal("100.00")
        assert ledger_log.verify(bob.id) == MAX_AMOUNT


class TestAtomicity:
    """Store failures inside a unit leave no partial effect."""

    def test_failure_after_first_entry_rolls_back_transfer(
        self, temp_db, engine, account_store, ledger_log, alice, bob, monkeypatch
    ):
        engine.deposit(alice.id, "500")
        original = type(temp_db).append_ledger_entry

        def failing_append(self, account_id, entry_type, *args, **kwargs):
            if entry_type is LedgerEntryType.TRANSFER_IN:
                raise RuntimeError("disk full")
            return original(self, account_id, entry_type, *args, **kwargs)

        monkeypatch.setattr(type(temp_db), "append_ledger_entry", failing_append)

        with pytest.raises(TransactionFailedError, match="Transfer failed. Please try again."):
            engine.transfer(alice.id, "bob@example.com", "200")

        monkeypatch.undo()
        assert account_store.get(alice.id).balance == Decimal("500.00")
        assert account_store.get(bob.id).balance == Decimal("0.00")
        assert len(ledger_log.entries(alice.id)) == 1
        assert ledger_log.entries(bob.id) == []

    def test_failed_balance_write_rolls_back_withdrawal(
        self, temp_db, engine, account_store, ledger_log, alice, monkeypatch
    ):
        engine.deposit(alice.id, "100")

        def failing_set_balance(self, account_id, balance):
            raise RuntimeError("connection lost")

        monkeypatch.setattr(type(temp_db), "set_balance", failing_set_balance)

        with pytest.raises(TransactionFailedError) as excinfo:
            engine.withdraw(alice.id, "10")

        monkeypatch.undo()
        assert excinfo.value.operation == "withdrawal"
        assert isinstance(excinfo.value.__cause__, RuntimeError)
        assert account_store.get(alice.id).balance == Decimal("100.00")
        assert len(ledger_log.entries(alice.id)) == 1

    def test_activity_failure_does_not_abort_deposit(
        self, temp_db, engine, account_store, alice, monkeypatch
    ):
        def failing_append_activity(self, *args, **kwargs):
            raise RuntimeError("audit table unavailable")

        monkeypatch.setattr(type(temp_db), "append_activity", failing_append_activity)

        result = engine.deposit(alice.id, "80")

        monkeypatch.undo()
        assert result.new_balance == Decimal("80.00")
        assert account_store.get(alice.id).balance == Decimal("80.00")

    def test_ledger_replay_matches_after_mixed_operations(
        self, engine, ledger_log, account_store, alice, bob
    ):
        engine.deposit(alice.id, "700")
        engine.withdraw(alice.id, "120.40")
        engine.transfer(alice.id, "bob@example.com", "79.60")
        engine.deposit(bob.id, "20")
        engine.transfer(bob.id, "alice@example.com", "99.60")

        for account in account_store.list_accounts():
            assert ledger_log.replay_balance(account.id) == account.balance
            assert ledger_log.verify(account.id) == account.balance
