"""
Test suite for ledger module

Tests accounts, entries, the normal-side table and derived balances.
"""

import pytest
from dataclasses import FrozenInstanceError

from dci_ledger.currency import Money
from dci_ledger.exceptions import InvalidAmountError
from dci_ledger.ledger import (
    Account, AccountInfo, AccountType, Entry, EntryDirection, NORMAL_SIDE,
    Operation, direction_for, open_account
)


def make_entry(account, amount, direction, narrative="Test"):
    return Entry(
        account_id=account.account_id,
        date="2014-08-02 3:59",
        narrative=narrative,
        amount=Money.parse(amount),
        direction=direction
    )


class TestNormalSide:
    """Test the normal-side direction table"""

    def test_asset_mapping(self):
        assert direction_for(AccountType.ASSET, Operation.DEPOSIT) == EntryDirection.CREDIT
        assert direction_for(AccountType.ASSET, Operation.WITHDRAW) == EntryDirection.DEBIT

    def test_liability_mapping_is_inverted(self):
        assert direction_for(AccountType.LIABILITY, Operation.DEPOSIT) == EntryDirection.DEBIT
        assert direction_for(AccountType.LIABILITY, Operation.WITHDRAW) == EntryDirection.CREDIT

    def test_table_covers_every_type_and_operation(self):
        for account_type in AccountType:
            assert set(NORMAL_SIDE[account_type]) == set(Operation)


class TestEntry:
    """Test entry validation"""

    def test_signed_amount(self):
        account = open_account(1, "Miles", "Moses", "0.00")
        credit = make_entry(account, '10.00', EntryDirection.CREDIT)
        debit = make_entry(account, '10.00', EntryDirection.DEBIT)
        assert credit.signed_amount == Money.parse('10.00')
        assert debit.signed_amount == Money.parse('-10.00')

    def test_negative_amount_rejected(self):
        account = open_account(1, "Miles", "Moses", "0.00")
        with pytest.raises(InvalidAmountError):
            make_entry(account, '-1.00', EntryDirection.CREDIT)

    def test_entry_is_immutable(self):
        account = open_account(1, "Miles", "Moses", "0.00")
        entry = make_entry(account, '1.00', EntryDirection.CREDIT)
        with pytest.raises(FrozenInstanceError):
            entry.narrative = "changed"


class TestAccount:
    """Test account construction and balance calculation"""

    def test_open_account(self):
        """Test the account factory"""
        account = open_account(20403, "Miles", "Moses", "4000.30", "asset")

        assert account.account_id == 20403
        assert account.account_type == AccountType.ASSET
        assert account.full_name == "Moses Miles"
        assert account.info.starting_balance == Money.parse('4000.30')
        assert account.entries == ()
        assert str(account.balance()) == '4000.30'

    def test_open_liability_account_case_insensitive(self):
        account = open_account(3452, "Account 1", "Vendor", "30.52", "Liability")
        assert account.account_type == AccountType.LIABILITY

    def test_unknown_account_type(self):
        with pytest.raises(ValueError):
            open_account(1, "Miles", "Moses", "1.00", "equity")

    def test_account_info_is_immutable(self):
        account = open_account(1, "Miles", "Moses", "1.00")
        with pytest.raises(FrozenInstanceError):
            account.info.last_name = "Other"

    def test_balance_folds_entries(self):
        """Test balance equals starting balance plus the signed entry sum"""
        account = open_account(1, "Miles", "Moses", "100.00")
        account._append_entry(make_entry(account, '25.10', EntryDirection.CREDIT))
        account._append_entry(make_entry(account, '0.20', EntryDirection.DEBIT))
        account._append_entry(make_entry(account, '74.90', EntryDirection.DEBIT))

        assert account.balance() == Money.parse('50.00')
        signed = sum((e.signed_amount.minor_units for e in account.entries), 0)
        assert account.balance().minor_units == account.info.starting_balance.minor_units + signed

    def test_balance_has_no_side_effects(self):
        account = open_account(1, "Miles", "Moses", "10.00")
        account._append_entry(make_entry(account, '5.00', EntryDirection.CREDIT))
        first = account.balance()
        for _ in range(5):
            assert account.balance() == first
        assert len(account.entries) == 1

    def test_entries_view_is_read_only(self):
        account = open_account(1, "Miles", "Moses", "10.00")
        snapshot = account.entries
        account._append_entry(make_entry(account, '5.00', EntryDirection.CREDIT))
        assert snapshot == ()
        assert isinstance(account.entries, tuple)

    def test_entries_keep_insertion_order(self):
        account = open_account(1, "Miles", "Moses", "10.00")
        account._append_entry(Entry(1, "2014-08-03", "later date", Money(100), EntryDirection.CREDIT))
        account._append_entry(Entry(1, "2014-08-01", "earlier date", Money(100), EntryDirection.CREDIT))
        assert [e.narrative for e in account.entries] == ["later date", "earlier date"]

    def test_accounts_compare_by_identity(self):
        info = AccountInfo(1, "Miles", "Moses", Money.zero(), AccountType.ASSET)
        assert Account(info) != Account(info)
