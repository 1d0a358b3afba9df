"""
Account and Entry Module

Accounts own an append-only log of dated entries. Balances are derived from
the starting balance and the entries, never stored separately.
"""

from datetime import datetime
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union
from enum import Enum
import threading

from .currency import Money
from .exceptions import InvalidAmountError


class AccountType(Enum):
    """Account types supported by the ledger"""
    ASSET = "asset"
    LIABILITY = "liability"


class EntryDirection(Enum):
    """Raw bookkeeping direction of an entry"""
    CREDIT = "credit"
    DEBIT = "debit"


class Operation(Enum):
    """Operations a granted account role can perform"""
    DEPOSIT = "deposit"
    WITHDRAW = "withdraw"


# Normal-side table: which direction each operation records per account type
NORMAL_SIDE: Dict[AccountType, Dict[Operation, EntryDirection]] = {
    AccountType.ASSET: {
        Operation.DEPOSIT: EntryDirection.CREDIT,
        Operation.WITHDRAW: EntryDirection.DEBIT,
    },
    AccountType.LIABILITY: {
        Operation.DEPOSIT: EntryDirection.DEBIT,
        Operation.WITHDRAW: EntryDirection.CREDIT,
    },
}


def direction_for(account_type: AccountType, operation: Operation) -> EntryDirection:
    """Look up the entry direction an operation records on an account type"""
    return NORMAL_SIDE[account_type][operation]


@dataclass(frozen=True)
class AccountInfo:
    """Identity and opening position of an account"""
    account_id: Union[int, str]
    last_name: str
    first_name: str
    starting_balance: Money
    account_type: AccountType


@dataclass(frozen=True)
class Entry:
    """
    One ledger line. Amount is always a non-negative magnitude; the
    direction carries the sign.
    """
    account_id: Union[int, str]
    date: Union[datetime, str]
    narrative: str
    amount: Money
    direction: EntryDirection

    def __post_init__(self):
        if self.amount.is_negative():
            raise InvalidAmountError(str(self.amount), "entry amounts must not be negative")

    @property
    def signed_amount(self) -> Money:
        """Effect of this entry on the nominal balance"""
        if self.direction == EntryDirection.CREDIT:
            return self.amount
        return -self.amount


@dataclass(eq=False)
class Account:
    """
    Account with an append-only entry log.

    Entries are appended only through a granted AccountRole; the public
    ``entries`` view is a read-only snapshot.
    """
    info: AccountInfo
    _entries: List[Entry] = field(default_factory=list, repr=False)
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    @property
    def account_id(self) -> Union[int, str]:
        return self.info.account_id

    @property
    def account_type(self) -> AccountType:
        return self.info.account_type

    @property
    def full_name(self) -> str:
        return f"{self.info.first_name} {self.info.last_name}"

    @property
    def entries(self) -> Optional[Tuple[Entry, ...]]:
        """Entries in the order they were recorded, None without an entry log"""
        if self._entries is None:
            return None
        return tuple(self._entries)

    def balance(self) -> Money:
        """
        Calculate the balance from the starting balance and all entries

        Credits increase and debits decrease the nominal balance; which
        operation records which direction is decided by NORMAL_SIDE.
        """
        running_balance = self.info.starting_balance
        for entry in self._entries:
            running_balance = running_balance + entry.signed_amount
        return running_balance

    def _append_entry(self, entry: Entry) -> None:
        # Only AccountRole calls this, while its grant is active
        self._entries.append(entry)


def open_account(
    account_id: Union[int, str],
    last_name: str,
    first_name: str,
    starting_balance: Union[Money, str, int] = "0.00",
    account_type: Union[AccountType, str] = AccountType.ASSET
) -> Account:
    """
    Create an account with an empty entry log

    Args:
        account_id: Unique account identifier
        last_name: Holder last name
        first_name: Holder first name
        starting_balance: Opening balance as Money or a decimal string
        account_type: AccountType or "asset" / "liability"

    Returns:
        New Account

    Raises:
        ValueError: If the account type is unknown
        InvalidAmountError: If the starting balance cannot be parsed
    """
    if not isinstance(account_type, AccountType):
        account_type = AccountType(str(account_type).strip().lower())

    info = AccountInfo(
        account_id=account_id,
        last_name=last_name,
        first_name=first_name,
        starting_balance=Money.coerce(starting_balance),
        account_type=account_type
    )
    return Account(info=info)
