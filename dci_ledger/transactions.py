"""
Transaction Context Module

A transaction context binds its operands, grants the capability it needs,
executes, and revokes. Each context is single use:

    CREATED -> GRANTED -> EXECUTED -> REVOKED

A context that fails still ends in REVOKED and cannot be executed again.
"""

from contextlib import ExitStack, contextmanager
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Iterator, Optional, Type, Union
import uuid

from .config import LedgerConfig, get_config
from .currency import Money
from .exceptions import InsufficientFundsError, InvalidAmountError, InvalidStateError
from .ledger import Entry, EntryDirection, Operation, direction_for
from .logging_config import ensure_logging, get_logger, log_action
from .roles import AccountRole, Role, describe_target, grant, revoke


class ContextState(Enum):
    """Lifecycle states of a transaction context"""
    CREATED = "created"
    GRANTED = "granted"
    EXECUTED = "executed"
    REVOKED = "revoked"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def transaction_amount(value: Union[Money, str, int, Any]) -> Money:
    """Coerce a boundary amount and reject negative values"""
    amount = Money.coerce(value)
    if amount.is_negative():
        raise InvalidAmountError(str(amount), "transaction amounts must not be negative")
    return amount


@contextmanager
def account_locks(*accounts: Any) -> Iterator[None]:
    """
    Hold the lock of every account for the duration of the block.

    Locks are taken in ascending account id order so two contexts touching
    the same accounts can never wait on each other in a cycle.
    """
    unique = {}
    for account in accounts:
        if getattr(account, "lock", None) is not None:
            unique[id(account)] = account
    ordered = sorted(unique.values(), key=describe_target)

    with ExitStack() as stack:
        for account in ordered:
            stack.enter_context(account.lock)
        yield


class TransactionContext:
    """Base class for single-use transaction contexts"""

    role: Type[Role] = Role

    def __init__(self, config: Optional[LedgerConfig] = None):
        self.context_id = str(uuid.uuid4())
        self.state = ContextState.CREATED
        self.error: Optional[Exception] = None
        self._config = config
        self.logger = get_logger(type(self).__module__)

    @property
    def config(self) -> LedgerConfig:
        return self._config if self._config is not None else get_config()

    def role_player(self) -> Any:
        """Object the context's role is granted to"""
        raise NotImplementedError

    def participants(self) -> tuple:
        """Every account this context may write to"""
        return (self.role_player(),)

    def run(self, capability: Role) -> Any:
        """Perform the transaction with the granted capability"""
        raise NotImplementedError

    def execute(self) -> Any:
        """
        Grant, run and revoke. May only be called once.

        Raises:
            InvalidStateError: If the context was already executed
            CapabilityRequirementError: If the role cannot be granted
        """
        if self.state != ContextState.CREATED:
            raise InvalidStateError(type(self).__name__, self.state)

        ensure_logging(self.config)
        capability = None
        try:
            capability = grant(self.role, self.role_player())
            self.state = ContextState.GRANTED
            with account_locks(*self.participants()):
                result = self.run(capability)
            self.state = ContextState.EXECUTED
        except Exception as e:
            self.error = e
            raise
        finally:
            revoke(capability)
            self.state = ContextState.REVOKED

        return result


class _AccountEntryContext(TransactionContext):
    """Shared operands of deposit and withdraw contexts"""

    role = AccountRole
    operation: Operation = Operation.DEPOSIT

    def __init__(
        self,
        account: Any,
        narrative: str,
        entry_time: Union[datetime, str],
        amount: Union[Money, str, int],
        config: Optional[LedgerConfig] = None
    ):
        super().__init__(config)
        self.account = account
        self.narrative = narrative
        self.entry_time = entry_time
        self.amount = transaction_amount(amount)

    def role_player(self) -> Any:
        return self.account

    def _log_entry(self, entry: Entry) -> None:
        log_action(
            self.logger, "info", f"{self.operation.value.capitalize()} recorded",
            action=self.operation.value,
            resource=f"account:{entry.account_id}",
            correlation_id=self.context_id,
            extra={
                "amount": str(entry.amount),
                "direction": entry.direction.value,
                "narrative": entry.narrative
            }
        )


class DepositContext(_AccountEntryContext):
    """Record a deposit on one account"""

    operation = Operation.DEPOSIT

    def run(self, capability: AccountRole) -> Entry:
        entry = capability.deposit(self)
        self._log_entry(entry)
        return entry


class WithdrawContext(_AccountEntryContext):
    """
    Record a withdrawal on one account.

    Funds are not checked unless overdraft is disabled in config; transfers
    check funds themselves before withdrawing.
    """

    operation = Operation.WITHDRAW

    def run(self, capability: AccountRole) -> Entry:
        if not self.config.allow_direct_withdraw_overdraft:
            self._check_overdraft()
        entry = capability.withdraw(self)
        self._log_entry(entry)
        return entry

    def _check_overdraft(self) -> None:
        info = self.account.info
        if direction_for(info.account_type, Operation.WITHDRAW) != EntryDirection.DEBIT:
            return
        available = self.account.balance()
        if available < self.amount:
            raise InsufficientFundsError(info.account_id, available, self.amount)
