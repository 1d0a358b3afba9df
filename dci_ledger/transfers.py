"""
Transfer and Bill Payment Module

Transfers move money between two accounts by composing a withdraw context
on the source with a deposit context on the destination. Bill payment runs
one transfer per creditor and reports each outcome.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, List, Optional, Sequence, Tuple, Union

from .config import LedgerConfig
from .currency import Money
from .exceptions import InsufficientFundsError
from .logging_config import log_action
from .roles import AccountRole, Role, check_requirements
from .transactions import (
    DepositContext, TransactionContext, WithdrawContext, transaction_amount, utc_now
)


class BillCreditor(AccountRole):
    """Requirements of an account whose balance is paid off by PayBills"""

    requirements = AccountRole.requirements + ("balance",)


class TransferMoneySource(Role):
    """Capability of an account to fund transfers and pay bills"""

    requirements = ("info", "balance")

    def balance(self) -> Money:
        self._ensure_active()
        return self.player.balance()

    def has_sufficient_funds(self, amount: Money) -> bool:
        return self.balance() >= amount

    def transfer_to(self, context: 'TransferContext') -> bool:
        """
        Withdraw from the source, then deposit to the destination

        Returns:
            True if entries were recorded, False for a skipped zero transfer

        Raises:
            CapabilityRequirementError: If either account cannot record entries
            InsufficientFundsError: Before any entry is written
        """
        self._ensure_active()
        for account in (self.player, context.destination):
            check_requirements(AccountRole, account)

        if not self.has_sufficient_funds(context.amount):
            raise InsufficientFundsError(
                self.player.info.account_id, self.balance(), context.amount
            )

        config = context.config
        if context.amount.is_zero() and config.skip_zero_amount_transfers:
            return False

        source_id = self.player.info.account_id
        destination_id = context.destination.info.account_id

        WithdrawContext(
            self.player,
            config.transfer_out_narrative.format(account_id=destination_id),
            context.entry_time,
            context.amount,
            config=config
        ).execute()

        DepositContext(
            context.destination,
            config.transfer_in_narrative.format(account_id=source_id),
            context.entry_time,
            context.amount,
            config=config
        ).execute()
        return True

    def pay_bills(self, context: 'PayBillsContext') -> 'PayBillsResult':
        """
        Transfer each creditor's balance in order, collecting failures

        Raises:
            CapabilityRequirementError: Before any transfer, if the source or
                any creditor could not take part
        """
        self._ensure_active()
        check_requirements(AccountRole, self.player)
        for creditor in context.creditors:
            check_requirements(BillCreditor, creditor)

        result = PayBillsResult()

        for creditor in context.creditors:
            creditor_id = creditor.info.account_id
            amount = creditor.balance()
            if not amount.is_positive():
                result.skipped.append(creditor_id)
                continue

            transfer = TransferContext(
                self.player, creditor, amount,
                entry_time=context.entry_time, config=context.config
            )
            try:
                transfer.execute()
            except InsufficientFundsError as e:
                result.failed.append((creditor_id, e))
            else:
                result.paid.append(creditor_id)

        return result


class TransferContext(TransactionContext):
    """Move an amount from a source account to a destination account"""

    role = TransferMoneySource

    def __init__(
        self,
        source: Any,
        destination: Any,
        amount: Union[Money, str, int],
        entry_time: Optional[Union[datetime, str]] = None,
        config: Optional[LedgerConfig] = None
    ):
        super().__init__(config)
        self.source = source
        self.destination = destination
        self.amount = transaction_amount(amount)
        self.entry_time = entry_time if entry_time is not None else utc_now()

    def role_player(self) -> Any:
        return self.source

    def participants(self) -> tuple:
        return (self.source, self.destination)

    def run(self, capability: TransferMoneySource) -> bool:
        try:
            recorded = capability.transfer_to(self)
        except InsufficientFundsError as e:
            source_id = self.source.info.account_id
            destination_id = self.destination.info.account_id
            log_action(
                self.logger, "warning", "Transfer refused: insufficient funds",
                action="transfer", resource=f"account:{source_id}",
                correlation_id=self.context_id,
                extra={
                    "destination": destination_id,
                    "available": str(e.available),
                    "requested": str(e.requested)
                }
            )
            raise

        source_id = self.source.info.account_id
        destination_id = self.destination.info.account_id
        log_action(
            self.logger, "info",
            "Transfer completed" if recorded else "Zero amount transfer skipped",
            action="transfer", resource=f"account:{source_id}",
            correlation_id=self.context_id,
            extra={"destination": destination_id, "amount": str(self.amount)}
        )
        return recorded


@dataclass
class PayBillsResult:
    """Outcome of a bill payment run, by creditor account id"""
    paid: List[Any] = field(default_factory=list)
    failed: List[Tuple[Any, InsufficientFundsError]] = field(default_factory=list)
    skipped: List[Any] = field(default_factory=list)

    @property
    def all_paid(self) -> bool:
        return not self.failed


class PayBillsContext(TransactionContext):
    """Pay every creditor's outstanding balance from one source account"""

    role = TransferMoneySource

    def __init__(
        self,
        source: Any,
        creditors: Sequence[Any],
        entry_time: Optional[Union[datetime, str]] = None,
        config: Optional[LedgerConfig] = None
    ):
        super().__init__(config)
        self.source = source
        self.creditors = list(creditors)
        self.entry_time = entry_time if entry_time is not None else utc_now()

    def role_player(self) -> Any:
        return self.source

    def participants(self) -> tuple:
        return (self.source, *self.creditors)

    def run(self, capability: TransferMoneySource) -> PayBillsResult:
        result = capability.pay_bills(self)
        log_action(
            self.logger, "info", "Bills paid",
            action="pay_bills", resource=f"account:{self.source.info.account_id}",
            correlation_id=self.context_id,
            extra={
                "paid": [str(c) for c in result.paid],
                "failed": [str(c) for c, _ in result.failed],
                "skipped": [str(c) for c in result.skipped]
            }
        )
        return result
