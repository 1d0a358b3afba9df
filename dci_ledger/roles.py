"""
Capability Grant Module

A role is a small wrapper constructed per transaction around the account
playing it. Granting validates the player against the role's requirements
before anything is created, so a refused grant has no visible effect.
Revoking deactivates the wrapper; any later use of it is rejected.
"""

from contextlib import contextmanager
from typing import Any, Iterator, List, Optional, Tuple, Type, TypeVar

from .exceptions import CapabilityRequirementError, InvalidStateError
from .ledger import Entry, Operation, direction_for
from .logging_config import get_logger

logger = get_logger("dci_ledger.roles")

R = TypeVar("R", bound="Role")


class Role:
    """Base class for transaction-scoped capabilities"""

    # Attributes the player must expose (present and not None)
    requirements: Tuple[str, ...] = ()

    def __init__(self, player: Any):
        self.player = player
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    @classmethod
    def missing_requirements(cls, target: Any) -> List[str]:
        """Names of required attributes the target lacks"""
        return [name for name in cls.requirements if getattr(target, name, None) is None]

    def _ensure_active(self) -> None:
        if not self._active:
            raise InvalidStateError(
                type(self).__name__, "revoked",
                f"{type(self).__name__} capability was revoked and can no longer be used"
            )

    def _revoke(self) -> None:
        self._active = False


def describe_target(target: Any) -> str:
    """Account id of the target, or its type name"""
    info = getattr(target, "info", None)
    account_id = getattr(info, "account_id", None)
    if account_id is not None:
        return str(account_id)
    return type(target).__name__


def check_requirements(role_cls: Type[Role], target: Any) -> None:
    """
    Raise if the target could not play the role

    Raises:
        CapabilityRequirementError: Naming every missing attribute
    """
    missing = role_cls.missing_requirements(target)
    if missing:
        raise CapabilityRequirementError(role_cls.__name__, missing, describe_target(target))


def grant(role_cls: Type[R], target: Any) -> R:
    """
    Grant a role to a target for one transaction

    Raises:
        CapabilityRequirementError: If the target lacks a required attribute
    """
    check_requirements(role_cls, target)
    logger.debug(f"Granted {role_cls.__name__} to {describe_target(target)}")
    return role_cls(target)


def revoke(role: Optional[Role]) -> None:
    """Revoke a granted role. Safe to call repeatedly or with None."""
    if role is None or not role.active:
        return
    role._revoke()
    logger.debug(f"Revoked {type(role).__name__} from {describe_target(role.player)}")


@contextmanager
def granted(role_cls: Type[R], target: Any) -> Iterator[R]:
    """Grant a role for the duration of a with-block"""
    role = grant(role_cls, target)
    try:
        yield role
    finally:
        revoke(role)


class AccountRole(Role):
    """Deposit and withdraw on an account's entry log"""

    requirements = ("info", "entries", "_append_entry")

    def deposit(self, context) -> Entry:
        return self._record(Operation.DEPOSIT, context)

    def withdraw(self, context) -> Entry:
        return self._record(Operation.WITHDRAW, context)

    def _record(self, operation: Operation, context) -> Entry:
        self._ensure_active()
        info = self.player.info
        entry = Entry(
            account_id=info.account_id,
            date=context.entry_time,
            narrative=context.narrative,
            amount=context.amount,
            direction=direction_for(info.account_type, operation)
        )
        self.player._append_entry(entry)
        return entry
