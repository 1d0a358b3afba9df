"""
Typed Exception Hierarchy for the Ledger

Every error carries a machine-readable ``code`` and structured attributes so
callers branch on type and data, never on message text.

    LedgerError (base)
    |
    +-- CapabilityRequirementError   grant refused, player lacks a requirement
    +-- InsufficientFundsError       source balance below the requested amount
    +-- InvalidStateError            context re-executed / capability revoked
    +-- InvalidAmountError           unparseable or negative amount
"""

from typing import Any, Optional, Sequence


class LedgerError(Exception):
    """Base exception for all ledger errors."""

    code: str = "LEDGER_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CapabilityRequirementError(LedgerError):
    """Target object is missing an attribute a role requires."""

    code: str = "CAPABILITY_REQUIREMENT"

    def __init__(self, role_name: str, missing: Sequence[str], target: Optional[str] = None):
        self.role_name = role_name
        self.missing = tuple(missing)
        self.target = target
        super().__init__(
            f"Missing required property for role {role_name}: "
            f"{', '.join(self.missing)}"
            + (f" (target {target})" if target else "")
        )


class InsufficientFundsError(LedgerError):
    """Source account cannot cover the requested amount."""

    code: str = "INSUFFICIENT_FUNDS"

    def __init__(self, account_id: Any, available: Any, requested: Any):
        self.account_id = account_id
        self.available = available
        self.requested = requested
        super().__init__(
            f"Insufficient funds in account {account_id}: "
            f"available {available}, requested {requested}"
        )


class InvalidStateError(LedgerError):
    """Operation is not allowed in the object's current lifecycle state."""

    code: str = "INVALID_STATE"

    def __init__(self, name: str, state: Any, detail: Optional[str] = None):
        self.name = name
        self.state = state
        state_label = getattr(state, "value", state)
        super().__init__(detail or f"{name} cannot be executed in {state_label} state")


class InvalidAmountError(LedgerError, ValueError):
    """Amount could not be parsed or is not allowed for the operation."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, value: Any, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid amount {value!r}: {reason}")
