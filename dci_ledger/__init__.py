"""
DCI Ledger

A minimal ledger of accounts and append-only entries. Deposits, withdrawals,
transfers and bill payments run as single-use transaction contexts that grant
an account a capability for the duration of one transaction.
"""

__version__ = "1.0.0"
