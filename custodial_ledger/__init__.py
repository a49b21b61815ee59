"""
Custodial Ledger

Per-customer debit/credit positions against a pooled fund, with lazy simple
interest, balance ceilings and KYC-gated deposits and withdrawals.
"""

__version__ = "1.0.0"
