"""
Error Taxonomy Module

Every failure aborts the current call with no partial state retained.
All errors derive from ValueError so callers that only care about
"the request was rejected" can catch that.
"""


class LedgerError(ValueError):
    """Base class for all ledger errors"""


class UnknownIdentity(LedgerError):
    """Identity is not registered with the bank"""


class NotVerified(LedgerError):
    """Customer has not passed KYC yet"""


class AlreadyKnown(LedgerError):
    """Customer was already marked as known"""


class InvalidAmount(LedgerError):
    """Amount is zero, negative, or otherwise unusable"""


class InsufficientFunds(LedgerError):
    """Requested amount exceeds the available funds of the source"""


class InvalidName(LedgerError):
    """Name is empty after trimming"""


class LimitExceeded(LedgerError):
    """Resulting balance would reach or exceed its configured ceiling"""


class AccessDenied(LedgerError):
    """Credential is not allowed to perform the operation"""


class InvalidCredential(LedgerError):
    """Credential could not be verified"""
