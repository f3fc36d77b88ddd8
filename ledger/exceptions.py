"""
Ledger exceptions.

Every failure of a ledger operation is reported as a distinct subclass of
LedgerError carrying a stable ``kind`` and the HTTP status used by the API.
"""


class LedgerError(Exception):
    """Base exception for ledger operations."""

    kind = "LedgerError"
    status_code = 500

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class ValidationError(LedgerError):
    """Malformed or missing arguments."""

    kind = "ValidationError"
    status_code = 422


class NotFound(LedgerError):
    """Referenced account or asset does not exist."""

    kind = "NotFound"
    status_code = 404


class AlreadyExists(LedgerError):
    """A record already exists at the requested key."""

    kind = "AlreadyExists"
    status_code = 409


class InvalidPrice(LedgerError):
    """Listing price is not a positive integer."""

    kind = "InvalidPrice"
    status_code = 400


class NotForSale(LedgerError):
    """Asset is not currently listed."""

    kind = "NotForSale"
    status_code = 409


class SelfTrade(LedgerError):
    """Buyer already owns the asset."""

    kind = "SelfTrade"
    status_code = 409


class InsufficientFunds(LedgerError):
    """Buyer balance does not strictly exceed the listed price."""

    kind = "InsufficientFunds"
    status_code = 409


class NotOwner(LedgerError):
    """Seller is not the current owner of the asset."""

    kind = "NotOwner"
    status_code = 403


class StoreError(LedgerError):
    """State store unavailable, timed out, or holding undecodable data."""

    kind = "StoreError"
    status_code = 503


class InconsistentState(LedgerError):
    """An index entry refers to a record that does not resolve."""

    kind = "InconsistentState"
    status_code = 500
