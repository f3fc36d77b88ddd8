"""SQLAlchemy models for the ledger state store."""

from ledger.models.state import StateEntry

__all__ = ["StateEntry"]
