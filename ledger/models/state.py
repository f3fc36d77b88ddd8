"""
StateEntry model - one row per key of the key-value state.

Accounts, assets, indices and the trade journal all live here as opaque
JSON bytes; the table knows nothing about record types.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, LargeBinary, String, func
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base


class StateEntry(Base):
    """A single key of the ledger state."""

    __tablename__ = "state_entries"

    key: Mapped[str] = mapped_column(String, primary_key=True)

    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)

    # Write count for the key, bumped on every put. Bookkeeping only, the
    # ledger never reads it.
    version: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime, nullable=False, server_default=func.now(), onupdate=func.now()
    )

    def __repr__(self) -> str:
        return f"StateEntry(key={self.key!r}, version={self.version})"
