"""Account registry - creation and lookup of accounts."""

import logging

from ledger import telemetry
from ledger.exceptions import ValidationError
from ledger.schemas.records import Account
from ledger.services.index import ACCOUNTS_INDEX
from ledger.services.registry import RecordQuery, RecordRegistry, validate_key

logger = logging.getLogger(__name__)


class AccountRegistry(RecordRegistry[Account]):
    """Accounts keyed by username, enumerated through ``_accountsIndex``."""

    model = Account
    index_name = ACCOUNTS_INDEX
    label = "Account"

    def key_of(self, record: Account) -> str:
        return record.username

    async def create(self, username: str, initial_balance: int) -> Account:
        """Create a new account.

        Args:
            username: Unique username, also the store key
            initial_balance: Starting balance, must not be negative

        Returns:
            The created account

        Raises:
            ValidationError: If the username is empty/reserved or the balance is negative
            AlreadyExists: If a record already exists at username
            StoreError: If the index or record write fails
        """
        validate_key(username, self.label)
        if initial_balance < 0:
            raise ValidationError("Initial balance must not be negative")

        account = await self._create(Account(username=username, balance=initial_balance))

        telemetry.record_account_created()
        logger.info(
            "Account created",
            extra={"username": username, "balance": initial_balance},
        )
        return account

    def list(self) -> RecordQuery[Account]:
        """All accounts in creation order."""
        return RecordQuery(self, lambda account: True)
