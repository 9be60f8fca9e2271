from typing import Iterable, List, Optional

import structlog

from accounts import Account
from exceptions import TransactionError
from models import AccountSnapshot, ProcessingSummary, Transaction
from repositories import AccountRepository, InMemoryAccountRepository

logger = structlog.get_logger("ledger.services")


class LedgerService:
    """Routes transactions to per-client accounts, creating accounts on first reference."""

    def __init__(self, repository: Optional[AccountRepository] = None):
        self.repository = repository if repository is not None else InMemoryAccountRepository()

    def get_or_create_account(self, client_id: int) -> Account:
        account = self.repository.get(client_id)
        if account is None:
            account = Account(client_id)
            self.repository.add(account)
            logger.debug("Account created", client=client_id)
        return account

    def apply(self, tx: Transaction) -> None:
        """Apply a transaction to its client's account.

        The account is created even if the transaction is then rejected.
        Raises the account's TransactionError unchanged.
        """
        account = self.get_or_create_account(tx.client)
        account.apply(tx)

    def process(self, transactions: Iterable[Transaction]) -> ProcessingSummary:
        """Apply a stream of transactions, logging rejections and carrying on."""
        summary = ProcessingSummary()

        for tx in transactions:
            try:
                self.apply(tx)
            except TransactionError as e:
                logger.warning(
                    str(e),
                    client=tx.client,
                    tx=tx.tx,
                    type=tx.type.value,
                    error_code=e.error_code,
                )
                summary.rejected[e.error_code] = summary.rejected.get(e.error_code, 0) + 1
                continue

            summary.applied += 1
            logger.debug("Transaction applied", client=tx.client, tx=tx.tx, type=tx.type.value)

        summary.accounts_count = self.account_count()
        logger.info(
            "Transaction stream processed",
            applied=summary.applied,
            rejected=summary.rejected_count,
            accounts_count=summary.accounts_count,
        )
        return summary

    def snapshot(self, sort: bool = False) -> List[AccountSnapshot]:
        accounts = self.repository.all()
        if sort:
            accounts.sort(key=lambda account: account.id)
        return [account.snapshot() for account in accounts]

    def account_count(self) -> int:
        return self.repository.count()
