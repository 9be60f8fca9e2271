from typing import Dict, Optional

from exceptions import (
    AccountLocked,
    AlreadyDisputed,
    InsufficientFunds,
    NotDisputed,
    TransactionAlreadyExists,
    TransactionNotFound,
)
from models import (
    AccountSnapshot,
    Chargeback,
    Deposit,
    DisputableTransaction,
    Dispute,
    Resolve,
    Transaction,
    Withdrawal,
)


class Account:
    """Balances and transaction history of a single client.

    Every successful transition moves two of available/held/total together
    so that ``total == available + held`` keeps holding. A chargeback locks
    the account for good; every later transaction is rejected.
    """

    def __init__(self, client_id: int, available: float = 0.0, held: float = 0.0, locked: bool = False):
        self.id = client_id
        self.available = available
        self.held = held
        self.total = available + held
        self.locked = locked
        self._history: Dict[int, DisputableTransaction] = {}

    def __repr__(self) -> str:
        return (
            f"Account(id={self.id}, available={self.available}, held={self.held}, "
            f"total={self.total}, locked={self.locked})"
        )

    def apply(self, tx: Transaction) -> None:
        """Apply one transaction or raise a TransactionError without mutating anything.

        The caller routes by client, ``tx.client`` is assumed to match ``self.id``.
        """
        if self.locked:
            raise AccountLocked(self.id)

        if isinstance(tx, Deposit):
            self._ensure_new(tx)
            self.available += tx.amount
            self.total += tx.amount
            self._save(tx)
        elif isinstance(tx, Withdrawal):
            if self.available < tx.amount:
                raise InsufficientFunds(tx)
            self._ensure_new(tx)
            self.available -= tx.amount
            self.total -= tx.amount
            self._save(tx)
        else:
            self._apply_dispute_step(tx)

    def get_transaction(self, tx_id: int) -> Optional[DisputableTransaction]:
        return self._history.get(tx_id)

    def snapshot(self) -> AccountSnapshot:
        return AccountSnapshot(
            client=self.id,
            available=self.available,
            held=self.held,
            total=self.total,
            locked=self.locked,
        )

    def _ensure_new(self, tx: Transaction) -> None:
        if tx.tx in self._history:
            raise TransactionAlreadyExists(tx.tx)

    def _save(self, tx: Transaction) -> None:
        self._history[tx.tx] = DisputableTransaction(transaction=tx)

    def _apply_dispute_step(self, tx: Transaction) -> None:
        entry = self._history.get(tx.tx)
        if entry is None:
            raise TransactionNotFound(tx.tx)

        if isinstance(tx, Dispute) and entry.disputed:
            raise AlreadyDisputed(tx.tx)
        if isinstance(tx, (Resolve, Chargeback)) and not entry.disputed:
            raise NotDisputed(tx.tx)

        if isinstance(entry.transaction, Deposit):
            self._apply_to_deposit(tx, entry)
        else:
            self._apply_to_withdrawal(tx, entry)

    def _apply_to_deposit(self, tx: Transaction, entry: DisputableTransaction) -> None:
        amount = entry.transaction.amount
        if isinstance(tx, Dispute):
            # the deposited funds may have been withdrawn since
            if self.available < amount:
                raise InsufficientFunds(tx)
            self.available -= amount
            self.held += amount
            entry.disputed = True
        elif isinstance(tx, Resolve):
            self.available += amount
            self.held -= amount
            entry.disputed = False
        elif isinstance(tx, Chargeback):
            self.total -= amount
            self.held -= amount
            self.locked = True

    def _apply_to_withdrawal(self, tx: Transaction, entry: DisputableTransaction) -> None:
        # Disputing a withdrawal holds the withdrawn amount again without making
        # it available. A chargeback releases it to available; total was already
        # raised by the dispute.
        amount = entry.transaction.amount
        if isinstance(tx, Dispute):
            self.total += amount
            self.held += amount
            entry.disputed = True
        elif isinstance(tx, Resolve):
            self.total -= amount
            self.held -= amount
            entry.disputed = False
        elif isinstance(tx, Chargeback):
            self.available += amount
            self.held -= amount
            self.locked = True
