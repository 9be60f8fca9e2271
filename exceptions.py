"""
Ledger exceptions.

Exception Hierarchy:
    LedgerError (base)
    ├── TransactionError - one transaction rejected, processing continues
    │   ├── InsufficientFunds
    │   ├── AccountLocked
    │   ├── AlreadyDisputed
    │   ├── NotDisputed
    │   ├── TransactionNotFound
    │   └── TransactionAlreadyExists
    └── StreamError - the input/output contract is broken, the run stops
        ├── InputSourceError
        ├── MalformedRecordError
        └── OutputError
"""

from typing import Optional


class LedgerError(Exception):
    """Base exception for the payments ledger."""

    error_code: str = "LEDGER_ERROR"


class TransactionError(LedgerError):
    """A single transaction was rejected by an account."""

    error_code = "TRANSACTION_REJECTED"


class InsufficientFunds(TransactionError):
    error_code = "INSUFFICIENT_FUNDS"

    def __init__(self, transaction):
        self.transaction = transaction
        super().__init__(
            f"insufficient available funds to apply {transaction.type.value} "
            f"of tx {transaction.tx} for client {transaction.client}"
        )


class AccountLocked(TransactionError):
    error_code = "ACCOUNT_LOCKED"

    def __init__(self, client_id: int):
        self.client_id = client_id
        super().__init__(f"account {client_id} is locked")


class AlreadyDisputed(TransactionError):
    error_code = "ALREADY_DISPUTED"

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(f"tx {tx_id} is already disputed")


class NotDisputed(TransactionError):
    error_code = "NOT_DISPUTED"

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(f"tx {tx_id} is not disputed")


class TransactionNotFound(TransactionError):
    error_code = "TX_NOT_FOUND"

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(f"tx {tx_id} not found")


class TransactionAlreadyExists(TransactionError):
    error_code = "TX_ALREADY_EXISTS"

    def __init__(self, tx_id: int):
        self.tx_id = tx_id
        super().__init__(f"tx {tx_id} already exists")


class StreamError(LedgerError):
    """The input source or output sink cannot be used; the whole run fails."""

    error_code = "STREAM_ERROR"


class InputSourceError(StreamError):
    error_code = "INPUT_UNREADABLE"


class MalformedRecordError(StreamError):
    """A record could not be decoded into a transaction."""

    error_code = "MALFORMED_RECORD"

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class OutputError(StreamError):
    error_code = "OUTPUT_UNWRITABLE"
