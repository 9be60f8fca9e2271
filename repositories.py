from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from accounts import Account


class AccountRepository(ABC):
    @abstractmethod
    def get(self, client_id: int) -> Optional[Account]:
        """Get an account. Returns None if it doesn't exist."""
        pass

    @abstractmethod
    def add(self, account: Account) -> None:
        """Store a new account."""
        pass

    @abstractmethod
    def all(self) -> List[Account]:
        """Every stored account, in no particular order."""
        pass

    @abstractmethod
    def count(self) -> int:
        pass


class InMemoryAccountRepository(AccountRepository):
    def __init__(self):
        self.accounts: Dict[int, Account] = {}

    def get(self, client_id: int) -> Optional[Account]:
        return self.accounts.get(client_id)

    def add(self, account: Account) -> None:
        if account.id in self.accounts:
            raise ValueError(f"Account {account.id} already exists")
        self.accounts[account.id] = account

    def all(self) -> List[Account]:
        return list(self.accounts.values())

    def count(self) -> int:
        return len(self.accounts)
