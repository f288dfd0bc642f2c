from __future__ import annotations

from typing import Optional, Protocol

from ..core.enums import Role
from .model import Account


class AccountRepository(Protocol):
    """Repository interface for accounts.

    Note (DIP): services depend on this interface, not on a concrete database.
    """

    def get_by_id(self, account_id: str) -> Optional[Account]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[Account]:
        raise NotImplementedError

    def create_account(self, *, email: str, password_hash: str, role: Role) -> str:
        """Insert an account and return its new id."""

        raise NotImplementedError

    def update_email(self, account_id: str, email: str) -> bool:
        raise NotImplementedError

    def update_password_hash(self, account_id: str, password_hash: str) -> bool:
        raise NotImplementedError

    def delete_by_id(self, account_id: str) -> bool:
        raise NotImplementedError
