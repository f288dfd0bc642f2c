from __future__ import annotations

from typing import Optional

import mysql.connector

from ..core.enums import Role
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, is_duplicate_key, new_id
from .model import Account
from .repository import AccountRepository


class MySQLAccountRepository(AccountRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get_where(self, column: str, value: str) -> Optional[Account]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT id, email, password_hash, role, is_active, created_at
                FROM accounts
                WHERE {column}=%s
                """,
                (value,),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Account(
                account_id=row["id"],
                email=row["email"],
                password_hash=row["password_hash"],
                role=Role(row["role"]),
                is_active=bool(row.get("is_active", True)),
                created_at=row.get("created_at"),
            )

    def get_by_id(self, account_id: str) -> Optional[Account]:
        return self._get_where("id", account_id)

    def get_by_email(self, email: str) -> Optional[Account]:
        return self._get_where("email", email)

    def create_account(self, *, email: str, password_hash: str, role: Role) -> str:
        account_id = new_id()
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    """
                    INSERT INTO accounts(id, email, password_hash, role, is_active)
                    VALUES(%s,%s,%s,%s,1)
                    """,
                    (account_id, email, password_hash, role.value),
                )
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("Email is already registered")
            raise
        return account_id

    def update_email(self, account_id: str, email: str) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute("UPDATE accounts SET email=%s WHERE id=%s", (email, account_id))
                return cur.rowcount > 0
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ValidationError("Email is already registered")
            raise

    def update_password_hash(self, account_id: str, password_hash: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE accounts SET password_hash=%s WHERE id=%s", (password_hash, account_id))
            return cur.rowcount > 0

    def delete_by_id(self, account_id: str) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM accounts WHERE id=%s", (account_id,))
            return cur.rowcount > 0
