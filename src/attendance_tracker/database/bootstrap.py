from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

from werkzeug.security import generate_password_hash

from .connection import DBConfig, DatabaseConnection
from .mysql_base import db_cursor, fetchone, new_id

logger = logging.getLogger(__name__)

_DELIMITER_RE = re.compile(r"(?im)^\s*DELIMITER\s+(\S+)\s*$")


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _split_on(sql: str, delimiter: str) -> Iterable[str]:
    # Handles delimiters inside quotes and drops `--` / `#` line comments.
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False
    i = 0
    n = len(sql)

    while i < n:
        ch = sql[i]

        if escape:
            buf.append(ch)
            escape = False
            i += 1
            continue

        if in_single or in_double:
            if ch == "\\":
                escape = True
            elif ch == "'" and in_single:
                in_single = False
            elif ch == '"' and in_double:
                in_double = False
            buf.append(ch)
            i += 1
            continue

        if ch == "#" or sql.startswith("-- ", i) or sql.startswith("--\n", i):
            eol = sql.find("\n", i)
            i = n if eol == -1 else eol
            continue

        if ch == "'":
            in_single = True
        elif ch == '"':
            in_double = True
        elif sql.startswith(delimiter, i):
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            i += len(delimiter)
            continue

        buf.append(ch)
        i += 1

    tail = "".join(buf).strip()
    if tail:
        yield tail


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script into statements, honouring `DELIMITER` directives."""
    delimiter = ";"
    pos = 0
    for m in _DELIMITER_RE.finditer(sql):
        yield from _split_on(sql[pos:m.start()], delimiter)
        delimiter = m.group(1)
        pos = m.end()
    yield from _split_on(sql[pos:], delimiter)


def _exec_sql(cur, sql: str) -> int:
    count = 0
    for stmt in iter_sql_statements(sql):
        cur.execute(stmt)
        count += 1
    return count


def ensure_database_exists(config: DBConfig) -> None:
    conn = DatabaseConnection(config).connect(with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_sql_file(config: DBConfig, *, path: str | Path) -> int:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    with db_cursor(DatabaseConnection(config), dictionary=False) as (_, cur):
        count = _exec_sql(cur, sql)
    logger.info("applied %s (%d statements) to %s", Path(path).name, count, config.describe())
    return count


def apply_schema(config: DBConfig, *, schema_path: str | Path) -> None:
    ensure_database_exists(config)
    apply_sql_file(config, path=schema_path)


def apply_seed_sql(config: DBConfig, *, seed_path: str | Path) -> None:
    apply_sql_file(config, path=seed_path)


def ensure_demo_accounts(config: DBConfig) -> None:
    """Create (or reset) the demo admin / teacher / student logins."""
    with db_cursor(DatabaseConnection(config)) as (_, cur):

        def lookup(sql: str, params: tuple) -> str:
            cur.execute(sql, params)
            row = fetchone(cur)
            if not row:
                raise RuntimeError(f"Missing seed row for {params!r}; run seed.sql first")
            return str(row["id"])

        dept_ccs = lookup("SELECT id FROM departments WHERE name=%s", ("CCS",))
        course_bsit = lookup("SELECT id FROM courses WHERE department_id=%s AND name=%s", (dept_ccs, "BSIT"))

        def upsert_account(email: str, password: str, role: str) -> str:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT id FROM accounts WHERE email=%s", (email,))
            existing = fetchone(cur)
            if existing:
                cur.execute(
                    "UPDATE accounts SET password_hash=%s, role=%s, is_active=1 WHERE id=%s",
                    (password_hash, role, existing["id"]),
                )
                return str(existing["id"])
            account_id = new_id()
            cur.execute(
                "INSERT INTO accounts(id, email, password_hash, role, is_active) VALUES(%s,%s,%s,%s,1)",
                (account_id, email, password_hash, role),
            )
            return account_id

        upsert_account("admin@school.test", "Admin#2024", "admin")

        teacher_id = upsert_account("teacher@school.test", "Teacher#2024", "teacher")
        cur.execute(
            """
            INSERT INTO teachers(id, first_name, last_name, email, department_id)
            VALUES(%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE department_id=VALUES(department_id)
            """,
            (teacher_id, "Maria", "Santos", "teacher@school.test", dept_ccs),
        )

        student_id = upsert_account("student@school.test", "Student#2024", "student")
        cur.execute(
            """
            INSERT INTO students(id, first_name, last_name, email, department_id, course_id, year_level)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            ON DUPLICATE KEY UPDATE course_id=VALUES(course_id), year_level=VALUES(year_level)
            """,
            (student_id, "Juan", "Dela Cruz", "student@school.test", dept_ccs, course_bsit, "1st Year"),
        )


def list_tables(config: DBConfig) -> list[str]:
    with db_cursor(DatabaseConnection(config), dictionary=False) as (_, cur):
        cur.execute("SHOW FULL TABLES")
        return [row[0] for row in cur.fetchall()]
