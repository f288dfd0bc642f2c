from __future__ import annotations

from pathlib import Path

import mysql.connector
import pytest

from attendance_tracker.classes.mysql_class_repository import MySQLEnrollmentRepository
from attendance_tracker.core.constants import ENROLLMENT_BLOCK_MESSAGE
from attendance_tracker.core.exceptions import EnrollmentBlockError, ValidationError
from attendance_tracker.database.bootstrap import iter_sql_statements

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def test_delimiter_blocks_keep_trigger_body_together():
    sql = """
CREATE TABLE a (id INT); -- trailing comment
DROP TRIGGER IF EXISTS trg;
DELIMITER $$
CREATE TRIGGER trg BEFORE INSERT ON a FOR EACH ROW
BEGIN
  SET @x = 'a;b';
END$$
DELIMITER ;
INSERT INTO a VALUES (1);
"""
    statements = list(iter_sql_statements(sql))

    assert statements[0] == "CREATE TABLE a (id INT)"
    assert statements[1] == "DROP TRIGGER IF EXISTS trg"
    assert statements[2].startswith("CREATE TRIGGER trg")
    assert statements[2].endswith("END")
    assert "SET @x = 'a;b';" in statements[2]
    assert statements[3] == "INSERT INTO a VALUES (1)"
    assert len(statements) == 4


def test_schema_file_splits_into_executable_statements():
    statements = list(iter_sql_statements(SCHEMA_PATH.read_text(encoding="utf-8")))

    assert not any(s.upper().startswith("DELIMITER") for s in statements)
    triggers = [s for s in statements if s.startswith("CREATE TRIGGER")]
    assert len(triggers) == 1
    assert "SIGNAL SQLSTATE '45000'" in triggers[0]
    assert sum(1 for s in statements if s.startswith("CREATE OR REPLACE VIEW")) == 2


class _RaisingCursor:
    def __init__(self, error):
        self._error = error

    def execute(self, *args, **kwargs):
        raise self._error

    def close(self):
        pass


class _FakeConnection:
    def __init__(self, error):
        self._error = error
        self.rolled_back = False

    def cursor(self, dictionary=True):
        return _RaisingCursor(self._error)

    def commit(self):
        pass

    def rollback(self):
        self.rolled_back = True

    def close(self):
        pass


class _FakeFactory:
    def __init__(self, error):
        self.conn = _FakeConnection(error)

    def connect(self):
        return self.conn


def test_trigger_signal_is_translated_to_block_error():
    err = mysql.connector.errors.DatabaseError(
        msg="Student already enrolled in block A, cannot enroll in block B",
        errno=1644,
        sqlstate="45000",
    )
    factory = _FakeFactory(err)

    with pytest.raises(EnrollmentBlockError, match=ENROLLMENT_BLOCK_MESSAGE):
        MySQLEnrollmentRepository(factory).enroll(student_id="s-1", class_id="class-2")
    assert factory.conn.rolled_back


def test_duplicate_enrollment_is_a_validation_error():
    err = mysql.connector.errors.IntegrityError(msg="Duplicate entry", errno=1062, sqlstate="23000")

    with pytest.raises(ValidationError, match="already enrolled in this class"):
        MySQLEnrollmentRepository(_FakeFactory(err)).enroll(student_id="s-1", class_id="class-1")


def test_other_database_errors_propagate():
    err = mysql.connector.errors.DatabaseError(msg="boom", errno=1146, sqlstate="42S02")

    with pytest.raises(mysql.connector.errors.DatabaseError):
        MySQLEnrollmentRepository(_FakeFactory(err)).enroll(student_id="s-1", class_id="class-1")
