"""Constraint-violation classification from structured driver data."""
import sqlite3

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from photofeed.errors import AlreadyFollowed, StorageError, UserNotFound
from photofeed.storage.conflicts import Violation, classify, translate


class FakeMySQLError(Exception):
    """Shaped like pymysql's errors: (errno, message) in args."""


class FakePgError(Exception):
    def __init__(self, sqlstate, constraint_name=None):
        super().__init__("pg error")
        self.sqlstate = sqlstate
        self.constraint_name = constraint_name


class FakeSqliteError(Exception):
    def __init__(self, code):
        super().__init__("sqlite error")
        self.sqlite_errorcode = code


def integrity(orig):
    return IntegrityError("INSERT ...", {}, orig)


@pytest.mark.parametrize(
    "orig, kind",
    [
        (FakeMySQLError(1062, "Duplicate entry '1-2' for key 'uq_follows'"), Violation.UNIQUE),
        (FakeMySQLError(1452, "Cannot add or update a child row"), Violation.FOREIGN_KEY),
        (FakeMySQLError(1451, "Cannot delete or update a parent row"), Violation.FOREIGN_KEY),
        (FakePgError("23505"), Violation.UNIQUE),
        (FakePgError("23503"), Violation.FOREIGN_KEY),
        (FakeSqliteError(sqlite3.SQLITE_CONSTRAINT_UNIQUE), Violation.UNIQUE),
        (FakeSqliteError(sqlite3.SQLITE_CONSTRAINT_FOREIGNKEY), Violation.FOREIGN_KEY),
        (FakeSqliteError(sqlite3.SQLITE_CONSTRAINT_NOTNULL), Violation.OTHER),
        (FakeMySQLError(1048, "Column cannot be null"), Violation.OTHER),
    ],
)
def test_classify_by_driver_code(orig, kind):
    assert classify(integrity(orig)).kind is kind


def test_classify_ignores_message_text():
    # Looks like a duplicate to a human, but carries no structured code
    orig = Exception("Duplicate entry 'x' for key 'uq_users_email'")
    assert classify(integrity(orig)).kind is Violation.OTHER


def test_classify_follows_the_cause_chain():
    inner = FakePgError("23505", constraint_name="uq_users_email")
    outer = RuntimeError("adapter error")
    outer.__cause__ = inner

    violation = classify(integrity(outer))

    assert violation.kind is Violation.UNIQUE
    assert violation.constraint == "uq_users_email"


def test_translate_returns_the_error_for_the_violation():
    exc = integrity(FakeMySQLError(1062, "dup"))
    error = translate("test.op", exc, unique=AlreadyFollowed(), foreign_key=UserNotFound())
    assert isinstance(error, AlreadyFollowed)

    exc = integrity(FakeMySQLError(1452, "fk"))
    error = translate("test.op", exc, unique=AlreadyFollowed(), foreign_key=UserNotFound())
    assert isinstance(error, UserNotFound)


def test_translate_accepts_a_factory():
    exc = integrity(FakePgError("23505", constraint_name="uq_likes_user_post"))
    error = translate("test.op", exc, unique=lambda v: AlreadyFollowed(v.constraint))
    assert str(error) == "uq_likes_user_post"


def test_translate_without_a_mapping_is_a_storage_error():
    # A FK violation on an op that only expects unique violations
    exc = integrity(FakeMySQLError(1452, "fk"))
    error = translate("storage.things.insert", exc, unique=AlreadyFollowed())

    assert isinstance(error, StorageError)
    assert error.op == "storage.things.insert"
    assert error.cause is exc


def test_translate_operational_error_is_a_storage_error():
    exc = OperationalError("SELECT 1", {}, Exception("connection reset"))
    error = translate("storage.users.get", exc)
    assert isinstance(error, StorageError)
    assert "storage.users.get" in str(error)
