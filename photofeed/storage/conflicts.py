"""
Classification of relational-store constraint violations.

Every write the storage layer issues goes through ``translate`` when it
fails. Classification only looks at structured driver data:

  MySQL / TiDB   errno in ``args[0]``   (1062 duplicate, 1452/1451 FK …)
  PostgreSQL     SQLSTATE               (23505 unique, 23503 FK)
  SQLite         extended result code   (SQLITE_CONSTRAINT_UNIQUE …)

Message text differs between drivers, versions and server locales, so it is
never parsed.
"""
import enum
import logging
import sqlite3
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Union

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

from photofeed.errors import PhotofeedError, StorageError
from photofeed.telemetry import WRITE_CONFLICTS_TOTAL

logger = logging.getLogger(__name__)


class Violation(enum.Enum):
    UNIQUE = "unique"
    FOREIGN_KEY = "foreign_key"
    OTHER = "other"


@dataclass(frozen=True)
class ConstraintViolation:
    kind: Violation
    # Only drivers that report it structurally (asyncpg, psycopg) fill this
    constraint: Optional[str] = None


_MYSQL_UNIQUE = {1062, 1586}              # ER_DUP_ENTRY, ER_DUP_ENTRY_WITH_KEY_NAME
_MYSQL_FOREIGN_KEY = {1216, 1217, 1451, 1452}
_SQLSTATE_UNIQUE = "23505"
_SQLSTATE_FOREIGN_KEY = "23503"
_SQLITE_UNIQUE = {sqlite3.SQLITE_CONSTRAINT_UNIQUE, sqlite3.SQLITE_CONSTRAINT_PRIMARYKEY}
_SQLITE_FOREIGN_KEY = {sqlite3.SQLITE_CONSTRAINT_FOREIGNKEY}


def _driver_errors(exc: BaseException) -> Iterator[BaseException]:
    """Yield the DB-API error wrapped by SQLAlchemy and whatever it chains to."""
    seen = set()
    current: Optional[BaseException] = getattr(exc, "orig", None) or exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        yield current
        current = current.__cause__ or current.__context__


def _constraint_name(err: BaseException) -> Optional[str]:
    name = getattr(err, "constraint_name", None)
    if name:
        return name
    diag = getattr(err, "diag", None)
    return getattr(diag, "constraint_name", None)


def classify(exc: BaseException) -> ConstraintViolation:
    """Work out which kind of constraint ``exc`` violated."""
    for err in _driver_errors(exc):
        constraint = _constraint_name(err)

        sqlstate = getattr(err, "sqlstate", None) or getattr(err, "pgcode", None)
        if sqlstate == _SQLSTATE_UNIQUE:
            return ConstraintViolation(Violation.UNIQUE, constraint)
        if sqlstate == _SQLSTATE_FOREIGN_KEY:
            return ConstraintViolation(Violation.FOREIGN_KEY, constraint)

        sqlite_code = getattr(err, "sqlite_errorcode", None)
        if sqlite_code in _SQLITE_UNIQUE:
            return ConstraintViolation(Violation.UNIQUE, constraint)
        if sqlite_code in _SQLITE_FOREIGN_KEY:
            return ConstraintViolation(Violation.FOREIGN_KEY, constraint)

        args = getattr(err, "args", ())
        if args and isinstance(args[0], int):
            if args[0] in _MYSQL_UNIQUE:
                return ConstraintViolation(Violation.UNIQUE, constraint)
            if args[0] in _MYSQL_FOREIGN_KEY:
                return ConstraintViolation(Violation.FOREIGN_KEY, constraint)

    return ConstraintViolation(Violation.OTHER)


ErrorFactory = Callable[[ConstraintViolation], PhotofeedError]
ErrorChoice = Union[PhotofeedError, ErrorFactory, None]


def _build(choice: ErrorChoice, violation: ConstraintViolation) -> Optional[PhotofeedError]:
    if choice is None:
        return None
    if isinstance(choice, PhotofeedError):
        return choice
    return choice(violation)


def translate(
    op: str,
    exc: SQLAlchemyError,
    *,
    unique: ErrorChoice = None,
    foreign_key: ErrorChoice = None,
) -> PhotofeedError:
    """
    Map a failed write to the domain error the caller should raise.

    ``unique`` / ``foreign_key`` name the error for the corresponding
    violation, either as an instance or as a factory taking the
    ``ConstraintViolation``. Anything left unclassified becomes a
    ``StorageError`` tagged with ``op``.
    """
    if isinstance(exc, IntegrityError):
        violation = classify(exc)
        if violation.kind is Violation.UNIQUE:
            error = _build(unique, violation)
        elif violation.kind is Violation.FOREIGN_KEY:
            error = _build(foreign_key, violation)
        else:
            error = None

        if error is not None:
            WRITE_CONFLICTS_TOTAL.labels(op=op, kind=violation.kind.value).inc()
            logger.info("%s rejected by store: %s", op, error)
            return error

    if isinstance(exc, DBAPIError) and exc.connection_invalidated:
        logger.warning("%s lost its database connection", op)

    logger.error("%s failed: %s", op, exc)
    return StorageError(op, exc)
