"""
Store adapter for the upload target tables.

Target tables are not ORM models: their columns come from whatever CSV
was uploaded, so they are reflected (or created) at runtime with
SQLAlchemy Core. Driver errors are translated into StoreError with a
StoreErrorKind here, so callers never inspect driver payloads.
"""
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    Integer,
    MetaData,
    Table,
    Text,
    inspect,
)
from sqlalchemy import exc as sa_exc
from sqlalchemy.engine import Engine
from sqlalchemy.sql import func

from ..logger import get_logger
from .type_inference import ColumnType

logger = get_logger(__name__)

SQL_TYPES = {
    ColumnType.BOOLEAN: Boolean,
    ColumnType.INTEGER: Integer,
    ColumnType.DECIMAL: Float,
    ColumnType.TEXT: Text,
}


class TableState(str, Enum):
    EXISTS = "exists"
    MISSING = "missing"


class StoreErrorKind(str, Enum):
    UNDEFINED_TABLE = "undefined_table"
    UNDEFINED_COLUMN = "undefined_column"
    CONSTRAINT_VIOLATION = "constraint_violation"
    INVALID_DATA = "invalid_data"
    CONNECTION = "connection"
    UNKNOWN = "unknown"


class StoreError(Exception):
    """A failed store operation, classified at the adapter boundary"""

    def __init__(self, kind: StoreErrorKind, message: str):
        self.kind = kind
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


# SQLSTATE class prefixes (PostgreSQL drivers expose pgcode / sqlstate)
_SQLSTATE_KINDS = [
    ("42P01", StoreErrorKind.UNDEFINED_TABLE),
    ("42703", StoreErrorKind.UNDEFINED_COLUMN),
    ("23", StoreErrorKind.CONSTRAINT_VIOLATION),
    ("22", StoreErrorKind.INVALID_DATA),
    ("08", StoreErrorKind.CONNECTION),
]


def _sqlstate(error: sa_exc.DBAPIError) -> Optional[str]:
    orig = error.orig
    return getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)


def classify_error(error: Exception) -> StoreErrorKind:
    """Map a SQLAlchemy/DBAPI exception onto a StoreErrorKind"""
    if isinstance(error, sa_exc.NoSuchTableError):
        return StoreErrorKind.UNDEFINED_TABLE

    if isinstance(error, sa_exc.DBAPIError):
        state = _sqlstate(error)
        if state:
            for prefix, kind in _SQLSTATE_KINDS:
                if state.startswith(prefix):
                    return kind

        if isinstance(error, sa_exc.IntegrityError):
            return StoreErrorKind.CONSTRAINT_VIOLATION
        if isinstance(error, sa_exc.DataError):
            return StoreErrorKind.INVALID_DATA

        # SQLite reports schema problems as OperationalError without a SQLSTATE
        text = str(error.orig).lower()
        if "no such table" in text:
            return StoreErrorKind.UNDEFINED_TABLE
        if "no column named" in text or "no such column" in text:
            return StoreErrorKind.UNDEFINED_COLUMN
        if isinstance(error, sa_exc.OperationalError):
            return StoreErrorKind.CONNECTION

    return StoreErrorKind.UNKNOWN


def _error_message(error: Exception) -> str:
    if isinstance(error, sa_exc.NoSuchTableError):
        return f"relation \"{error}\" does not exist"
    if isinstance(error, sa_exc.DBAPIError) and error.orig is not None:
        return str(error.orig).strip()
    return str(error).strip()


def to_store_error(error: Exception) -> StoreError:
    return StoreError(classify_error(error), _error_message(error))


class DataStore:
    """Narrow table-level interface over a SQLAlchemy engine"""

    def __init__(self, engine: Engine):
        self.engine = engine
        self._tables: Dict[str, Table] = {}

    def table_state(self, table_name: str) -> TableState:
        try:
            exists = inspect(self.engine).has_table(table_name)
        except sa_exc.SQLAlchemyError as e:
            raise to_store_error(e) from e
        return TableState.EXISTS if exists else TableState.MISSING

    def create_table(self, table_name: str, column_types: Dict[str, ColumnType]) -> None:
        """CREATE TABLE IF NOT EXISTS with an id, the inferred columns and created_at"""
        columns = [Column("id", Integer, primary_key=True, autoincrement=True)]
        for name, column_type in column_types.items():
            if name in ("id", "created_at"):
                continue
            columns.append(Column(name, SQL_TYPES[column_type]))
        columns.append(Column("created_at", DateTime, server_default=func.now()))

        table = Table(table_name, MetaData(), *columns)
        try:
            table.create(bind=self.engine, checkfirst=True)
        except sa_exc.SQLAlchemyError as e:
            raise to_store_error(e) from e

        logger.info("Created table %s with %d data columns", table_name, len(columns) - 2)
        self._tables.pop(table_name, None)

    def insert_rows(self, table_name: str, rows: List[Dict[str, Any]]) -> int:
        """Insert rows in one transaction; returns the number of rows sent"""
        if not rows:
            return 0
        try:
            table = self._reflect(table_name)
            unknown = sorted(set().union(*rows) - set(table.c.keys()))
            if unknown:
                raise StoreError(
                    StoreErrorKind.UNDEFINED_COLUMN,
                    f"column \"{unknown[0]}\" of relation \"{table_name}\" does not exist",
                )
            with self.engine.begin() as conn:
                conn.execute(table.insert(), rows)
        except sa_exc.SQLAlchemyError as e:
            raise to_store_error(e) from e
        except (OverflowError, ValueError, TypeError) as e:
            # Raised by the driver while binding values, e.g. an int too large for SQLite
            raise StoreError(StoreErrorKind.INVALID_DATA, str(e).strip()) from e
        return len(rows)

    def _reflect(self, table_name: str) -> Table:
        table = self._tables.get(table_name)
        if table is None:
            table = Table(table_name, MetaData(), autoload_with=self.engine)
            self._tables[table_name] = table
        return table
