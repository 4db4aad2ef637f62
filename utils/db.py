"""SQLite record store used by the logbook managers.

Every public method opens a fresh connection, runs one statement, commits and
closes the connection again, whatever the outcome.  Database errors never
leave this module: they are logged and turned into ``False``, ``[]``,
``None`` or ``-1`` depending on the call.  Only programming mistakes (bad
table definitions, invalid identifiers) raise :class:`TableDefinitionError`.
"""
from __future__ import annotations

import logging
import re
import sqlite3
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, TypeVar, Union

logger = logging.getLogger(__name__)

SqlValue = Union[str, int, float, bytes, None]
Params = Union[Sequence[SqlValue], Mapping[str, SqlValue], None]

T = TypeVar("T")

_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class TableDefinitionError(ValueError):
    """Raised for malformed table definitions or identifiers."""


class StoreUnavailableError(RuntimeError):
    """Raised internally when no usable connection could be opened."""


class ColumnTypeError(TypeError):
    """Raised by :class:`Row` accessors when a cell has an unexpected type."""


def _check_identifier(name: str) -> str:
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise TableDefinitionError(f"Invalid SQL identifier: {name!r}")
    return name


# ---------------------------------------------------------------------------
# Row values
# ---------------------------------------------------------------------------


class Row(Mapping):
    """Read-only column -> value mapping with checked accessors."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, SqlValue]) -> None:
        self._values: Dict[str, SqlValue] = dict(values)

    def __getitem__(self, key: str) -> SqlValue:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Row({self._values!r})"

    def _typed(self, column: str, kinds: tuple, label: str) -> Any:
        value = self._values.get(column)
        if value is None:
            return None
        # bool is an int subclass but never comes back from sqlite3
        if not isinstance(value, kinds):
            raise ColumnTypeError(
                f"Column {column!r} holds {type(value).__name__} {value!r}, expected {label}"
            )
        return value

    def text(self, column: str) -> Optional[str]:
        return self._typed(column, (str,), "text")

    def integer(self, column: str) -> Optional[int]:
        return self._typed(column, (int,), "integer")

    def real(self, column: str) -> Optional[float]:
        value = self._typed(column, (int, float), "real")
        return None if value is None else float(value)

    def blob(self, column: str) -> Optional[bytes]:
        return self._typed(column, (bytes,), "blob")


@dataclass(frozen=True)
class TableDump:
    """Full contents of a table, as used by the CSV exporter."""

    columns: List[str]
    primary_key: Optional[str]
    rows: List[tuple]


# ---------------------------------------------------------------------------
# Store
# ---------------------------------------------------------------------------


class RecordStore:
    """Generic CRUD helper over the tables of one SQLite database file."""

    def __init__(
        self,
        db_path: Union[str, Path],
        *,
        connect_attempts: int = 3,
        timeout: float = 5.0,
    ) -> None:
        if connect_attempts < 1:
            raise ValueError("connect_attempts must be at least 1")
        self.db_path = Path(db_path)
        self._connect_attempts = connect_attempts
        self._timeout = timeout

    # ------------------------------------------------------------------
    # Connection helpers
    # ------------------------------------------------------------------
    def _open(self) -> sqlite3.Connection:
        last_error: Optional[BaseException] = None
        for attempt in range(1, self._connect_attempts + 1):
            try:
                self.db_path.parent.mkdir(parents=True, exist_ok=True)
                conn = sqlite3.connect(str(self.db_path), timeout=self._timeout)
            except (OSError, sqlite3.Error) as exc:
                last_error = exc
                logger.warning(
                    "Opening %s failed (attempt %d/%d): %s",
                    self.db_path, attempt, self._connect_attempts, exc,
                )
                continue
            try:
                conn.execute("SELECT 1").fetchone()
            except sqlite3.Error as exc:
                last_error = exc
                logger.warning(
                    "Connection to %s unusable (attempt %d/%d): %s",
                    self.db_path, attempt, self._connect_attempts, exc,
                )
                conn.close()
                continue
            return conn
        raise StoreUnavailableError(
            f"Could not open {self.db_path} after {self._connect_attempts} attempt(s)"
        ) from last_error

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = self._open()
        try:
            yield conn
            conn.commit()
        finally:
            try:
                conn.close()
            except sqlite3.Error:
                logger.exception("Error closing connection to %s", self.db_path)

    def _while_connected(self, work: Callable[[sqlite3.Connection], T], default: T, action: str) -> T:
        try:
            with self._connection() as conn:
                return work(conn)
        except (sqlite3.Error, OverflowError, StoreUnavailableError):
            logger.exception("SQLite %s failed on %s", action, self.db_path)
            return default

    def test_connection(self) -> bool:
        try:
            with self._connection():
                return True
        except (sqlite3.Error, StoreUnavailableError):
            logger.exception("Unable to connect to %s", self.db_path)
            return False

    # ------------------------------------------------------------------
    # Schema
    # ------------------------------------------------------------------
    def create_table(
        self,
        name: str,
        columns: Sequence[str],
        types: Sequence[str],
        extra: Optional[str] = None,
    ) -> bool:
        """Create ``name`` if it does not exist yet.

        ``extra`` is appended verbatim after the column list, e.g.
        ``"PRIMARY KEY (registration)"``.
        """

        _check_identifier(name)
        if len(columns) != len(types):
            raise TableDefinitionError(
                f"Table {name!r}: {len(columns)} column(s) but {len(types)} type(s)"
            )
        if not columns:
            raise TableDefinitionError(f"Table {name!r} needs at least one column")
        parts = [f"{_check_identifier(col)} {decl}" for col, decl in zip(columns, types)]
        if extra and extra.strip():
            parts.append(extra.strip())
        sql = f"CREATE TABLE IF NOT EXISTS {name} ({', '.join(parts)})"
        logger.debug("create_table: %s", sql)

        def work(conn: sqlite3.Connection) -> bool:
            conn.execute(sql)
            return True

        return self._while_connected(work, False, f"create table {name}")

    def drop_table(self, name: str) -> bool:
        sql = f"DROP TABLE IF EXISTS {_check_identifier(name)}"

        def work(conn: sqlite3.Connection) -> bool:
            conn.execute(sql)
            return True

        return self._while_connected(work, False, f"drop table {name}")

    def truncate_table(self, name: str) -> bool:
        sql = f"DELETE FROM {_check_identifier(name)}"

        def work(conn: sqlite3.Connection) -> bool:
            conn.execute(sql)
            return True

        return self._while_connected(work, False, f"truncate table {name}")

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def upsert_row(
        self,
        table: str,
        key_column: str,
        key_value: SqlValue,
        values: Mapping[str, SqlValue],
    ) -> bool:
        """Insert a row or overwrite the columns in ``values`` for an existing key.

        Issues a single ``INSERT ... ON CONFLICT ... DO UPDATE`` statement with
        every value bound as a parameter.
        """

        _check_identifier(table)
        _check_identifier(key_column)
        update_cols = [_check_identifier(c) for c in values if c != key_column]
        cols = [key_column] + update_cols
        params: List[SqlValue] = [key_value] + [values[c] for c in update_cols]
        placeholders = ", ".join("?" for _ in cols)
        if update_cols:
            assignments = ", ".join(f"{c}=excluded.{c}" for c in update_cols)
            conflict = f"DO UPDATE SET {assignments}"
        else:
            conflict = "DO NOTHING"
        sql = (
            f"INSERT INTO {table} ({', '.join(cols)}) VALUES ({placeholders}) "
            f"ON CONFLICT({key_column}) {conflict}"
        )
        logger.debug("upsert_row: %s", sql)

        def work(conn: sqlite3.Connection) -> bool:
            conn.execute(sql, params)
            return True

        return self._while_connected(work, False, f"upsert into {table}")

    def delete_row(self, table: str, key_column: str, key_value: SqlValue) -> bool:
        """Delete rows matching the key; zero matches still counts as success."""

        sql = f"DELETE FROM {_check_identifier(table)} WHERE {_check_identifier(key_column)} = ?"

        def work(conn: sqlite3.Connection) -> bool:
            conn.execute(sql, (key_value,))
            return True

        return self._while_connected(work, False, f"delete from {table}")

    def execute(self, statement: str, params: Params = None) -> bool:
        """Run an arbitrary parameterised statement."""

        def work(conn: sqlite3.Connection) -> bool:
            if params is None:
                conn.execute(statement)
            else:
                conn.execute(statement, params)
            return True

        return self._while_connected(work, False, "execute")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get_value(
        self,
        table: str,
        key_column: str,
        key_value: SqlValue,
        value_column: str,
    ) -> SqlValue:
        sql = (
            f"SELECT {_check_identifier(value_column)} FROM {_check_identifier(table)} "
            f"WHERE {_check_identifier(key_column)} = ? LIMIT 1"
        )

        def work(conn: sqlite3.Connection) -> SqlValue:
            found = conn.execute(sql, (key_value,)).fetchone()
            return None if found is None else found[0]

        return self._while_connected(work, None, f"select from {table}")

    def get_rows(
        self,
        table: str,
        key_column: str,
        key_value: SqlValue,
        columns: Sequence[str],
        extra: Optional[str] = None,
    ) -> List[Row]:
        sql = (
            f"SELECT {self._column_list(columns)} FROM {_check_identifier(table)} "
            f"WHERE {_check_identifier(key_column)} = ?"
        )
        if extra and extra.strip():
            sql += f" {extra.strip()}"
        return self._select_rows(sql, (key_value,), table)

    def get_all_rows(
        self,
        table: str,
        columns: Sequence[str],
        extra: Optional[str] = None,
    ) -> List[Row]:
        sql = f"SELECT {self._column_list(columns)} FROM {_check_identifier(table)}"
        if extra and extra.strip():
            sql += f" {extra.strip()}"
        return self._select_rows(sql, (), table)

    def get_column(self, table: str, column: str, extra: Optional[str] = None) -> List[SqlValue]:
        """Return every value of ``column``.

        ``extra`` (e.g. ``"GROUP BY dep ORDER BY COUNT(dep) DESC"``) is appended
        verbatim and is not parameterised.
        """

        sql = f"SELECT {_check_identifier(column)} FROM {_check_identifier(table)}"
        if extra and extra.strip():
            sql += f" {extra.strip()}"

        def work(conn: sqlite3.Connection) -> List[SqlValue]:
            return [r[0] for r in conn.execute(sql).fetchall()]

        return self._while_connected(work, [], f"select column from {table}")

    def get_row_count(self, table: str) -> int:
        sql = f"SELECT COUNT(*) FROM {_check_identifier(table)}"

        def work(conn: sqlite3.Connection) -> int:
            return int(conn.execute(sql).fetchone()[0])

        return self._while_connected(work, -1, f"count rows of {table}")

    def dump_table(self, table: str) -> Optional[TableDump]:
        _check_identifier(table)

        def work(conn: sqlite3.Connection) -> TableDump:
            info = conn.execute(f"PRAGMA table_info({table})").fetchall()
            pk_cols = sorted((r[5], r[1]) for r in info if r[5])
            cur = conn.execute(f"SELECT * FROM {table}")
            columns = [d[0] for d in cur.description]
            rows = cur.fetchall()
            if pk_cols:
                primary_key: Optional[str] = pk_cols[0][1]
            else:
                primary_key = columns[0] if columns else None
            return TableDump(columns=columns, primary_key=primary_key, rows=rows)

        return self._while_connected(work, None, f"dump table {table}")

    # ------------------------------------------------------------------
    def _column_list(self, columns: Sequence[str]) -> str:
        if not columns:
            return "*"
        return ", ".join(_check_identifier(c) for c in columns)

    def _select_rows(self, sql: str, params: Sequence[SqlValue], table: str) -> List[Row]:
        logger.debug("select: %s", sql)

        def work(conn: sqlite3.Connection) -> List[Row]:
            cur = conn.execute(sql, params)
            names = [d[0] for d in cur.description]
            return [Row(dict(zip(names, values))) for values in cur.fetchall()]

        return self._while_connected(work, [], f"select from {table}")


__all__ = [
    "RecordStore",
    "Row",
    "TableDump",
    "SqlValue",
    "TableDefinitionError",
    "StoreUnavailableError",
    "ColumnTypeError",
]
