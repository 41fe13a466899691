import sqlite3
from typing import Dict, Iterable, List, Optional, Set, Union

from nestedset.core.config import TreeConfig
from nestedset.core.exceptions import DbException, NotFoundError
from nestedset.core.types import Clause, UpdatePlan, eq
from nestedset.concurrency.transactions import Transaction
from ..interfaces import Store, Row
from .sql_builder import (
    clause_columns, quote, render_clause, render_select, render_update,
    render_insert,
)


class SqliteStore(Store):
    """
    Store backed by one SQLite table.

    Suitable for:
    - Demos and tests against a real SQL engine
    - Single-process applications keeping a forest in a file

    The connection runs in autocommit mode and transactions are driven
    explicitly with ``BEGIN IMMEDIATE``/``COMMIT``/``ROLLBACK``, so every
    tree mutation is one SQLite transaction holding the write lock.
    """

    def __init__(self, connection: Union[sqlite3.Connection, str] = ":memory:",
                 table: str = "nodes", config: Optional[TreeConfig] = None,
                 timeout: float = 5.0):
        super().__init__()
        if isinstance(connection, str):
            try:
                connection = sqlite3.connect(
                    connection, timeout=timeout, check_same_thread=False)
            except sqlite3.Error as e:
                raise DbException(f"Failed to connect to SQLite: {e}") from e

        connection.isolation_level = None
        connection.row_factory = sqlite3.Row
        self._conn = connection
        self.table = table
        self.config = config or TreeConfig()
        self._columns: Optional[Set[str]] = None

    def create_table(self, extra_columns: Optional[Dict[str, str]] = None) -> None:
        """
        Create the node table if it does not exist.

        Args:
            extra_columns: Additional column name -> SQL type pairs
                (e.g. ``{"name": "TEXT"}``)
        """
        cfg = self.config
        columns = [f"{quote(self.ID_COLUMN)} INTEGER PRIMARY KEY AUTOINCREMENT"]
        columns += [f"{quote(c)} INTEGER NOT NULL DEFAULT 0" for c in cfg.columns]
        if cfg.scope:
            columns.append(f"{quote(cfg.scope)} INTEGER")
        for name, sql_type in (extra_columns or {}).items():
            columns.append(f"{quote(name)} {sql_type}")

        self._execute(
            f"CREATE TABLE IF NOT EXISTS {quote(self.table)} ({', '.join(columns)})")

        index_columns = [cfg.scope] if cfg.scope else []
        index_columns += [cfg.root_column, cfg.left_column, cfg.right_column]
        self._execute(
            f"CREATE INDEX IF NOT EXISTS {quote(self.table + '_bounds')} "
            f"ON {quote(self.table)} ({', '.join(quote(c) for c in index_columns)})")
        self._columns = None

    def get(self, node_id: int) -> Row:
        rows = self.select(eq(self.ID_COLUMN, node_id), limit=1)
        if not rows:
            raise NotFoundError(node_id)
        return rows[0]

    def insert(self, row: Row) -> Row:
        with self.transaction() as txn:
            sql, params = render_insert(self.table, row)
            cursor = self._execute(sql, params)
            txn.record_write(1)
            return self.get(cursor.lastrowid)

    def select(self, clause: Clause, order_by: Optional[str] = None,
               descending: bool = False, limit: Optional[int] = None) -> List[Row]:
        self._check_columns(clause_columns(clause) | ({order_by} if order_by else set()))
        sql, params = render_select(self.table, clause, order_by=order_by,
                                    descending=descending, limit=limit,
                                    id_column=self.ID_COLUMN)
        with self._write_lock:
            cursor = self._execute(sql, params)
            return [dict(row) for row in cursor.fetchall()]

    def count(self, clause: Clause) -> int:
        self._check_columns(clause_columns(clause))
        where, params = render_clause(clause)
        sql = f"SELECT COUNT(*) FROM {quote(self.table)} WHERE {where}"
        with self._write_lock:
            return self._execute(sql, params).fetchone()[0]

    def bulk_update(self, plan: UpdatePlan) -> int:
        if plan.is_empty():
            return 0

        self._check_columns(clause_columns(plan.target_clause()) | set(plan.columns()))
        with self.transaction() as txn:
            sql, params = render_update(self.table, plan)
            cursor = self._execute(sql, params)
            txn.record_write(cursor.rowcount)
            return cursor.rowcount

    def table_columns(self) -> Set[str]:
        """
        Column names of the node table, read once and cached.

        Raises:
            DbException: If a configured bookkeeping column is missing
        """
        if self._columns is None:
            rows = self._execute(f"PRAGMA table_info({quote(self.table)})").fetchall()
            columns = {row["name"] for row in rows}
            if not columns:
                # no table yet; let SQLite report it
                return columns

            required = list(self.config.columns)
            if self.config.scope:
                required.append(self.config.scope)
            missing = [c for c in required if c not in columns]
            if missing:
                raise DbException(
                    f"Table {self.table!r} lacks configured columns: {', '.join(missing)}")
            self._columns = columns
        return self._columns

    def _check_columns(self, names: Iterable[str]) -> None:
        with self._write_lock:
            columns = self.table_columns()
        if not columns:
            return
        unknown = sorted(set(names) - columns)
        if unknown:
            raise DbException(
                f"Unknown column {', '.join(unknown)} in table {self.table!r}")

    def close(self) -> None:
        """Close the underlying connection."""
        self._conn.close()

    def _execute(self, sql: str, params=()) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except sqlite3.Error as e:
            raise DbException(f"SQLite error: {e} [{sql}]") from e

    def _begin(self, txn: Transaction) -> None:
        self._execute("BEGIN IMMEDIATE")

    def _commit(self, txn: Transaction) -> None:
        self._execute("COMMIT")

    def _rollback(self, txn: Transaction) -> None:
        if self._conn.in_transaction:
            self._execute("ROLLBACK")
