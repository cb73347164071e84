"""
Snowflake database connection management.

Provides connection factory and context manager for Snowflake operations.
Includes mock mode with in-memory storage for local development.

Using the repository pattern means most code never touches this module
directly - it goes through the repositories, which handle the translation
between domain models and database rows.

The mock connection understands exactly the SQL the repositories write:
single-table INSERT / UPDATE / DELETE / SELECT with `col <op> %s`
conditions joined by AND, an optional ORDER BY on one column, and an
optional LIMIT. Anything else raises SnowflakeQueryError so a repository
that drifts outside that subset fails loudly in tests.
"""

import logging
import operator
import re
from contextlib import contextmanager
from typing import Any, Callable, Generator, Optional

from .config import SnowflakeConfig, SnowflakeConnection

logger = logging.getLogger(__name__)


TABLES = ("users", "exercises", "exercise_library", "workout_templates")


class SnowflakeConnectionError(Exception):
    """Raised when Snowflake connection fails."""
    pass


class SnowflakeQueryError(Exception):
    """Raised when the mock connection receives SQL it can't interpret."""
    pass


def _load_private_key(key_path: str):
    """
    Load private key from file for key-pair authentication.

    Snowflake requires the private key as DER bytes, not a file path.
    """
    from cryptography.hazmat.backends import default_backend
    from cryptography.hazmat.primitives import serialization

    with open(key_path, 'rb') as key_file:
        private_key = serialization.load_pem_private_key(
            key_file.read(),
            password=None,  # No password on the key
            backend=default_backend()
        )

    return private_key.private_bytes(
        encoding=serialization.Encoding.DER,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption()
    )


@contextmanager
def get_snowflake_connection(config: SnowflakeConfig) -> Generator[SnowflakeConnection, None, None]:
    """
    Provide Snowflake connection with automatic cleanup.

    Supports both password and key-pair authentication:
    - If private_key_path is set, uses key-pair auth
    - Otherwise, uses password auth

    Usage:
        with get_snowflake_connection(config) as conn:
            cursor = conn.cursor()
            # do work
            conn.commit()
    """
    try:
        import snowflake.connector
    except ImportError:
        raise ImportError(
            "snowflake-connector-python is required. "
            "Install with: pip install snowflake-connector-python"
        )

    conn = None
    try:
        connect_params = {
            'account': config.account,
            'user': config.user,
            'database': config.database,
            'schema': config.schema,
            'warehouse': config.warehouse,
            'role': config.role,
            'client_session_keep_alive': True,
        }

        if config.private_key_path:
            logger.info("Using key-pair authentication for Snowflake")
            connect_params['private_key'] = _load_private_key(config.private_key_path)
        elif config.password:
            logger.info("Using password authentication for Snowflake")
            connect_params['password'] = config.password
        else:
            raise SnowflakeConnectionError(
                "Either password or private_key_path must be provided"
            )

        conn = snowflake.connector.connect(**connect_params)

        logger.debug(
            "Established Snowflake connection",
            extra={
                "account": config.account,
                "database": config.database,
                "schema": config.schema,
            }
        )

    except snowflake.connector.errors.DatabaseError as e:
        logger.error(
            "Snowflake connection failed",
            extra={"error": str(e), "account": config.account}
        )
        raise SnowflakeConnectionError(f"Database connection failed: {e}")

    try:
        yield conn
    finally:
        try:
            conn.close()
            logger.debug("Closed Snowflake connection")
        except Exception as e:
            logger.warning(
                "Error closing Snowflake connection",
                extra={"error": str(e)}
            )


# ---------------------------------------------------------------------------
# Mock Connection for Local Development
# ---------------------------------------------------------------------------

_INSERT_RE = re.compile(r"^INSERT INTO (\w+) \(([^)]*)\) VALUES \(([^)]*)\)$", re.IGNORECASE)
_UPDATE_RE = re.compile(r"^UPDATE (\w+) SET (.+?) WHERE (.+)$", re.IGNORECASE)
_DELETE_RE = re.compile(r"^DELETE FROM (\w+)(?: WHERE (.+))?$", re.IGNORECASE)
_SELECT_RE = re.compile(
    r"^SELECT (DISTINCT )?(.+?) FROM (\w+)"
    r"(?: WHERE (.+?))?"
    r"(?: ORDER BY (\w+)(?: (ASC|DESC))?)?"
    r"(?: LIMIT %s)?$",
    re.IGNORECASE,
)
_CONDITION_RE = re.compile(r"^(\w+)\s*(>=|<=|=|<|>)\s*%s$")
_IS_NULL_RE = re.compile(r"^(\w+) IS NULL$", re.IGNORECASE)
_ASSIGNMENT_RE = re.compile(r"^(\w+)\s*=\s*%s$")

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    ">=": operator.ge,
    "<=": operator.le,
    "<": operator.lt,
    ">": operator.gt,
}

Row = dict[str, Any]
Condition = Callable[[Row], bool]


def _comparison(column: str, op: str, value: Any) -> Condition:
    compare = _OPERATORS[op]

    def check(row: Row) -> bool:
        current = row.get(column)
        # SQL semantics: any comparison with NULL is false
        if current is None or value is None:
            return False
        return compare(current, value)

    return check


def _is_null(column: str) -> Condition:
    return lambda row: row.get(column) is None


def _sort_key(column: str) -> Callable[[Row], tuple]:
    def key(row: Row) -> tuple:
        value = row.get(column)
        return (value is None, value if value is not None else 0)
    return key


class MockSnowflakeCursor:
    """
    Mock Snowflake cursor for testing.

    Implements just enough of the cursor interface to support the
    repositories without a real database. Tables are lists of row dicts.
    """

    def __init__(self, storage: dict[str, list[Row]]) -> None:
        self._storage = storage
        self._results: list[tuple] = []
        self._rowcount: int = 0

    def execute(self, query: str, params: Optional[tuple] = None) -> 'MockSnowflakeCursor':
        """Execute a query against mock storage."""
        sql = " ".join(query.split()).rstrip(";")
        params = list(params or ())

        logger.debug(
            "Mock cursor execute",
            extra={"query": sql[:100], "param_count": len(params)}
        )

        self._results = []
        self._rowcount = 0

        keyword = sql.split(" ", 1)[0].upper()
        if keyword == "SELECT":
            self._handle_select(sql, params)
        elif keyword == "INSERT":
            self._handle_insert(sql, params)
        elif keyword == "UPDATE":
            self._handle_update(sql, params)
        elif keyword == "DELETE":
            self._handle_delete(sql, params)
        else:
            raise SnowflakeQueryError(f"Unsupported statement: {sql[:60]}")

        return self

    def _table(self, name: str) -> list[Row]:
        table = self._storage.get(name.lower())
        if table is None:
            raise SnowflakeQueryError(f"Unknown table: {name}")
        return table

    def _parse_conditions(self, where: Optional[str], params: list) -> list[Condition]:
        """Turn `a = %s AND b >= %s` into row predicates, consuming params in order."""
        if not where:
            return []

        conditions = []
        remaining = list(params)
        for clause in re.split(r"\s+AND\s+", where, flags=re.IGNORECASE):
            clause = clause.strip()
            null_match = _IS_NULL_RE.match(clause)
            if null_match:
                conditions.append(_is_null(null_match.group(1).lower()))
                continue

            match = _CONDITION_RE.match(clause)
            if not match or not remaining:
                raise SnowflakeQueryError(f"Unsupported condition: {clause}")
            column, op = match.group(1).lower(), match.group(2)
            conditions.append(_comparison(column, op, remaining.pop(0)))

        return conditions

    def _matching(self, table: str, where: Optional[str], params: list) -> list[Row]:
        conditions = self._parse_conditions(where, params)
        return [row for row in self._table(table) if all(c(row) for c in conditions)]

    def _handle_select(self, sql: str, params: list) -> None:
        if sql.upper() == "SELECT 1":
            self._results = [(1,)]
            return

        match = _SELECT_RE.match(sql)
        if not match:
            raise SnowflakeQueryError(f"Unsupported SELECT: {sql[:60]}")

        distinct, columns, table, where, order_column, direction = match.groups()
        where_count = where.count("%s") if where else 0
        rows = self._matching(table, where, params[:where_count])

        if order_column:
            rows = sorted(
                rows,
                key=_sort_key(order_column.lower()),
                reverse=(direction or "").upper() == "DESC",
            )

        if columns.strip().upper() == "COUNT(*)":
            self._results = [(len(rows),)]
            return

        names = [c.strip().lower() for c in columns.split(",")]
        results = [tuple(row.get(name) for name in names) for row in rows]

        if distinct:
            seen = set()
            unique = []
            for result in results:
                if result not in seen:
                    seen.add(result)
                    unique.append(result)
            results = unique

        if sql.upper().endswith("LIMIT %S"):
            results = results[:params[where_count]]

        self._results = results

    def _handle_insert(self, sql: str, params: list) -> None:
        match = _INSERT_RE.match(sql)
        if not match:
            raise SnowflakeQueryError(f"Unsupported INSERT: {sql[:60]}")

        table, columns, _ = match.groups()
        names = [c.strip().lower() for c in columns.split(",")]
        if len(names) != len(params):
            raise SnowflakeQueryError(
                f"INSERT into {table} has {len(names)} columns but {len(params)} params"
            )

        self._table(table).append(dict(zip(names, params)))
        self._rowcount = 1

    def _handle_update(self, sql: str, params: list) -> None:
        match = _UPDATE_RE.match(sql)
        if not match:
            raise SnowflakeQueryError(f"Unsupported UPDATE: {sql[:60]}")

        table, assignments, where = match.groups()
        columns = []
        for assignment in assignments.split(","):
            assignment_match = _ASSIGNMENT_RE.match(assignment.strip())
            if not assignment_match:
                raise SnowflakeQueryError(f"Unsupported assignment: {assignment}")
            columns.append(assignment_match.group(1).lower())

        values = params[:len(columns)]
        rows = self._matching(table, where, params[len(columns):])
        for row in rows:
            row.update(zip(columns, values))
        self._rowcount = len(rows)

    def _handle_delete(self, sql: str, params: list) -> None:
        match = _DELETE_RE.match(sql)
        if not match:
            raise SnowflakeQueryError(f"Unsupported DELETE: {sql[:60]}")

        table, where = match.groups()
        doomed = self._matching(table, where, params)
        rows = self._table(table)
        rows[:] = [row for row in rows if not any(row is d for d in doomed)]
        self._rowcount = len(doomed)

    def fetchone(self):
        """Fetch one row from results."""
        if not self._results:
            return None
        return self._results[0]

    def fetchall(self) -> list:
        """Fetch all rows from results."""
        return self._results

    def close(self) -> None:
        """Close cursor (no-op for mock)."""
        pass

    @property
    def rowcount(self) -> int:
        """Return number of rows affected."""
        return self._rowcount


class MockSnowflakeConnection:
    """
    Mock Snowflake connection for local development.

    Stores data in memory, one list of row dicts per table.
    This enables testing the full API without a real database.

    Not suitable for production, but perfect for:
    - Local development
    - Unit tests
    - CI/CD environments
    """

    def __init__(self) -> None:
        self._storage: dict[str, list[Row]] = {table: [] for table in TABLES}

        logger.info("Initialized mock Snowflake connection (in-memory)")

    def cursor(self) -> MockSnowflakeCursor:
        """Create a mock cursor."""
        return MockSnowflakeCursor(self._storage)

    def commit(self) -> None:
        """Commit transaction (no-op for mock, always auto-commits)."""
        logger.debug("Mock connection commit")

    def rollback(self) -> None:
        """Rollback transaction (no-op for mock)."""
        logger.debug("Mock connection rollback")

    def close(self) -> None:
        """Close connection (no-op for mock)."""
        logger.debug("Mock connection close")

    # Helper methods for testing
    def _rows(self, table: str) -> list[Row]:
        """Raw rows of a table (for test assertions)."""
        return self._storage[table]

    def _clear(self) -> None:
        """Clear all mock storage (for test cleanup)."""
        for table in self._storage.values():
            table.clear()


@contextmanager
def get_mock_snowflake_connection() -> Generator[MockSnowflakeConnection, None, None]:
    """Provide a fresh in-memory connection."""
    conn = MockSnowflakeConnection()
    try:
        yield conn
    finally:
        conn.close()


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

@contextmanager
def create_snowflake_connection(
    config: Optional[SnowflakeConfig] = None,
    mock_mode: bool = False,
) -> Generator[SnowflakeConnection, None, None]:
    """
    Create Snowflake connection based on configuration.

    Args:
        config: Snowflake configuration (required if not mock_mode)
        mock_mode: If True, return mock connection for testing

    Yields:
        SnowflakeConnection implementation (real or mock)
    """
    if mock_mode:
        with get_mock_snowflake_connection() as conn:
            yield conn
    else:
        if config is None:
            raise ValueError("config is required when not in mock mode")

        with get_snowflake_connection(config) as conn:
            yield conn
