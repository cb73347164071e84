"""Snowflake connection settings and the connection interface repositories rely on."""

from dataclasses import dataclass
from typing import Optional, Protocol


class SnowflakeConnection(Protocol):
    """
    Protocol for Snowflake connections.

    Using a protocol means tests can provide a mock without
    importing the actual snowflake-connector-python.
    """

    def cursor(self): ...
    def commit(self) -> None: ...


@dataclass
class SnowflakeConfig:
    """Configuration for Snowflake connection."""
    account: str
    user: str
    password: Optional[str] = None
    private_key_path: Optional[str] = None
    database: str = "FITTRACK"
    schema: str = "TRAINING"
    warehouse: str = "COMPUTE_WH"
    role: Optional[str] = None
