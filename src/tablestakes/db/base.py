"""Abstract database connector interface."""

import logging
from abc import ABC, abstractmethod
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, AsyncIterator

if TYPE_CHECKING:
    from tablestakes.nlq.schema_context import SchemaCatalog

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Rows returned by a single statement.

    Statements that return no rows degenerate to
    ``QueryResult(columns=[], rows=[{"affectedRows": n}])``.
    """

    columns: list[str] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def affected(cls, count: int | None) -> "QueryResult":
        return cls(columns=[], rows=[{"affectedRows": count or 0}])


class DatabaseConnector(ABC):
    """Abstract base class for database connectors.

    One instance serves exactly one request. ``get_schema`` and
    ``execute_query`` connect on demand when no session is open.
    """

    kind: str = ""

    @abstractmethod
    async def connect(self) -> None:
        """Acquire a database session.

        Raises:
            DatabaseConnectionError: If the session cannot be acquired
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Release the session. Safe to call more than once."""
        pass

    @abstractmethod
    def is_connected(self) -> bool:
        """Return True while a session is held."""
        pass

    @abstractmethod
    async def get_schema(self) -> "SchemaCatalog":
        """Introspect tables and columns.

        Raises:
            SchemaError: If introspection fails
        """
        pass

    @abstractmethod
    async def execute_query(self, sql: str) -> QueryResult:
        """Execute one SQL statement.

        Args:
            sql: Statement text, executed as-is

        Raises:
            QueryExecutionError: If execution fails
        """
        pass

    @asynccontextmanager
    async def session(self) -> AsyncIterator["DatabaseConnector"]:
        """Connect on entry and release on every exit path.

        Release also runs when the surrounding task is cancelled. A failing
        release is logged and never replaces the original outcome.
        """
        try:
            await self.connect()
            yield self
        finally:
            if self.is_connected():
                try:
                    await self.disconnect()
                except Exception as e:
                    logger.warning(
                        "Failed to release database session",
                        extra={"database_type": self.kind, "error": str(e)},
                    )
