"""Async storage gateway over the SQLite database.

`StorageGateway` is the only component that talks to `aiosqlite`. Every
statement is executed on a short-lived connection obtained from
`utils.database_init.AsyncDatabaseInitializer`, committed, and reported
back as a `QueryResult`. Driver errors of any kind are re-raised as
`StoreFault` so callers never depend on sqlite exception types.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, List, Sequence, Tuple

from utils.database_init import AsyncDatabaseInitializer
from utils.errors import StoreFault

logger = logging.getLogger(__name__)


@dataclass
class QueryResult:
    """Outcome of a single statement.

    Attributes:
        rows: Fetched rows (empty for INSERT/UPDATE/DELETE).
        affected_rows: Rows changed by a mutation, -1 for plain SELECTs.
        last_row_id: Primary key of the last inserted row, if any.
    """

    rows: List[Tuple[Any, ...]] = field(default_factory=list)
    affected_rows: int = 0
    last_row_id: int | None = None


class StorageGateway:
    """Execute parameterized statements against the backing store.

    One attempt per call, no retries.
    """

    def __init__(self, db_initializer: AsyncDatabaseInitializer) -> None:
        self._db = db_initializer

    async def execute(self, query: str, params: Sequence[Any] = ()) -> QueryResult:
        """Run `query` with `params` and commit.

        Args:
            query: SQL statement using `?` placeholders.
            params: Positional parameters bound to the placeholders.

        Returns:
            QueryResult with fetched rows and mutation counters.

        Raises:
            StoreFault: On any failure from the database layer.
        """
        try:
            async with self._db.connection() as conn:
                async with conn.execute(query, tuple(params)) as cur:
                    rows = await cur.fetchall()
                    result = QueryResult(
                        rows=[tuple(r) for r in rows],
                        affected_rows=cur.rowcount,
                        last_row_id=cur.lastrowid,
                    )
                await conn.commit()
                return result
        except Exception as exc:  # pylint: disable=broad-exception-caught
            logger.error("Store fault while executing %r: %s", query, exc)
            raise StoreFault(statement=query) from exc
