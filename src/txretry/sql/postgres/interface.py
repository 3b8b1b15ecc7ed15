from __future__ import annotations

from typing import Any, Optional, Sequence

from txretry.base.interface import BaseConnection
from txretry.exception import TxRetryError

try:
    from psycopg import AsyncConnection

    POSTGRES_ENABLED = True
except ModuleNotFoundError:
    POSTGRES_ENABLED = False
    AsyncConnection = type("Connection", (), {})  # type: ignore


class PostgresConnection(BaseConnection):
    """Adapter over a psycopg ``AsyncConnection``

    Example:

    ```python
    async with await AsyncConnection.connect(dsn) as raw:
        conn = PostgresConnection(raw)
        await coordinator.run_in_transaction(conn, work)
    ```
    """

    def _check_driver(self) -> None:
        if not POSTGRES_ENABLED:
            raise TxRetryError(
                "Postgres driver not found. Try reinstalling txretry: "
                "pip install txretry[postgres]"
            )

    @property
    def autocommit(self) -> bool:
        return self._raw.autocommit

    async def set_autocommit(self, value: bool) -> None:
        await self._raw.set_autocommit(value)

    async def commit(self) -> None:
        await self._raw.commit()

    async def rollback(self) -> None:
        await self._raw.rollback()

    async def execute(
        self,
        query: str,
        params: Optional[Sequence[Any]] = None,
    ) -> Any:
        return await self._raw.execute(query, params)
