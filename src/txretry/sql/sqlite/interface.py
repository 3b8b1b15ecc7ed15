from __future__ import annotations

from typing import Any, Optional, Sequence

from txretry.base.interface import BaseConnection
from txretry.exception import TxRetryError

try:
    import aiosqlite

    AIOSQLITE_ENABLED = True
except ModuleNotFoundError:
    AIOSQLITE_ENABLED = False


class SQLiteConnection(BaseConnection):
    """Adapter over an ``aiosqlite.Connection``

    The connection must be opened with ``isolation_level=None`` so that
    the sqlite3 module never opens transactions on its own. Explicit mode
    is then driven with ``BEGIN``, and a new transaction is begun after
    every commit or rollback until auto-commit is switched back on.

    Example:

    ```python
    async with aiosqlite.connect(path, isolation_level=None) as raw:
        conn = SQLiteConnection(raw)
        await coordinator.run_in_transaction(conn, work)
    ```
    """

    def __init__(self, raw: Any) -> None:
        super().__init__(raw)
        if raw.isolation_level is not None:
            raise TxRetryError(
                "SQLite connections must be opened with isolation_level=None"
            )
        self._autocommit = True

    def _check_driver(self) -> None:
        if not AIOSQLITE_ENABLED:
            raise TxRetryError(
                "SQLite driver not found. Try reinstalling txretry: "
                "pip install txretry[sqlite]"
            )

    @property
    def autocommit(self) -> bool:
        return self._autocommit

    async def set_autocommit(self, value: bool) -> None:
        if value:
            if self._raw.in_transaction:
                await self._raw.commit()
        elif not self._raw.in_transaction:
            await self._begin()
        self._autocommit = value

    async def commit(self) -> None:
        await self._raw.commit()
        if not self._autocommit:
            await self._begin()

    async def rollback(self) -> None:
        await self._raw.rollback()
        if not self._autocommit:
            await self._begin()

    async def execute(
        self,
        query: str,
        params: Optional[Sequence[Any]] = None,
    ) -> Any:
        return await self._raw.execute(query, params)

    async def _begin(self) -> None:
        cursor = await self._raw.execute("BEGIN")
        await cursor.close()
