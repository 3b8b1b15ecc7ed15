"""
Savepoint handle for nested rollback points inside a unit of work.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .interfaces import TransactionError

if TYPE_CHECKING:
    from txretry.base.interface import BaseConnection

    from .coordinator import TransactionCoordinator

logger = logging.getLogger(__name__)


class Savepoint:
    """
    A savepoint created on a connection through a coordinator.

    Can be used as an async context manager: the savepoint is released when
    the block exits cleanly, and rolled back to when it raises.

    Example:

    ```python
    async def work(conn):
        await conn.execute("INSERT INTO audit ...")
        async with await coordinator.create_savepoint(conn, "optional"):
            await conn.execute("INSERT INTO maybe_duplicated ...")
    ```
    """

    def __init__(
        self,
        name: str,
        coordinator: TransactionCoordinator,
        connection: BaseConnection,
    ):
        self.name = name
        self.coordinator = coordinator
        self.connection = connection
        self._released = False

        logger.debug("Created savepoint %s on %s", self.name, connection)

    async def rollback(self) -> None:
        """Rollback to this savepoint"""
        if self._released:
            raise TransactionError(f"Savepoint {self.name} already released")

        await self.coordinator.rollback_to_savepoint(
            self.connection, self.name
        )
        logger.debug("Rolled back to savepoint %s", self.name)

    async def release(self) -> None:
        """Release this savepoint, keeping its changes in the transaction"""
        if self._released:
            raise TransactionError(f"Savepoint {self.name} already released")

        await self.coordinator.release_savepoint(self.connection, self.name)
        self._released = True

    @property
    def is_released(self) -> bool:
        return self._released

    async def __aenter__(self) -> Savepoint:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        if self._released:
            return False

        if exc_type is None:
            await self.release()
        else:
            await self.rollback()
        return False

    def __str__(self) -> str:
        status = "released" if self._released else "active"
        return f"<Savepoint {self.name} ({status})>"
