from __future__ import annotations

import asyncio
import logging
import re
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Optional,
    TypeVar,
)

from .interfaces import (
    IsolationLevel,
    TransactionControlError,
    TransactionInterruptedError,
    TransactionSetupError,
)
from .policy import RetryPolicy
from .savepoint import Savepoint

if TYPE_CHECKING:
    from txretry.base.interface import BaseConnection

logger = logging.getLogger(__name__)

R = TypeVar("R")
UnitOfWork = Callable[["BaseConnection"], Awaitable[R]]

SAVEPOINT_NAME = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


class TransactionCoordinator:
    """Runs units of work in a transaction, retrying them on conflicts.

    A coordinator keeps no state between invocations, so one instance can
    serve any number of concurrent callers as long as each one brings its
    own connection.

    Example:

    ```python
    coordinator = TransactionCoordinator()

    async def transfer(conn):
        await conn.execute("UPDATE accounts SET ... WHERE id = 1")
        await conn.execute("UPDATE accounts SET ... WHERE id = 2")

    await coordinator.run_in_transaction(PostgresConnection(raw), transfer)
    ```
    """

    def __init__(
        self,
        policy: Optional[RetryPolicy] = None,
        sleep: Optional[Callable[[float], Awaitable[Any]]] = None,
    ):
        """
        Initialize transaction coordinator.

        Args:
            policy: Attempt budget, backoff and retryable state codes
            sleep: Coroutine function used to wait between attempts.
                Defaults to `asyncio.sleep`
        """
        self.policy = policy or RetryPolicy()
        self._sleep = sleep or asyncio.sleep

    async def run_in_transaction(
        self,
        connection: BaseConnection,
        work: UnitOfWork[R],
        isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
    ) -> R:
        """Run a unit of work in a transaction, retrying it on conflicts

        The unit of work is awaited once per attempt, so it must be safe to
        run again. Database effects of a failed attempt are rolled back,
        anything it did in-process is not.

        Args:
            connection (BaseConnection): A connection not already in a
                transaction
            work (UnitOfWork): Coroutine function taking the connection
            isolation_level (IsolationLevel, optional): Informational only,
                the connection's default isolation is used.
                Defaults to `IsolationLevel.READ_COMMITTED`.

        Raises:
            TransactionSetupError: If the connection cannot report or
                leave auto-commit mode
            TransactionInterruptedError: If cancelled while waiting to retry

        Returns:
            R: Whatever the unit of work returned on its committed attempt
        """
        try:
            original_autocommit = connection.autocommit
        except Exception as e:
            raise TransactionSetupError(
                f"Failed to read auto-commit mode: {e}"
            ) from e

        attempt = 0
        logger.debug(
            "Running transaction on %s (isolation %s)",
            connection,
            isolation_level.value,
        )

        # Every exit, including cancellation mid-rollback, restores the mode
        try:
            while True:
                attempt += 1
                await self._begin_attempt(connection)
                logger.debug("Transaction attempt %d started", attempt)

                try:
                    result = await work(connection)
                    await connection.commit()
                except asyncio.CancelledError:
                    logger.debug("Transaction attempt %d cancelled", attempt)
                    await self._rollback_quietly(connection, attempt)
                    raise
                except Exception as e:
                    await self._rollback_quietly(connection, attempt)
                    logger.debug(
                        "Exception caught on attempt %d: %s: %s",
                        attempt,
                        type(e).__name__,
                        e,
                    )
                    decision = self.policy.decide(e, attempt)

                    if not decision.retry:
                        if decision.conflict:
                            logger.warning(
                                "Conflict persisted after %d attempts, "
                                "giving up",
                                attempt,
                            )
                        else:
                            logger.debug(
                                "Not retrying non-conflict error on "
                                "attempt %d",
                                attempt,
                            )
                        raise

                    logger.info(
                        "Conflict detected on attempt %d, retrying in %.3fs",
                        attempt,
                        decision.delay,
                    )
                    try:
                        await self._sleep(decision.delay)
                    except asyncio.CancelledError as cancelled:
                        raise TransactionInterruptedError(
                            f"Interrupted during conflict retry after "
                            f"attempt {attempt}"
                        ) from cancelled
                    continue

                if attempt > 1:
                    logger.info(
                        "Transaction committed after %d attempts", attempt
                    )
                else:
                    logger.debug("Transaction committed")
                return result
        finally:
            await self._restore_autocommit(connection, original_autocommit)

    async def _begin_attempt(self, connection: BaseConnection) -> None:
        try:
            await connection.set_autocommit(False)
        except Exception as e:
            raise TransactionSetupError(
                f"Failed to begin transaction: {e}"
            ) from e

    async def _rollback_quietly(
        self, connection: BaseConnection, attempt: int
    ) -> None:
        try:
            await connection.rollback()
        except Exception as e:
            logger.error("Rollback failed on attempt %d: %s", attempt, e)

    async def _restore_autocommit(
        self, connection: BaseConnection, value: bool
    ) -> None:
        try:
            await connection.set_autocommit(value)
        except Exception as e:
            logger.warning("Failed to restore autocommit: %s", e)

    async def begin(self, connection: BaseConnection) -> None:
        """Leave auto-commit mode"""
        try:
            await connection.set_autocommit(False)
        except Exception as e:
            raise TransactionControlError(
                f"Failed to begin transaction: {e}"
            ) from e

    async def commit(self, connection: BaseConnection) -> None:
        try:
            await connection.commit()
        except Exception as e:
            raise TransactionControlError(
                f"Failed to commit transaction: {e}"
            ) from e

    async def rollback(self, connection: BaseConnection) -> None:
        try:
            await connection.rollback()
        except Exception as e:
            raise TransactionControlError(
                f"Failed to rollback transaction: {e}"
            ) from e

    def is_in_transaction(self, connection: BaseConnection) -> bool:
        try:
            return not connection.autocommit
        except Exception as e:
            raise TransactionControlError(
                f"Failed to check transaction status: {e}"
            ) from e

    async def create_savepoint(
        self, connection: BaseConnection, name: str
    ) -> Savepoint:
        """Create a savepoint for nested rollback points"""
        await self._savepoint_command(
            connection, name, f"SAVEPOINT {name}", "create"
        )
        return Savepoint(name, self, connection)

    async def rollback_to_savepoint(
        self, connection: BaseConnection, name: str
    ) -> None:
        await self._savepoint_command(
            connection, name, f"ROLLBACK TO SAVEPOINT {name}", "rollback to"
        )

    async def release_savepoint(
        self, connection: BaseConnection, name: str
    ) -> None:
        await self._savepoint_command(
            connection, name, f"RELEASE SAVEPOINT {name}", "release"
        )

    async def _savepoint_command(
        self, connection: BaseConnection, name: str, sql: str, action: str
    ) -> None:
        if not isinstance(name, str) or not SAVEPOINT_NAME.fullmatch(name):
            raise TransactionControlError(
                f"Invalid savepoint name: {name!r}"
            )

        logger.debug("Executing %s", sql)
        try:
            await connection.execute(sql)
        except Exception as e:
            logger.error("Failed to %s savepoint %s: %s", action, name, e)
            raise TransactionControlError(
                f"Failed to {action} savepoint {name}: {e}"
            ) from e
