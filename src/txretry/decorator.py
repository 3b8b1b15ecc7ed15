from __future__ import annotations

from functools import wraps
from typing import TYPE_CHECKING, Optional

from txretry.transaction import (
    IsolationLevel,
    TransactionCoordinator,
    UnitOfWork,
)

if TYPE_CHECKING:
    from txretry.base.interface import BaseConnection

_default_coordinator = TransactionCoordinator()


def get_default_coordinator() -> TransactionCoordinator:
    return _default_coordinator


async def run_in_transaction(
    connection: BaseConnection,
    work: UnitOfWork,
    isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
):
    """Run a unit of work through the default coordinator

    See [TransactionCoordinator.run_in_transaction](./txretry.transaction.coordinator.html#run_in_transaction)
    """  # noqa
    return await _default_coordinator.run_in_transaction(
        connection, work, isolation_level
    )


def transactional(
    coordinator: Optional[TransactionCoordinator] = None,
    isolation_level: IsolationLevel = IsolationLevel.READ_COMMITTED,
):
    """Convenience decorator to run a coroutine function in a retrying
    transaction. The first positional argument must be the connection.

    Example:

    ```python
    from txretry import transactional

    @transactional()
    async def update_rows(conn, first: int, second: int):
        await conn.execute(
            "UPDATE test_data SET value = value + 1 WHERE id = %s", (first,)
        )
        await conn.execute(
            "UPDATE test_data SET value = value + 1 WHERE id = %s", (second,)
        )

    await update_rows(PostgresConnection(raw), 1, 100)
    ```

    Args:
        coordinator (TransactionCoordinator, optional): Coordinator to run
            through. Defaults to the module level coordinator.
        isolation_level (IsolationLevel, optional): Passed on to the
            coordinator. Defaults to `IsolationLevel.READ_COMMITTED`.
    """

    def decorator(f):
        @wraps(f)
        async def decorated_function(
            connection: BaseConnection, *args, **kwargs
        ):
            runner = coordinator or _default_coordinator
            return await runner.run_in_transaction(
                connection,
                lambda conn: f(conn, *args, **kwargs),
                isolation_level,
            )

        return decorated_function

    return decorator
