from txretry import IsolationLevel, run_in_transaction, transactional
from txretry.decorator import get_default_coordinator

from .fakes import FakeConnection, deadlock


async def test_transactional_passes_arguments(coordinator, connection, sleep):
    attempts = []

    @transactional(coordinator)
    async def update_rows(conn, first: int, second: int, *, step=1):
        """Update two rows"""
        attempts.append((conn, first, second, step))
        if len(attempts) == 1:
            raise deadlock()
        return first + second

    result = await update_rows(connection, 1, 100, step=2)

    assert result == 101
    assert attempts == [(connection, 1, 100, 2)] * 2
    assert sleep.delays == [0.05]
    assert update_rows.__name__ == "update_rows"
    assert update_rows.__doc__ == "Update two rows"


async def test_transactional_isolation_level_is_passed_on(
    coordinator, connection
):
    seen = []
    original = coordinator.run_in_transaction

    async def spy(conn, work, isolation_level):
        seen.append(isolation_level)
        return await original(conn, work, isolation_level)

    coordinator.run_in_transaction = spy

    @transactional(coordinator, IsolationLevel.SERIALIZABLE)
    async def noop(conn):
        return "ok"

    assert await noop(connection) == "ok"
    assert seen == [IsolationLevel.SERIALIZABLE]


async def test_transactional_uses_default_coordinator():
    connection = FakeConnection()

    @transactional()
    async def read(conn):
        return "value"

    assert await read(connection) == "value"
    assert connection.calls[0] == ("set_autocommit", False)
    assert get_default_coordinator().policy.max_attempts == 5


async def test_module_level_run_in_transaction():
    connection = FakeConnection()

    async def work(conn):
        return conn

    assert await run_in_transaction(connection, work) is connection
    assert connection.autocommit
