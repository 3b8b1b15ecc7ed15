import txretry
from txretry.base.interface import BaseConnection
from txretry.sql.postgres.interface import PostgresConnection
from txretry.sql.sqlite.interface import SQLiteConnection
from txretry.transaction import TransactionError, TransactionInterruptedError


def test_version():
    assert isinstance(txretry.__version__, str)


def test_exports():
    for name in txretry.__all__:
        assert hasattr(txretry, name)


def test_connections_are_registered():
    assert PostgresConnection in BaseConnection.registered_connections
    assert SQLiteConnection in BaseConnection.registered_connections


def test_error_hierarchy():
    assert issubclass(TransactionError, txretry.TxRetryError)
    assert issubclass(TransactionInterruptedError, TransactionError)
