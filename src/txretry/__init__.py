from importlib.metadata import version

from .base.interface import BaseConnection
from .decorator import run_in_transaction, transactional
from .exception import TxRetryError
from .sql.postgres.interface import PostgresConnection
from .sql.sqlite.interface import SQLiteConnection
from .transaction import (
    IsolationLevel,
    RetryDecision,
    RetryPolicy,
    Savepoint,
    TransactionControlError,
    TransactionCoordinator,
    TransactionError,
    TransactionInterruptedError,
    TransactionSetupError,
)

__version__ = version("txretry")

__all__ = (
    "run_in_transaction",
    "transactional",
    "BaseConnection",
    "IsolationLevel",
    "PostgresConnection",
    "RetryDecision",
    "RetryPolicy",
    "Savepoint",
    "SQLiteConnection",
    "TransactionControlError",
    "TransactionCoordinator",
    "TransactionError",
    "TransactionInterruptedError",
    "TransactionSetupError",
    "TxRetryError",
)
