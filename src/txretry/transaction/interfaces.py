from asyncio import CancelledError
from enum import Enum

from txretry.exception import TxRetryError


class IsolationLevel(Enum):
    """SQL transaction isolation levels"""

    READ_UNCOMMITTED = "READ UNCOMMITTED"
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class TransactionError(TxRetryError):
    """Base exception for transaction errors"""

    pass


class TransactionSetupError(TransactionError):
    """Raised when a connection cannot enter explicit-transaction mode"""

    pass


class TransactionControlError(TransactionError):
    """Raised when a begin/commit/rollback/savepoint call fails"""

    pass


class TransactionInterruptedError(TransactionError, CancelledError):
    """Raised when the task is cancelled while backing off before a retry.

    It is also a CancelledError so that the cancellation of the running
    task is not lost.
    """

    pass
