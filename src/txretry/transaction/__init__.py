"""
Transaction coordination that retries units of work on database conflicts.
"""

from .classify import get_state_code, is_retryable_conflict, iter_causes
from .coordinator import TransactionCoordinator, UnitOfWork
from .interfaces import (
    IsolationLevel,
    TransactionControlError,
    TransactionError,
    TransactionInterruptedError,
    TransactionSetupError,
)
from .policy import RetryDecision, RetryPolicy
from .savepoint import Savepoint

__all__ = [
    "TransactionCoordinator",
    "UnitOfWork",
    "RetryPolicy",
    "RetryDecision",
    "TransactionError",
    "TransactionSetupError",
    "TransactionControlError",
    "TransactionInterruptedError",
    "IsolationLevel",
    "Savepoint",
    "get_state_code",
    "is_retryable_conflict",
    "iter_causes",
]
