from __future__ import annotations

from dataclasses import dataclass, replace
from typing import NamedTuple, Tuple

from txretry.exception import TxRetryError

from .classify import (
    DEADLOCK_DETECTED,
    DEFAULT_MAX_CAUSE_DEPTH,
    is_retryable_conflict,
)


class RetryDecision(NamedTuple):
    retry: bool
    delay: float
    conflict: bool


@dataclass(frozen=True)
class RetryPolicy:
    """Attempt budget and backoff for conflict retries.

    Args:
        max_attempts (int, optional): Total attempts, including the first.
            Defaults to `5`.
        backoff (float, optional): Seconds of delay per attempt already
            made. The delay before retry k is `backoff * k`.
            Defaults to `0.05`.
        retryable_codes (Tuple[str, ...], optional): Driver state codes
            that mark a conflict. Defaults to deadlock detected (`40P01`).
        max_cause_depth (int, optional): How far down an error's cause
            chain to look for a state code. Defaults to `32`.
        follow_context (bool, optional): Also walk implicit exception
            context, not just `raise ... from` causes.
            Defaults to `False`.
    """

    max_attempts: int = 5
    backoff: float = 0.05
    retryable_codes: Tuple[str, ...] = (DEADLOCK_DETECTED,)
    max_cause_depth: int = DEFAULT_MAX_CAUSE_DEPTH
    follow_context: bool = False

    def __post_init__(self):
        if not isinstance(self.max_attempts, int) or self.max_attempts < 1:
            raise TxRetryError(
                "max_attempts: must be an integer of at least 1"
            )
        if self.backoff <= 0:
            raise TxRetryError("backoff: must be a positive number of seconds")
        if self.max_cause_depth < 1:
            raise TxRetryError("max_cause_depth: must be at least 1")
        object.__setattr__(
            self, "retryable_codes", tuple(self.retryable_codes)
        )

    def delay_for(self, attempt: int) -> float:
        if attempt < 1:
            raise TxRetryError("attempt: must be at least 1")
        return self.backoff * attempt

    def is_conflict(self, error: BaseException) -> bool:
        return is_retryable_conflict(
            error,
            self.retryable_codes,
            self.max_cause_depth,
            self.follow_context,
        )

    def decide(self, error: BaseException, attempt: int) -> RetryDecision:
        """Decide whether a failed attempt should be retried

        Args:
            error (BaseException): The error that failed the attempt
            attempt (int): The 1-indexed number of the failed attempt

        Returns:
            RetryDecision: Whether to retry, and after how many seconds
        """
        conflict = self.is_conflict(error)
        if conflict and attempt < self.max_attempts:
            return RetryDecision(True, self.delay_for(attempt), conflict)
        return RetryDecision(False, 0.0, conflict)

    def with_codes(self, *codes: str) -> RetryPolicy:
        merged = self.retryable_codes + tuple(
            code for code in codes if code not in self.retryable_codes
        )
        return replace(self, retryable_codes=merged)
