"""
Classification of driver errors into retryable conflicts.
"""

from __future__ import annotations

import logging
from typing import Collection, Iterator, Optional

logger = logging.getLogger(__name__)

DEADLOCK_DETECTED = "40P01"
DEFAULT_MAX_CAUSE_DEPTH = 32

# psycopg 3, psycopg2, sqlite3
_STATE_CODE_ATTRIBUTES = ("sqlstate", "pgcode", "sqlite_errorname")


def get_state_code(error: BaseException) -> Optional[str]:
    """Return the driver-defined state code carried by an error, if any"""
    for attribute in _STATE_CODE_ATTRIBUTES:
        code = getattr(error, attribute, None)
        if isinstance(code, str) and code:
            return code
    return None


def iter_causes(
    error: BaseException,
    max_depth: int = DEFAULT_MAX_CAUSE_DEPTH,
    follow_context: bool = False,
) -> Iterator[BaseException]:
    """Yield the error followed by each of its underlying causes.

    Only explicit ``raise ... from`` causes are followed unless
    ``follow_context`` is set, in which case an error without a
    ``__cause__`` continues to its implicit ``__context__`` (when not
    suppressed). The walk stops after ``max_depth`` errors or when an
    error repeats.
    """
    seen = set()
    current: Optional[BaseException] = error
    depth = 0
    while current is not None and depth < max_depth:
        if id(current) in seen:
            break
        seen.add(id(current))
        yield current
        depth += 1
        if current.__cause__ is not None:
            current = current.__cause__
        elif follow_context and not current.__suppress_context__:
            current = current.__context__
        else:
            current = None


def is_retryable_conflict(
    error: BaseException,
    codes: Collection[str] = (DEADLOCK_DETECTED,),
    max_depth: int = DEFAULT_MAX_CAUSE_DEPTH,
    follow_context: bool = False,
) -> bool:
    for cause in iter_causes(error, max_depth, follow_context):
        code = get_state_code(cause)
        if code is None:
            continue
        logger.debug(
            "Found %s with state code %s", type(cause).__name__, code
        )
        if code in codes:
            return True
    return False
