"""Retry helper for read-only use cases.

Queries can be repeated safely after a transient storage failure.
Mutating use cases are never wrapped: replaying a checkout or a
cancellation must be a deliberate decision of the caller.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, TypeVar

from preorder.domain.exceptions import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_READ_ATTEMPTS = 3


def retry_read(query: Callable[[], T], attempts: int = MAX_READ_ATTEMPTS, backoff: float = 0.05) -> T:
    """Run *query*, retrying on PersistenceError with a linear backoff."""
    for attempt in range(1, attempts + 1):
        try:
            return query()
        except PersistenceError:
            if attempt == attempts:
                raise
            logger.warning("Transient storage error on read (attempt %d), retrying", attempt)
            time.sleep(backoff * attempt)
    raise AssertionError("unreachable")
