"""Retry helper for atomic units that lose an optimistic-locking race."""

import time
from typing import Callable, TypeVar

from feeledger.database.base import Database
from feeledger.domain.errors import ConcurrencyConflict
from feeledger.logging_config import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def run_with_retry(
    db: Database,
    func: Callable[[], T],
    *,
    retries: int = 3,
    backoff_base: float = 0.05,
    operation: str = "unit",
) -> T:
    """Run ``func`` as a fresh atomic unit, retrying on ConcurrencyConflict.

    ``func`` must open its own unit with ``db.atomic()`` so each attempt
    starts from a clean session. When a unit is already open the caller owns
    it and the conflict is left for the caller to handle, so ``func`` runs
    exactly once. StoreUnavailable and every other error propagate at once.
    """
    if db.in_atomic():
        return func()

    for attempt in range(retries + 1):
        try:
            return func()
        except ConcurrencyConflict as exc:
            if attempt >= retries:
                logger.error(
                    "concurrency_retries_exhausted",
                    extra={"operation": operation, "attempts": attempt + 1},
                )
                raise
            logger.warning(
                "concurrency_retry",
                extra={"operation": operation, "attempt": attempt + 1, "error": str(exc)},
            )
            time.sleep(backoff_base * (2 ** attempt))
    raise AssertionError("unreachable")
