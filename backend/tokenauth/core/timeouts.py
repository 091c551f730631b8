"""Timeout-bounded execution of blocking calls.

Store round-trips and the entropy draw run on worker pools so the request
thread never waits longer than the configured bound. A call that outlives its
bound keeps running in its pool; its result is discarded.

Each concern has its own pool: a backlog of slow store calls must not eat
into the entropy bound, which starts counting at submission.
"""

from __future__ import annotations

import atexit
import concurrent.futures
import logging
from collections.abc import Callable
from typing import Final, TypeVar

T = TypeVar("T")

log = logging.getLogger(__name__)

STORE_POOL: Final[str] = "store"
ENTROPY_POOL: Final[str] = "entropy"

POOL_SIZES: Final[dict[str, int]] = {STORE_POOL: 8, ENTROPY_POOL: 2}

_executors: dict[str, concurrent.futures.ThreadPoolExecutor] = {
    name: concurrent.futures.ThreadPoolExecutor(max_workers=size, thread_name_prefix=f"bounded-{name}")
    for name, size in POOL_SIZES.items()
}


def call_with_timeout(
    fn: Callable[..., T],
    /,
    *args: object,
    timeout: float,
    pool: str = STORE_POOL,
    **kwargs: object,
) -> T:
    """
    Run ``fn(*args, **kwargs)`` on ``pool`` and wait at most ``timeout`` seconds.

    :param fn: Blocking callable.
    :param timeout: Upper bound in seconds (must be positive).
    :param pool: Worker pool name, :data:`STORE_POOL` or :data:`ENTROPY_POOL`.
    :returns: Whatever ``fn`` returns.
    :raises TimeoutError: When the bound expires first.
    :raises KeyError: Unknown pool name.
    :raises Exception: Any exception raised by ``fn`` itself, unchanged.
    """
    if timeout <= 0:
        raise ValueError("timeout must be positive")

    future = _executors[pool].submit(fn, *args, **kwargs)
    try:
        return future.result(timeout=timeout)
    except concurrent.futures.TimeoutError as exc:
        future.cancel()
        name = getattr(fn, "__qualname__", repr(fn))
        log.warning("bounded call timed out", extra={"op": f"{pool}:{name}"})
        raise TimeoutError(f"{name} did not complete within {timeout}s") from exc


def shutdown(wait: bool = False) -> None:
    """Stop every worker pool."""
    for executor in _executors.values():
        executor.shutdown(wait=wait, cancel_futures=not wait)


atexit.register(shutdown)
