"""
Runs independent git queries, optionally on a thread pool.

The analyzers hand over a mapping of key → zero-argument callable and get
back a mapping with the same keys. Nothing is returned until every query has
finished; the first failure aborts the batch and is re-raised.
"""

from collections.abc import Callable, Hashable, Mapping
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from threading import Event
from typing import TypeVar

from mergescope.errors import AnalysisCancelled
from mergescope.logging_config import get_logger

logger = get_logger(__name__)

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

# How often a waiting batch wakes up to look at the cancel event (seconds)
_CANCEL_POLL_INTERVAL = 0.1


def _check_cancelled(cancel: Event | None) -> None:
    if cancel is not None and cancel.is_set():
        raise AnalysisCancelled("Analysis cancelled")


def fetch_all(
    requests: Mapping[K, Callable[[], V]],
    workers: int = 1,
    cancel: Event | None = None,
) -> dict[K, V]:
    """
    Executes every request and returns the results keyed like the input.

    With workers <= 1 the requests run in order on the calling thread and the
    cancel event is checked between them. Otherwise they run on a
    ThreadPoolExecutor; pending futures are cancelled as soon as one request
    fails or the event is set.
    """
    _check_cancelled(cancel)
    if not requests:
        return {}

    if workers <= 1 or len(requests) == 1:
        results: dict[K, V] = {}
        for key, request in requests.items():
            _check_cancelled(cancel)
            results[key] = request()
        return results

    logger.debug(f"Running {len(requests)} git queries on {workers} workers")

    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = {executor.submit(request): key for key, request in requests.items()}
        pending = set(futures)

        try:
            while pending:
                done, pending = wait(
                    pending,
                    timeout=_CANCEL_POLL_INTERVAL,
                    return_when=FIRST_EXCEPTION,
                )
                for future in done:
                    error = future.exception()
                    if error is not None:
                        raise error
                _check_cancelled(cancel)
        except BaseException:
            for future in pending:
                future.cancel()
            raise

        return {futures[future]: future.result() for future in futures}
