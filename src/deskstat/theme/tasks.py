"""
Phase barrier helper for running independent compile steps concurrently.
"""

from concurrent.futures import FIRST_EXCEPTION, Executor, wait
from typing import Any, Callable, List, Optional


def run_concurrently(executor: Optional[Executor], *calls: Callable[[], Any]) -> List[Any]:
    """
    Run ``calls`` concurrently and wait for all of them.

    Results come back in the order of ``calls``. If any call raises, the
    calls that have not started yet are cancelled and the first exception is
    re-raised once the running ones have settled. Without an executor the
    calls run one after the other in the current thread.
    """
    if executor is None:
        return [call() for call in calls]

    futures = [executor.submit(call) for call in calls]
    done, pending = wait(futures, return_when=FIRST_EXCEPTION)

    for future in pending:
        future.cancel()

    failed = [f for f in futures if f.done() and not f.cancelled() and f.exception()]
    if failed:
        # Let already running siblings finish before the phase unwinds
        wait([f for f in pending if not f.cancelled()])
        raise failed[0].exception()

    return [future.result() for future in futures]
