from __future__ import annotations

import threading
from concurrent.futures import Future
from typing import Callable, Optional, TypeVar

from .config import env_float

T = TypeVar("T")

DEADLINE_THREAD_NAME = "rf-deadline"


def http_timeout_seconds() -> float:
    value = env_float("RF_HTTP_TIMEOUT", 15.0)
    return value if value > 0 else 15.0


def run_with_deadline(fn: Callable[[], T], seconds: Optional[float]) -> T:
    """
    Run ``fn`` on a helper thread and wait at most ``seconds`` for its result.

    With ``seconds`` None the call runs inline. The helper is a daemon thread: on
    expiry it is abandoned, its late result is discarded, and it does not keep the
    process alive at exit (a stuck store call cannot delay CLI shutdown).

    Raises:
        concurrent.futures.TimeoutError: ``fn`` did not finish in time.
        Exception: Whatever ``fn`` raised.
    """
    if seconds is None:
        return fn()
    future: Future = Future()

    def _target() -> None:
        if not future.set_running_or_notify_cancel():
            return
        try:
            future.set_result(fn())
        except BaseException as exc:  # handed to the waiting caller
            future.set_exception(exc)

    threading.Thread(target=_target, name=DEADLINE_THREAD_NAME, daemon=True).start()
    return future.result(timeout=seconds)
