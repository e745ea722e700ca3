# ABOUTME: Cancellation tokens and the scope that exposes the active token to provider requests.
# ABOUTME: The resolver installs a token per resolution; adapters check it around each exchange.

import contextlib
import contextvars
import threading
import time
from collections.abc import Iterator


class CancelToken:
    """Thread-safe cancellation flag with an optional deadline.

    Another thread may call cancel() at any time. The resolver checks the
    token between providers, and an in-flight request is abandoned as soon as
    the token fires.
    """

    def __init__(self, timeout: float | None = None) -> None:
        self._event = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        if self._event.is_set():
            return True
        return self._deadline is not None and time.monotonic() >= self._deadline

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None when there is no deadline."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())


_ACTIVE_TOKEN: contextvars.ContextVar[CancelToken | None] = contextvars.ContextVar(
    "bibresolve_cancel_token", default=None
)


def current_token() -> CancelToken | None:
    """The token installed by the innermost cancel_scope, if any."""
    return _ACTIVE_TOKEN.get()


@contextlib.contextmanager
def cancel_scope(token: CancelToken | None) -> Iterator[CancelToken | None]:
    """Install `token` for every provider request made inside the block."""
    reset = _ACTIVE_TOKEN.set(token)
    try:
        yield token
    finally:
        _ACTIVE_TOKEN.reset(reset)
