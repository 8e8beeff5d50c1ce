import threading
from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T")


class CallTimeoutError(Exception):
    """Raised when a call does not finish within its time budget."""


def call_with_timeout(func: Callable[[], T], timeout_seconds: float) -> T:
    """Run ``func`` on a daemon thread and wait at most ``timeout_seconds``.

    The thread is not killed on expiry; its eventual result is discarded, and
    being a daemon it never holds up interpreter exit. Exceptions raised by
    ``func`` propagate unchanged.
    """
    outcome: dict[str, Any] = {}

    def _target() -> None:
        try:
            outcome["result"] = func()
        except BaseException as exc:  # noqa: BLE001 - re-raised in the caller's thread
            outcome["error"] = exc

    thread = threading.Thread(target=_target, name="legaldocs-timeout", daemon=True)
    thread.start()
    thread.join(timeout_seconds)
    if thread.is_alive():
        raise CallTimeoutError(f"Call did not finish within {timeout_seconds:g}s")
    if "error" in outcome:
        raise outcome["error"]
    return outcome["result"]
