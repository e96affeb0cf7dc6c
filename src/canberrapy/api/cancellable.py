"""Cancellable - cooperative cancellation token."""

import itertools
import threading
from typing import Callable, Dict

from canberrapy.core.exceptions import CancelledError
from canberrapy.utils.log import get_logger

logger = get_logger(__name__)

_handler_ids = itertools.count(1)


class Cancellable:
    """
    Thread-safe cancellation token.

    Listeners connected with connect() run once, on the thread that calls
    cancel(). A listener connected after cancellation runs immediately.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._cancelled = False
        self._handlers: Dict[int, Callable[["Cancellable"], None]] = {}

    def cancel(self) -> None:
        """Cancel and notify every connected listener."""
        with self._lock:
            if self._cancelled:
                return
            self._cancelled = True
            handlers = list(self._handlers.values())

        for handler in handlers:
            try:
                handler(self)
            except Exception:
                logger.exception("Error in cancellation listener")

    def is_cancelled(self) -> bool:
        """Check whether cancel() has been called."""
        return self._cancelled

    def raise_if_cancelled(self) -> None:
        """
        Raise if cancelled.

        Raises:
            CancelledError: If cancel() has been called.
        """
        if self._cancelled:
            raise CancelledError()

    def connect(self, handler: Callable[["Cancellable"], None]) -> int:
        """
        Connect a cancellation listener.

        Args:
            handler: Called with this cancellable when it is cancelled.

        Returns:
            Handler id for disconnect().
        """
        handler_id = next(_handler_ids)
        with self._lock:
            already_cancelled = self._cancelled
            self._handlers[handler_id] = handler

        if already_cancelled:
            handler(self)
        return handler_id

    def disconnect(self, handler_id: int) -> None:
        """
        Disconnect a listener. Unknown ids are ignored.

        Listeners with a release() method are released once removed.
        """
        with self._lock:
            handler = self._handlers.pop(handler_id, None)
        release = getattr(handler, "release", None)
        if release is not None:
            release()

    @property
    def handler_count(self) -> int:
        """Number of connected listeners."""
        with self._lock:
            return len(self._handlers)
