"""PlaybackTask - handle for an awaitable play request."""

import threading
from typing import TYPE_CHECKING, Callable, List, Optional

from canberrapy.api.cancellable import Cancellable
from canberrapy.core.exceptions import SoundError
from canberrapy.utils.log import get_logger

if TYPE_CHECKING:
    from canberrapy.api.context import SoundContext

logger = get_logger(__name__)


class PlaybackTask:
    """
    Result of one awaitable play request.

    A task completes exactly once, either with True or with a SoundError.
    Completion may be delivered from any thread, including before the
    call that created the task has returned.
    """

    def __init__(
        self,
        context: "SoundContext",
        token: int,
        cancellable: Optional[Cancellable] = None,
    ):
        self._context = context
        self._token = token
        self._cancellable = cancellable
        self._lock = threading.Lock()
        self._done_event = threading.Event()
        # Set under the lock; the event is set once the cancel handler is gone
        self._completed = False
        self._result: Optional[bool] = None
        self._error: Optional[SoundError] = None
        self._callbacks: List[Callable[["PlaybackTask"], None]] = []
        self._cancel_handler_id: Optional[int] = None

    @property
    def context(self) -> "SoundContext":
        """Context that created this task."""
        return self._context

    @property
    def token(self) -> int:
        """Request token shared with the backend."""
        return self._token

    @property
    def cancellable(self) -> Optional[Cancellable]:
        """Cancellable bound to the request, if any."""
        return self._cancellable

    def done(self) -> bool:
        """Check whether the task has completed."""
        return self._done_event.is_set()

    def result(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for completion and return the outcome.

        Args:
            timeout: Maximum time to wait (None = infinite).

        Returns:
            True if playback finished successfully.

        Raises:
            TimeoutError: If timeout is exceeded.
            SoundError: The error the request completed with.
        """
        if not self._done_event.wait(timeout=timeout):
            raise TimeoutError(f"Playback did not finish within {timeout}s")
        if self._error is not None:
            raise self._error
        return self._result

    def exception(self, timeout: Optional[float] = None) -> Optional[SoundError]:
        """Wait for completion and return the stored error, if any."""
        if not self._done_event.wait(timeout=timeout):
            raise TimeoutError(f"Playback did not finish within {timeout}s")
        return self._error

    def add_done_callback(self, fn: Callable[["PlaybackTask"], None]) -> None:
        """
        Call fn(task) once the task completes.

        Runs immediately on the calling thread if already complete.
        """
        with self._lock:
            if not self._completed:
                self._callbacks.append(fn)
                return
        self._done_event.wait()
        self._run_callback(fn)

    def set_result(self, value: bool = True) -> bool:
        """Complete successfully. Returns False if already completed."""
        return self._complete(value, None)

    def set_error(self, error: SoundError) -> bool:
        """Complete with an error. Returns False if already completed."""
        return self._complete(None, error)

    def attach_cancel_handler(self, handler_id: int) -> None:
        """
        Remember the cancellation listener of this request.

        If the task has already completed, the listener is disconnected
        right away.
        """
        with self._lock:
            if not self._completed:
                self._cancel_handler_id = handler_id
                return
        if self._cancellable is not None:
            self._cancellable.disconnect(handler_id)

    def _complete(self, result: Optional[bool], error: Optional[SoundError]) -> bool:
        with self._lock:
            if self._completed:
                return False
            self._completed = True
            self._result = result
            self._error = error
            callbacks, self._callbacks = self._callbacks, []
            handler_id, self._cancel_handler_id = self._cancel_handler_id, None

        if handler_id is not None and self._cancellable is not None:
            self._cancellable.disconnect(handler_id)
        self._done_event.set()

        for fn in callbacks:
            self._run_callback(fn)
        return True

    def _run_callback(self, fn: Callable[["PlaybackTask"], None]) -> None:
        try:
            fn(self)
        except Exception:
            logger.exception(f"Error in done callback of task {self._token}")

    def __repr__(self) -> str:
        if not self.done():
            state = "pending"
        elif self._error is not None:
            state = f"error={self._error.code}"
        else:
            state = "done"
        return f"PlaybackTask(token={self._token}, {state})"
