"""Service for play, cache and cancel coordination."""

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, Union

from canberrapy.api.cancellable import Cancellable
from canberrapy.api.task import PlaybackTask
from canberrapy.core.exceptions import (
    InvalidArgumentError,
    PlaybackError,
    SoundError,
    SoundErrorCode,
    SubmissionError,
)
from canberrapy.core.proplist import PropList, pairs_from_args
from canberrapy.core.registry import PendingTaskRegistry
from canberrapy.services.context_lifecycle import ContextLifecycleService
from canberrapy.utils.log import get_logger
from canberrapy.utils.validate import validate_driver

if TYPE_CHECKING:
    from canberrapy.api.context import SoundContext

logger = get_logger(__name__)

Attrs = Union[Mapping, Sequence[Any]]
"""Either a str -> str mapping or a flat key, value, ... sequence."""

ReadyCallback = Callable[["SoundContext", PlaybackTask], None]


class _CancelListener:
    """
    Cancellation listener for one request.

    Keeps the owning context alive until it is disconnected.
    """

    def __init__(self, context: "SoundContext", token: int):
        self._context = context
        self._token = token

    def __call__(self, cancellable: Cancellable) -> None:
        context = self._context
        if context is None:
            return
        try:
            context.cancel(self._token)
        except SoundError as e:
            logger.warning(f"Cancelling request {self._token} failed: {e}")

    def release(self) -> None:
        self._context = None


class PlaybackService:
    """
    Service for submitting requests to the backend.

    Responsibilities:
    - Marshal attributes into property lists and always release them
    - Submit fire-and-forget and awaitable play requests
    - Complete pending tasks from backend completion callbacks
    - Forward cancellation to the backend
    """

    def __init__(
        self,
        owner: "SoundContext",
        lifecycle: ContextLifecycleService,
        registry: Optional[PendingTaskRegistry] = None,
    ):
        """
        Initialize playback service.

        Args:
            owner: Context that hands out tasks created here.
            lifecycle: Lifecycle service owning the backend handle.
            registry: Optional pending task registry (creates new if None).
        """
        self._owner = owner
        self._lifecycle = lifecycle
        self._backend = lifecycle.backend
        self._registry = registry or PendingTaskRegistry()

    def _proplist(self, attrs: Attrs) -> PropList:
        """Marshal attributes; raises before any backend call on bad structure."""
        if isinstance(attrs, Mapping):
            return PropList.from_mapping(self._backend, attrs)
        return PropList.from_pairs(self._backend, pairs_from_args(attrs))

    def _check(self, code: int, what: str) -> bool:
        if code != SoundErrorCode.SUCCESS:
            raise SubmissionError(f"{what}: {self._backend.error_text(code)}", code)
        return True

    def open(self) -> bool:
        """
        Open the output device.

        Raises:
            SubmissionError: If the backend cannot open the device.
        """
        handle = self._lifecycle.handle
        code = self._lifecycle.execute(lambda: self._backend.open(handle))
        return self._check(code, "Failed to open output device")

    def set_driver(self, driver: str) -> bool:
        """
        Select the backend output driver.

        Raises:
            InvalidArgumentError: If the name is not a non-empty string.
            SubmissionError: If the backend rejects the driver.
        """
        driver = validate_driver(driver)
        handle = self._lifecycle.handle
        code = self._lifecycle.execute(lambda: self._backend.set_driver(handle, driver))
        return self._check(code, f"Failed to set driver {driver!r}")

    def change_attrs(self, attrs: Attrs) -> bool:
        """
        Merge attributes into the context's persistent attributes.

        Raises:
            InvalidArgumentError: If the attributes are malformed.
            MarshalError: If the backend rejects an attribute.
            SubmissionError: If the backend rejects the update.
        """
        handle = self._lifecycle.handle

        def apply() -> int:
            with self._proplist(attrs) as proplist:
                return self._backend.apply_properties(handle, proplist.handle)

        code = self._lifecycle.execute(apply)
        return self._check(code, "Failed to change attributes")

    def cache(self, attrs: Attrs) -> bool:
        """
        Pre-load a sound so later playback starts quickly.

        Raises:
            InvalidArgumentError: If the attributes are malformed.
            MarshalError: If the backend rejects an attribute.
            SubmissionError: If the backend rejects the cache request.
        """
        handle = self._lifecycle.handle

        def submit() -> int:
            with self._proplist(attrs) as proplist:
                return self._backend.cache(handle, proplist.handle)

        code = self._lifecycle.execute(submit)
        return self._check(code, "Failed to cache sound")

    def play_simple(self, attrs: Attrs, cancellable: Optional[Cancellable] = None) -> bool:
        """
        Submit a play request without waiting for playback to finish.

        Success means the backend accepted the request.

        Raises:
            InvalidArgumentError: If the attributes are malformed.
            MarshalError: If the backend rejects an attribute.
            SubmissionError: If the backend rejects the request.
        """
        handle = self._lifecycle.handle
        token = self._registry.next_token()

        def submit() -> int:
            with self._proplist(attrs) as proplist:
                return self._backend.play(handle, token, proplist.handle, None)

        code = self._lifecycle.execute(submit)
        self._check(code, "Failed to play sound")

        if cancellable is not None:
            cancellable.connect(_CancelListener(self._owner, token))
        logger.debug(f"Submitted play request {token}")
        return True

    def play_full(
        self,
        attrs: Attrs,
        cancellable: Optional[Cancellable] = None,
        callback: Optional[ReadyCallback] = None,
    ) -> PlaybackTask:
        """
        Submit a play request and return a task for its completion.

        Errors, including a context that is not open, complete the task
        instead of raising.

        Args:
            attrs: Attributes of the sound event.
            cancellable: Optional cancellable bound to the request.
            callback: Called as callback(context, task) once the task completes.

        Returns:
            Task that completes when the backend reports playback finished.
        """
        token = self._registry.next_token()
        task = PlaybackTask(self._owner, token, cancellable)
        if callback is not None:
            task.add_done_callback(lambda t: callback(self._owner, t))

        self._registry.register(task)

        def submit() -> int:
            with self._proplist(attrs) as proplist:
                return self._backend.play(
                    handle, token, proplist.handle, self._on_finished
                )

        try:
            handle = self._lifecycle.handle
            code = self._lifecycle.execute(submit)
        except SoundError as e:
            self._registry.pop(token)
            task.set_error(e)
            return task
        except BaseException:
            self._registry.pop(token)
            raise

        if code != SoundErrorCode.SUCCESS:
            self._registry.pop(token)
            task.set_error(
                SubmissionError(f"Failed to play sound: {self._backend.error_text(code)}", code)
            )
            return task

        if cancellable is not None:
            handler_id = cancellable.connect(_CancelListener(self._owner, token))
            task.attach_cancel_handler(handler_id)
        logger.debug(f"Submitted awaitable play request {token}")
        return task

    def _on_finished(self, token: int, code: int) -> None:
        """Backend completion callback; may run on any thread."""
        task = self._registry.pop(token)
        if task is None:
            logger.debug(f"Completion for request {token} with no pending task")
            return

        def deliver() -> None:
            if code != SoundErrorCode.SUCCESS:
                task.set_error(PlaybackError(self._backend.error_text(code), code))
            else:
                task.set_result(True)
            logger.debug(f"Request {token} finished with code {code}")

        self._lifecycle.dispatch(deliver)

    def finish(self, task: PlaybackTask, timeout: Optional[float] = None) -> bool:
        """
        Wait for a task created by play_full().

        Returns:
            True if playback finished successfully.

        Raises:
            InvalidArgumentError: If the task belongs to another context.
            SoundError: STATE if called from a completion callback on a task
                that has not finished yet.
            SoundError: The error the task completed with.
            TimeoutError: If timeout is exceeded.
        """
        if not isinstance(task, PlaybackTask) or task.context is not self._owner:
            raise InvalidArgumentError("Task was not created by this sound context")
        if not task.done() and self._lifecycle.dispatcher.in_worker_thread():
            # Only the dispatcher thread can complete the task
            raise SoundError(
                "Cannot wait for a pending task from a completion callback",
                SoundErrorCode.STATE,
            )
        return task.result(timeout=timeout)

    def cancel(self, token: int) -> bool:
        """
        Ask the backend to cancel a request.

        Returns:
            False if the context is no longer open, True otherwise.

        Raises:
            SubmissionError: If the backend rejects the cancel request.
        """
        if not self._lifecycle.is_open:
            logger.debug(f"Ignoring cancel of request {token}: context not open")
            return False
        handle = self._lifecycle.handle
        code = self._lifecycle.execute(lambda: self._backend.cancel(handle, token))
        return self._check(code, f"Failed to cancel request {token}")

    def abandon_pending(self) -> int:
        """
        Fail every task still waiting for a completion callback.

        Returns:
            Number of tasks failed.
        """
        tasks = self._registry.drain()
        for task in tasks:
            task.set_error(
                PlaybackError("Sound context closed", SoundErrorCode.DESTROYED)
            )
        return len(tasks)

    @property
    def registry(self) -> PendingTaskRegistry:
        """
        Get pending task registry.

        Returns:
            Pending task registry instance.
        """
        return self._registry
