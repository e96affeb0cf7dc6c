"""Service for managing sound context lifecycle."""

from typing import Any, Callable, Dict, Optional, TypeVar

from canberrapy.concurrency.worker import BackendWorker
from canberrapy.core.attrs import ATTR_APPLICATION_ID, ATTR_APPLICATION_NAME
from canberrapy.core.exceptions import (
    ContextNotInitializedError,
    SoundError,
    SoundErrorCode,
    SubmissionError,
)
from canberrapy.core.interfaces import IBackendWorker, ISoundBackend
from canberrapy.core.models import ContextConfig, ContextState
from canberrapy.core.proplist import PropList
from canberrapy.utils.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class ContextLifecycleService:
    """
    Service for managing the backend handle of one sound context.

    Responsibilities:
    - Create the backend handle and apply initial properties
    - Run the worker thread that serializes backend calls
    - Run the dispatcher thread that delivers completions off the backend's
      event thread
    - Destroy the handle exactly once
    """

    def __init__(
        self,
        backend: ISoundBackend,
        config: ContextConfig,
        worker: Optional[IBackendWorker] = None,
    ):
        """
        Initialize lifecycle service.

        Args:
            backend: Sound backend implementation.
            config: Context configuration.
            worker: Optional worker implementation (for testing).
        """
        self._backend = backend
        self._config = config
        self._worker: Optional[IBackendWorker] = worker
        self._dispatcher = BackendWorker(name="canberrapy-dispatch")
        self._handle: Optional[Any] = None
        self._state = ContextState.UNINITIALIZED

    def init(self) -> None:
        """
        Create the backend handle.

        Calling init() on an open context does nothing. A failed init()
        may be retried.

        Raises:
            SubmissionError: If the backend cannot create the handle or
                rejects the configured driver.
            SoundError: If the context has been closed.
        """
        if self._state == ContextState.OPEN:
            return
        if self._state == ContextState.CLOSED:
            raise SoundError("Sound context has been closed", SoundErrorCode.STATE)

        if self._worker is None:
            self._worker = BackendWorker()
        self._worker.start()
        self._dispatcher.start()

        handle, code = self.execute(self._backend.create_handle)
        if code != SoundErrorCode.SUCCESS:
            self._fail()
            raise SubmissionError(
                f"Failed to create sound context: {self._backend.error_text(code)}", code
            )

        if self._config.driver:
            code = self.execute(lambda: self._backend.set_driver(handle, self._config.driver))
            if code != SoundErrorCode.SUCCESS:
                self.execute(lambda: self._backend.destroy_handle(handle))
                self._fail()
                raise SubmissionError(
                    f"Failed to set driver {self._config.driver!r}: "
                    f"{self._backend.error_text(code)}",
                    code,
                )

        self._handle = handle
        self._state = ContextState.OPEN
        self._apply_initial_properties(handle)
        logger.info("Sound context initialized")

    def _apply_initial_properties(self, handle: Any) -> None:
        """Apply configured properties; failure leaves the context open."""
        props = self.initial_properties()
        if not props:
            return

        def apply() -> int:
            with PropList.from_mapping(self._backend, props) as proplist:
                return self._backend.apply_properties(handle, proplist.handle)

        try:
            code = self.execute(apply)
        except SoundError as e:
            logger.warning(f"Could not build initial properties: {e}")
            return
        if code != SoundErrorCode.SUCCESS:
            logger.warning(
                f"Could not apply initial properties: {self._backend.error_text(code)}"
            )

    def initial_properties(self) -> Dict[str, str]:
        """Properties applied to the handle at init time."""
        props: Dict[str, str] = {}
        if self._config.application_name:
            props[ATTR_APPLICATION_NAME] = self._config.application_name
        if self._config.application_id:
            props[ATTR_APPLICATION_ID] = self._config.application_id
        props.update(self._config.attrs)
        return props

    def _fail(self) -> None:
        self._state = ContextState.FAILED
        self._stop_worker()

    def close(self) -> None:
        """
        Destroy the backend handle and stop the worker.

        This method is idempotent and safe to call multiple times.
        """
        if self._state == ContextState.CLOSED:
            logger.debug("Context already closed, skipping")
            return

        handle, self._handle = self._handle, None
        self._state = ContextState.CLOSED
        if handle is not None:
            logger.info("Closing sound context...")
            try:
                code = self.execute(lambda: self._backend.destroy_handle(handle))
                if code != SoundErrorCode.SUCCESS:
                    logger.warning(
                        f"Error destroying sound context: {self._backend.error_text(code)}"
                    )
            except (RuntimeError, TimeoutError) as e:
                logger.warning(f"Error destroying sound context: {e}")

        self._stop_worker()
        logger.info("Sound context closed")

    def _stop_worker(self) -> None:
        # Worker first: completions it delivers while stopping still reach
        # the dispatcher, which runs everything queued before its sentinel
        for thread in (self._worker, self._dispatcher):
            if thread is None:
                continue
            try:
                thread.stop()
            except RuntimeError as e:
                logger.warning(f"Error stopping worker thread: {e}")

    def execute(self, func: Callable[[], T]) -> T:
        """Run a backend call on the worker thread."""
        return self._worker.execute(func, timeout=self._config.worker_timeout)

    def dispatch(self, func: Callable[[], None]) -> None:
        """
        Run func on the dispatcher thread without waiting.

        Backend completion callbacks arrive on the backend's own event
        thread, which may hold locks that play and cancel need. Completing
        tasks and running user callbacks here keeps that thread free. Once
        the dispatcher has stopped, func runs on the calling thread.
        """
        if not self._dispatcher.post(func):
            func()

    @property
    def dispatcher(self) -> BackendWorker:
        """Thread that delivers completions."""
        return self._dispatcher

    @property
    def state(self) -> ContextState:
        """Current initialization state."""
        return self._state

    @property
    def is_open(self) -> bool:
        """Check whether the context holds a backend handle."""
        return self._state == ContextState.OPEN

    @property
    def handle(self) -> Any:
        """
        Backend handle.

        Raises:
            ContextNotInitializedError: If the context is not open.
        """
        if self._state != ContextState.OPEN:
            raise ContextNotInitializedError(
                f"Sound context is {self._state.value}, call init() first"
            )
        return self._handle

    @property
    def backend(self) -> ISoundBackend:
        """Backend instance."""
        return self._backend

    @property
    def config(self) -> ContextConfig:
        """Context configuration."""
        return self._config
