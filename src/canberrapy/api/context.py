"""SoundContext - main public API."""

import weakref
from typing import Mapping, Optional

from canberrapy.api.cancellable import Cancellable
from canberrapy.api.task import PlaybackTask
from canberrapy.core.interfaces import IBackendWorker, ISoundBackend
from canberrapy.core.models import ContextConfig, ContextState
from canberrapy.services.context_lifecycle import ContextLifecycleService
from canberrapy.services.playback import PlaybackService, ReadyCallback
from canberrapy.utils.log import get_logger

logger = get_logger(__name__)


class SoundContext:
    """
    Sound context facade.

    Plays short event sounds through the sound backend. Create the
    context, call init() (or use SoundContext.new(), or a ``with``
    block), then call play_simple() for fire-and-forget sounds or
    play_full() when you need to know when the sound has finished.

    Attributes describe the sound to play, for example::

        ctx.play_simple(ATTR_EVENT_ID, "bell")
        ctx.play_simplev({ATTR_MEDIA_FILENAME: "/path/to/file.oga"})

    The ``*attrs`` variants take a flat ``key, value, key, value, ...``
    list; the ``...v`` variants take a mapping. Attributes set with
    change_attrs() apply to every later call unless overridden.
    """

    def __init__(
        self,
        config: Optional[ContextConfig] = None,
        backend: Optional[ISoundBackend] = None,
        worker: Optional[IBackendWorker] = None,
    ):
        """
        Allocate a SoundContext. Call init() before using it.

        Args:
            config: Context configuration.
            backend: Optional backend implementation (default: CanberraBackend).
            worker: Optional worker implementation (for testing).
        """
        self._config = config or ContextConfig()
        if backend is None:
            # Lazy import to avoid loading libcanberra on import
            from canberrapy.backends.canberra.backend import CanberraBackend
            backend = CanberraBackend()

        self._lifecycle_service = ContextLifecycleService(backend, self._config, worker)
        self._playback_service = PlaybackService(self, self._lifecycle_service)
        # Releases the backend handle when the context is garbage collected;
        # must not reference self
        self._finalizer = weakref.finalize(
            self, ContextLifecycleService.close, self._lifecycle_service
        )

    @classmethod
    def new(
        cls,
        config: Optional[ContextConfig] = None,
        backend: Optional[ISoundBackend] = None,
    ) -> "SoundContext":
        """
        Create and initialize a SoundContext.

        Raises:
            SubmissionError: If the backend context cannot be created.
        """
        context = cls(config, backend)
        context.init()
        return context

    def init(self) -> bool:
        """
        Initialize the context. Does nothing if already initialized.

        Returns:
            True.

        Raises:
            SubmissionError: If the backend context cannot be created.
        """
        self._lifecycle_service.init()
        return True

    def close(self) -> None:
        """
        Release the backend context. Safe to call more than once.

        Dropping the last reference to the context has the same effect.
        """
        self._finalizer()
        abandoned = self._playback_service.abandon_pending()
        if abandoned:
            logger.info(f"Failed {abandoned} pending playbacks on close")

    @property
    def state(self) -> ContextState:
        """Initialization state."""
        return self._lifecycle_service.state

    @property
    def config(self) -> ContextConfig:
        """Context configuration."""
        return self._config

    def open(self) -> bool:
        """
        Open the output device.

        Most callers do not need this; the device is opened by the first
        play request.

        Raises:
            SubmissionError: If the device cannot be opened.
        """
        return self._playback_service.open()

    def set_driver(self, driver: str) -> bool:
        """
        Select the backend output driver. Must be called before open().

        Raises:
            SubmissionError: If the backend rejects the driver.
        """
        return self._playback_service.set_driver(driver)

    def change_attrs(self, *attrs: str) -> bool:
        """
        Update the context attributes from key, value pairs.

        Raises:
            InvalidArgumentError: If a key has no value.
            MarshalError: If the backend rejects an attribute.
            SubmissionError: If the backend rejects the update.
        """
        return self._playback_service.change_attrs(attrs)

    def change_attrsv(self, attrs: Mapping[str, str]) -> bool:
        """Update the context attributes from a mapping."""
        return self._playback_service.change_attrs(attrs)

    def play_simple(self, *attrs: str, cancellable: Optional[Cancellable] = None) -> bool:
        """
        Play a sound and return as soon as the backend has accepted it.

        Args:
            *attrs: Attribute key, value pairs.
            cancellable: Optional cancellable; cancelling it stops the sound.

        Returns:
            True if the request was accepted.

        Raises:
            InvalidArgumentError: If a key has no value.
            MarshalError: If the backend rejects an attribute.
            SubmissionError: If the backend rejects the request.
        """
        return self._playback_service.play_simple(attrs, cancellable)

    def play_simplev(
        self, attrs: Mapping[str, str], cancellable: Optional[Cancellable] = None
    ) -> bool:
        """Mapping variant of play_simple()."""
        return self._playback_service.play_simple(attrs, cancellable)

    def play_full(
        self,
        *attrs: str,
        cancellable: Optional[Cancellable] = None,
        callback: Optional[ReadyCallback] = None,
    ) -> PlaybackTask:
        """
        Play a sound and get a task that completes when it has finished.

        Errors, including malformed attributes, are delivered through the
        task. ``callback(context, task)`` runs once the task completes. For
        completions reported by the backend it runs on the context's
        dispatcher thread, never on the backend's own event thread; calling
        play_full_finish() there on an unfinished task raises SoundError.

        Returns:
            PlaybackTask; pass it to play_full_finish().
        """
        return self._playback_service.play_full(attrs, cancellable, callback)

    def play_fullv(
        self,
        attrs: Mapping[str, str],
        cancellable: Optional[Cancellable] = None,
        callback: Optional[ReadyCallback] = None,
    ) -> PlaybackTask:
        """Mapping variant of play_full()."""
        return self._playback_service.play_full(attrs, cancellable, callback)

    def play_full_finish(self, task: PlaybackTask, timeout: Optional[float] = None) -> bool:
        """
        Wait for a task returned by play_full().

        Returns:
            True if the sound finished playing successfully.

        Raises:
            InvalidArgumentError: If the task comes from another context.
            SoundError: The error playback failed with.
            TimeoutError: If timeout is exceeded.
        """
        return self._playback_service.finish(task, timeout)

    def cache(self, *attrs: str) -> bool:
        """
        Cache a sound so later playback has less latency.

        Raises:
            InvalidArgumentError: If a key has no value.
            MarshalError: If the backend rejects an attribute.
            SubmissionError: If the backend rejects the request.
        """
        return self._playback_service.cache(attrs)

    def cachev(self, attrs: Mapping[str, str]) -> bool:
        """Mapping variant of cache()."""
        return self._playback_service.cache(attrs)

    def cancel(self, token: int) -> bool:
        """
        Cancel the request with the given token.

        Normally done through a Cancellable. Returns False if the context
        is already closed.
        """
        return self._playback_service.cancel(token)

    @property
    def pending_count(self) -> int:
        """Number of play_full() requests still waiting to finish."""
        return self._playback_service.registry.count()

    def __enter__(self):
        """Context manager entry."""
        self.init()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
