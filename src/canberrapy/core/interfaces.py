"""Protocol interfaces for sound backend abstraction."""

from typing import Any, Callable, Optional, Protocol, Tuple

FinishCallback = Callable[[int, int], None]
"""Completion callback: (token, result_code)."""


class ISoundBackend(Protocol):
    """Interface for a sound-event backend implementation.

    Every method returns an integer result code (0 on success, negative
    SoundErrorCode otherwise) instead of raising; translation into
    exceptions is done by the services layer.
    """

    def create_handle(self) -> Tuple[Any, int]:
        """Create a backend context handle."""
        ...

    def destroy_handle(self, handle: Any) -> int:
        """Destroy a handle created by create_handle()."""
        ...

    def open(self, handle: Any) -> int:
        """Open the output device."""
        ...

    def set_driver(self, handle: Any, name: str) -> int:
        """Select the output driver by name (before open)."""
        ...

    def apply_properties(self, handle: Any, proplist: Any) -> int:
        """Merge a property list into the handle's persistent properties."""
        ...

    def play(
        self,
        handle: Any,
        token: int,
        proplist: Any,
        callback: Optional[FinishCallback] = None,
    ) -> int:
        """
        Submit a play request.

        The return code reflects submission only. When a callback is
        given, it is called exactly once with (token, code) once playback
        has finished, possibly from another thread and possibly before
        this method returns.
        """
        ...

    def cache(self, handle: Any, proplist: Any) -> int:
        """Pre-register a sound without playing it."""
        ...

    def cancel(self, handle: Any, token: int) -> int:
        """Cancel all playbacks submitted with the given token."""
        ...

    def error_text(self, code: int) -> str:
        """Textual description of a result code."""
        ...

    def proplist_create(self) -> Tuple[Any, int]:
        """Create an empty property list."""
        ...

    def proplist_sets(self, proplist: Any, key: str, value: str) -> int:
        """Set a string property."""
        ...

    def proplist_destroy(self, proplist: Any) -> int:
        """Destroy a property list."""
        ...


class IBackendWorker(Protocol):
    """Interface for backend worker thread communication."""

    def start(self) -> None:
        """Start the worker thread."""
        ...

    def stop(self) -> None:
        """Stop the worker thread (blocks until done)."""
        ...

    def execute(self, func, timeout: Optional[float] = None):
        """Execute a command in the worker thread and return result."""
        ...
