"""Worker thread for backend command execution."""

import queue
import threading
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Optional, TypeVar

from canberrapy.core.interfaces import IBackendWorker
from canberrapy.utils.log import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


@dataclass
class Command:
    """Command to execute in worker thread."""

    id: str
    func: Callable[[], T]
    result_event: threading.Event
    result: Optional[Any] = None
    error: Optional[BaseException] = None
    detached: bool = False


class BackendWorker(IBackendWorker):
    """
    Worker thread that executes backend commands.

    Every call touching a backend handle goes through this thread, so the
    handle is never used from two threads at once.
    """

    def __init__(self, name: str = "canberrapy-worker"):
        self._name = name
        self._queue: queue.Queue[Optional[Command]] = queue.Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        # Guards _running against the enqueue in execute() and post()
        self._lock = threading.Lock()
        self._running = False

    @property
    def is_running(self) -> bool:
        """Check whether the worker accepts commands."""
        return self._running

    def start(self) -> None:
        """Start the worker thread."""
        if self._thread is not None and self._thread.is_alive():
            return

        self._stop_event.clear()
        # Daemon thread so a forgotten close() does not block interpreter exit
        self._thread = threading.Thread(
            target=self._worker_loop, name=self._name, daemon=True
        )
        self._thread.start()
        with self._lock:
            self._running = True
        logger.info(f"{self._name} thread started")

    def stop(self) -> None:
        """Stop the worker thread (blocks until done)."""
        if self._thread is None or not self._thread.is_alive():
            self._running = False
            self._thread = None
            return

        logger.info(f"Stopping {self._name} thread...")
        with self._lock:
            # Commands accepted before this point are queued ahead of the sentinel
            self._running = False
            self._stop_event.set()
            self._queue.put(None)

        if threading.current_thread() is self._thread:
            # Stopping from inside a command; the loop exits after it returns
            self._thread = None
            return

        self._thread.join(timeout=5.0)
        if self._thread.is_alive():
            logger.error("Worker thread did not stop within timeout")
        else:
            logger.info(f"{self._name} thread stopped")
        self._thread = None

    def execute(self, func: Callable[[], T], timeout: Optional[float] = None) -> T:
        """
        Execute a function in the worker thread and return result.

        Calls made from the worker thread itself run inline.

        Args:
            func: Function to execute (no arguments).
            timeout: Maximum time to wait for result (None = infinite).

        Returns:
            Result of function execution.

        Raises:
            RuntimeError: If worker thread is not running.
            TimeoutError: If timeout is exceeded.
            Exception: Any exception raised by the function.
        """
        if self._running and self.in_worker_thread():
            return func()

        cmd = Command(
            id=str(uuid.uuid4()),
            func=func,
            result_event=threading.Event(),
        )

        with self._lock:
            if not self._running:
                raise RuntimeError("Worker thread not running")
            self._queue.put(cmd)

        if not cmd.result_event.wait(timeout=timeout):
            raise TimeoutError(f"Command execution timeout after {timeout}s")

        if cmd.error is not None:
            raise cmd.error

        return cmd.result

    def post(self, func: Callable[[], Any]) -> bool:
        """
        Queue a function without waiting for it.

        Errors raised by func are logged.

        Returns:
            False if the worker is not running and func was not queued.
        """
        cmd = Command(
            id=str(uuid.uuid4()),
            func=func,
            result_event=threading.Event(),
            detached=True,
        )
        with self._lock:
            if not self._running:
                return False
            self._queue.put(cmd)
        return True

    def in_worker_thread(self) -> bool:
        """Check whether the caller is running on the worker thread."""
        return threading.current_thread() is self._thread

    def _worker_loop(self) -> None:
        """Main worker loop."""
        logger.debug("Worker thread started")
        try:
            while True:
                cmd = self._queue.get()

                if cmd is None:  # Sentinel
                    logger.debug("Received sentinel, exiting worker loop")
                    break

                try:
                    cmd.result = cmd.func()
                except Exception as e:
                    if cmd.detached:
                        logger.exception(f"Posted command {cmd.id} failed")
                    else:
                        logger.debug(f"Command {cmd.id} raised {e!r}")
                    cmd.error = e
                finally:
                    cmd.result_event.set()
                    self._queue.task_done()
                # Drop the closure so it cannot keep its owner alive while idle
                cmd = None

                if self._stop_event.is_set() and self._queue.empty():
                    break
        finally:
            self._drain()
            logger.debug("Worker thread exiting")

    def _drain(self) -> None:
        """Fail commands still queued when the loop exits."""
        while True:
            try:
                cmd = self._queue.get_nowait()
            except queue.Empty:
                return
            if cmd is not None:
                cmd.error = RuntimeError("Worker thread stopped")
                cmd.result_event.set()
