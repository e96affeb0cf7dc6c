"""Registry of in-flight awaitable play requests."""

import itertools
import threading
from typing import TYPE_CHECKING, Dict, List, Optional

if TYPE_CHECKING:
    from canberrapy.api.task import PlaybackTask

_TOKEN_MASK = 0xFFFFFFFF


class PendingTaskRegistry:
    """
    Registry for play requests waiting on a backend completion callback.

    Responsibilities:
    - Hand out request tokens (non-zero, 32-bit, unique per context)
    - Own each pending task until its completion is delivered
    - Allow access from the backend's callback thread
    """

    def __init__(self):
        """Initialize the registry."""
        self._tasks: Dict[int, "PlaybackTask"] = {}
        self._counter = itertools.count(1)
        self._lock = threading.Lock()

    def next_token(self) -> int:
        """
        Allocate a request token.

        Returns:
            Token in the range [1, 2**32 - 1] not used by a pending task.
        """
        with self._lock:
            while True:
                token = next(self._counter) & _TOKEN_MASK
                if token != 0 and token not in self._tasks:
                    return token

    def register(self, task: "PlaybackTask") -> None:
        """
        Register a pending task under its token.

        Args:
            task: Task awaiting completion.
        """
        with self._lock:
            self._tasks[task.token] = task

    def pop(self, token: int) -> Optional["PlaybackTask"]:
        """
        Remove and return the task for a token.

        Args:
            token: Request token.

        Returns:
            The task if it was still pending, None otherwise.
        """
        with self._lock:
            return self._tasks.pop(token, None)

    def drain(self) -> List["PlaybackTask"]:
        """Remove and return every pending task."""
        with self._lock:
            tasks = list(self._tasks.values())
            self._tasks.clear()
        return tasks

    def count(self) -> int:
        """
        Get number of pending tasks.

        Returns:
            Number of pending tasks.
        """
        with self._lock:
            return len(self._tasks)
