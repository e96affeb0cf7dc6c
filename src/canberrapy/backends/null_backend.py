"""Null backend for testing (no actual audio output)."""

import itertools
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from canberrapy.core.exceptions import SoundErrorCode, default_error_text
from canberrapy.core.interfaces import FinishCallback, ISoundBackend
from canberrapy.utils.log import get_logger

logger = get_logger(__name__)


@dataclass
class NullHandle:
    """In-memory stand-in for a backend context handle."""

    id: int
    driver: Optional[str] = None
    opened: bool = False
    destroyed: bool = False
    props: Dict[str, str] = field(default_factory=dict)
    cache: List[Dict[str, str]] = field(default_factory=list)


@dataclass
class NullPropList:
    """In-memory property list; keeps insertion order."""

    id: int
    entries: List[Tuple[str, str]] = field(default_factory=list)
    destroyed: bool = False

    def as_dict(self) -> Dict[str, str]:
        return dict(self.entries)


@dataclass
class NullPlayback:
    """A play request accepted by the null backend."""

    token: int
    props: Dict[str, str]
    callback: Optional[FinishCallback]


class NullBackend(ISoundBackend):
    """
    Null backend implementation for testing.

    Records every call in ``calls`` as (method, args) tuples. Failures are
    injected with fail(); plays complete immediately when
    ``complete_immediately`` is set, otherwise they stay pending until
    complete() or complete_all() is called.
    """

    def __init__(self, complete_immediately: bool = False):
        self.complete_immediately = complete_immediately
        self.calls: List[Tuple[str, tuple]] = []
        self.handles: List[NullHandle] = []
        self.proplists: List[NullPropList] = []
        self.played: List[NullPlayback] = []
        self.cancelled: List[int] = []
        self._failures: Dict[str, int] = {}
        self._rejected_keys: Dict[str, int] = {}
        self._pending: Dict[int, NullPlayback] = {}
        self._ids = itertools.count(1)
        self._lock = threading.Lock()

    def fail(self, method: str, code: int = SoundErrorCode.INTERNAL) -> None:
        """Make every later call of a method return the given code."""
        self._failures[method] = int(code)

    def reject_key(self, key: str, code: int = SoundErrorCode.INVALID) -> None:
        """Make proplist_sets fail for one key."""
        self._rejected_keys[key] = int(code)

    def clear_failures(self) -> None:
        """Remove every injected failure."""
        self._failures.clear()
        self._rejected_keys.clear()

    def call_count(self, method: str) -> int:
        """Number of recorded calls of a method."""
        return sum(1 for name, _ in self.calls if name == method)

    @property
    def pending_tokens(self) -> List[int]:
        """Tokens of plays waiting for completion."""
        with self._lock:
            return [p.token for p in self._pending.values()]

    def _record(self, method: str, *args) -> int:
        self.calls.append((method, args))
        return self._failures.get(method, SoundErrorCode.SUCCESS)

    def create_handle(self) -> Tuple[Any, int]:
        """Create a handle."""
        code = self._record("create_handle")
        if code != SoundErrorCode.SUCCESS:
            return None, code
        handle = NullHandle(id=next(self._ids))
        self.handles.append(handle)
        logger.debug(f"NullBackend: created handle {handle.id}")
        return handle, code

    def destroy_handle(self, handle: NullHandle) -> int:
        """Destroy a handle; outstanding plays complete with DESTROYED."""
        code = self._record("destroy_handle", handle)
        handle.destroyed = True
        self.complete_all(SoundErrorCode.DESTROYED)
        logger.debug(f"NullBackend: destroyed handle {handle.id}")
        return code

    def open(self, handle: NullHandle) -> int:
        """Open the output device."""
        code = self._record("open", handle)
        if code == SoundErrorCode.SUCCESS:
            handle.opened = True
        return code

    def set_driver(self, handle: NullHandle, name: str) -> int:
        """Select a driver."""
        code = self._record("set_driver", handle, name)
        if code != SoundErrorCode.SUCCESS:
            return code
        if handle.opened:
            return SoundErrorCode.STATE
        handle.driver = name
        return code

    def apply_properties(self, handle: NullHandle, proplist: NullPropList) -> int:
        """Merge properties into the handle."""
        code = self._record("apply_properties", handle, proplist.as_dict())
        if code == SoundErrorCode.SUCCESS:
            handle.props.update(proplist.entries)
        return code

    def play(
        self,
        handle: NullHandle,
        token: int,
        proplist: NullPropList,
        callback: Optional[FinishCallback] = None,
    ) -> int:
        """Accept a play request."""
        props = dict(handle.props)
        props.update(proplist.entries)
        code = self._record("play", handle, token, props, callback is not None)
        if code != SoundErrorCode.SUCCESS:
            return code
        if handle.destroyed:
            return SoundErrorCode.DESTROYED

        playback = NullPlayback(token=token, props=props, callback=callback)
        self.played.append(playback)
        handle.opened = True
        if self.complete_immediately:
            if callback is not None:
                callback(token, SoundErrorCode.SUCCESS)
        else:
            with self._lock:
                self._pending[id(playback)] = playback
        return code

    def cache(self, handle: NullHandle, proplist: NullPropList) -> int:
        """Remember a cached sound."""
        code = self._record("cache", handle, proplist.as_dict())
        if code == SoundErrorCode.SUCCESS:
            handle.cache.append(proplist.as_dict())
        return code

    def cancel(self, handle: NullHandle, token: int) -> int:
        """Complete every pending play with this token as CANCELED."""
        code = self._record("cancel", handle, token)
        if code != SoundErrorCode.SUCCESS:
            return code
        self.cancelled.append(token)
        self.complete(token, SoundErrorCode.CANCELED)
        return code

    def error_text(self, code: int) -> str:
        """Text for a code."""
        return default_error_text(code)

    def proplist_create(self) -> Tuple[Any, int]:
        """Create a property list."""
        code = self._record("proplist_create")
        if code != SoundErrorCode.SUCCESS:
            return None, code
        proplist = NullPropList(id=next(self._ids))
        self.proplists.append(proplist)
        return proplist, code

    def proplist_sets(self, proplist: NullPropList, key: str, value: str) -> int:
        """Append one entry."""
        code = self._record("proplist_sets", key, value)
        if code == SoundErrorCode.SUCCESS:
            code = self._rejected_keys.get(key, SoundErrorCode.SUCCESS)
        if code == SoundErrorCode.SUCCESS:
            proplist.entries.append((key, value))
        return code

    def proplist_destroy(self, proplist: NullPropList) -> int:
        """Destroy a property list."""
        proplist.destroyed = True
        return self._record("proplist_destroy", proplist.id)

    def complete(self, token: int, code: int = SoundErrorCode.SUCCESS) -> int:
        """
        Finish every pending play with the given token.

        Returns:
            Number of plays completed.
        """
        with self._lock:
            matches = [key for key, p in self._pending.items() if p.token == token]
            finished = [self._pending.pop(key) for key in matches]
        for playback in finished:
            if playback.callback is not None:
                playback.callback(playback.token, int(code))
        return len(finished)

    def complete_all(self, code: int = SoundErrorCode.SUCCESS) -> int:
        """Finish every pending play with the given code."""
        with self._lock:
            finished = list(self._pending.values())
            self._pending.clear()
        for playback in finished:
            if playback.callback is not None:
                playback.callback(playback.token, int(code))
        return len(finished)

    @property
    def live_proplists(self) -> List[NullPropList]:
        """Property lists created but never destroyed."""
        return [p for p in self.proplists if not p.destroyed]
