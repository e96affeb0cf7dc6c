"""libcanberra backend implementation."""

import itertools
import threading
from ctypes import byref
from typing import Any, Dict, Optional, Tuple

from canberrapy.backends.canberra.bindings import (
    NULL_FINISH_CALLBACK,
    ca_context_p,
    ca_finish_callback_t,
    ca_proplist_p,
    declare,
    encode,
)
from canberrapy.backends.canberra.dll import get_library
from canberrapy.backends.canberra.utils import describe, is_success, strerror
from canberrapy.core.exceptions import BackendLoadError, SoundErrorCode
from canberrapy.core.interfaces import FinishCallback, ISoundBackend
from canberrapy.utils.log import get_logger

logger = get_logger(__name__)

# Python callbacks waiting for ca_context_play_full to finish, keyed by
# the integer passed to libcanberra as userdata.
_callbacks: Dict[int, FinishCallback] = {}
_callbacks_lock = threading.Lock()
_userdata_ids = itertools.count(1)


def _dispatch_finished(ca, token, error_code, userdata):
    """Native finish callback; runs on libcanberra's event thread."""
    with _callbacks_lock:
        callback = _callbacks.pop(userdata or 0, None)
    if callback is None:
        logger.warning(f"Finish callback for unknown request {token} ({describe(error_code)})")
        return
    try:
        callback(int(token), int(error_code))
    except Exception:
        logger.exception(f"Error in finish callback for request {token}")


# Must outlive every request submitted with it
_native_finish_callback = ca_finish_callback_t(_dispatch_finished)


class CanberraBackend(ISoundBackend):
    """libcanberra backend implementation."""

    def __init__(self, lib=None):
        self._lib = lib

    @property
    def lib(self):
        """Declared libcanberra CDLL, loaded on first use."""
        if self._lib is None:
            self._lib = declare(get_library())
        return self._lib

    def create_handle(self) -> Tuple[Any, int]:
        """Create a ca_context."""
        ca = ca_context_p()
        code = self.lib.ca_context_create(byref(ca))
        if not is_success(code):
            return None, code
        logger.info("libcanberra context created")
        return ca, code

    def destroy_handle(self, handle: Any) -> int:
        """Destroy a ca_context; pending plays finish with CA_ERROR_DESTROYED."""
        code = self.lib.ca_context_destroy(handle)
        logger.info(f"libcanberra context destroyed: {describe(code)}")
        return code

    def open(self, handle: Any) -> int:
        """Open the output device."""
        return self.lib.ca_context_open(handle)

    def set_driver(self, handle: Any, name: str) -> int:
        """Select the output driver."""
        return self.lib.ca_context_set_driver(handle, encode(name))

    def apply_properties(self, handle: Any, proplist: Any) -> int:
        """Merge a property list into the context."""
        return self.lib.ca_context_change_props_full(handle, proplist)

    def play(
        self,
        handle: Any,
        token: int,
        proplist: Any,
        callback: Optional[FinishCallback] = None,
    ) -> int:
        """Submit a play request through ca_context_play_full."""
        if callback is None:
            return self.lib.ca_context_play_full(
                handle, token, proplist, NULL_FINISH_CALLBACK, None
            )

        userdata = next(_userdata_ids)
        # Registered first: libcanberra may finish before play_full returns
        with _callbacks_lock:
            _callbacks[userdata] = callback

        code = self.lib.ca_context_play_full(
            handle, token, proplist, _native_finish_callback, userdata
        )
        if not is_success(code):
            with _callbacks_lock:
                _callbacks.pop(userdata, None)
        return code

    def cache(self, handle: Any, proplist: Any) -> int:
        """Cache a sample."""
        return self.lib.ca_context_cache_full(handle, proplist)

    def cancel(self, handle: Any, token: int) -> int:
        """Cancel playbacks with the given id."""
        return self.lib.ca_context_cancel(handle, token)

    def error_text(self, code: int) -> str:
        """libcanberra's text for a code."""
        try:
            lib = self.lib
        except BackendLoadError:
            lib = None
        return strerror(lib, code)

    def proplist_create(self) -> Tuple[Any, int]:
        """Create a ca_proplist."""
        proplist = ca_proplist_p()
        code = self.lib.ca_proplist_create(byref(proplist))
        if not is_success(code):
            return None, code
        return proplist, code

    def proplist_sets(self, proplist: Any, key: str, value: str) -> int:
        """Set a string property."""
        try:
            key_b, value_b = encode(key), encode(value)
        except UnicodeEncodeError:
            return SoundErrorCode.INVALID
        return self.lib.ca_proplist_sets(proplist, key_b, value_b)

    def proplist_destroy(self, proplist: Any) -> int:
        """Destroy a ca_proplist."""
        return self.lib.ca_proplist_destroy(proplist)
