"""ctypes bindings for libcanberra functions and types."""

from ctypes import CDLL, CFUNCTYPE, POINTER, c_char_p, c_int, c_uint32, c_void_p

from canberrapy.core.exceptions import BackendLoadError

# Opaque handles
ca_context_p = c_void_p
ca_proplist_p = c_void_p

# void (*ca_finish_callback_t)(ca_context *c, uint32_t id, int error_code, void *userdata)
ca_finish_callback_t = CFUNCTYPE(None, ca_context_p, c_uint32, c_int, c_void_p)
NULL_FINISH_CALLBACK = ca_finish_callback_t()

# name: (restype, argtypes)
SIGNATURES = {
    "ca_context_create": (c_int, [POINTER(ca_context_p)]),
    "ca_context_destroy": (c_int, [ca_context_p]),
    "ca_context_set_driver": (c_int, [ca_context_p, c_char_p]),
    "ca_context_open": (c_int, [ca_context_p]),
    "ca_context_change_props_full": (c_int, [ca_context_p, ca_proplist_p]),
    "ca_context_play_full": (
        c_int,
        [ca_context_p, c_uint32, ca_proplist_p, ca_finish_callback_t, c_void_p],
    ),
    "ca_context_cache_full": (c_int, [ca_context_p, ca_proplist_p]),
    "ca_context_cancel": (c_int, [ca_context_p, c_uint32]),
    "ca_proplist_create": (c_int, [POINTER(ca_proplist_p)]),
    "ca_proplist_destroy": (c_int, [ca_proplist_p]),
    "ca_proplist_sets": (c_int, [ca_proplist_p, c_char_p, c_char_p]),
    "ca_strerror": (c_char_p, [c_int]),
}


def declare(lib: CDLL) -> CDLL:
    """
    Set restype/argtypes on every function the backend uses.

    Raises:
        BackendLoadError: If a symbol is missing from the library.
    """
    for name, (restype, argtypes) in SIGNATURES.items():
        try:
            func = getattr(lib, name)
        except AttributeError:
            raise BackendLoadError(f"{name} not found in libcanberra")
        func.restype = restype
        func.argtypes = argtypes
    return lib


def encode(text: str) -> bytes:
    """Encode a Python string for a const char * argument."""
    return text.encode("utf-8")
