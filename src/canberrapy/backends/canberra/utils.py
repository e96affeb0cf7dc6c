"""Utility functions for the libcanberra backend."""

from canberrapy.core.exceptions import SoundErrorCode, code_to_name, default_error_text


def strerror(lib, code: int) -> str:
    """
    Text for a libcanberra result code.

    Args:
        lib: Declared libcanberra CDLL, or None.
        code: Result code.

    Returns:
        libcanberra's own text, or the built-in text when unavailable.
    """
    if lib is not None:
        text = lib.ca_strerror(int(code))
        if text:
            return text.decode("utf-8", errors="replace")
    return default_error_text(code)


def describe(code: int) -> str:
    """Short 'NAME (code)' form used in log lines."""
    return f"{code_to_name(code)} ({int(code)})"


def is_success(code: int) -> bool:
    """Check a libcanberra result code."""
    return int(code) == SoundErrorCode.SUCCESS
