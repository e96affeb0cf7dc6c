"""Shared library loader for libcanberra."""

import ctypes
import ctypes.util
import os
from typing import List, Optional, Tuple

from canberrapy.core.exceptions import BackendLoadError
from canberrapy.utils.log import get_logger

logger = get_logger(__name__)

LIBRARY_ENV = "CANBERRA_LIBRARY"

# Tried after find_library() and $CANBERRA_LIBRARY
LIBRARY_NAMES = [
    "libcanberra.so.0",
    "libcanberra.so",
    "libcanberra.0.dylib",
    "libcanberra.dylib",
]


class CanberraLibrary:
    """libcanberra loader."""

    def __init__(self):
        self._lib: Optional[ctypes.CDLL] = None
        self._path: Optional[str] = None

    def load(self) -> Tuple[ctypes.CDLL, str]:
        """
        Load libcanberra.

        Returns:
            Tuple of (CDLL instance, library name or path).

        Raises:
            BackendLoadError: If the library cannot be loaded.
        """
        if self._lib is not None:
            return self._lib, self._path

        candidates = self._candidates()
        errors = []
        for name in candidates:
            try:
                lib = ctypes.CDLL(name)
            except OSError as e:
                errors.append(f"{name}: {e}")
                continue
            self._lib = lib
            self._path = name
            logger.info(f"Loaded libcanberra: {name}")
            return lib, name

        raise BackendLoadError(
            "libcanberra not found. Tried: " + ", ".join(candidates)
            + (f" ({'; '.join(errors)})" if errors else "")
        )

    def _candidates(self) -> List[str]:
        """Library names to try, in order."""
        candidates = []
        override = os.environ.get(LIBRARY_ENV)
        if override:
            candidates.append(override)
        found = ctypes.util.find_library("canberra")
        if found:
            candidates.append(found)
        for name in LIBRARY_NAMES:
            if name not in candidates:
                candidates.append(name)
        return candidates


# Global instance
_loader = CanberraLibrary()


def get_library() -> ctypes.CDLL:
    """Get loaded libcanberra."""
    lib, _ = _loader.load()
    return lib
