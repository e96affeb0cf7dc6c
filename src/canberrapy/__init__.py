"""
canberrapy - Python wrapper for libcanberra using ctypes.

This package provides a small object-oriented API for playing short
system event sounds, with fire-and-forget and awaitable playback,
context attributes, sound caching and cancellation.
"""

from canberrapy.api.cancellable import Cancellable
from canberrapy.api.context import SoundContext
from canberrapy.api.task import PlaybackTask
from canberrapy.core.attrs import *  # noqa: F401,F403
from canberrapy.core import attrs as _attrs
from canberrapy.core.exceptions import (
    BackendLoadError,
    CancelledError,
    ContextNotInitializedError,
    InvalidArgumentError,
    MarshalError,
    PlaybackError,
    SoundError,
    SoundErrorCode,
    SubmissionError,
)
from canberrapy.core.models import ContextConfig, ContextState

__version__ = "0.1.0"

__all__ = [
    "SoundContext",
    "PlaybackTask",
    "Cancellable",
    "ContextConfig",
    "ContextState",
    "SoundError",
    "SoundErrorCode",
    "SubmissionError",
    "PlaybackError",
    "InvalidArgumentError",
    "MarshalError",
    "ContextNotInitializedError",
    "CancelledError",
    "BackendLoadError",
] + sorted(name for name in dir(_attrs) if name.startswith("ATTR_"))
