"""Exception classes and error codes for canberrapy."""

from enum import IntEnum


class SoundErrorCode(IntEnum):
    """Error codes, identical to libcanberra's own code space."""

    SUCCESS = 0
    NOTSUPPORTED = -1
    INVALID = -2
    STATE = -3
    OOM = -4
    NODRIVER = -5
    SYSTEM = -6
    CORRUPT = -7
    TOOBIG = -8
    NOTFOUND = -9
    DESTROYED = -10
    CANCELED = -11
    NOTAVAILABLE = -12
    ACCESS = -13
    IO = -14
    INTERNAL = -15
    DISABLED = -16
    FORKED = -17
    DISCONNECTED = -18


ERROR_TEXT = {
    SoundErrorCode.SUCCESS: "Success",
    SoundErrorCode.NOTSUPPORTED: "Operation not supported",
    SoundErrorCode.INVALID: "Invalid argument",
    SoundErrorCode.STATE: "Invalid state",
    SoundErrorCode.OOM: "Out of memory",
    SoundErrorCode.NODRIVER: "No such driver",
    SoundErrorCode.SYSTEM: "System error",
    SoundErrorCode.CORRUPT: "File or data corrupt",
    SoundErrorCode.TOOBIG: "File or data too large",
    SoundErrorCode.NOTFOUND: "File or data not found",
    SoundErrorCode.DESTROYED: "Destroyed",
    SoundErrorCode.CANCELED: "Canceled",
    SoundErrorCode.NOTAVAILABLE: "Not available",
    SoundErrorCode.ACCESS: "Access forbidden",
    SoundErrorCode.IO: "IO error",
    SoundErrorCode.INTERNAL: "Internal error",
    SoundErrorCode.DISABLED: "Sound disabled",
    SoundErrorCode.FORKED: "Process forked",
    SoundErrorCode.DISCONNECTED: "Disconnected",
}


def code_to_name(code: int) -> str:
    """Convert an error code to its symbolic name (or the bare number)."""
    try:
        return SoundErrorCode(code).name
    except ValueError:
        return str(code)


def default_error_text(code: int) -> str:
    """Human-readable text for a code, without asking the backend."""
    try:
        return ERROR_TEXT[SoundErrorCode(code)]
    except ValueError:
        return f"Unknown error code {code}"


class SoundError(Exception):
    """Base exception for sound context errors."""

    def __init__(self, message: str, code: int = SoundErrorCode.INTERNAL):
        self.code = int(code)
        self.message = message
        super().__init__(f"{message} ({code_to_name(self.code)})")


class SubmissionError(SoundError):
    """Raised when the backend rejects a request at submission time."""
    pass


class PlaybackError(SoundError):
    """Reported through a task when the backend fails an accepted playback."""
    pass


class InvalidArgumentError(SoundError):
    """Raised for malformed attribute input, before the backend is contacted."""

    def __init__(self, message: str):
        super().__init__(message, SoundErrorCode.INVALID)


class MarshalError(SoundError):
    """Raised when the backend rejects a property insertion."""

    def __init__(self, message: str, code: int, key: str = None):
        self.key = key
        super().__init__(message, code)


class ContextNotInitializedError(SoundError):
    """Raised when context operations are attempted before init()."""

    def __init__(self, message: str = "Sound context is not initialized"):
        super().__init__(message, SoundErrorCode.STATE)


class CancelledError(SoundError):
    """Raised by Cancellable.raise_if_cancelled()."""

    def __init__(self, message: str = "Operation was cancelled"):
        super().__init__(message, SoundErrorCode.CANCELED)


class BackendLoadError(SoundError):
    """Raised when the native sound library cannot be loaded."""

    def __init__(self, message: str):
        super().__init__(message, SoundErrorCode.NOTAVAILABLE)
