"""Attribute marshalling into backend property lists."""

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple

from canberrapy.core.exceptions import (
    MarshalError,
    SoundErrorCode,
    SubmissionError,
    InvalidArgumentError,
)
from canberrapy.core.interfaces import ISoundBackend
from canberrapy.utils.log import get_logger
from canberrapy.utils.validate import validate_attr_key, validate_attr_value

logger = get_logger(__name__)

AttrPairs = List[Tuple[str, str]]


def pairs_from_args(args: Sequence[Any]) -> AttrPairs:
    """
    Turn a flat ``key, value, key, value, ...`` sequence into ordered pairs.

    Args:
        args: Alternating attribute names and values.

    Returns:
        List of (key, value) tuples in encounter order.

    Raises:
        InvalidArgumentError: If a key has no value (odd count), a value
            is None, or a key/value is not a string.
    """
    pairs: AttrPairs = []
    for i in range(0, len(args), 2):
        key = validate_attr_key(args[i])
        if i + 1 >= len(args):
            raise InvalidArgumentError(f"Attribute {key!r} has no value")
        value = validate_attr_value(key, args[i + 1])
        pairs.append((key, value))
    return pairs


class PropList:
    """
    Scoped owner of one backend property list.

    Use as a context manager; the backend list is destroyed on every exit
    path. destroy() is idempotent.
    """

    def __init__(self, backend: ISoundBackend):
        self._backend = backend
        self._handle: Optional[Any] = None
        self._keys: List[str] = []

        handle, code = backend.proplist_create()
        if code != SoundErrorCode.SUCCESS:
            raise SubmissionError(
                f"Failed to create property list: {backend.error_text(code)}", code
            )
        self._handle = handle

    @classmethod
    def from_pairs(cls, backend: ISoundBackend, pairs: Iterable[Tuple[str, str]]) -> "PropList":
        """
        Build a property list from ordered pairs.

        Insertion stops at the first backend failure.

        Raises:
            MarshalError: If the backend rejects an insertion.
        """
        proplist = cls(backend)
        try:
            for key, value in pairs:
                code = proplist.sets(key, value)
                if code != SoundErrorCode.SUCCESS:
                    raise MarshalError(
                        f"Failed to set attribute {key!r}: {backend.error_text(code)}",
                        code,
                        key=key,
                    )
        except BaseException:
            proplist.destroy()
            raise
        return proplist

    @classmethod
    def from_mapping(cls, backend: ISoundBackend, attrs: Mapping[str, str]) -> "PropList":
        """
        Build a property list from a mapping.

        Every entry is attempted; failures are reported in aggregate only.

        Raises:
            InvalidArgumentError: If a key or value is not a string.
            MarshalError: If any insertion failed.
        """
        items = [
            (validate_attr_key(key), validate_attr_value(key, value))
            for key, value in attrs.items()
        ]
        proplist = cls(backend)
        failed_code = SoundErrorCode.SUCCESS
        for key, value in items:
            code = proplist.sets(key, value)
            if code != SoundErrorCode.SUCCESS and failed_code == SoundErrorCode.SUCCESS:
                failed_code = code

        if failed_code != SoundErrorCode.SUCCESS:
            proplist.destroy()
            raise MarshalError(
                f"Failed to set attributes: {backend.error_text(failed_code)}",
                failed_code,
            )
        return proplist

    def sets(self, key: str, value: str) -> int:
        """Set one string property; returns the backend code."""
        if self._handle is None:
            return SoundErrorCode.STATE
        code = self._backend.proplist_sets(self._handle, key, value)
        if code == SoundErrorCode.SUCCESS:
            self._keys.append(key)
        return code

    @property
    def handle(self) -> Any:
        """Backend property list handle (None once destroyed)."""
        return self._handle

    @property
    def keys(self) -> List[str]:
        """Keys inserted so far, in insertion order."""
        return list(self._keys)

    def destroy(self) -> None:
        """Release the backend property list."""
        if self._handle is None:
            return
        handle, self._handle = self._handle, None
        code = self._backend.proplist_destroy(handle)
        if code != SoundErrorCode.SUCCESS:
            logger.warning(f"Failed to destroy property list: {self._backend.error_text(code)}")

    def __enter__(self) -> "PropList":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.destroy()
