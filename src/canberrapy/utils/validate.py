"""Validation utilities."""

from canberrapy.core.exceptions import InvalidArgumentError


def validate_attr_key(key) -> str:
    """Ensure an attribute key is a non-empty string."""
    if not isinstance(key, str) or not key:
        raise InvalidArgumentError(f"Attribute key must be a non-empty string, got {key!r}")
    return key


def validate_attr_value(key: str, value) -> str:
    """Ensure an attribute value is present and a string."""
    if value is None:
        raise InvalidArgumentError(f"Attribute {key!r} has no value")
    if not isinstance(value, str):
        raise InvalidArgumentError(
            f"Attribute {key!r} must have a string value, got {type(value).__name__}"
        )
    return value


def validate_driver(name) -> str:
    """Ensure a driver name is a non-empty string."""
    if not isinstance(name, str) or not name:
        raise InvalidArgumentError(f"Driver name must be a non-empty string, got {name!r}")
    return name
