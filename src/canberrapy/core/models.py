"""Data models and configuration classes."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional


class ContextState(Enum):
    """Initialization state of a sound context."""

    UNINITIALIZED = "uninitialized"
    OPEN = "open"
    FAILED = "failed"
    CLOSED = "closed"


@dataclass
class ContextConfig:
    """Configuration for SoundContext."""

    application_name: Optional[str] = None
    """Value for the application.name property. Default: not set."""

    application_id: Optional[str] = None
    """Value for the application.id property. Default: not set."""

    driver: Optional[str] = None
    """Backend output driver to select at init time. Default: backend choice."""

    attrs: Dict[str, str] = field(default_factory=dict)
    """Extra properties applied to the context at init time."""

    worker_timeout: Optional[float] = None
    """Seconds to wait for a backend call on the worker thread (None = forever)."""

