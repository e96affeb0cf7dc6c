"""Services layer for sound context orchestration."""

from canberrapy.services.context_lifecycle import ContextLifecycleService
from canberrapy.services.playback import PlaybackService

__all__ = ["ContextLifecycleService", "PlaybackService"]
