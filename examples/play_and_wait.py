"""Example: Play a sound file and wait until it has finished."""

import sys
from pathlib import Path

from canberrapy import (
    ATTR_MEDIA_FILENAME,
    ATTR_MEDIA_ROLE,
    Cancellable,
    ContextConfig,
    SoundContext,
    SoundError,
)

if __name__ == "__main__":
    if len(sys.argv) < 2:
        print("Usage: python play_and_wait.py <path_to_sound_file>")
        sys.exit(1)

    path = sys.argv[1]
    if not Path(path).exists():
        print(f"Error: File not found: {path}")
        sys.exit(1)

    config = ContextConfig(application_name="play_and_wait example")
    ctx = SoundContext(config)
    cancellable = Cancellable()

    try:
        ctx.init()

        # Cache first so the second play starts without delay
        ctx.cachev({ATTR_MEDIA_FILENAME: path})

        for attempt in range(2):
            task = ctx.play_fullv(
                {ATTR_MEDIA_FILENAME: path, ATTR_MEDIA_ROLE: "event"},
                cancellable=cancellable,
            )
            try:
                ctx.play_full_finish(task)
                print(f"Playback {attempt + 1} finished")
            except KeyboardInterrupt:
                print("\nInterrupted, cancelling...")
                cancellable.cancel()
                break
    except SoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
    finally:
        ctx.close()
