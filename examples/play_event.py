"""Example: Play a theme event sound by id."""

import sys

from canberrapy import ATTR_EVENT_DESCRIPTION, ATTR_EVENT_ID, SoundContext, SoundError

if __name__ == "__main__":
    event_id = sys.argv[1] if len(sys.argv) > 1 else "bell"

    try:
        with SoundContext() as ctx:
            ctx.play_simple(
                ATTR_EVENT_ID, event_id,
                ATTR_EVENT_DESCRIPTION, "canberrapy example",
            )
            print(f"Requested event sound {event_id!r}")
    except SoundError as e:
        print(f"Error: {e}")
        sys.exit(1)
