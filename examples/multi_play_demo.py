"""Example: Several overlapping event sounds with completion callbacks."""

import threading

from canberrapy import ATTR_EVENT_ID, PlaybackTask, SoundContext, SoundError

EVENTS = ["bell", "message-new-instant", "complete", "dialog-warning"]


def on_finished(ctx: SoundContext, task: PlaybackTask) -> None:
    error = task.exception()
    if error is None:
        print(f"  request {task.token}: finished")
    else:
        print(f"  request {task.token}: {error}")


if __name__ == "__main__":
    with SoundContext() as ctx:
        tasks = [ctx.play_full(ATTR_EVENT_ID, event, callback=on_finished) for event in EVENTS]
        print(f"Started {len(tasks)} sounds, waiting...")

        done = threading.Event()
        remaining = [len(tasks)]

        def count_down(task):
            remaining[0] -= 1
            if remaining[0] == 0:
                done.set()

        for task in tasks:
            task.add_done_callback(count_down)

        if not done.wait(timeout=10.0):
            print("Timed out waiting for sounds")

        for event, task in zip(EVENTS, tasks):
            try:
                ctx.play_full_finish(task, timeout=0)
            except (SoundError, TimeoutError) as e:
                print(f"{event}: {e}")
