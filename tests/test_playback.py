"""Tests for play, cache and attribute operations (using NullBackend)."""

import threading

import pytest
from canberrapy.api.context import SoundContext
from canberrapy.api.task import PlaybackTask
from canberrapy.backends.null_backend import NullBackend
from canberrapy.core.attrs import ATTR_EVENT_ID, ATTR_MEDIA_FILENAME, ATTR_MEDIA_ROLE
from canberrapy.core.models import ContextConfig
from canberrapy.core.exceptions import (
    InvalidArgumentError,
    MarshalError,
    PlaybackError,
    SoundError,
    SoundErrorCode,
    SubmissionError,
)


def last_call(backend, method):
    """Arguments of the most recent call of a backend method."""
    return [args for name, args in backend.calls if name == method][-1]


def test_play_simple(context, backend):
    """Test fire-and-forget playback."""
    assert context.play_simple(ATTR_EVENT_ID, "bell", ATTR_MEDIA_ROLE, "event")

    _, token, props, has_callback = last_call(backend, "play")
    assert props == {ATTR_EVENT_ID: "bell", ATTR_MEDIA_ROLE: "event"}
    assert not has_callback
    assert token != 0
    assert backend.live_proplists == []


def test_play_simplev(context, backend):
    """Test fire-and-forget playback from a mapping."""
    assert context.play_simplev({ATTR_MEDIA_FILENAME: "/usr/share/sounds/bell.oga"})
    assert backend.played[0].props == {ATTR_MEDIA_FILENAME: "/usr/share/sounds/bell.oga"}


def test_play_simple_invalid_attrs(context, backend):
    """Test that malformed attributes never reach the backend."""
    calls_before = len(backend.calls)

    with pytest.raises(InvalidArgumentError):
        context.play_simple(ATTR_EVENT_ID, "bell", ATTR_MEDIA_ROLE)

    assert len(backend.calls) == calls_before
    assert backend.call_count("play") == 0


def test_play_simple_marshal_error(context, backend):
    """Test that a rejected attribute aborts before playback."""
    backend.reject_key(ATTR_MEDIA_ROLE)
    with pytest.raises(MarshalError):
        context.play_simple(ATTR_EVENT_ID, "bell", ATTR_MEDIA_ROLE, "event")
    assert backend.call_count("play") == 0
    assert backend.live_proplists == []


def test_play_simple_submission_failure(context, backend):
    """Test that a rejected request fails synchronously."""
    backend.fail("play", SoundErrorCode.NODRIVER)

    with pytest.raises(SubmissionError) as exc_info:
        context.play_simple(ATTR_EVENT_ID, "bell")

    assert exc_info.value.code == SoundErrorCode.NODRIVER
    assert exc_info.value.message.endswith("No such driver")
    assert backend.pending_tokens == []
    assert backend.live_proplists == []


def test_play_full_success(context, backend):
    """Test awaitable playback completing later."""
    task = context.play_full(ATTR_EVENT_ID, "bell")

    assert isinstance(task, PlaybackTask)
    assert not task.done()
    assert context.pending_count == 1
    assert last_call(backend, "play")[3]

    backend.complete(task.token)

    assert context.play_full_finish(task) is True
    assert context.pending_count == 0
    assert backend.live_proplists == []


def test_play_full_completes_before_submission_returns():
    """Test completion delivered from inside the backend's play call."""
    backend = NullBackend(complete_immediately=True)
    finished = []

    with SoundContext(backend=backend) as ctx:
        task = ctx.play_fullv(
            {ATTR_EVENT_ID: "bell"}, callback=lambda c, t: finished.append((c, t))
        )
        assert ctx.play_full_finish(task, timeout=2.0)
        ctx._lifecycle_service.dispatcher.execute(lambda: None, timeout=2.0)
        assert finished == [(ctx, task)]
        assert ctx.pending_count == 0


def test_play_full_completion_from_other_thread(context, backend):
    """Test completion delivered on a backend event thread."""
    task = context.play_full(ATTR_EVENT_ID, "bell")

    thread = threading.Thread(target=backend.complete, args=(task.token,))
    thread.start()

    assert context.play_full_finish(task, timeout=2.0)
    thread.join()


def test_play_full_callback_runs_once(context, backend, settle):
    """Test that the ready callback fires exactly once."""
    calls = []
    task = context.play_full(ATTR_EVENT_ID, "bell", callback=lambda c, t: calls.append(t))

    backend.complete(task.token)
    backend.complete(task.token)
    settle()

    assert calls == [task]
    assert task.set_result(True) is False


def test_play_full_playback_error(context, backend):
    """Test that a failed playback is delivered through the task."""
    task = context.play_full(ATTR_MEDIA_FILENAME, "/missing.oga")
    backend.complete(task.token, SoundErrorCode.NOTFOUND)

    with pytest.raises(PlaybackError) as exc_info:
        context.play_full_finish(task)
    assert exc_info.value.code == SoundErrorCode.NOTFOUND
    assert exc_info.value.message == "File or data not found"


def test_play_full_submission_failure(context, backend):
    """Test that a rejected request completes the task immediately."""
    backend.fail("play", SoundErrorCode.STATE)
    task = context.play_full(ATTR_EVENT_ID, "bell")

    assert task.done()
    with pytest.raises(SubmissionError) as exc_info:
        context.play_full_finish(task)
    assert exc_info.value.code == SoundErrorCode.STATE
    assert backend.pending_tokens == []
    assert context.pending_count == 0


def test_play_full_invalid_attrs(context, backend):
    """Test that malformed attributes complete the task without a backend call."""
    task = context.play_full(ATTR_EVENT_ID)

    assert task.done()
    assert isinstance(task.exception(), InvalidArgumentError)
    assert backend.call_count("play") == 0
    assert context.pending_count == 0


def test_concurrent_play_full(context, backend):
    """Test that two pending plays complete independently."""
    first = context.play_full(ATTR_EVENT_ID, "bell")
    second = context.play_full(ATTR_EVENT_ID, "message")
    assert first.token != second.token

    backend.complete(first.token)

    assert first.exception(timeout=2.0) is None
    assert not second.done()
    assert context.pending_count == 1

    backend.complete(second.token, SoundErrorCode.IO)
    assert context.play_full_finish(first)
    with pytest.raises(PlaybackError):
        context.play_full_finish(second)


def test_finish_foreign_task(context):
    """Test that finishing another context's task is rejected."""
    other = SoundContext.new(backend=NullBackend(complete_immediately=True))
    try:
        task = other.play_full(ATTR_EVENT_ID, "bell")
        with pytest.raises(InvalidArgumentError):
            context.play_full_finish(task)
        with pytest.raises(InvalidArgumentError):
            context.play_full_finish("not a task")
    finally:
        other.close()


def test_finish_timeout(context):
    """Test waiting on a task that never completes."""
    task = context.play_full(ATTR_EVENT_ID, "bell")
    with pytest.raises(TimeoutError):
        context.play_full_finish(task, timeout=0.05)


def test_cache_never_plays(context, backend):
    """Test that caching only calls the backend cache."""
    assert context.cache(ATTR_EVENT_ID, "bell")
    assert context.cachev({ATTR_EVENT_ID: "message"})

    assert backend.call_count("cache") == 2
    assert backend.call_count("play") == 0
    assert backend.handles[0].cache == [{ATTR_EVENT_ID: "bell"}, {ATTR_EVENT_ID: "message"}]
    assert backend.live_proplists == []


def test_cache_failure(context, backend):
    """Test that a rejected cache request is reported."""
    backend.fail("cache", SoundErrorCode.TOOBIG)
    with pytest.raises(SubmissionError) as exc_info:
        context.cache(ATTR_MEDIA_FILENAME, "/huge.wav")
    assert exc_info.value.code == SoundErrorCode.TOOBIG
    assert backend.live_proplists == []


def test_cache_invalid_attrs(context, backend):
    """Test that malformed cache attributes are rejected up front."""
    with pytest.raises(InvalidArgumentError):
        context.cache(ATTR_EVENT_ID)
    assert backend.call_count("cache") == 0


def test_change_attrs_apply_to_later_plays(context, backend):
    """Test that context attributes are used unless overridden."""
    assert context.change_attrs(ATTR_MEDIA_ROLE, "event", ATTR_EVENT_ID, "bell")
    assert context.change_attrsv({ATTR_MEDIA_FILENAME: "/bell.oga"})

    context.play_simple(ATTR_EVENT_ID, "message")

    assert backend.played[0].props == {
        ATTR_MEDIA_ROLE: "event",
        ATTR_EVENT_ID: "message",
        ATTR_MEDIA_FILENAME: "/bell.oga",
    }
    assert backend.live_proplists == []


def test_change_attrs_failure(context, backend):
    """Test that a rejected attribute update releases the list."""
    backend.fail("apply_properties", SoundErrorCode.INVALID)
    with pytest.raises(SubmissionError):
        context.change_attrs(ATTR_EVENT_ID, "bell")
    assert backend.live_proplists == []


def test_open(context, backend):
    """Test opening the output device."""
    assert context.open()
    assert backend.handles[0].opened


def test_open_failure(context, backend):
    """Test that an open failure carries the backend text."""
    backend.fail("open", SoundErrorCode.NOTAVAILABLE)
    with pytest.raises(SubmissionError) as exc_info:
        context.open()
    assert exc_info.value.code == SoundErrorCode.NOTAVAILABLE
    assert "Not available" in str(exc_info.value)


def test_set_driver(context, backend):
    """Test selecting a driver before opening."""
    assert context.set_driver("alsa")
    assert backend.handles[0].driver == "alsa"


def test_set_driver_after_open(context, backend):
    """Test that the backend refuses a driver change once open."""
    context.open()
    with pytest.raises(SubmissionError) as exc_info:
        context.set_driver("alsa")
    assert exc_info.value.code == SoundErrorCode.STATE


def test_set_driver_invalid_name(context, backend):
    """Test that an empty driver name is rejected without a backend call."""
    with pytest.raises(InvalidArgumentError):
        context.set_driver("")
    assert backend.call_count("set_driver") == 0


def test_play_from_done_callback(context, backend, settle):
    """Test starting a new play from a completion callback."""
    follow_ups = []

    def replay(ctx, task):
        follow_ups.append(ctx.play_full(ATTR_EVENT_ID, "bell"))

    first = context.play_full(ATTR_EVENT_ID, "bell", callback=replay)
    backend.complete(first.token)
    settle()

    assert len(follow_ups) == 1
    assert not follow_ups[0].done()
    assert context.pending_count == 1


class EventLockBackend(NullBackend):
    """Null backend whose event thread holds a lock that play() also needs."""

    def __init__(self):
        super().__init__()
        self.event_lock = threading.RLock()

    def play(self, *args, **kwargs):
        with self.event_lock:
            return super().play(*args, **kwargs)

    def deliver(self, token):
        with self.event_lock:
            self.complete(token)


def test_done_callback_can_play_while_backend_holds_event_lock():
    """Test that completions are delivered off the backend's event thread."""
    backend = EventLockBackend()
    follow_ups = []
    callback_threads = []

    def replay(ctx, task):
        callback_threads.append(threading.current_thread().name)
        follow_ups.append(ctx.play_full(ATTR_EVENT_ID, "message"))

    with SoundContext(ContextConfig(worker_timeout=2.0), backend=backend) as ctx:
        first = ctx.play_full(ATTR_EVENT_ID, "bell", callback=replay)

        events = threading.Thread(
            target=backend.deliver, args=(first.token,), name="backend-events"
        )
        events.start()
        events.join(timeout=2.0)
        assert not events.is_alive()

        assert ctx.play_full_finish(first, timeout=2.0)
        ctx._lifecycle_service.dispatcher.execute(lambda: None, timeout=2.0)

        assert callback_threads == ["canberrapy-dispatch"]
        assert len(follow_ups) == 1
        assert not follow_ups[0].done()
        assert backend.pending_tokens == [follow_ups[0].token]


def test_finish_pending_task_from_done_callback(context, backend, settle):
    """Test that waiting on an unfinished task inside a callback is refused."""
    errors = []
    second = context.play_full(ATTR_EVENT_ID, "message")

    def wait_for_second(ctx, task):
        try:
            ctx.play_full_finish(second)
        except SoundError as e:
            errors.append(e)

    first = context.play_full(ATTR_EVENT_ID, "bell", callback=wait_for_second)
    backend.complete(first.token)
    settle()

    assert len(errors) == 1
    assert errors[0].code == SoundErrorCode.STATE
    assert not second.done()
