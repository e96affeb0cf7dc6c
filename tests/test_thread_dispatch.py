"""Tests for thread dispatch and worker."""

import threading
import time
import pytest
from canberrapy.concurrency.worker import BackendWorker


def test_worker_start_stop():
    """Test worker thread start and stop."""
    worker = BackendWorker()

    worker.start()
    assert worker._thread is not None
    assert worker._thread.is_alive()
    assert worker.is_running

    worker.stop()
    assert worker._thread is None
    assert not worker.is_running


def test_worker_restart():
    """Test that a stopped worker can be started again."""
    worker = BackendWorker()
    worker.start()
    worker.stop()

    worker.start()
    assert worker.execute(lambda: "again") == "again"
    worker.stop()


def test_worker_execute():
    """Test executing commands in worker thread."""
    worker = BackendWorker()
    worker.start()

    result = worker.execute(lambda: 42)
    assert result == 42

    thread_name = worker.execute(lambda: threading.current_thread().name)
    assert thread_name == "canberrapy-worker"

    worker.stop()


def test_worker_execute_with_error():
    """Test error handling in worker thread."""
    worker = BackendWorker()
    worker.start()

    def failing_function():
        raise ValueError("Test error")

    with pytest.raises(ValueError, match="Test error"):
        worker.execute(failing_function)

    # Worker keeps running after a failed command
    assert worker.execute(lambda: 1) == 1

    worker.stop()


def test_worker_execute_timeout():
    """Test command execution timeout."""
    worker = BackendWorker()
    worker.start()

    def slow_function():
        time.sleep(0.5)
        return 42

    with pytest.raises(TimeoutError):
        worker.execute(slow_function, timeout=0.1)

    worker.stop()


def test_worker_not_running():
    """Test executing before worker is started."""
    worker = BackendWorker()

    with pytest.raises(RuntimeError, match="not running"):
        worker.execute(lambda: 42)


def test_nested_execute_runs_inline():
    """Test that a command can call execute() without deadlocking."""
    worker = BackendWorker()
    worker.start()

    result = worker.execute(lambda: worker.execute(lambda: "inner"), timeout=1.0)
    assert result == "inner"

    worker.stop()


def test_stop_from_worker_thread():
    """Test stopping the worker from inside one of its commands."""
    worker = BackendWorker()
    worker.start()
    thread = worker._thread

    worker.execute(worker.stop, timeout=1.0)

    thread.join(timeout=1.0)
    assert not thread.is_alive()
    assert not worker.is_running


def test_concurrent_executions():
    """Test concurrent command executions."""
    worker = BackendWorker()
    worker.start()

    results = []
    errors = []

    def task(value):
        return value * 2

    def run_task(value):
        try:
            result = worker.execute(lambda: task(value))
            results.append(result)
        except Exception as e:
            errors.append(e)

    threads = []
    for i in range(10):
        t = threading.Thread(target=run_task, args=(i,))
        threads.append(t)
        t.start()

    for t in threads:
        t.join()

    assert len(errors) == 0
    assert len(results) == 10
    assert sorted(results) == [i * 2 for i in range(10)]

    worker.stop()


def test_stop_during_enqueue_still_runs_command():
    """Test that a command accepted while stop() starts is executed."""
    worker = BackendWorker()
    worker.start()
    put = worker._queue.put
    stoppers = []

    def slow_put(item, *args, **kwargs):
        if item is not None and not stoppers:
            stopper = threading.Thread(target=worker.stop)
            stoppers.append(stopper)
            stopper.start()
            time.sleep(0.1)
        put(item, *args, **kwargs)

    worker._queue.put = slow_put

    assert worker.execute(lambda: "ran", timeout=2.0) == "ran"
    stoppers[0].join(timeout=2.0)
    assert not stoppers[0].is_alive()
    assert not worker.is_running
    with pytest.raises(RuntimeError, match="not running"):
        worker.execute(lambda: "late", timeout=1.0)


def test_post_runs_without_waiting():
    """Test fire-and-forget commands."""
    worker = BackendWorker(name="canberrapy-dispatch")
    worker.start()
    seen = []

    assert worker.post(lambda: seen.append(threading.current_thread().name))
    worker.execute(lambda: None, timeout=1.0)

    assert seen == ["canberrapy-dispatch"]
    worker.stop()


def test_post_error_is_logged(caplog):
    """Test that a failing posted command does not stop the worker."""
    worker = BackendWorker()
    worker.start()

    def failing_function():
        raise ValueError("posted error")

    assert worker.post(failing_function)
    assert worker.execute(lambda: 1, timeout=1.0) == 1
    assert "failed" in caplog.text

    worker.stop()


def test_post_after_stop():
    """Test that posting to a stopped worker is refused."""
    worker = BackendWorker()
    worker.start()
    worker.stop()

    assert worker.post(lambda: None) is False
