"""Shared fixtures."""

import pytest
from canberrapy.api.context import SoundContext
from canberrapy.backends.null_backend import NullBackend


@pytest.fixture
def backend():
    """Null backend that holds plays until completed by the test."""
    return NullBackend()


@pytest.fixture
def context(backend):
    """Initialized context on the null backend."""
    ctx = SoundContext(backend=backend)
    ctx.init()
    yield ctx
    ctx.close()


@pytest.fixture
def settle(context):
    """Block until completions queued so far have been delivered."""
    dispatcher = context._lifecycle_service.dispatcher
    return lambda: dispatcher.execute(lambda: None, timeout=2.0)
