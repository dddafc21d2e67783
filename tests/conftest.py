"""
Shared pytest fixtures for PropsModel tests.
"""

import pytest

from propsmodel import EventEmitter, PropsModel, change_topic


@pytest.fixture
def emitter():
    """Provide a fresh event emitter."""
    return EventEmitter()


@pytest.fixture
def model(emitter):
    """Provide an empty model bound to the `emitter` fixture."""
    return PropsModel(emitter)


@pytest.fixture
def listen(emitter):
    """
    Record change events.

    `listen("a", "b")` subscribes to the change topics of a and b and returns
    the list that every (prop_name, new_value, old_value) event is appended to.
    """
    recorded = []

    def subscribe(*prop_names):
        for prop_name in prop_names:
            emitter.on(change_topic(prop_name), lambda *args: recorded.append(args))
        return recorded

    return subscribe
