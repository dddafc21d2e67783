"""
PropsModel Events - Synchronous Publish/Subscribe
=================================================

The model publishes change notifications through an event bus: any object
with `emit(topic, *args)` and `on(topic, handler)` will do. `EventEmitter`
is the in-process implementation used when none is supplied.

Delivery is synchronous. Handlers run in the order they subscribed, on the
stack of whoever called `emit`, and an exception raised by a handler is
propagated to that caller; remaining handlers for the topic do not run.

Property change topics are named by `change_topic`, and their handlers are
called as `handler(prop_name, new_value, old_value)`.
"""

import logging
from collections import defaultdict
from typing import Any, Callable, Dict, List, Protocol, runtime_checkable

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]

CHANGE_TOPIC_SUFFIX = "-changed"


def change_topic(prop_name: str) -> str:
    """Name of the topic on which changes to `prop_name` are published."""
    return f"{prop_name}{CHANGE_TOPIC_SUFFIX}"


@runtime_checkable
class EventBus(Protocol):
    """The two operations the model needs from an event bus."""

    def emit(self, topic: str, *args: Any) -> Any: ...

    def on(self, topic: str, handler: Handler) -> Any: ...


class EventEmitter:
    """
    Minimal synchronous event emitter.

    Example:
        emitter = EventEmitter()
        emitter.on("foo-changed", lambda name, new, old: print(name, new, old))
        emitter.emit("foo-changed", "foo", 2, 1)  # prints: foo 2 1
    """

    def __init__(self):
        self._handlers: Dict[str, List[Handler]] = defaultdict(list)

    def on(self, topic: str, handler: Handler) -> "EventEmitter":
        """
        Subscribe `handler` to `topic`.

        The same handler may be subscribed more than once, in which case it
        is called once per subscription.

        Returns:
            The emitter, for chaining.
        """
        self._handlers[topic].append(handler)
        return self

    def off(self, topic: str, handler: Handler) -> "EventEmitter":
        """Remove one subscription of `handler` from `topic`, if there is one."""
        handlers = self._handlers.get(topic)
        if handlers and handler in handlers:
            handlers.remove(handler)
        return self

    def emit(self, topic: str, *args: Any) -> bool:
        """
        Call every handler of `topic` with `args`, in subscription order.

        Handlers subscribed while the topic is being emitted are not called
        for the current emission.

        Returns:
            True if the topic had at least one handler.
        """
        handlers = list(self._handlers.get(topic, ()))
        if not handlers:
            return False
        logger.debug("Emitting %s to %d handler(s)", topic, len(handlers))
        for handler in handlers:
            handler(*args)
        return True

    def listeners(self, topic: str) -> List[Handler]:
        """Copy of the handlers currently subscribed to `topic`."""
        return list(self._handlers.get(topic, ()))

    def listener_count(self, topic: str) -> int:
        return len(self._handlers.get(topic, ()))

    def __repr__(self) -> str:
        topics = sum(1 for handlers in self._handlers.values() if handlers)
        return f"EventEmitter(topics={topics})"
