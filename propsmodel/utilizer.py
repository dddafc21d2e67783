"""
Utilizers: callables that feed the current values of a fixed, ordered set
of properties to a handler.
"""

from typing import Any, Callable, List, Mapping, Sequence

from .prop import Prop


class Utilizer:
    """
    Calls `handler(*values, *args)` with the live values of `prop_names`.

    Values are read on every call, never captured when the utilizer is
    created. Name checks happen in the model before construction.

    Example:
        total = model.create_utilizer(["price", "qty"], lambda p, q, tax: p * q * tax)
        total(1.2)  # price * qty * 1.2, with whatever price and qty are now
    """

    def __init__(
        self,
        props: Mapping[str, Prop],
        prop_names: Sequence[str],
        handler: Callable[..., Any],
    ):
        self._props = props
        self.prop_names = tuple(prop_names)
        self.handler = handler

    def values(self) -> List[Any]:
        """Current values of the utilized properties, in order."""
        return [self._props[name].value for name in self.prop_names]

    def __call__(self, *args: Any) -> Any:
        return self.handler(*self.values(), *args)

    def __repr__(self) -> str:
        handler_name = getattr(self.handler, "__name__", repr(self.handler))
        return f"Utilizer({', '.join(self.prop_names)} -> {handler_name})"
