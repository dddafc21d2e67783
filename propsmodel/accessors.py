"""
PropsModel Accessors - Bean-Style Getters and Setters
=====================================================

Builds `getFoo` / `setFoo` style callables for properties and attaches them
to a target. Accessor names are computed from the property name by a pure
string transform and handed back as data:

    accessors = model.install_accessors(person, {"name": "readwrite", "age": "readonly"})
    sorted(accessors)      # ["getAge", "getName", "setName"]
    person.setName("Bob")  # same as model.set("name", "Bob")

A `MutableMapping` target receives the accessors as items; any other object
receives them as attributes.
"""

import logging
from collections.abc import MutableMapping
from enum import Enum
from typing import Any, Callable, Dict, Tuple

from .errors import InvalidAccessModeError

logger = logging.getLogger(__name__)

Accessors = Dict[str, Callable[..., Any]]


class AccessMode(Enum):
    """Which accessors to install for a property."""

    READONLY = "readonly"
    READWRITE = "readwrite"
    NONE = "none"

    @classmethod
    def parse(cls, mode: Any, prop_name: str) -> "AccessMode":
        """
        Parse a mode string, ignoring case.

        Raises:
            InvalidAccessModeError: For anything but readonly, readwrite or none
        """
        if isinstance(mode, cls):
            return mode
        if isinstance(mode, str):
            try:
                return cls(mode.lower())
            except ValueError:
                pass
        raise InvalidAccessModeError(str(mode), prop_name)

    @property
    def can_read(self) -> bool:
        return self is not AccessMode.NONE

    @property
    def can_write(self) -> bool:
        return self is AccessMode.READWRITE


def accessor_names(prop_name: str) -> Tuple[str, str]:
    """
    Getter and setter names for a property: "foo" -> ("getFoo", "setFoo").

    Only the first character is upper-cased; the rest is kept as is.
    """
    suffix = prop_name[:1].upper() + prop_name[1:]
    return f"get{suffix}", f"set{suffix}"


def make_accessors(
    prop_name: str,
    mode: AccessMode,
    getter: Callable[[str], Any],
    setter: Callable[[str, Any], Any],
) -> Accessors:
    """
    Build the accessors `mode` calls for, bound to `prop_name`.

    Args:
        prop_name: Property the accessors read and write
        mode: Which accessors to build
        getter: Called as getter(prop_name)
        setter: Called as setter(prop_name, value)
    """
    get_name, set_name = accessor_names(prop_name)
    accessors: Accessors = {}

    if mode.can_read:

        def get_value() -> Any:
            return getter(prop_name)

        get_value.__name__ = get_name
        accessors[get_name] = get_value

    if mode.can_write:

        def set_value(value: Any) -> None:
            setter(prop_name, value)

        set_value.__name__ = set_name
        accessors[set_name] = set_value

    return accessors


def attach_accessors(target: Any, accessors: Accessors) -> None:
    """Put accessors on `target`, as items for mappings and attributes otherwise."""
    if isinstance(target, MutableMapping):
        target.update(accessors)
    else:
        for name, accessor in accessors.items():
            setattr(target, name, accessor)
    logger.debug("Installed accessors %s on %r", sorted(accessors), target)
