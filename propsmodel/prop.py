"""
Property records held by a `PropsModel`.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional, Tuple

Validator = Callable[[Any, Any], Any]
ChangeRule = Callable[[Any, Any], bool]
Writer = Callable[[Any, Any], Any]

# Compared by type and value; every other value is compared by identity.
_SCALAR_TYPES = (type(None), bool, int, float, complex, str, bytes)


def noop(*args: Any) -> None:
    """Validator that accepts everything."""
    return None


def _scalar_type(value: Any) -> type:
    # int and float form a single number type; bool stays apart
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return float
    return type(value)


def default_did_change(new_value: Any, old_value: Any) -> bool:
    """
    Default change rule: strict inequality.

    Scalars are unequal when their types or values differ, where ints and
    floats count as one number type (`2` to `2.0` is not a change, `1` to
    `True` is). Containers and other objects are unequal unless they are
    the very same object, so a structurally equal copy still counts as a
    change. Supply a custom rule to get deep comparison.
    """
    if isinstance(new_value, _SCALAR_TYPES) and isinstance(old_value, _SCALAR_TYPES):
        if _scalar_type(new_value) is not _scalar_type(old_value):
            return True
        return new_value != old_value
    return new_value is not old_value


class PropKind(Enum):
    """How a property gets its value."""

    PRIMARY = "primary"
    DERIVED = "derived"
    VIEW = "view"


@dataclass
class Prop:
    """
    One named property.

    `name`, `kind`, `dependencies` and `writer` never change after the
    property is defined; `value` is replaced by every accepted write.

    Attributes:
        name: Unique name within the model
        value: Current value
        kind: Primary, derived or view
        validator: Called as validator(new_value, current_value) before a
            write; rejects the write by raising
        did_change: Decides whether a write is published as a change
        dependencies: Names the value is computed from, in argument order
        writer: For views, maps (new_view_value, base_value) to a new base value
    """

    name: str
    value: Any
    kind: PropKind = PropKind.PRIMARY
    validator: Validator = noop
    did_change: ChangeRule = default_did_change
    dependencies: Tuple[str, ...] = field(default_factory=tuple)
    writer: Optional[Writer] = None

    @property
    def is_derived(self) -> bool:
        return self.kind is PropKind.DERIVED

    @property
    def is_view(self) -> bool:
        return self.kind is PropKind.VIEW

    @property
    def base(self) -> Optional[str]:
        """The property a view reads from and writes through."""
        return self.dependencies[0] if self.is_view else None

    def __repr__(self) -> str:
        if self.dependencies:
            deps = ", ".join(self.dependencies)
            return f"Prop({self.name} [{self.kind.value} of {deps}] = {self.value!r})"
        return f"Prop({self.name} [{self.kind.value}] = {self.value!r})"
