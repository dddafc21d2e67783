"""
PropsModel Access - Restricted Views of a Model
===============================================

An `AccessPolicy` decides which properties may be read and written; a
`PropsApi` applies one to a model. Views hold no state of their own, so any
number of them can share one model, and all of them see the same values and
the same event bus.

Built-in Policies
-----------------

**PublicAccessPolicy**: read access to properties whose names do not start
with an underscore, write access to those that are also not derived.

**PrivateAccessPolicy**: read access to everything, write access to
everything that is not derived.

**CheckerAccessPolicy**: built from plain functions, see
`PropsModel.create_api`.

Usage:
    public = model.get_standard_public_api()
    public.get("name")      # fine
    public.get("_secret")   # AccessDeniedError: Property is not publicly accessible: _secret
    public.set("full", "")  # AccessDeniedError: Write access to full is not allowed ...
    public.to_json()        # everything except underscore-prefixed properties
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Sequence, Union

from .errors import AccessDeniedError

if TYPE_CHECKING:
    from .accessors import Accessors
    from .model import PropsModel
    from .utilizer import Utilizer

NameCheck = Callable[[str], Any]


def is_public(prop_name: str) -> bool:
    """Public properties are those whose name does not start with an underscore."""
    return not prop_name.startswith("_")


def assert_public(prop_name: str) -> None:
    if not is_public(prop_name):
        raise AccessDeniedError(
            f"Property is not publicly accessible: {prop_name}", prop_name
        )


def checker_to_validator(checker: Callable[[str], Any]) -> NameCheck:
    """
    Turn a read checker into a validator that raises instead of answering.

    The checker's result grants access when it is truthy and not an
    exception. An exception returned by the checker is raised as is;
    any other refusal raises a generic `AccessDeniedError`.
    """

    def validate(prop_name: str) -> None:
        result = checker(prop_name)
        if isinstance(result, BaseException):
            raise result
        if not result:
            raise AccessDeniedError(
                f"Requested access to property '{prop_name}' is not allowed", prop_name
            )

    return validate


class AccessPolicy(ABC):
    """Decides which properties a view may read and write."""

    @abstractmethod
    def can_read(self, prop_name: str) -> bool:
        """Whether the property is visible, used to filter `to_json`."""
        pass

    def check_read(self, prop_name: str) -> None:
        """Raise if the property may not be read."""
        if not self.can_read(prop_name):
            raise AccessDeniedError(
                f"Requested access to property '{prop_name}' is not allowed", prop_name
            )

    def check_write(self, prop_name: str) -> None:
        """Raise if the property may not be written. Defaults to the read check."""
        self.check_read(prop_name)


class UnrestrictedAccessPolicy(AccessPolicy):
    """Everything may be read and written; the model's own methods use it."""

    def can_read(self, prop_name: str) -> bool:
        return True

    def check_read(self, prop_name: str) -> None:
        pass

    def check_write(self, prop_name: str) -> None:
        pass


class CheckerAccessPolicy(AccessPolicy):
    """
    Policy made of plain functions.

    Args:
        read_checker: Returns a truthy, non-exception value for readable names
        read_validator: Raises for names that may not be read; derived from
            `read_checker` when omitted
        write_validator: Raises for names that may not be written; defaults
            to the read validator
    """

    def __init__(
        self,
        read_checker: Callable[[str], Any],
        read_validator: Optional[NameCheck] = None,
        write_validator: Optional[NameCheck] = None,
    ):
        self.read_checker = read_checker
        self.read_validator = read_validator or checker_to_validator(read_checker)
        self.write_validator = write_validator or self.read_validator

    def can_read(self, prop_name: str) -> bool:
        result = self.read_checker(prop_name)
        return bool(result) and not isinstance(result, BaseException)

    def check_read(self, prop_name: str) -> None:
        self.read_validator(prop_name)

    def check_write(self, prop_name: str) -> None:
        self.write_validator(prop_name)


class _StandardAccessPolicy(AccessPolicy):
    """Shared rule of the standard policies: derived properties are read-only."""

    def __init__(self, model: "PropsModel"):
        self.model = model

    def check_not_derived(self, prop_name: str) -> None:
        if self.model.is_derived(prop_name):
            raise AccessDeniedError(
                f"Write access to {prop_name} is not allowed "
                f"because the property is a derived property.",
                prop_name,
            )


class PublicAccessPolicy(_StandardAccessPolicy):
    """Public properties only; derived ones are read-only."""

    def can_read(self, prop_name: str) -> bool:
        return is_public(prop_name)

    def check_read(self, prop_name: str) -> None:
        assert_public(prop_name)

    def check_write(self, prop_name: str) -> None:
        assert_public(prop_name)
        self.check_not_derived(prop_name)


class PrivateAccessPolicy(_StandardAccessPolicy):
    """All properties; derived ones are read-only."""

    def can_read(self, prop_name: str) -> bool:
        return True

    def check_read(self, prop_name: str) -> None:
        pass

    def check_write(self, prop_name: str) -> None:
        self.check_not_derived(prop_name)


class PropsApi:
    """
    A view of a `PropsModel` restricted by an `AccessPolicy`.

    Every method behaves like the model method of the same name, except
    that the policy's read check (or write check, for `set` and setters) is
    applied to each property named, before anything else happens. A write
    to a view is also checked against every base it reaches.
    """

    def __init__(self, model: "PropsModel", policy: AccessPolicy):
        self._model = model
        self._policy = policy

    @property
    def model(self) -> "PropsModel":
        return self._model

    @property
    def policy(self) -> AccessPolicy:
        return self._policy

    def get(self, prop_name: str) -> Any:
        return self._model._get(self._policy.check_read, prop_name)

    def set(self, prop_name_or_values: Union[str, Mapping], *value: Any) -> None:
        self._model._set(self._policy.check_write, prop_name_or_values, *value)

    def to_json(self) -> Dict[str, Any]:
        """Snapshot of the properties this view can read, in definition order."""
        return self._model._to_json(self._policy.can_read)

    def create_utilizer(
        self, prop_names: Sequence[str], handler: Callable[..., Any]
    ) -> "Utilizer":
        return self._model._create_utilizer(self._policy.check_read, prop_names, handler)

    def create_change_handler(
        self, respond_to: Sequence[str], handler: Callable[..., Any]
    ) -> "Utilizer":
        return self._model._create_change_handler(
            self._policy.check_read, respond_to, handler
        )

    def on_any(self, prop_names: Sequence[str], handler: Callable[..., Any]) -> None:
        self._model._on_any(self._policy.check_read, prop_names, handler)

    def install_accessors(
        self, target: Any, property_access: Mapping[str, Any]
    ) -> "Accessors":
        """
        Install accessors that go through this view.

        All entries are checked against the policy before any accessor is
        installed, so one refused entry installs nothing.
        """
        return self._model._install_accessors(
            self.get,
            self.set,
            self._policy.check_read,
            self._policy.check_write,
            target,
            property_access,
        )

    def has(self, prop_name: str) -> bool:
        """Whether the property exists and this view can read it."""
        return self._model.has(prop_name) and self._policy.can_read(prop_name)

    def __contains__(self, prop_name: object) -> bool:
        return isinstance(prop_name, str) and self.has(prop_name)

    def __repr__(self) -> str:
        return f"PropsApi({type(self._policy).__name__})"
