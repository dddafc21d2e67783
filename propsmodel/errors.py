"""
PropsModel Errors
=================

Every failure raised by a model or one of its API views is a subclass of
`PropsModelError`. Errors raised by caller-supplied validators and event
handlers are never wrapped: they reach the caller exactly as raised.
"""

from typing import Optional


class PropsModelError(Exception):
    """Base class for all errors raised by the property model."""

    pass


class DuplicatePropertyError(PropsModelError):
    """Raised when a property name is defined a second time."""

    def __init__(self, prop_name: str):
        super().__init__(f"Property already defined: {prop_name}")
        self.prop_name = prop_name


class UnknownPropertyError(PropsModelError):
    """Raised when an operation names a property that was never defined."""

    def __init__(self, prop_name: str, message: Optional[str] = None):
        super().__init__(message or f"No such property '{prop_name}'")
        self.prop_name = prop_name


class UnknownDependencyError(UnknownPropertyError):
    """
    Raised when a derived property names a dependency that is not defined yet.

    Dependencies must be defined before their dependents, which is also what
    rules out self references and cycles.
    """

    def __init__(self, prop_name: str, dependency: str):
        super().__init__(
            dependency,
            f"Cannot derive property '{prop_name}' from unknown property '{dependency}'",
        )
        self.derived_name = prop_name
        self.dependency = dependency


class ValidationError(PropsModelError):
    """Convenience error for value validators to raise on a rejected value."""

    pass


class AccessDeniedError(PropsModelError):
    """Raised when an API view does not allow reading or writing a property."""

    def __init__(self, message: str, prop_name: Optional[str] = None):
        super().__init__(message)
        self.prop_name = prop_name


class InvalidAccessModeError(PropsModelError, ValueError):
    """Raised for an accessor mode other than readonly, readwrite or none."""

    def __init__(self, mode: str, prop_name: str):
        super().__init__(
            f"Unknown access type '{mode}' specified for property '{prop_name}'"
        )
        self.mode = mode
        self.prop_name = prop_name


class ConflictingWriteError(PropsModelError, ValueError):
    """Raised when one batch writes a property both directly and through a view."""

    def __init__(self, view_name: str, base_name: str):
        super().__init__(
            f"Cannot set '{view_name}' and '{base_name}' in one batch "
            f"because '{view_name}' writes through '{base_name}'"
        )
        self.view_name = view_name
        self.prop_name = base_name
