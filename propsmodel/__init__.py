"""
PropsModel - Reactive Property Container
========================================

A model of named properties with validation, synchronous change events,
derived properties that recompute themselves, and restricted API views.
"""

from .access import (
    AccessPolicy,
    CheckerAccessPolicy,
    PrivateAccessPolicy,
    PropsApi,
    PublicAccessPolicy,
    UnrestrictedAccessPolicy,
)
from .accessors import AccessMode, accessor_names
from .errors import (
    AccessDeniedError,
    ConflictingWriteError,
    DuplicatePropertyError,
    InvalidAccessModeError,
    PropsModelError,
    UnknownDependencyError,
    UnknownPropertyError,
    ValidationError,
)
from .events import EventBus, EventEmitter, change_topic
from .graph import DependencyGraph
from .model import PropsModel
from .prop import Prop, PropKind, default_did_change
from .utilizer import Utilizer

__all__ = [
    # Model
    "PropsModel",
    "Prop",
    "PropKind",
    "Utilizer",
    "DependencyGraph",
    "default_did_change",
    # Events
    "EventBus",
    "EventEmitter",
    "change_topic",
    # API views
    "PropsApi",
    "AccessPolicy",
    "CheckerAccessPolicy",
    "PublicAccessPolicy",
    "PrivateAccessPolicy",
    "UnrestrictedAccessPolicy",
    "AccessMode",
    "accessor_names",
    # Exceptions
    "PropsModelError",
    "DuplicatePropertyError",
    "UnknownPropertyError",
    "UnknownDependencyError",
    "ConflictingWriteError",
    "ValidationError",
    "AccessDeniedError",
    "InvalidAccessModeError",
]
