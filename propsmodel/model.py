"""
PropsModel - Reactive Property Container
========================================

A `PropsModel` holds named properties, publishes a change event on its event
bus whenever one of them changes, and keeps derived properties up to date by
recomputing them when anything they depend on changes.

Kinds of Properties
-------------------

**Primary** properties are set directly. An optional validator is called with
`(new_value, current_value)` before every write and rejects it by raising.

**Derived** properties are computed by a calculator from other properties and
recomputed whenever one of those changes. They cannot be validated; the
standard API views refuse to write them.

**Views** present part of another property (one item of a list, one key of a
dict, or anything a reader/writer pair can express). Reading a view reads its
base; writing a view writes the base.

Change Events
-------------

Every change is emitted on the topic `"{name}-changed"` with the arguments
`(name, new_value, old_value)`. Defining a property counts as a change from
`None`. Whether a write is a change is decided by the property's change rule,
strict inequality by default (see `default_did_change`).

Delivery is synchronous and re-entrant: by the time `set("a", ...)` returns,
every derived property downstream of `a` has been recomputed and its own
change event emitted.

Basic Usage
-----------

```python
from propsmodel import PropsModel

model = PropsModel()
model.define_prop("first", "Ada")
model.define_prop("last", "Lovelace")
model.define_derived_prop("full", ["first", "last"], lambda f, l: f"{f} {l}")

model.set("first", "Augusta")
model.get("full")  # "Augusta Lovelace"

model.set({"first": "Charles", "last": "Babbage"})
model.to_json()  # {"first": "Charles", "last": "Babbage", "full": "Charles Babbage"}
```

Restricted access to a model goes through API views, see `propsmodel.access`.
"""

import logging
from collections.abc import Mapping
from typing import (
    Any,
    Callable,
    Dict,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from .access import (
    AccessPolicy,
    CheckerAccessPolicy,
    PrivateAccessPolicy,
    PropsApi,
    PublicAccessPolicy,
    UnrestrictedAccessPolicy,
)
from .accessors import AccessMode, Accessors, attach_accessors, make_accessors
from .errors import (
    ConflictingWriteError,
    DuplicatePropertyError,
    UnknownDependencyError,
    UnknownPropertyError,
)
from .events import EventBus, EventEmitter, change_topic
from .graph import DependencyGraph
from .prop import ChangeRule, Prop, PropKind, Validator, default_did_change, noop
from .utilizer import Utilizer

logger = logging.getLogger(__name__)

NameCheck = Callable[[str], Any]

_MISSING = object()

_UNRESTRICTED = UnrestrictedAccessPolicy()


class PropsModel:
    """
    Store of named properties with change events and derived properties.

    The model performs no locking. Hosts that share one model between
    threads must serialize all access to it themselves.

    Args:
        event_bus: Bus the change events are emitted on. Anything with
            `emit(topic, *args)` and `on(topic, handler)` works; a private
            `EventEmitter` is created when omitted.
    """

    def __init__(self, event_bus: Optional[EventBus] = None):
        self._event_bus = event_bus if event_bus is not None else EventEmitter()
        self._props: Dict[str, Prop] = {}
        self._graph = DependencyGraph()

    @property
    def event_bus(self) -> EventBus:
        return self._event_bus

    # ========================================================================
    # DEFINITION
    # ========================================================================

    def define_prop(
        self,
        prop_name: str,
        initial_value: Any,
        validator: Optional[Validator] = None,
        did_change: Optional[ChangeRule] = None,
    ) -> "PropsModel":
        """
        Define a primary property.

        A change event is emitted for the initial value unless `did_change`
        says `(initial_value, None)` is not a change.

        Args:
            prop_name: Name of the property; must not be defined yet
            initial_value: Starting value. The validator is not applied to it.
            validator: Called as validator(new_value, current_value) before
                each write; raises to reject the value. The return value is
                ignored.
            did_change: Called as did_change(new_value, old_value) after each
                write; a change event is emitted only if it returns a truthy
                value. Defaults to strict inequality.

        Returns:
            The model, so definitions can be chained.

        Raises:
            DuplicatePropertyError: If the name is already defined
        """
        self._assert_undefined(prop_name)
        self._add_prop(
            Prop(
                name=prop_name,
                value=initial_value,
                kind=PropKind.PRIMARY,
                validator=validator or noop,
                did_change=did_change or default_did_change,
            )
        )
        return self

    def define_derived_prop(
        self,
        prop_name: str,
        depends_on: Sequence[str],
        calculate: Callable[..., Any],
        initial_value: Any = None,
        did_change: Optional[ChangeRule] = None,
    ) -> "PropsModel":
        """
        Define a property computed from other properties.

        The calculator is called with the current values of `depends_on`, in
        that order. It runs once at definition (unless `initial_value` is
        given) and again every time one of the dependencies changes; each
        recomputed value is written with the normal set protocol, so it
        emits a change event of its own.

        Every dependency must already be defined. Since the property itself
        is not defined until this call returns, it can depend neither on
        itself nor on anything defined after it, which keeps the dependency
        graph free of cycles.

        Args:
            prop_name: Name of the property; must not be defined yet
            depends_on: Names of the properties the value is computed from
            calculate: Computes the value from the dependency values
            initial_value: Value to start with instead of calling `calculate`.
                None means "not given".
            did_change: Change rule, as for `define_prop`

        Returns:
            The model, so definitions can be chained.

        Raises:
            DuplicatePropertyError: If the name is already defined
            UnknownDependencyError: If a dependency is not defined yet
        """
        self._assert_undefined(prop_name)
        dependencies = tuple(depends_on)
        self._assert_dependencies(prop_name, dependencies)

        calculate_value = self._create_utilizer(
            _UNRESTRICTED.check_read, dependencies, calculate
        )
        value = calculate_value() if initial_value is None else initial_value

        self._add_prop(
            Prop(
                name=prop_name,
                value=value,
                kind=PropKind.DERIVED,
                did_change=did_change or default_did_change,
                dependencies=dependencies,
            ),
            on_dependency_change=lambda: self._recompute(prop_name, calculate_value()),
        )
        return self

    def define_prop_view(
        self,
        prop_name: str,
        base: str,
        read: Callable[[Any], Any],
        write: Callable[[Any, Any], Any],
        did_change: Optional[ChangeRule] = None,
    ) -> "PropsModel":
        """
        Define a view: a property that reads and writes through another one.

        The view's value is `read(base_value)`, recomputed whenever the base
        changes. Setting the view to `v` sets the base to
        `write(v, base_value)`, so the base's validator applies and the view
        follows through the base's change event.

        Args:
            prop_name: Name of the view; must not be defined yet
            base: Name of the property the view presents
            read: Maps the base value to the view value
            write: Maps (new_view_value, base_value) to the new base value.
                It should return a new object rather than modify the base
                value, or the default change rule will not see a change.
            did_change: Change rule, as for `define_prop`

        Raises:
            DuplicatePropertyError: If the name is already defined
            UnknownDependencyError: If the base is not defined yet
        """
        self._assert_undefined(prop_name)
        self._assert_dependencies(prop_name, (base,))

        read_value = self._create_utilizer(_UNRESTRICTED.check_read, (base,), read)

        self._add_prop(
            Prop(
                name=prop_name,
                value=read_value(),
                kind=PropKind.VIEW,
                did_change=did_change or default_did_change,
                dependencies=(base,),
                writer=write,
            ),
            on_dependency_change=lambda: self._recompute(prop_name, read_value()),
        )
        return self

    def define_view_of_list_prop(
        self, prop_name: str, base: str, index: int
    ) -> "PropsModel":
        """
        Define a view of one item of a list-valued property.

        Writing the view replaces the item in a copy of the base list.
        """

        def write(value: Any, items: Sequence[Any]) -> List[Any]:
            updated = list(items)
            updated[index] = value
            return updated

        return self.define_prop_view(prop_name, base, lambda items: items[index], write)

    def define_view_of_dict_prop(self, prop_name: str, base: str, key: Any) -> "PropsModel":
        """
        Define a view of one key of a dict-valued property.

        Reading a missing key gives None. Writing the view sets the key in a
        copy of the base dict.
        """

        def write(value: Any, mapping: Mapping) -> Dict[Any, Any]:
            updated = dict(mapping)
            updated[key] = value
            return updated

        return self.define_prop_view(
            prop_name, base, lambda mapping: mapping.get(key), write
        )

    # ========================================================================
    # UNRESTRICTED API
    # ========================================================================

    def get(self, prop_name: str) -> Any:
        """
        Current value of a property.

        Raises:
            UnknownPropertyError: If the property is not defined
        """
        return self._get(_UNRESTRICTED.check_read, prop_name)

    def set(self, prop_name_or_values: Union[str, Mapping], value: Any = _MISSING) -> None:
        """
        Set one property, or several at once.

        Call as `set(name, value)` or `set({name: value, ...})`. A batch is
        all or nothing: every name is checked and every validator run before
        any value changes. Once all values are in place, change events are
        emitted one property at a time, in the order given.

        Writing a view writes its base. A batch may write several views of
        one base, but not a view together with its base.

        Raises:
            UnknownPropertyError: If any property is not defined
            ConflictingWriteError: If a batch writes a view and its base
            Exception: Whatever a property's validator raises
        """
        self._set(_UNRESTRICTED.check_write, prop_name_or_values, value)

    def to_json(self, accepts: Optional[Callable[[str], Any]] = None) -> Dict[str, Any]:
        """
        Snapshot of property values in definition order.

        Args:
            accepts: Optional filter; only names it returns a truthy value
                for are included
        """
        return self._to_json(accepts or _UNRESTRICTED.can_read)

    def create_utilizer(
        self, prop_names: Sequence[str], handler: Callable[..., Any]
    ) -> Utilizer:
        """
        Make a callable that passes the live values of `prop_names` to `handler`.

        Calling the result with extra arguments appends them after the
        property values: `utilizer(x)` calls `handler(*values, x)`.

        Raises:
            UnknownPropertyError: If any property is not defined
        """
        return self._create_utilizer(_UNRESTRICTED.check_read, prop_names, handler)

    def create_change_handler(
        self, respond_to: Sequence[str], handler: Callable[..., Any]
    ) -> Utilizer:
        """
        Call `handler` with the values of all of `respond_to` whenever any of
        them changes.

        Returns:
            The utilizer that is subscribed, so it can also be called directly.
        """
        return self._create_change_handler(
            _UNRESTRICTED.check_read, respond_to, handler
        )

    def on_any(self, prop_names: Sequence[str], handler: Callable[..., Any]) -> None:
        """
        Subscribe `handler(prop_name, new_value, old_value)` to the change
        events of every property in `prop_names`.
        """
        self._on_any(_UNRESTRICTED.check_read, prop_names, handler)

    def install_accessors(self, target: Any, property_access: Mapping[str, Any]) -> Accessors:
        """
        Install getFoo/setFoo style accessors on `target`.

        Args:
            target: Object to attach the accessors to; mappings get items
            property_access: Property name -> "readonly", "readwrite" or "none"

        Returns:
            The installed accessors by name.
        """
        return self._install_accessors(
            self.get,
            self.set,
            _UNRESTRICTED.check_read,
            _UNRESTRICTED.check_write,
            target,
            property_access,
        )

    # ========================================================================
    # API VIEWS
    # ========================================================================

    def create_api(
        self,
        read_checker: Callable[[str], Any],
        read_validator: Optional[NameCheck] = None,
        write_validator: Optional[NameCheck] = None,
    ) -> PropsApi:
        """
        Create a restricted view of the model.

        Args:
            read_checker: Returns a truthy value (that is not an exception)
                for readable names; used as is to filter `to_json`
            read_validator: Raises for names that may not be read. Derived
                from `read_checker` when omitted.
            write_validator: Raises for names that may not be written.
                Defaults to the read validator.
        """
        return self.api_for(
            CheckerAccessPolicy(read_checker, read_validator, write_validator)
        )

    def api_for(self, policy: AccessPolicy) -> PropsApi:
        """Create a view of the model restricted by `policy`."""
        return PropsApi(self, policy)

    def get_standard_public_api(self) -> PropsApi:
        """
        View with read access to public properties (names not starting with
        an underscore) and write access to those that are not derived.
        """
        return self.api_for(PublicAccessPolicy(self))

    def get_standard_private_api(self) -> PropsApi:
        """
        View with read access to every property and write access to every
        property that is not derived. Typically used by the model's owner.
        """
        return self.api_for(PrivateAccessPolicy(self))

    # ========================================================================
    # INTROSPECTION
    # ========================================================================

    def has(self, prop_name: str) -> bool:
        return prop_name in self._props

    def prop_names(self) -> List[str]:
        """Names of all properties in definition order."""
        return list(self._props)

    def get_kind(self, prop_name: str) -> PropKind:
        return self._require(prop_name).kind

    def is_derived(self, prop_name: str) -> bool:
        return self._require(prop_name).is_derived

    def get_dependencies(self, prop_name: str) -> List[str]:
        """Properties `prop_name` is computed from, in declared order."""
        self._require(prop_name)
        return self._graph.get_dependencies(prop_name)

    def get_dependents(self, prop_name: str) -> List[str]:
        """Properties recomputed directly when `prop_name` changes."""
        self._require(prop_name)
        return self._graph.get_dependents(prop_name)

    def __contains__(self, prop_name: object) -> bool:
        return prop_name in self._props

    def __getitem__(self, prop_name: str) -> Any:
        return self.get(prop_name)

    def __setitem__(self, prop_name: str, value: Any) -> None:
        self.set(prop_name, value)

    def __len__(self) -> int:
        return len(self._props)

    def __repr__(self) -> str:
        return f"PropsModel({', '.join(self._props)})"

    # ========================================================================
    # INTERNAL IMPLEMENTATION
    # ========================================================================
    #
    # The methods below take the access checks to apply as arguments. The
    # model passes the checks of an unrestricted policy; API views pass their policy's checks.

    def _require(self, prop_name: str) -> Prop:
        prop = self._props.get(prop_name)
        if prop is None:
            raise UnknownPropertyError(prop_name)
        return prop

    def _assert_undefined(self, prop_name: str) -> None:
        if prop_name in self._props:
            raise DuplicatePropertyError(prop_name)

    def _assert_dependencies(self, prop_name: str, dependencies: Tuple[str, ...]) -> None:
        for dependency in dependencies:
            if dependency not in self._props:
                raise UnknownDependencyError(prop_name, dependency)

    def _add_prop(
        self, prop: Prop, on_dependency_change: Optional[Callable[[], Any]] = None
    ) -> None:
        self._props[prop.name] = prop
        self._graph.add_node(prop.name)
        for dependency in prop.dependencies:
            self._graph.add_edge(dependency, prop.name)

        if on_dependency_change is not None:
            self._subscribe(prop.dependencies, lambda *event: on_dependency_change())

        logger.debug("Defined %r", prop)
        if prop.did_change(prop.value, None):
            self._fire_change(prop.name, prop.value, None)

    def _subscribe(self, prop_names: Iterable[str], handler: Callable[..., Any]) -> None:
        for prop_name in prop_names:
            self._event_bus.on(change_topic(prop_name), handler)

    def _fire_change(self, prop_name: str, new_value: Any, old_value: Any) -> None:
        self._event_bus.emit(change_topic(prop_name), prop_name, new_value, old_value)

    def _recompute(self, prop_name: str, value: Any) -> None:
        logger.debug("Recomputed %s", prop_name)
        self._apply({prop_name: value})

    def _get(self, check_read: NameCheck, prop_name: str) -> Any:
        prop = self._require(prop_name)
        check_read(prop_name)
        return prop.value

    def _set(
        self,
        check_write: NameCheck,
        prop_name_or_values: Union[str, Mapping],
        value: Any = _MISSING,
    ) -> None:
        if value is _MISSING:
            if not isinstance(prop_name_or_values, Mapping):
                raise TypeError(
                    "set() takes a property name and a value, "
                    "or a mapping of property names to values"
                )
            values = dict(prop_name_or_values)
        else:
            values = {prop_name_or_values: value}

        for prop_name in values:
            self._require(prop_name)
        for prop_name in values:
            for target in self._write_targets(prop_name):
                check_write(target)

        self._apply(self._redirect_views(values))

    def _write_targets(self, prop_name: str) -> List[str]:
        """The property itself followed by every base a write to it passes through."""
        targets = [prop_name]
        prop = self._props[prop_name]
        while prop.is_view:
            prop = self._props[prop.base]
            targets.append(prop.name)
        return targets

    def _redirect_views(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """
        Replace writes to views by writes to the properties they present.

        Several views of one base combine into a single write, in batch
        order. A base may not be written directly in the same batch.
        """
        writes: Dict[str, Any] = {}
        for prop_name, value in values.items():
            prop = self._props[prop_name]
            while prop.is_view:
                base = self._props[prop.base]
                if base.name in values:
                    raise ConflictingWriteError(prop_name, base.name)
                base_value = writes[base.name] if base.name in writes else base.value
                value = prop.writer(value, base_value)
                prop = base
            writes[prop.name] = value
        return writes

    def _apply(self, values: Dict[str, Any]) -> None:
        """
        Validate, store and publish new values; every write goes through here.

        All validators run before any value is stored, and all values are
        stored before any change event is emitted. Events are emitted one
        property at a time, so handlers (including recomputation of derived
        properties) see every value of the batch already in place.
        """
        writes = [(self._props[prop_name], value) for prop_name, value in values.items()]

        for prop, value in writes:
            prop.validator(value, prop.value)

        old_values = []
        for prop, value in writes:
            old_values.append(prop.value)
            prop.value = value

        for (prop, value), old_value in zip(writes, old_values):
            if prop.did_change(value, old_value):
                logger.debug("Changed %s: %r -> %r", prop.name, old_value, value)
                self._fire_change(prop.name, value, old_value)

    def _to_json(self, accepts: Callable[[str], Any]) -> Dict[str, Any]:
        return {
            prop_name: prop.value
            for prop_name, prop in self._props.items()
            if accepts(prop_name)
        }

    def _create_utilizer(
        self,
        check_read: NameCheck,
        prop_names: Sequence[str],
        handler: Callable[..., Any],
    ) -> Utilizer:
        prop_names = tuple(prop_names)
        for prop_name in prop_names:
            if prop_name not in self._props:
                raise UnknownPropertyError(
                    prop_name, f"Cannot create utilizer of unknown property '{prop_name}'"
                )
        for prop_name in prop_names:
            check_read(prop_name)
        return Utilizer(self._props, prop_names, handler)

    def _create_change_handler(
        self,
        check_read: NameCheck,
        respond_to: Sequence[str],
        handler: Callable[..., Any],
    ) -> Utilizer:
        utilizer = self._create_utilizer(check_read, respond_to, handler)
        self._subscribe(utilizer.prop_names, lambda *event: utilizer())
        return utilizer

    def _on_any(
        self,
        check_read: NameCheck,
        prop_names: Sequence[str],
        handler: Callable[..., Any],
    ) -> None:
        prop_names = tuple(prop_names)
        for prop_name in prop_names:
            self._require(prop_name)
        for prop_name in prop_names:
            check_read(prop_name)
        self._subscribe(prop_names, handler)

    def _install_accessors(
        self,
        getter: Callable[[str], Any],
        setter: Callable[[str, Any], Any],
        check_read: NameCheck,
        check_write: NameCheck,
        target: Any,
        property_access: Mapping[str, Any],
    ) -> Accessors:
        plan = []
        for prop_name, mode in property_access.items():
            if prop_name not in self._props:
                raise UnknownPropertyError(
                    prop_name,
                    f"Cannot create accessors for non-existent property '{prop_name}'",
                )
            access = AccessMode.parse(mode, prop_name)
            if access.can_read:
                check_read(prop_name)
            if access.can_write:
                for base_name in self._write_targets(prop_name):
                    check_write(base_name)
            plan.append((prop_name, access))

        accessors: Accessors = {}
        for prop_name, access in plan:
            accessors.update(make_accessors(prop_name, access, getter, setter))
        attach_accessors(target, accessors)
        return accessors
