"""Unit tests for derived properties, recomputation and views."""

import pytest

from propsmodel import (
    ConflictingWriteError,
    UnknownDependencyError,
    UnknownPropertyError,
    ValidationError,
)


def weighted(foo1, foo2, foo3):
    return (31 * foo1) + (37 * foo2) + (41 * foo3)


@pytest.mark.unit
@pytest.mark.derived
class TestDerivedProps:
    """Derived properties compute from their dependencies and follow them."""

    def test_uses_given_initial_value(self, model):
        model.define_prop("foo1", 314158)

        model.define_derived_prop("bar", ["foo1"], lambda foo1: -1, 630033)

        assert model.get("bar") == 630033

    def test_calculates_value_when_no_initial_value_is_given(self, model):
        model.define_prop("foo1", 314158)

        model.define_derived_prop("bar", ["foo1"], lambda foo1: 2 * foo1)

        assert model.get("bar") == 2 * 314158

    def test_none_initial_value_means_calculate(self, model):
        model.define_prop("foo1", 3)

        model.define_derived_prop("bar", ["foo1"], lambda foo1: foo1 + 1, None)

        assert model.get("bar") == 4

    def test_definition_fires_initial_event(self, model, listen):
        model.define_prop("foo1", 3)
        events = listen("bar")

        model.define_derived_prop("bar", ["foo1"], lambda foo1: foo1 * 2)

        assert events == [("bar", 6, None)]

    def test_recomputes_and_notifies_when_dependency_changes(self, model, listen):
        model.define_prop("foo1", 314158)
        model.define_derived_prop("bar", ["foo1"], lambda foo1: 2 * foo1)
        events = listen("bar")

        model.set("foo1", 629023)

        assert model.get("bar") == 2 * 629023
        assert events == [("bar", 2 * 629023, 2 * 314158)]

    def test_dependency_values_arrive_in_declared_order(self, model):
        model.define_prop("a", "A")
        model.define_prop("b", "B")

        model.define_derived_prop("ba", ["b", "a"], lambda b, a: b + a)

        assert model.get("ba") == "BA"

    def test_batch_set_computes_from_post_batch_values(self, model):
        model.define_prop("foo1", 1)
        model.define_prop("foo2", 2)
        model.define_prop("foo3", 3)
        model.define_derived_prop("bar", ["foo1", "foo2", "foo3"], weighted)

        model.set({"foo1": 11, "foo2": 9, "foo3": 4})

        assert model.get("bar") == weighted(11, 9, 4)

    def test_batch_set_recomputes_once_per_changed_dependency(self, model, listen):
        """Events for a batch are not merged: each changed dependency recomputes"""
        model.define_prop("foo1", 1)
        model.define_prop("foo2", 2)
        model.define_prop("foo3", 3)
        calls = []

        def calculate(*values):
            calls.append(values)
            return weighted(*values)

        model.define_derived_prop(
            "bar", ["foo1", "foo2", "foo3"], calculate, None, lambda new, old: True
        )
        calls.clear()
        events = listen("bar")

        model.set({"foo1": 11, "foo2": 9, "foo3": 4})

        assert calls == [(11, 9, 4)] * 3
        assert len(events) == 3
        assert events[0] == ("bar", weighted(11, 9, 4), weighted(1, 2, 3))

    def test_unchanged_recomputation_fires_no_event(self, model, listen):
        model.define_prop("n", 3)
        model.define_derived_prop("is_odd", ["n"], lambda n: n % 2 == 1)
        events = listen("is_odd")

        model.set("n", 5)

        assert events == []
        assert model.get("is_odd") is True

    def test_chains_recompute_before_set_returns(self, model):
        model.define_prop("a", 1)
        model.define_derived_prop("b", ["a"], lambda a: a + 1)
        model.define_derived_prop("c", ["b"], lambda b: b * 10)
        model.define_derived_prop("d", ["a", "c"], lambda a, c: c - a)

        model.set("a", 5)

        assert model.to_json() == {"a": 5, "b": 6, "c": 60, "d": 55}

    def test_long_chain_recomputes_through(self, model):
        model.define_prop("p0", 0)
        for i in range(1, 50):
            model.define_derived_prop(f"p{i}", [f"p{i - 1}"], lambda value: value + 1)

        model.set("p0", 100)

        assert model.get("p49") == 149

    def test_recomputation_bypasses_access_checks(self, model):
        """Derived values are written by the model even though views cannot"""
        model.define_prop("foo1", 1)
        model.define_derived_prop("_bar1", ["foo1"], lambda foo1: 2 * foo1)
        model.define_derived_prop("bar2", ["_bar1", "foo1"], lambda bar1, foo1: 2 * foo1 + 3 * bar1)
        api = model.get_standard_private_api()

        api.set("foo1", 10)

        assert api.get("_bar1") == 20
        assert api.get("bar2") == 80

    def test_dependencies_are_recorded_in_the_graph(self, model):
        model.define_prop("price", 2)
        model.define_prop("qty", 3)
        model.define_derived_prop("total", ["price", "qty"], lambda p, q: p * q)
        model.define_derived_prop("label", ["total"], str)

        assert model.get_dependencies("total") == ["price", "qty"]
        assert model.get_dependents("price") == ["total"]
        assert model.get_dependents("total") == ["label"]
        assert model.get_dependencies("price") == []


@pytest.mark.unit
@pytest.mark.derived
class TestDependencyChecks:
    """Dependencies must exist before their dependents are defined."""

    def test_unknown_dependency_is_rejected(self, model):
        model.define_prop("foo", 10)

        with pytest.raises(UnknownDependencyError, match="unknown property 'baz'"):
            model.define_derived_prop("bar", ["foo", "baz"], lambda foo, baz: 15)

        with pytest.raises(UnknownPropertyError, match="No such property 'bar'"):
            model.get("bar")

    def test_self_dependency_is_rejected(self, model):
        model.define_prop("foo", 10)

        with pytest.raises(UnknownDependencyError, match="unknown property 'bar'"):
            model.define_derived_prop("bar", ["foo", "bar"], lambda foo, bar: 15)

        assert not model.has("bar")

    def test_forward_reference_is_rejected(self, model):
        model.define_prop("a", 1)

        with pytest.raises(UnknownDependencyError) as excinfo:
            model.define_derived_prop("b", ["c"], lambda c: c)
        model.define_derived_prop("c", ["a"], lambda a: a)

        assert excinfo.value.dependency == "c"
        assert excinfo.value.derived_name == "b"
        assert model.prop_names() == ["a", "c"]

    def test_unknown_dependency_is_an_unknown_property_error(self, model):
        with pytest.raises(UnknownPropertyError):
            model.define_derived_prop("bar", ["nothing"], lambda nothing: 1)

    def test_rejected_definition_subscribes_nothing(self, model, emitter):
        model.define_prop("foo", 10)

        with pytest.raises(UnknownDependencyError):
            model.define_derived_prop("bar", ["foo", "baz"], lambda foo, baz: 15)

        assert emitter.listener_count("foo-changed") == 0


@pytest.mark.unit
@pytest.mark.derived
class TestPropViews:
    """Views read from and write through a base property."""

    def test_view_gives_the_calculated_value(self, model):
        model.define_prop("foo", [10, 20])

        model.define_prop_view("foo-x", "foo", lambda xy: xy[0], lambda x, xy: [x, xy[1]])

        assert model.get("foo-x") == 10

    def test_view_follows_the_base(self, model):
        model.define_prop("foo", [10, 20])
        model.define_prop_view("foo-x", "foo", lambda xy: xy[0], lambda x, xy: [x, xy[1]])

        model.set("foo", [30, 40])

        assert model.get("foo-x") == 30

    def test_writing_the_view_updates_the_base(self, model, listen):
        model.define_prop("foo", [10, 20])
        model.define_prop_view("foo-x", "foo", lambda xy: xy[0], lambda x, xy: [x, xy[1]])
        events = listen("foo", "foo-x")

        model.set("foo-x", 57)

        assert model.get("foo") == [57, 20]
        assert model.get("foo-x") == 57
        # The view subscribed to the base before the test did.
        assert events == [("foo-x", 57, 10), ("foo", [57, 20], [10, 20])]

    def test_writing_the_view_runs_the_base_validator(self, model):
        def sorted_pair(new_value, old_value):
            if new_value[0] > new_value[1]:
                raise ValidationError("pair must be sorted")

        model.define_prop("pair", [1, 5], sorted_pair)
        model.define_view_of_list_prop("low", "pair", 0)

        with pytest.raises(ValidationError, match="sorted"):
            model.set("low", 9)

        assert model.get("pair") == [1, 5]
        assert model.get("low") == 1

    def test_view_of_unknown_base_is_rejected(self, model):
        with pytest.raises(UnknownDependencyError, match="unknown property 'foo'"):
            model.define_view_of_list_prop("foo-0", "foo", 0)

    def test_list_view_reads_the_index(self, model):
        model.define_prop("foo", [10, 20])
        model.define_view_of_list_prop("foo-0", "foo", 0)

        assert model.get("foo-0") == 10

        model.set("foo", [13, 23])

        assert model.get("foo-0") == 13

    def test_list_view_write_replaces_the_item_in_a_copy(self, model):
        original = [10, 20]
        model.define_prop("foo", original)
        model.define_view_of_list_prop("foo-1", "foo", 1)

        model.set("foo-1", 144)

        assert model.get("foo") == [10, 144]
        assert original == [10, 20]

    def test_dict_view_reads_the_key(self, model):
        model.define_prop("foo", {"x": 10, "y": 20})
        model.define_view_of_dict_prop("foo-x", "foo", "x")

        assert model.get("foo-x") == 10

        model.set("foo", {"x": 19, "z": "whatever"})

        assert model.get("foo-x") == 19

    def test_dict_view_of_missing_key_reads_none(self, model):
        model.define_prop("foo", {"x": 10})
        model.define_view_of_dict_prop("foo-y", "foo", "y")

        assert model.get("foo-y") is None

    def test_dict_view_write_sets_the_key(self, model):
        model.define_prop("foo", {"x": 10, "y": 20})
        model.define_view_of_dict_prop("foo-y", "foo", "y")

        model.set("foo-y", 399)

        assert model.get("foo") == {"x": 10, "y": 399}

    def test_batch_with_two_views_of_one_base_combines_writes(self, model):
        model.define_prop("point", {"x": 0, "y": 0})
        model.define_view_of_dict_prop("x", "point", "x")
        model.define_view_of_dict_prop("y", "point", "y")

        model.set({"x": 3, "y": 4})

        assert model.get("point") == {"x": 3, "y": 4}
        assert (model.get("x"), model.get("y")) == (3, 4)

    def test_view_of_a_view(self, model):
        model.define_prop("grid", [[1, 2], [3, 4]])
        model.define_view_of_list_prop("row1", "grid", 1)
        model.define_view_of_list_prop("cell10", "row1", 0)

        model.set("cell10", 30)

        assert model.get("grid") == [[1, 2], [30, 4]]
        assert model.get("row1") == [30, 4]
        assert model.get("cell10") == 30

    @pytest.mark.parametrize(
        "values",
        [{"foo-0": 7, "foo": [1, 2]}, {"foo": [1, 2], "foo-0": 7}],
    )
    def test_batch_with_view_and_its_base_is_refused(self, model, listen, values):
        model.define_prop("foo", [10, 20])
        model.define_view_of_list_prop("foo-0", "foo", 0)
        events = listen("foo", "foo-0")

        with pytest.raises(ConflictingWriteError, match="'foo-0' writes through 'foo'"):
            model.set(values)

        assert model.get("foo") == [10, 20]
        assert model.get("foo-0") == 10
        assert events == []

    def test_batch_with_nested_view_and_intermediate_view_is_refused(self, model):
        model.define_prop("grid", [[1, 2], [3, 4]])
        model.define_view_of_list_prop("row1", "grid", 1)
        model.define_view_of_list_prop("cell10", "row1", 0)

        with pytest.raises(ConflictingWriteError):
            model.set({"cell10": 30, "row1": [5, 6]})

        assert model.get("grid") == [[1, 2], [3, 4]]
