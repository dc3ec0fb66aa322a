"""Tests for the recursive value converter."""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Optional

import pytest

from json_mapper import UNSET, json_property
from json_mapper.converter import DEFAULT_MAX_DEPTH, ValueConverter, json_type_name
from json_mapper.descriptors import FieldDescriptorCache
from json_mapper.types import (
    CircularReferenceError,
    ErrorType,
    MaxDepthExceededError,
    MissingRequiredFieldError,
    TypeMismatchError,
    UnknownEnumValueError,
    UnsupportedShapeError,
)

from sample_models import (
    Address,
    JsonPropertyEnum,
    JsonPropertyListOfLists,
    JsonPropertyMultitypedList,
    JsonPropertyString,
    NestedJsonProperty,
    JsonPropertyInt,
    Node,
    Ordinal,
    Person,
    Priority,
    Team,
)


@dataclass
class Computed:
    label: str = json_property()
    derived: int = json_property(init=False, default=0)


@dataclass
class NeedsArgument:
    token: str
    label: str = json_property()


@dataclass
class Holder:
    payload: Any = json_property()
    items: list = json_property(default_factory=list)


class TestSerialization:
    """Tests for ValueConverter.to_json."""

    def setup_method(self):
        """Set up test fixtures."""
        self.converter = ValueConverter(FieldDescriptorCache())

    def test_object_keys_in_declaration_order(self, sample_person, sample_person_json):
        result = self.converter.to_json(sample_person, Person)

        assert result == sample_person_json
        assert list(result) == list(sample_person_json)

    def test_key_order_is_stable_across_calls(self, sample_person):
        first = self.converter.to_json(sample_person, Person)
        second = self.converter.to_json(sample_person, Person)

        assert list(first) == list(second)

    def test_unset_fields_are_omitted(self):
        assert self.converter.to_json(JsonPropertyString(), JsonPropertyString) == {}

    def test_none_omitted_for_non_nullable_field(self):
        value = JsonPropertyString(test_string=None)

        assert self.converter.to_json(value, JsonPropertyString) == {}

    def test_none_emitted_for_nullable_field(self):
        value = Address(street="s", city="c", zip_code=None)

        assert self.converter.to_json(value, Address) == {"street": "s", "city": "c", "zipCode": None}

    def test_none_emitted_for_dynamic_field(self):
        assert self.converter.to_json(Holder(payload=None), Holder) == {"payload": None, "items": []}

    def test_enum_uses_external_value(self):
        result = self.converter.to_json(JsonPropertyEnum(enum_value=Ordinal.VALUE_TWO), JsonPropertyEnum)

        assert result == {"enumValue": "two"}
        assert self.converter.to_json(Priority.HIGH, Priority) == "high"

    def test_nested_objects(self):
        value = NestedJsonProperty(
            child1=JsonPropertyString(test_string="testString"),
            child2=JsonPropertyInt(i=4)
        )

        result = self.converter.to_json(value, NestedJsonProperty)

        assert result == {"child1": {"testString": "testString"}, "child2": {"i": 4}}
        assert list(result) == ["child1", "child2"]

    def test_heterogeneous_list(self):
        value = JsonPropertyMultitypedList(multityped_list=["foo", ["bar"]])

        result = self.converter.to_json(value, JsonPropertyMultitypedList)

        assert result == {"multitypedList": ["foo", ["bar"]]}

    def test_dynamic_list_with_objects_and_enums(self):
        value = Holder(payload=[1, 2.5, True, None, Ordinal.VALUE_ONE, Address(street="s", city="c")])

        result = self.converter.to_json(value, Holder)

        assert result["payload"] == [1, 2.5, True, None, "one", {"street": "s", "city": "c", "zipCode": None}]

    def test_list_of_lists(self):
        value = JsonPropertyListOfLists(list_of_lists=[["foo"], ["1", "2"]])

        result = self.converter.to_json(value, JsonPropertyListOfLists)

        assert result == {"listOfLists": [["foo"], ["1", "2"]]}

    def test_tuple_collection(self):
        team = Team(name="core", scores=(3, 1, 2))

        assert self.converter.to_json(team, Team) == {"name": "core", "members": [], "scores": [3, 1, 2]}

    def test_mixin_enum_in_primitive_field_writes_plain_value(self):
        class Color(str, Enum):
            RED = "red"

        class Level(IntEnum):
            HIGH = 3

        @dataclass
        class Box:
            color: str = json_property()
            level: int = json_property()
            weight: float = json_property()

        result = self.converter.to_json(Box(color=Color.RED, level=Level.HIGH, weight=Level.HIGH), Box)

        assert result == {"color": "red", "level": 3, "weight": 3.0}
        assert [type(v) for v in result.values()] == [str, int, float]

    def test_float_field_accepts_int(self):
        result = self.converter.to_json(Person(name="a", height=2), Person)

        assert result["height"] == 2.0
        assert isinstance(result["height"], float)

    def test_primitive_type_mismatch(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            self.converter.to_json(Person(name="a", age="30"), Person)

        assert exc_info.value.path == ("age",)
        assert exc_info.value.error_type == ErrorType.TYPE_MISMATCH

    def test_bool_is_not_an_int(self):
        with pytest.raises(TypeMismatchError):
            self.converter.to_json(Person(name="a", age=True), Person)

    def test_string_is_not_a_collection(self):
        with pytest.raises(TypeMismatchError):
            self.converter.to_json(Person(name="a", tags="admin"), Person)

    def test_wrong_object_type(self):
        with pytest.raises(TypeMismatchError):
            self.converter.to_json(Person(name="a", address="nowhere"), Person)

    def test_none_element_in_typed_list(self):
        with pytest.raises(TypeMismatchError) as exc_info:
            self.converter.to_json(Person(name="a", tags=["x", None]), Person)

        assert exc_info.value.path_string == "tags.[1]"

    def test_unsupported_dynamic_value(self):
        with pytest.raises(UnsupportedShapeError):
            self.converter.to_json(Holder(payload={1, 2}), Holder)

    def test_non_string_dict_key(self):
        with pytest.raises(TypeMismatchError):
            self.converter.to_json(Holder(payload={1: "one"}), Holder)

    def test_circular_reference(self):
        node = Node(value=1)
        node.children.append(node)

        with pytest.raises(CircularReferenceError) as exc_info:
            self.converter.to_json(node, Node)

        assert exc_info.value.path == ("children", "[0]")

    def test_shared_value_is_not_circular(self):
        leaf = Node(value=2)
        root = Node(value=1, children=[leaf, leaf])

        result = self.converter.to_json(root, Node)

        assert result["children"] == [{"value": 2, "children": []}, {"value": 2, "children": []}]

    def test_circular_dynamic_list(self):
        payload = []
        payload.append(payload)

        with pytest.raises(CircularReferenceError):
            self.converter.to_json(Holder(payload=payload), Holder)

    def test_max_depth(self):
        converter = ValueConverter(FieldDescriptorCache(), max_depth=3)
        tree = Node(value=0, children=[Node(value=1, children=[Node(value=2)])])

        with pytest.raises(MaxDepthExceededError):
            converter.to_json(tree, Node)

    def test_default_max_depth_fires_before_recursion_limit(self):
        payload = []
        for _ in range(400):
            payload = [payload]

        with pytest.raises(MaxDepthExceededError) as exc_info:
            self.converter.to_json(Holder(payload=payload), Holder)

        assert len(exc_info.value.path) == DEFAULT_MAX_DEPTH + 1


class TestDeserialization:
    """Tests for ValueConverter.from_json."""

    def setup_method(self):
        """Set up test fixtures."""
        self.converter = ValueConverter(FieldDescriptorCache())

    def test_object(self, sample_person, sample_person_json):
        assert self.converter.from_json(sample_person_json, Person) == sample_person

    def test_missing_optional_field_keeps_default(self):
        person = self.converter.from_json({"name": "Bob"}, Person)

        assert person.age == 0
        assert person.tags == []
        assert person.extra is UNSET
        assert person.scratch == "not mapped"

    def test_missing_required_field(self):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.converter.from_json({"child2": {"i": 4}}, NestedJsonProperty)

        assert exc_info.value.path == ("child1",)
        assert exc_info.value.error_type == ErrorType.MISSING_REQUIRED_FIELD

    def test_missing_required_nested_field(self):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.converter.from_json({"name": "A", "address": {"street": "s"}}, Person)

        assert exc_info.value.path_string == "address.city"

    def test_required_field_with_null_on_nullable_shape(self):
        @dataclass
        class Reference:
            target: Optional[str] = json_property(required=True)

        assert self.converter.from_json({"target": None}, Reference) == Reference(target=None)

    def test_null_for_non_nullable_field(self):
        with pytest.raises(TypeMismatchError, match="found null"):
            self.converter.from_json({"name": None}, Person)

    def test_unknown_keys_ignored(self):
        person = self.converter.from_json({"name": "A", "unknown": 1, "scratch": "x"}, Person)

        assert person.scratch == "not mapped"

    def test_enum_by_external_value(self):
        result = self.converter.from_json({"enumValue": "two"}, JsonPropertyEnum)

        assert result.enum_value is Ordinal.VALUE_TWO

    def test_unknown_enum_value(self):
        with pytest.raises(UnknownEnumValueError) as exc_info:
            self.converter.from_json({"enumValue": "VALUE_TWO"}, JsonPropertyEnum)

        assert exc_info.value.path == ("enumValue",)

    @pytest.mark.parametrize("json_value,expected_type", [
        ({"name": "A", "age": "30"}, "string"),
        ({"name": "A", "age": 30.5}, "number"),
        ({"name": "A", "age": True}, "boolean"),
        ({"name": "A", "active": 1}, "number"),
        ({"name": 5}, "number"),
        ({"name": "A", "tags": {"a": 1}}, "object"),
        ({"name": "A", "address": []}, "array"),
    ])
    def test_type_mismatch(self, json_value, expected_type):
        with pytest.raises(TypeMismatchError, match=f"found {expected_type}"):
            self.converter.from_json(json_value, Person)

    def test_float_accepts_integer_number(self):
        person = self.converter.from_json({"name": "A", "height": 2}, Person)

        assert person.height == 2.0
        assert isinstance(person.height, float)

    def test_root_must_be_object(self):
        with pytest.raises(TypeMismatchError):
            self.converter.from_json(["not", "an", "object"], Person)

    def test_list_of_objects(self):
        team = self.converter.from_json(
            {"name": "core", "members": [{"name": "A"}, {"name": "B", "age": 3}], "scores": [1, 2]},
            Team
        )

        assert [m.name for m in team.members] == ["A", "B"]
        assert team.members[1].age == 3
        assert team.scores == (1, 2)

    def test_list_element_error_path(self):
        with pytest.raises(MissingRequiredFieldError) as exc_info:
            self.converter.from_json({"name": "core", "members": [{"name": "A"}, {}]}, Team)

        assert exc_info.value.path_string == "members.[1].name"

    def test_list_of_lists(self):
        result = self.converter.from_json({"listOfLists": [["foo"], ["1", "2"]]}, JsonPropertyListOfLists)

        assert result.list_of_lists == [["foo"], ["1", "2"]]

    def test_dynamic_returns_raw_copy(self):
        raw = {"nested": {"a": [1, 2]}}

        holder = self.converter.from_json({"payload": raw}, Holder)

        assert holder.payload == raw
        assert holder.payload is not raw
        assert holder.payload["nested"] is not raw["nested"]

    def test_recursive_type(self):
        tree = self.converter.from_json({"value": 1, "children": [{"value": 2}]}, Node)

        assert tree == Node(value=1, children=[Node(value=2)])

    def test_non_init_field_assigned_after_construction(self):
        result = self.converter.from_json({"label": "x", "derived": 7}, Computed)

        assert result.label == "x"
        assert result.derived == 7

    def test_uninstantiable_class(self):
        with pytest.raises(UnsupportedShapeError, match="Cannot instantiate NeedsArgument"):
            self.converter.from_json({"label": "x"}, NeedsArgument)

    def test_max_depth(self):
        converter = ValueConverter(FieldDescriptorCache(), max_depth=2)

        with pytest.raises(MaxDepthExceededError):
            converter.from_json({"value": 0, "children": [{"value": 1}]}, Node)

    def test_default_max_depth_on_object_chain(self):
        tree = {"value": 0}
        for i in range(450):
            tree = {"value": i, "children": [tree]}

        with pytest.raises(MaxDepthExceededError):
            self.converter.from_json(tree, Node)

    def test_dynamic_copy_is_depth_limited(self):
        payload = []
        for _ in range(400):
            payload = [payload]

        with pytest.raises(MaxDepthExceededError) as exc_info:
            self.converter.from_json({"payload": payload}, Holder)

        assert exc_info.value.path[0] == "payload"

    def test_recursion_error_is_reported_as_max_depth(self):
        converter = ValueConverter(FieldDescriptorCache(), max_depth=100000)
        payload = []
        for _ in range(5000):
            payload = [payload]

        with pytest.raises(MaxDepthExceededError, match="recursion limit"):
            converter.from_json({"payload": payload}, Holder)


class TestRoundTrip:
    """Round trips through to_json and from_json."""

    def setup_method(self):
        """Set up test fixtures."""
        self.converter = ValueConverter(FieldDescriptorCache())

    @pytest.mark.parametrize("value", [
        JsonPropertyString(test_string="test"),
        JsonPropertyEnum(enum_value=Ordinal.VALUE_THREE),
        JsonPropertyListOfLists(list_of_lists=[["a"], [], ["b", "c"]]),
        NestedJsonProperty(child1=JsonPropertyString(test_string="x"), child2=JsonPropertyInt(i=-1)),
        Team(name="t", members=[Person(name="A", priority=Priority.HIGH, extra=[1, "two", [3]])], scores=(9,)),
        Node(value=1, children=[Node(value=2, children=[Node(value=3)])]),
    ])
    def test_round_trip(self, value):
        assert self.converter.from_json(self.converter.to_json(value, type(value)), type(value)) == value

    def test_none_in_non_nullable_field_reads_back_as_default(self):
        tree = self.converter.to_json(JsonPropertyString(test_string=None), JsonPropertyString)

        assert self.converter.from_json(tree, JsonPropertyString).test_string is UNSET


def test_json_type_name():
    assert json_type_name(None) == "null"
    assert json_type_name(False) == "boolean"
    assert json_type_name(1) == "number"
    assert json_type_name(1.5) == "number"
    assert json_type_name("") == "string"
    assert json_type_name([]) == "array"
    assert json_type_name({}) == "object"
