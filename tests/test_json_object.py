import logging

import pytest

from jamf_objects.exceptions import InvalidDataError, UnknownAttributeError, UnsupportedError
from jamf_objects.models.attributes import Attr, Identifier, Primitive
from jamf_objects.models.json_object import JSONObject
from jamf_objects.resources import Building


class _Location(JSONObject):
    OBJECT_MODEL = {
        "room": Attr(Primitive.STRING),
        "floor": Attr(Primitive.INTEGER),
    }


class _Widget(JSONObject):
    OBJECT_MODEL = {
        "id": Attr(Primitive.J_ID, identifier=Identifier.PRIMARY, readonly=True),
        "name": Attr(Primitive.STRING, required=True),
        "count": Attr(Primitive.INTEGER, minimum=0),
        "enabled": Attr(Primitive.BOOLEAN),
        "tags": Attr(Primitive.STRING, multi=True, max_items=4, unique_items=True),
        "color": Attr(Primitive.STRING, enum=("red", "blue"), aliases=("colour",)),
        "location": Attr(_Location),
    }


class _Frozen(JSONObject):
    MUTABLE = False

    OBJECT_MODEL = {
        "name": Attr(Primitive.STRING),
        "labels": Attr(Primitive.STRING, multi=True),
    }


def test_schema_compilation_is_idempotent():
    accessor = _Widget.name
    _Widget.parse_object_model()
    _Widget.parse_object_model()
    assert _Widget.name is accessor
    assert _Widget.object_model_parsed()


def test_compilation_logs_each_attribute(caplog):
    with caplog.at_level(logging.DEBUG, logger="jamf_objects.models.json_object"):
        class _Logged(JSONObject):
            OBJECT_MODEL = {"serial": Attr(Primitive.STRING)}

    assert "Creating accessors for attribute 'serial' of _Logged" in caplog.text


def test_two_primary_identifiers_are_rejected():
    with pytest.raises(UnsupportedError):
        class _Broken(JSONObject):
            OBJECT_MODEL = {
                "id": Attr(Primitive.J_ID, identifier=Identifier.PRIMARY),
                "uuid": Attr(Primitive.STRING, identifier=Identifier.PRIMARY),
            }


def test_schema_queries():
    assert _Widget.required_attributes() == ["name"]
    assert _Widget.identifier_attributes() == ["id"]
    assert _Widget.primary_identifier_attribute() == "id"
    assert _Widget.attr_key_for_alias("colour") == "color"
    assert _Widget.attr_key_for_alias("nope") is None
    with pytest.raises(UnknownAttributeError):
        _Widget.attr_def("nope")


def test_init_requires_a_dict_with_required_keys():
    with pytest.raises(InvalidDataError):
        _Widget(["name", "foo"])
    with pytest.raises(InvalidDataError):
        _Widget({"count": 1})


def test_parsed_values_and_defaults():
    w = _Widget({"id": 5, "name": "foo", "tags": ["a"], "location": {"room": "101"}})
    assert w.id == "5"
    assert w.count is None
    assert w.tags == ("a",)
    assert isinstance(w.location, _Location)
    assert w.location.room == "101"
    assert not w.has_unsaved_changes()


def test_setting_an_equal_value_is_not_a_change():
    w = _Widget({"name": "foo"})
    w.name = "foo"
    assert w.unsaved_changes() == {}
    assert not w.has_unsaved_changes()


def test_setter_records_old_and_new():
    w = _Widget({"name": "foo"})
    w.name = "bar"
    w.name = "baz"
    assert w.unsaved_changes() == {"name": {"old": "foo", "new": "baz"}}


def test_failed_validation_leaves_value_unchanged():
    w = _Widget({"name": "foo", "count": 3})
    with pytest.raises(InvalidDataError):
        w.count = -1
    assert w.count == 3
    w.count = "5"
    assert w.count == 5
    assert w.unsaved_changes()["count"] == {"old": 3, "new": 5}


def test_aliases_share_one_attribute():
    w = _Widget({"name": "foo"})
    w.colour = "red"
    assert w.color == "red"
    assert w.unsaved_changes() == {"color": {"old": None, "new": "red"}}
    with pytest.raises(InvalidDataError):
        w.color = "green"


def test_boolean_predicate():
    w = _Widget({"name": "foo"})
    w.enabled = "yes"
    assert w.is_enabled is True
    assert w.enabled is True


def test_readonly_and_immutable_attributes():
    w = _Widget({"id": "1", "name": "foo"})
    with pytest.raises(UnsupportedError):
        w.id = "2"

    frozen = _Frozen({"name": "cold", "labels": ["x"]})
    with pytest.raises(UnsupportedError):
        frozen.name = "warm"
    assert not hasattr(frozen, "labels_append")
    assert not frozen.has_unsaved_changes()
    assert frozen.to_wire_format_changes_only() == {}


def test_array_getter_returns_a_snapshot():
    w = _Widget({"name": "foo", "tags": ["a"]})
    with pytest.raises(AttributeError):
        w.tags.append("b")
    assert w.tags == ("a",)


def test_array_mutators_track_changes():
    w = _Widget({"name": "foo"})
    w.tags_append("x")
    w.tags_append("y")
    assert w.tags == ("x", "y")
    assert w.unsaved_changes()["tags"] == {"old": [], "new": ["x", "y"]}


def test_array_mutators():
    w = _Widget({"name": "foo", "tags": ["a", "b"]})
    w.tags_prepend("z")
    assert w.tags == ("z", "a", "b")
    w.tags_insert(1, "m")
    assert w.tags == ("z", "m", "a", "b")
    w.tags_delete("a")
    assert w.tags == ("z", "m", "b")
    assert w.tags_delete_at(0) == "z"
    assert w.tags_delete_at(10) is None
    w.tags_delete_if(lambda t: t == "m")
    assert w.tags == ("b",)
    assert w.unsaved_changes()["tags"] == {"old": ["a", "b"], "new": ["b"]}


def test_array_insert_rejects_out_of_range_indexes():
    w = _Widget({"name": "foo", "tags": ["a"]})
    with pytest.raises(InvalidDataError):
        w.tags_insert(3, "b")
    with pytest.raises(InvalidDataError):
        w.tags_insert(-2, "b")
    assert w.tags == ("a",)
    assert not w.has_unsaved_changes()
    w.tags_insert(1, "b")
    assert w.tags == ("a", "b")


def test_array_constraints_block_partial_mutation():
    w = _Widget({"name": "foo", "tags": ["a", "b", "c", "d"]})
    with pytest.raises(InvalidDataError):
        w.tags_append("e")
    assert w.tags == ("a", "b", "c", "d")

    w = _Widget({"name": "foo", "tags": ["a"]})
    with pytest.raises(InvalidDataError):
        w.tags_append("a")
    with pytest.raises(InvalidDataError):
        w.tags = ["q", "q"]
    with pytest.raises(InvalidDataError):
        w.tags = "not a list"
    assert w.tags == ("a",)
    assert not w.has_unsaved_changes()


def test_deleting_a_missing_item_is_not_a_change():
    w = _Widget({"name": "foo", "tags": ["a"]})
    w.tags_delete("zzz")
    assert not w.has_unsaved_changes()


def test_nested_changes_and_recursive_clear():
    w = _Widget({"name": "foo", "location": {"room": "101", "floor": 1}})
    w.location.room = "102"
    assert w.unsaved_changes() == {"location": {"room": {"old": "101", "new": "102"}}}
    assert w.to_wire_format_changes_only() == {"location": {"room": "102"}}

    w.clear_unsaved_changes()
    assert not w.location.has_unsaved_changes()
    assert w.unsaved_changes() == {}


def test_replacing_a_nested_object_is_recorded_on_the_parent():
    w = _Widget({"name": "foo", "location": {"room": "101"}})
    w.location = _Location({"room": "200"})
    changes = w.unsaved_changes()
    assert changes["location"]["new"].room == "200"
    assert w.to_wire_format_changes_only() == {"location": {"room": "200", "floor": None}}


def test_changes_only_wire_format_skips_unchanged_and_readonly():
    w = _Widget({"id": "9", "name": "foo", "count": 1})
    w.count = 2
    w.tags = ["t"]
    assert w.to_wire_format_changes_only() == {"count": 2, "tags": ["t"]}


def test_creating_path_sets_through_accessors():
    w = _Widget({"name": "new", "colour": "blue"}, creating=True)
    assert w.color == "blue"
    assert w.tags == ()
    assert set(w.unsaved_changes()) == {"name", "color"}
    with pytest.raises(UnknownAttributeError):
        _Widget({"nope": 1}, creating=True)
    with pytest.raises(InvalidDataError):
        _Widget({"name": "x", "color": "green"}, creating=True)


def test_validate_attr_without_instance():
    assert _Widget.validate_attr("count", "4") == 4
    with pytest.raises(UnknownAttributeError):
        _Widget.validate_attr("nope", 1)


def test_building_round_trip():
    b = Building({"id": 5, "name": "Building A", "city": "NY"})
    assert b.id == "5"
    wire = b.to_wire_format()
    assert wire["id"] == "5"
    assert wire["name"] == "Building A"
    assert wire["city"] == "NY"
    assert wire["country"] is None
    assert Building(wire) == b
    assert b.to_xml("building").findtext("city") == "NY"


def test_to_json_and_repr():
    w = _Widget({"id": "1", "name": "foo"})
    assert '"name": "foo"' in w.to_json()
    assert repr(w) == "_Widget(id='1', name='foo')"


def test_objects_are_unhashable():
    with pytest.raises(TypeError):
        hash(_Widget({"name": "foo"}))
