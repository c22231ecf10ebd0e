import pytest

from jamf_objects.classic import ComputerGroup
from jamf_objects.classic.criteria import Criteria, Criterion
from jamf_objects.exceptions import InvalidDataError, MissingDataError, NoSuchItemError, UnsupportedError


class _FakeContainer:
    def __init__(self):
        self.update_calls = 0

    def should_update(self):
        self.update_calls += 1


def _dept(value="IT", and_or="and"):
    return Criterion(name="Department", search_type="is", value=value, and_or=and_or)


def test_criterion_validates_its_parts():
    with pytest.raises(InvalidDataError):
        Criterion(name="Department", search_type="is", value="IT", and_or="xor")
    with pytest.raises(InvalidDataError):
        Criterion(name="Department", search_type="sounds like", value="IT")
    with pytest.raises(InvalidDataError):
        Criterion(name="Last Check-in", search_type="more than x days ago", value="a week")
    with pytest.raises(InvalidDataError):
        Criterion(name="Last Enrollment", search_type="before (yyyy-mm-dd)", value="2024-1-1")

    crtn = Criterion(name="Last Enrollment", search_type="after (yyyy-mm-dd)", value="2024-01-01", and_or="OR")
    assert crtn.and_or == "or"
    crtn.search_type = "more than x days ago"
    with pytest.raises(InvalidDataError):
        crtn.value = "2024-01-01"
    crtn.value = 30
    assert crtn.value == 30


def test_criterion_equality_ignores_priority_and_parens():
    a = Criterion(name="Department", search_type="is", value="IT", priority=0)
    b = Criterion(name="Department", search_type="is", value="IT", priority=3, paren="opening")
    assert a == b
    assert hash(a) == hash(b)
    assert a != _dept(value="HR")
    assert sorted([_dept("IT"), _dept("HR")])[0].value == "HR"


def test_paren():
    crtn = _dept()
    assert crtn.paren is None
    crtn.paren = "opening"
    assert crtn.opening_paren and not crtn.closing_paren
    crtn.paren = "closing"
    assert crtn.paren == "closing"
    crtn.paren = None
    assert not crtn.opening_paren and not crtn.closing_paren
    with pytest.raises(InvalidDataError):
        crtn.paren = "both"


def test_duplicates_are_rejected():
    criteria = Criteria([_dept()])
    with pytest.raises(InvalidDataError):
        criteria.append_criterion(_dept())
    with pytest.raises(InvalidDataError):
        Criteria([_dept(), _dept()])
    criteria.append_criterion(_dept(and_or="or"))
    assert len(criteria) == 2


def test_incomplete_criteria_are_rejected():
    criteria = Criteria()
    with pytest.raises(InvalidDataError):
        criteria.append_criterion(Criterion(name="Department", search_type="is"))
    with pytest.raises(InvalidDataError):
        criteria.append_criterion(Criterion(search_type="is", value="IT"))
    with pytest.raises(InvalidDataError):
        criteria.append_criterion("Department is IT")
    with pytest.raises(InvalidDataError):
        criteria.criteria = [_dept(), "nope"]


def test_priorities_follow_positions():
    criteria = Criteria([_dept("IT")])
    criteria.prepend_criterion(_dept("HR"))
    criteria.insert_criterion(1, _dept("Sales"))
    criteria.append_criterion(_dept("Ops"))
    assert [c.value for c in criteria] == ["HR", "Sales", "IT", "Ops"]
    assert [c.priority for c in criteria] == [0, 1, 2, 3]

    criteria.delete_criterion(1)
    assert [c.value for c in criteria] == ["HR", "IT", "Ops"]
    assert [c.priority for c in criteria] == [0, 1, 2]
    assert criteria[1].value == "IT"


def test_insert_criterion_rejects_priorities_past_the_end():
    criteria = Criteria([_dept("IT")])
    with pytest.raises(NoSuchItemError):
        criteria.insert_criterion(5, _dept("HR"))
    with pytest.raises(NoSuchItemError):
        criteria.insert_criterion(-1, _dept("HR"))
    assert [c.value for c in criteria] == ["IT"]
    criteria.insert_criterion(1, _dept("HR"))
    assert [c.priority for c in criteria] == [0, 1]


def test_set_criterion_replaces_in_place():
    criteria = Criteria([_dept("IT"), _dept("HR")])
    criteria.set_criterion(0, _dept("IT"))
    criteria.set_criterion(0, _dept("Ops"))
    assert [c.value for c in criteria] == ["Ops", "HR"]
    with pytest.raises(InvalidDataError):
        criteria.set_criterion(0, _dept("HR"))
    with pytest.raises(NoSuchItemError):
        criteria.set_criterion(5, _dept("Legal"))


def test_criteria_can_never_become_empty_by_deletion():
    criteria = Criteria([_dept()])
    with pytest.raises(MissingDataError):
        criteria.delete_criterion(0)
    assert len(criteria) == 1
    with pytest.raises(NoSuchItemError):
        criteria.delete_criterion(3)


def test_changes_notify_the_container():
    container = _FakeContainer()
    criteria = Criteria([_dept()], container=container)
    assert container.update_calls == 1
    criteria.append_criterion(_dept("HR"))
    criteria.delete_criterion(0)
    criteria.clear()
    assert container.update_calls == 4
    assert len(criteria) == 0


def test_from_api_sorts_by_priority():
    raw = [
        {"priority": 1, "and_or": "or", "name": "Department", "search_type": "is", "value": "HR",
         "opening_paren": "false", "closing_paren": "true"},
        {"priority": 0, "and_or": "and", "name": "Department", "search_type": "is", "value": "IT",
         "opening_paren": "true", "closing_paren": "false"},
    ]
    criteria = Criteria.from_api(raw)
    assert [c.value for c in criteria] == ["IT", "HR"]
    assert criteria[0].paren == "opening"
    assert criteria[1].paren == "closing"


def test_to_xml():
    criteria = Criteria([_dept("IT"), _dept("HR", and_or="or")])
    xml = criteria.to_xml()
    assert xml.findtext("size") == "2"
    items = xml.findall("criterion")
    assert [i.findtext("priority") for i in items] == ["0", "1"]
    assert items[1].findtext("and_or") == "or"
    assert items[0].findtext("opening_paren") == "false"


SMART_GROUP = {
    "id": 3,
    "name": "IT Macs",
    "is_smart": True,
    "criteria": [
        {"priority": 0, "and_or": "and", "name": "Department", "search_type": "is", "value": "IT",
         "opening_paren": False, "closing_paren": False},
    ],
    "computers": [{"id": 42, "name": "mac42"}],
}


def test_smart_group_updates_with_criteria(cnx):
    group = ComputerGroup(SMART_GROUP, cnx=cnx)
    assert group.is_smart
    assert group.member_ids == [42]
    assert not group.need_to_update

    group.criteria.append_criterion(_dept("HR", and_or="or"))
    assert group.need_to_update
    group.update()

    path, xml = cnx.writes("C_PUT")[0]
    assert path == "computergroups/id/3"
    assert "<is_smart>true</is_smart>" in xml
    assert "<value>HR</value>" in xml
    assert not group.need_to_update


def test_replacing_criteria(cnx):
    group = ComputerGroup(SMART_GROUP, cnx=cnx)
    with pytest.raises(InvalidDataError):
        group.criteria = [_dept()]
    new_criteria = Criteria([_dept("Ops")])
    group.criteria = new_criteria
    assert new_criteria.container is group
    assert group.need_to_update


def test_static_groups_cannot_have_criteria(cnx):
    group = ComputerGroup({"id": 4, "name": "Lab", "is_smart": False}, cnx=cnx)
    group.criteria.append_criterion(_dept())
    with pytest.raises(UnsupportedError):
        group.update()


def test_smart_and_static_group_lists(directory):
    directory.c_routes["computergroups"] = {
        "computer_groups": [
            {"id": 7, "name": "Lab Macs", "is_smart": False},
            {"id": 3, "name": "IT Macs", "is_smart": True},
        ]
    }
    assert [g["id"] for g in ComputerGroup.all_smart()] == [3]
    assert [g["id"] for g in ComputerGroup.all_static()] == [7]
