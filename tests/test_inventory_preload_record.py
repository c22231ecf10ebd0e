import pytest

from jamf_objects.exceptions import AlreadyExistsError, InvalidDataError, MissingDataError, NoSuchItemError
from jamf_objects.resources import InventoryPreloadRecord

RECORDS = "v2/inventory-preload/records"

EXISTING = {
    "id": "1",
    "serialNumber": "C02ABC",
    "deviceType": "Computer",
    "username": "jdoe",
    "extensionAttributes": [],
}


@pytest.fixture
def records(cnx):
    cnx.routes[RECORDS] = {"totalCount": 1, "results": [dict(EXISTING)]}
    cnx.routes[f"{RECORDS}/1"] = dict(EXISTING)
    return cnx


def test_device_type_must_be_known(records):
    rec = InventoryPreloadRecord.create(serialNumber="C02NEW")
    with pytest.raises(InvalidDataError):
        rec.deviceType = "Toaster"
    assert rec.deviceType is None


def test_save_requires_device_type_then_posts(records):
    rec = InventoryPreloadRecord.create(serialNumber="C02NEW")
    with pytest.raises(MissingDataError):
        rec.save()
    assert records.writes("POST") == []

    rec.deviceType = "Computer"
    rec.save()

    posted = records.writes("POST")
    assert len(posted) == 1
    path, body = posted[0]
    assert path == RECORDS
    assert body["serialNumber"] == "C02NEW"
    assert body["deviceType"] == "Computer"
    assert rec.id == "101"
    assert rec.in_jss
    assert not rec.has_unsaved_changes()


def test_save_requires_serial_number(records):
    rec = InventoryPreloadRecord.create(deviceType="Computer")
    with pytest.raises(MissingDataError):
        rec.save()


def test_serial_numbers_must_be_unique(records):
    with pytest.raises(AlreadyExistsError):
        InventoryPreloadRecord.create(serialNumber="c02abc")


def test_email_address_is_validated(records):
    rec = InventoryPreloadRecord.create(serialNumber="C02NEW", deviceType="Computer")
    with pytest.raises(InvalidDataError):
        rec.emailAddress = "not-an-address"
    rec.emailAddress = "jdoe@example.com"
    assert rec.emailAddress == "jdoe@example.com"


def test_lookups(records):
    assert InventoryPreloadRecord.all_serialNumbers() == ["C02ABC"]
    assert InventoryPreloadRecord.valid_id("c02abc") == "1"
    assert InventoryPreloadRecord.valid_id("nope") is None
    assert InventoryPreloadRecord.map_all_ids_to("username") == {"1": "jdoe"}


def test_fetch_by_any_identifier(records):
    rec = InventoryPreloadRecord.fetch("C02ABC")
    assert rec.id == "1"
    rec = InventoryPreloadRecord.fetch(serialNumber="C02ABC")
    assert rec.username == "jdoe"
    with pytest.raises(NoSuchItemError):
        InventoryPreloadRecord.fetch("nope")


def test_existing_record_updates_with_put(records):
    rec = InventoryPreloadRecord.fetch("C02ABC")
    rec.serialNumber = "C02ABC"
    rec.username = "asmith"
    rec.save()
    path, body = records.writes("PUT")[0]
    assert path == f"{RECORDS}/1"
    assert body["username"] == "asmith"
    assert body["serialNumber"] == "C02ABC"


def test_delete_ids_reports_unknown_idents(records):
    missing = InventoryPreloadRecord.delete_ids("C02ABC", "nope")
    assert missing == ["nope"]
    assert ("DELETE", f"{RECORDS}/1", None) in records.requests


def test_history_is_shared_by_the_collection(records):
    records.routes["v2/inventory-preload/history"] = {"totalCount": 0, "results": []}
    rec = InventoryPreloadRecord.fetch("C02ABC")
    assert rec.change_log() == []
    rec.add_change_log_note("Imported from spreadsheet")
    assert ("v2/inventory-preload/history", {"note": "Imported from spreadsheet"}) in records.writes("POST")
