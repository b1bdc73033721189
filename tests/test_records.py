import datetime as dt

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from epass import RecordStore, StorageError, VisitorValidationError
from epass.records import (
    INVALID_CONTACT_MESSAGE,
    INVALID_PERSONS_MESSAGE,
    MISSING_FIELDS_MESSAGE,
    validate_submission,
)

from conftest import FIXED_NOW


@pytest.mark.parametrize("field", ["visitorName", "noOfPersons", "purpose", "contactNumber", "visitDate"])
def test_missing_field_is_rejected_without_persisting(store, collection, valid_form, field):
    del valid_form[field]
    with pytest.raises(VisitorValidationError, match=MISSING_FIELDS_MESSAGE):
        store.submit(valid_form)
    assert collection.count_documents({}) == 0


@pytest.mark.parametrize("value", ["", "   ", None])
def test_blank_field_counts_as_missing(store, valid_form, value):
    valid_form["purpose"] = value
    with pytest.raises(VisitorValidationError, match=MISSING_FIELDS_MESSAGE):
        store.submit(valid_form)


def test_missing_field_reported_before_bad_contact_number(valid_form):
    valid_form["contactNumber"] = "12345"
    valid_form["visitDate"] = ""
    with pytest.raises(VisitorValidationError) as excinfo:
        validate_submission(valid_form)
    assert str(excinfo.value) == MISSING_FIELDS_MESSAGE


@pytest.mark.parametrize(
    "number", ["12345", "98765432101", "98765abcde", "+919876543", " 9876543210 ", "9876543210\n"]
)
def test_contact_number_must_be_ten_digits(store, collection, valid_form, number):
    valid_form["contactNumber"] = number
    with pytest.raises(VisitorValidationError) as excinfo:
        store.submit(valid_form)
    assert str(excinfo.value) == INVALID_CONTACT_MESSAGE
    assert collection.count_documents({}) == 0


def test_contact_number_checked_before_person_count(valid_form):
    valid_form["contactNumber"] = "12345"
    valid_form["noOfPersons"] = "many"
    with pytest.raises(VisitorValidationError, match="contact number"):
        validate_submission(valid_form)


@pytest.mark.parametrize(
    "persons", ["many", 0, -3, "0", 2.5, True, "100000000000000000000", 1e300, 2**63, float("inf")]
)
def test_person_count_must_be_positive_integer(store, collection, valid_form, persons):
    valid_form["noOfPersons"] = persons
    with pytest.raises(VisitorValidationError) as excinfo:
        store.submit(valid_form)
    assert str(excinfo.value) == INVALID_PERSONS_MESSAGE
    assert collection.count_documents({}) == 0


@pytest.mark.parametrize("persons, expected", [(3, 3), ("4", 4), (" 5 ", 5), (6.0, 6)])
def test_person_count_accepts_integral_values(valid_form, persons, expected):
    valid_form["noOfPersons"] = persons
    assert validate_submission(valid_form)["noOfPersons"] == expected


def test_submit_persists_one_record_with_server_timestamp(store, collection, valid_form):
    valid_form["createdAt"] = "1999-01-01T00:00:00Z"

    record = store.submit(valid_form)

    assert record.id
    assert collection.count_documents({}) == 1
    assert record.created_at == FIXED_NOW.replace(microsecond=123000)
    assert record.visitor_name == "Asha Rao"
    assert record.no_of_persons == 2

    doc = collection.find_one({})
    assert str(doc["_id"]) == record.id
    assert doc["contactNumber"] == "9876543210"
    assert doc["createdAt"].year == 2024


def test_submit_accepts_numeric_contact_number(store, valid_form):
    valid_form["contactNumber"] = 9876543210
    assert store.submit(valid_form).contact_number == "9876543210"


def test_get_returns_persisted_record(store, valid_form):
    record = store.submit(valid_form)
    loaded = store.get(record.id)
    assert loaded is not None
    assert loaded.id == record.id
    assert loaded.purpose == "Meeting"


@pytest.mark.parametrize("record_id", ["not-an-object-id", "6630f1c2a1b2c3d4e5f60718"])
def test_get_unknown_record_returns_none(store, record_id):
    assert store.get(record_id) is None


def test_count_tracks_submissions(store, valid_form):
    assert store.count() == 0
    store.submit(valid_form)
    store.submit(valid_form)
    assert store.count() == 2


class _UnavailableCollection:
    def insert_one(self, document):
        raise ServerSelectionTimeoutError("no servers available")


def test_database_failure_is_reported_as_storage_error(valid_form):
    store = RecordStore(_UnavailableCollection(), clock=lambda: dt.datetime.now(dt.timezone.utc))
    with pytest.raises(StorageError, match="no servers available"):
        store.submit(valid_form)
