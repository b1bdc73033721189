"""
Visitor record validation and persistence.

`RecordStore` wraps a MongoDB collection handed to it by the application at
startup. Submissions are validated in a fixed order before anything touches
the database, so a rejected form never leaves a partial document behind.
"""

from __future__ import annotations

import datetime as dt
import logging
import re
from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.collection import Collection
from pymongo.errors import PyMongoError

from .errors import StorageError, VisitorValidationError

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("visitorName", "noOfPersons", "purpose", "contactNumber", "visitDate")
CONTACT_NUMBER_PATTERN = re.compile(r"[0-9]{10}")
MAX_PERSONS = 2**63 - 1  # BSON int64

MISSING_FIELDS_MESSAGE = "All fields are required."
INVALID_CONTACT_MESSAGE = "Invalid contact number. Please enter a 10-digit number."
INVALID_PERSONS_MESSAGE = "Invalid number of persons. Please enter a positive number."


@dataclass(frozen=True)
class VisitorRecord:
    """A persisted visitor submission. Frozen: records are never updated."""

    id: str
    visitor_name: str
    no_of_persons: int
    purpose: str
    contact_number: str
    visit_date: str
    created_at: dt.datetime

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "VisitorRecord":
        return cls(
            id=str(doc["_id"]),
            visitor_name=doc["visitorName"],
            no_of_persons=int(doc["noOfPersons"]),
            purpose=doc["purpose"],
            contact_number=doc["contactNumber"],
            visit_date=doc["visitDate"],
            created_at=doc["createdAt"],
        )


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return not value.strip()
    return False


def _parse_persons(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        number = value
    elif isinstance(value, float):
        if not value.is_integer():
            return None
        number = int(value)
    elif isinstance(value, str):
        try:
            number = int(value.strip())
        except ValueError:
            return None
    else:
        return None
    return number if 0 < number <= MAX_PERSONS else None


def validate_submission(fields: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Check a raw form submission and return the normalized document fields.

    Checks run in order (presence, contact number, person count) and the
    first failure raises `VisitorValidationError` with a user-facing message.
    """
    if any(_is_blank(fields.get(name)) for name in REQUIRED_FIELDS):
        raise VisitorValidationError(MISSING_FIELDS_MESSAGE)

    contact_number = str(fields["contactNumber"])
    if not CONTACT_NUMBER_PATTERN.fullmatch(contact_number):
        raise VisitorValidationError(INVALID_CONTACT_MESSAGE)

    persons = _parse_persons(fields["noOfPersons"])
    if persons is None:
        raise VisitorValidationError(INVALID_PERSONS_MESSAGE)

    return {
        "visitorName": str(fields["visitorName"]).strip(),
        "noOfPersons": persons,
        "purpose": str(fields["purpose"]).strip(),
        "contactNumber": contact_number,
        "visitDate": str(fields["visitDate"]).strip(),
    }


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class RecordStore:
    """Validates and persists visitor submissions into one collection."""

    def __init__(self, collection: Collection, clock: Callable[[], dt.datetime] = _utcnow):
        self.collection = collection
        self.clock = clock

    def submit(self, fields: Mapping[str, Any]) -> VisitorRecord:
        document = validate_submission(fields)

        # BSON datetimes carry millisecond precision
        now = self.clock()
        document["createdAt"] = now.replace(microsecond=now.microsecond // 1000 * 1000)

        try:
            result = self.collection.insert_one(document)
        except PyMongoError as exc:
            logger.error("Failed to persist visitor record: %s", exc)
            raise StorageError(f"Could not save visitor record: {exc}") from exc

        document["_id"] = result.inserted_id
        record = VisitorRecord.from_document(document)
        logger.info("Persisted visitor record %s", record.id)
        return record

    def get(self, record_id: str) -> Optional[VisitorRecord]:
        try:
            oid = ObjectId(record_id)
        except (InvalidId, TypeError):
            return None
        try:
            doc = self.collection.find_one({"_id": oid})
        except PyMongoError as exc:
            raise StorageError(f"Could not load visitor record: {exc}") from exc
        return VisitorRecord.from_document(doc) if doc else None

    def count(self) -> int:
        try:
            return self.collection.count_documents({})
        except PyMongoError as exc:
            raise StorageError(f"Could not count visitor records: {exc}") from exc
