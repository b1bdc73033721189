import datetime as dt
from pathlib import Path

import fitz
import mongomock
import pytest
from fastapi.testclient import TestClient

from epass import PassRenderer, RecordStore, Settings
from epass.records import VisitorRecord
from main import create_app

FIXED_NOW = dt.datetime(2024, 5, 1, 9, 30, 0, 123456, tzinfo=dt.timezone.utc)

VALID_FORM = {
    "visitorName": "Asha Rao",
    "noOfPersons": 2,
    "purpose": "Meeting",
    "contactNumber": "9876543210",
    "visitDate": "2024-05-01",
}


def write_png(path: Path, size: int = 20) -> Path:
    pix = fitz.Pixmap(fitz.csRGB, fitz.IRect(0, 0, size, size), False)
    pix.clear_with(200)
    pix.save(str(path))
    return path


@pytest.fixture
def valid_form() -> dict:
    return dict(VALID_FORM)


@pytest.fixture
def collection():
    return mongomock.MongoClient()["visitor_epass"]["visitors"]


@pytest.fixture
def store(collection) -> RecordStore:
    return RecordStore(collection, clock=lambda: FIXED_NOW)


@pytest.fixture
def public_dir(tmp_path: Path) -> Path:
    root = tmp_path / "public"
    root.mkdir()
    return root


@pytest.fixture
def renderer(public_dir: Path) -> PassRenderer:
    return PassRenderer(public_dir / "pdfs", public_dir)


@pytest.fixture
def record() -> VisitorRecord:
    return VisitorRecord(
        id="6630f1c2a1b2c3d4e5f60718",
        visitor_name="Asha Rao",
        no_of_persons=2,
        purpose="Meeting",
        contact_number="9876543210",
        visit_date="2024-05-01",
        created_at=FIXED_NOW,
    )


@pytest.fixture
def settings(public_dir: Path) -> Settings:
    return Settings(public_dir=public_dir, allowed_origins=("http://localhost:8501",))


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def client(settings: Settings, mongo_client):
    app = create_app(settings, mongo_client=mongo_client)
    with TestClient(app) as test_client:
        yield test_client
