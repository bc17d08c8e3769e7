from datetime import datetime

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

import config
from database import ensure_indexes, get_db
from utils.errors import PaymentInfrastructureError
from utils.paystack import get_gateway


class FakeGateway:
    """In-memory stand-in for the Paystack client."""

    def __init__(self):
        self.initialized = []
        self.captures = {}
        self.fail = False

    def initialize_transaction(self, email, amount, reference, metadata=None, currency="NGN", callback_url=None):
        if self.fail:
            raise PaymentInfrastructureError()
        self.initialized.append({"email": email, "amount": amount, "reference": reference, "metadata": metadata})
        return {
            "reference": reference,
            "authorization_url": f"https://checkout.paystack.test/{reference}",
            "access_code": f"code-{reference}",
        }

    def pay(self, reference, amount=None):
        """Simulate the pilgrim completing the hosted checkout."""
        sent = next(i for i in self.initialized if i["reference"] == reference)
        self.captures[reference] = {"status": "success", "amount": sent["amount"] if amount is None else amount}

    def verify_transaction(self, reference):
        return self.captures.get(reference, {"status": "abandoned", "amount": 0})


@pytest.fixture(autouse=True)
def no_outbound(monkeypatch):
    monkeypatch.setattr(config, "WEBHOOK_URLS", {k: "" for k in config.WEBHOOK_URLS})
    monkeypatch.setattr(config, "EMAIL_ENDPOINT_URL", "")
    monkeypatch.setattr(config, "EMAIL_ENDPOINT_TOKEN", None)
    monkeypatch.setattr(config, "SMTP_HOST", None)
    monkeypatch.setattr(config, "PAYSTACK_VERIFY_PAYMENTS", True)


@pytest.fixture
def db():
    database = mongomock.MongoClient().al_mutamir_test
    ensure_indexes(database)
    return database


@pytest.fixture
def gateway():
    return FakeGateway()


def _insert_user(db, role, **fields):
    doc = {"role": role, "email": f"{role}-{ObjectId()}@example.com", "created_at": datetime.utcnow(), **fields}
    doc["_id"] = db.users.insert_one(doc).inserted_id
    return doc


@pytest.fixture
def admin(db):
    return _insert_user(db, "admin", name="Admin")


@pytest.fixture
def pilgrim(db):
    return _insert_user(db, "pilgrim", name="Aisha Bello", phone="08030000000")


@pytest.fixture
def agency(db):
    return _insert_user(db, "agency", agency_name="Baraka Travels", verified=True)


@pytest.fixture
def make_agency(db):
    def _make(**fields):
        fields.setdefault("agency_name", "Agency")
        fields.setdefault("verified", False)
        return _insert_user(db, "agency", **fields)
    return _make


@pytest.fixture
def make_package(db):
    def _make(agency=None, **fields):
        doc = {
            "title": "Umrah Classic",
            "price": 500000,
            "duration": 14,
            "package_type": "Umrah",
            "status": "active",
            "min_payment_percent": 20,
            "agency_id": agency["_id"] if agency else None,
            "agency_name": agency.get("agency_name") if agency else config.PLATFORM_NAME,
            "created_at": datetime.utcnow(),
        }
        doc.update(fields)
        doc["_id"] = db.packages.insert_one(doc).inserted_id
        return doc
    return _make


@pytest.fixture
def headers():
    def _headers(user):
        return {"X-User-ID": str(user["_id"]), "X-User-Role": user["role"]}
    return _headers


@pytest.fixture
def client(db, gateway):
    from main import app

    app.dependency_overrides[get_db] = lambda: db
    app.dependency_overrides[get_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()
