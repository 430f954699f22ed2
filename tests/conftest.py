import mongomock
import pytest
from bson import ObjectId

from app import create_app
from config import TestConfig
from utils.db import ensure_indexes, mongo


@pytest.fixture
def app():
    app = create_app(TestConfig)
    mongo.cx = mongomock.MongoClient()
    mongo.db = mongo.cx["organisations_test"]
    with app.app_context():
        ensure_indexes()
        yield app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return mongo.db


def org_payload(email="hq@acme.org", name="Acme", org_type="hospital", long=0.0, lat=0.0, **extra):
    payload = {
        "email": email,
        "name": name,
        "type": org_type,
        "location": {"long": long, "lat": lat},
        "password": "secret-pass",
        "passwordConfirm": "secret-pass",
    }
    payload.update(extra)
    return payload


@pytest.fixture
def create_org(client):
    """POST an organisation and return (id, token)."""
    def _create(**kwargs):
        response = client.post("/api/v1/organisations/", json=org_payload(**kwargs))
        assert response.status_code == 201, response.get_json()
        body = response.get_json()
        return body["data"]["organisation"]["_id"], body["token"]
    return _create


def auth(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def missing_id():
    return str(ObjectId())
