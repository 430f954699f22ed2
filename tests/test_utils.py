import logging
from datetime import datetime
from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from app import create_app
from config import TestConfig
from utils.app_error import AppError
from utils.db import mongo, transaction
from utils.helpers import filter_obj, serialize, to_object_id


def test_filter_obj_keeps_only_allowed_keys():
    body = {"name": "A", "employees": 3, "password": "x", "type": "school"}

    assert filter_obj(body, "name", "Id", "employees") == {"name": "A", "employees": 3}
    assert filter_obj(body) == {}


def test_serialize_converts_bson_types():
    oid = ObjectId()
    when = datetime(2024, 5, 1, 10, 30)

    assert serialize({"_id": oid, "items": [{"at": when}], "n": 1}) == {
        "_id": str(oid),
        "items": [{"at": "2024-05-01T10:30:00"}],
        "n": 1,
    }


def test_to_object_id():
    oid = ObjectId()
    assert to_object_id(str(oid)) == oid
    assert to_object_id(oid) is oid

    with pytest.raises(AppError) as missing:
        to_object_id(None, "session id")
    assert missing.value.status_code == 400
    assert "session id" in missing.value.message

    with pytest.raises(AppError):
        to_object_id("1234")


def test_app_error_status():
    assert AppError("gone", 404).to_dict() == {"status": "fail", "message": "gone"}
    assert AppError("boom").status == "error"


def test_transaction_disabled_yields_none(app):
    with transaction() as session:
        assert session is None


def test_transaction_enabled_uses_client_session(app, monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(mongo, "cx", client)
    app.config["MONGO_TRANSACTIONS"] = True

    with transaction() as session:
        assert session is client.start_session.return_value.__enter__.return_value

    client.start_session.assert_called_once_with()
    session.start_transaction.assert_called_once_with()


def test_unexpected_errors_become_json_500(app):
    app.add_url_rule("/boom", "boom", lambda: 1 / 0)

    response = app.test_client().get("/boom")

    assert response.status_code == 500
    assert response.get_json() == {"status": "error", "message": "Something went wrong"}


def test_unknown_route_is_json_404(app):
    response = app.test_client().get("/nowhere")

    assert response.status_code == 404
    assert response.get_json()["status"] == "fail"


def test_disabled_index_creation_is_logged_outside_tests(caplog):
    class UnindexedConfig(TestConfig):
        TESTING = False

    with caplog.at_level(logging.WARNING, logger="utils.db"):
        create_app(UnindexedConfig)

    assert any("MONGO_ENSURE_INDEXES is off" in r.getMessage() for r in caplog.records)


def test_disabled_index_creation_is_quiet_in_tests(caplog):
    with caplog.at_level(logging.WARNING, logger="utils.db"):
        create_app(TestConfig)

    assert not any("MONGO_ENSURE_INDEXES is off" in r.getMessage() for r in caplog.records)
