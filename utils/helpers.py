from datetime import datetime

from bson import ObjectId
from flask import request

from utils.app_error import AppError


def filter_obj(obj, *allowed_fields):
    """Return a copy of ``obj`` holding only the whitelisted keys."""
    return {key: value for key, value in obj.items() if key in allowed_fields}


def request_data():
    # Query string first, JSON body overrides it
    data = request.args.to_dict()
    body = request.get_json(silent=True)
    if isinstance(body, dict):
        data.update(body)
    return data


def to_object_id(value, label="id"):
    if isinstance(value, ObjectId):
        return value
    if not value:
        raise AppError(f"Missing {label}", 400)
    if not ObjectId.is_valid(value):
        raise AppError(f"Invalid {label}: {value}", 400)
    return ObjectId(value)


def serialize(value):
    """Make a MongoDB document JSON friendly (ObjectId -> str, datetime -> ISO)."""
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, dict):
        return {key: serialize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize(item) for item in value]
    return value
