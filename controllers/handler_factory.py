"""
Generic handlers shared by resource blueprints.

Each builder takes a model class exposing ``find_by_id`` / ``delete`` and
returns a view function taking the document id as its ``doc_id`` argument.
"""

import logging

from flask import jsonify

from utils.app_error import AppError
from utils.helpers import serialize, to_object_id

logger = logging.getLogger(__name__)


def get_one(Model, resource_name):
    def handler(doc_id):
        doc = Model.find_by_id(to_object_id(doc_id))
        if not doc:
            raise AppError(f"No {resource_name} found with that ID", 404)

        public = getattr(Model, "public", None)
        if public:
            doc = public(doc)

        return jsonify({"status": "success", "data": {resource_name: serialize(doc)}}), 200

    handler.__name__ = f"get_{resource_name}"
    return handler


def delete_one(Model):
    name = Model.__name__.lower()

    def handler(doc_id):
        result = Model.delete(to_object_id(doc_id))
        if result.deleted_count == 0:
            raise AppError(f"No {name} found with that ID", 404)

        logger.info("Deleted %s %s", name, doc_id)
        return "", 204

    handler.__name__ = f"delete_{name}"
    return handler
