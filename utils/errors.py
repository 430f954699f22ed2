"""
utils/errors.py
-----------------
JSON error handlers for the whole app. Route handlers just raise;
everything they raise ends up in one of the handlers below.
"""

import logging

from bson.errors import InvalidId
from flask import jsonify
from pymongo.errors import DuplicateKeyError
from werkzeug.exceptions import HTTPException

from utils.app_error import AppError

logger = logging.getLogger(__name__)


def register_error_handlers(app):

    @app.errorhandler(AppError)
    def handle_app_error(err):
        return jsonify(err.to_dict()), err.status_code

    @app.errorhandler(InvalidId)
    def handle_invalid_id(err):
        return handle_app_error(AppError(f"Invalid id: {err}", 400))

    @app.errorhandler(DuplicateKeyError)
    def handle_duplicate_key(err):
        fields = ", ".join((err.details or {}).get("keyValue", {}).keys()) or "field"
        return handle_app_error(AppError(f"Duplicate value for {fields}", 409))

    @app.errorhandler(HTTPException)
    def handle_http_exception(err):
        return handle_app_error(AppError(err.description, err.code))

    @app.errorhandler(Exception)
    def handle_unexpected(err):
        logger.exception("Unhandled error: %s", err)
        return handle_app_error(AppError("Something went wrong", 500))
