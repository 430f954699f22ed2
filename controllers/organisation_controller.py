import logging
from numbers import Number

from flask import Blueprint, current_app, g, jsonify
from pymongo.errors import DuplicateKeyError

from controllers import handler_factory
from models.organisation import Organisation
from models.request import Request
from models.session import Session
from utils.app_error import AppError
from utils.auth import create_send_token, ensure_self, login_required, restrict_to_self
from utils.db import transaction
from utils.helpers import filter_obj, request_data, serialize, to_object_id

logger = logging.getLogger(__name__)

organisations_bp = Blueprint("organisations", __name__, url_prefix="/api/v1/organisations")


def _success(status_code=200, **data):
    return jsonify({"status": "success", "data": serialize(data)}), status_code


# Timestamps are matched by equality, so only plain values are accepted
def _is_timestamp(value):
    return isinstance(value, (str, Number)) and not isinstance(value, bool)


get_organisation = handler_factory.get_one(Organisation, "organisation")
delete_organisation = handler_factory.delete_one(Organisation)

organisations_bp.add_url_rule("/<doc_id>", view_func=get_organisation, methods=["GET"])
organisations_bp.add_url_rule(
    "/<doc_id>",
    view_func=login_required(restrict_to_self(delete_organisation)),
    methods=["DELETE"],
)


# -----------------------------
# CREATE ORGANISATION
# -----------------------------
@organisations_bp.route("/", methods=["POST"])
def create_organisation():
    org = Organisation.from_payload(request_data())
    try:
        doc = org.save()
    except DuplicateKeyError:
        raise AppError("Organisation already exists", 409)

    logger.info("Created organisation %s (%s)", doc["_id"], org.email)
    return create_send_token(doc, 201)


# -----------------------------
# CURRENT ORGANISATION
# -----------------------------
@organisations_bp.route("/me", methods=["GET"])
@login_required
def get_me():
    return get_organisation(g.organisation["_id"])


# -----------------------------
# UPDATE ORGANISATION
# -----------------------------
@organisations_bp.route("/", methods=["PATCH"])
@login_required
def update_organisation():
    data = request_data()

    if "password" in data or "passwordConfirm" in data:
        raise AppError(
            "This route is not for password update, use /updateMyPassword for that", 400
        )

    filtered_body = filter_obj(data, *Organisation.UPDATABLE_FIELDS)
    if not filtered_body:
        raise AppError(
            f"Nothing to update. Allowed fields: {', '.join(Organisation.UPDATABLE_FIELDS)}", 400
        )

    org_id = to_object_id(data.get("_id") or g.organisation["_id"])
    ensure_self(org_id)
    updated = Organisation.update(org_id, filtered_body)
    if not updated:
        raise AppError("No organisation found with that ID", 404)

    logger.info("Updated organisation %s: %s", org_id, sorted(filtered_body))
    return _success(organisation=Organisation.public(updated))


# -----------------------------
# ORGANISATIONS OF A SESSION
# -----------------------------
@organisations_bp.route("/by-session", methods=["GET"])
def get_all_organisation_by_session():
    data = request_data()
    session = Session.find_by_id(to_object_id(data.get("_id"), "session id"))
    if not session:
        raise AppError("No session found with that ID", 404)

    return _success(organisations=Organisation.find_many(session.get("organisations")))


# -----------------------------
# ORGANISATIONS OF A TYPE, BY DISTANCE
# -----------------------------
@organisations_bp.route("/nearby", methods=["GET"])
def get_all_organisation():
    data = request_data()
    org_type = data.get("type")
    if not isinstance(org_type, str) or not org_type.strip():
        raise AppError("Please provide an organisation type", 400)

    reference = Organisation.find_by_id(to_object_id(data.get("_id")), {"location": 1})
    if not reference:
        raise AppError("No organisation found with that ID", 404)

    organisations = Organisation.find_nearby(
        reference, org_type, current_app.config["ORGANISATION_PROXIMITY_ORDER"]
    )
    return _success(organisations=organisations)


# -----------------------------
# REQUESTS OF AN ORGANISATION
# -----------------------------
@organisations_bp.route("/<org_id>/requests", methods=["GET"])
def get_all_requests(org_id):
    org = Organisation.find_by_id(to_object_id(org_id), {"requests": 1})
    if not org:
        raise AppError("Organisation not found", 404)

    return _success(requests=Request.populate(org.get("requests")))


# -----------------------------
# ACCEPT REQUEST FROM OFFICER
# -----------------------------
@organisations_bp.route("/<org_id>/accept-request", methods=["POST"])
@login_required
def accept_request_from_officer(org_id):
    org_id = to_object_id(org_id)
    accepted = request_data().get("request")
    if not isinstance(accepted, dict) or not _is_timestamp(accepted.get("at")):
        raise AppError(
            "Please provide the request being accepted, with its 'at' timestamp", 400
        )

    with transaction() as db_session:
        org = Organisation.accept_notification(org_id, accepted["at"], session=db_session)
        if not org:
            raise AppError("No pending notification found for that request", 404)

        session = Session(organisations=[org_id], notifications=[accepted]).save(
            session=db_session
        )

    logger.info(
        "Organisation %s accepted request at %s (session %s)", org_id, accepted["at"], session["_id"]
    )
    return _success(session=session)
