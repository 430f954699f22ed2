from utils.db import mongo
from utils.app_error import AppError
from datetime import datetime
from numbers import Number
from werkzeug.security import generate_password_hash
from bson import ObjectId
from pymongo import ReturnDocument


class Organisation:

    # Fields the general update route may touch
    UPDATABLE_FIELDS = ("name", "Id", "employees")

    @staticmethod
    def collection():
        return mongo.db.organisations

    def __init__(self, name, org_type, email, location, password, phone=None,
                 employees=0, external_id=None, notifications=None, requests=None,
                 created_at=None, updated_at=None):
        self.name = name
        self.type = org_type
        self.email = email.strip().lower() if isinstance(email, str) else email
        self.phone = phone
        self.location = location
        self.password = generate_password_hash(password)
        self.employees = employees
        self.external_id = external_id
        self.notifications = notifications or []
        self.requests = [ObjectId(r) for r in (requests or [])]
        self.created_at = created_at or datetime.utcnow()
        self.updated_at = updated_at or datetime.utcnow()

    @classmethod
    def from_payload(cls, data):
        """Build an organisation from a create request body, validating it first."""
        if not data.get("password"):
            raise AppError("Please provide a password", 400)
        if not isinstance(data["password"], str):
            raise AppError("password must be a string", 400)
        if "passwordConfirm" in data and data["passwordConfirm"] != data["password"]:
            raise AppError("Passwords are not the same", 400)

        org = cls(
            name=data.get("name"),
            org_type=data.get("type"),
            email=data.get("email"),
            location=data.get("location"),
            password=data["password"],
            phone=data.get("phone"),
            employees=data.get("employees", 0),
            external_id=data.get("Id"),
        )
        org.validate()
        return org

    def validate(self):
        if not isinstance(self.email, str) or "@" not in self.email:
            raise AppError("Please provide a valid email", 400)
        if not isinstance(self.type, str) or not self.type.strip():
            raise AppError("An organisation must have a type", 400)
        validate_location(self.location)
        validate_fields({"name": self.name, "employees": self.employees, "Id": self.external_id})

    # Convert to dictionary for MongoDB
    def to_dict(self):
        doc = {
            "name": self.name,
            "type": self.type,
            "contact": {"email": self.email, "phone": self.phone},
            "location": {
                "long": float(self.location["long"]),
                "lat": float(self.location["lat"]),
            },
            "employees": self.employees,
            "password": self.password,
            "notifications": self.notifications,
            "requests": self.requests,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.external_id is not None:
            doc["Id"] = self.external_id
        return doc

    # Insert; the unique index on contact.email rejects duplicates
    def save(self):
        doc = self.to_dict()
        result = self.collection().insert_one(doc)
        doc["_id"] = result.inserted_id
        return doc

    @staticmethod
    def find_by_id(org_id, projection=None):
        return Organisation.collection().find_one({"_id": ObjectId(org_id)}, projection)

    @staticmethod
    def find_many(ids):
        """Resolve organisation references in the given order, skipping deleted ones."""
        ids = [ObjectId(i) for i in (ids or [])]
        if not ids:
            return []
        found = {
            doc["_id"]: doc
            for doc in Organisation.collection().find({"_id": {"$in": ids}}, {"password": 0})
        }
        return [found[i] for i in ids if i in found]

    @staticmethod
    def update(org_id, fields):
        """Apply already-filtered ``fields`` and return the updated document (or None)."""
        validate_fields(fields)
        return Organisation.collection().find_one_and_update(
            {"_id": ObjectId(org_id)},
            {"$set": {**fields, "updated_at": datetime.utcnow()}},
            return_document=ReturnDocument.AFTER,
        )

    @staticmethod
    def delete(org_id):
        return Organisation.collection().delete_one({"_id": ObjectId(org_id)})

    @staticmethod
    def find_nearby(reference, org_type, order="nearest"):
        """
        Organisations of ``org_type`` annotated with their planar distance
        from ``reference``'s location.

        order: "nearest" sorts ascending, "farthest" descending.
        """
        if order not in ("nearest", "farthest"):
            raise ValueError(f"Unknown proximity order: {order}")

        origin = reference["location"]
        pipeline = [
            {"$match": {"type": org_type}},
            {
                "$project": {
                    "name": 1,
                    "type": 1,
                    "location": 1,
                    "distance": {
                        "$sqrt": {
                            "$add": [
                                {"$pow": [{"$subtract": ["$location.long", origin["long"]]}, 2]},
                                {"$pow": [{"$subtract": ["$location.lat", origin["lat"]]}, 2]},
                            ]
                        }
                    },
                }
            },
            {"$match": {"type": org_type}},
            {"$sort": {"distance": 1 if order == "nearest" else -1}},
        ]
        return list(Organisation.collection().aggregate(pipeline))

    @staticmethod
    def accept_notification(org_id, at, session=None, attempts=3):
        """
        Flip the first pending notification stamped ``at`` to accepted.
        Returns the updated organisation, or None when nothing matched.

        The matching index is read first, then written with a filter that
        still requires that slot to be pending with the same ``at``, so a
        concurrent change makes the write miss and the lookup is retried.
        """
        pending = {"at": at, "status": {"$ne": True}}
        for _ in range(attempts):
            org = Organisation.collection().find_one(
                {"_id": ObjectId(org_id), "notifications": {"$elemMatch": pending}},
                {"notifications": 1},
                session=session,
            )
            if not org:
                return None

            index = next(
                i for i, n in enumerate(org["notifications"])
                if n.get("at") == at and n.get("status") is not True
            )
            updated = Organisation.collection().find_one_and_update(
                {
                    "_id": org["_id"],
                    f"notifications.{index}.at": at,
                    f"notifications.{index}.status": {"$ne": True},
                },
                {"$set": {f"notifications.{index}.status": True}},
                return_document=ReturnDocument.AFTER,
                session=session,
            )
            if updated:
                return updated
        return None

    # Strip credentials before a document leaves the API
    @staticmethod
    def public(doc):
        if doc is None:
            return None
        return {key: value for key, value in doc.items() if key != "password"}


def validate_location(location):
    if not isinstance(location, dict):
        raise AppError("An organisation must have a location", 400)
    for axis in ("long", "lat"):
        value = location.get(axis)
        if isinstance(value, bool) or not isinstance(value, Number):
            raise AppError(f"location.{axis} must be a number", 400)


def validate_fields(fields):
    if "name" in fields:
        name = fields["name"]
        if not isinstance(name, str) or not name.strip():
            raise AppError("An organisation must have a name", 400)
    if "employees" in fields:
        employees = fields["employees"]
        if isinstance(employees, bool) or not isinstance(employees, int) or employees < 0:
            raise AppError("employees must be a non-negative integer", 400)
    if fields.get("Id") is not None and not isinstance(fields["Id"], str):
        raise AppError("Id must be a string", 400)
