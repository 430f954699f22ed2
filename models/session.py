from utils.db import mongo
from datetime import datetime
from bson import ObjectId


class Session:

    @staticmethod
    def collection():
        return mongo.db.sessions

    def __init__(self, organisations=None, notifications=None, created_at=None):
        self.organisations = [ObjectId(o) for o in (organisations or [])]
        self.notifications = notifications or []
        self.created_at = created_at or datetime.utcnow()

    def to_dict(self):
        return {
            "organisations": self.organisations,
            "notifications": self.notifications,
            "created_at": self.created_at
        }

    def save(self, session=None):
        doc = self.to_dict()
        result = self.collection().insert_one(doc, session=session)
        doc["_id"] = result.inserted_id
        return doc

    @staticmethod
    def find_by_id(session_id):
        return Session.collection().find_one({"_id": ObjectId(session_id)})
