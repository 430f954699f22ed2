from utils.db import mongo


class Request:

    @staticmethod
    def collection():
        return mongo.db.requests

    @staticmethod
    def populate(ids):
        """Resolve a list of request ids, keeping their order and skipping dangling ones."""
        if not ids:
            return []
        found = {doc["_id"]: doc for doc in Request.collection().find({"_id": {"$in": list(ids)}})}
        return [found[i] for i in ids if i in found]
