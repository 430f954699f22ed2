"""
utils/db.py
-----------------
This module initializes and manages the MongoDB connection
for the entire Flask application.
"""

import logging
from contextlib import contextmanager

from flask import current_app
from flask_pymongo import PyMongo
from pymongo import ASCENDING

logger = logging.getLogger(__name__)

# Create a global MongoDB instance
mongo = PyMongo()


def init_db_connection(app):
    """
    Initialize MongoDB connection with Flask app.
    Reads MONGO_URI from the app config (see config.py).
    """
    mongo.init_app(app)

    if app.config.get("MONGO_ENSURE_INDEXES", True):
        with app.app_context():
            ensure_indexes()
    elif not app.config.get("TESTING"):
        logger.warning(
            "MONGO_ENSURE_INDEXES is off: contact email uniqueness is not enforced "
            "unless the contact_email_unique index already exists."
        )

    logger.info("MongoDB connection initialized successfully.")
    return mongo


def ensure_indexes():
    # Contact email uniqueness lives in the database, not in the handlers
    mongo.db.organisations.create_index(
        [("contact.email", ASCENDING)], unique=True, name="contact_email_unique"
    )
    mongo.db.organisations.create_index([("type", ASCENDING)], name="type")


@contextmanager
def transaction():
    """
    Yield a client session running a multi-document transaction, or None
    when MONGO_TRANSACTIONS is off (standalone servers have no transactions).
    Pass the yielded value as ``session=`` to every write inside the block.
    """
    if not current_app.config.get("MONGO_TRANSACTIONS"):
        yield None
        return

    with mongo.cx.start_session() as session:
        with session.start_transaction():
            yield session
