# models/__init__.py

from .organisation import Organisation
from .session import Session
from .request import Request

__all__ = [
    "Organisation",
    "Session",
    "Request"
]
