from datetime import datetime, timedelta, timezone
from functools import wraps

import jwt
from flask import current_app, g, jsonify, request

from models.organisation import Organisation
from utils.app_error import AppError
from utils.helpers import serialize

TOKEN_COOKIE = "jwt"


def sign_token(org_id):
    now = datetime.now(timezone.utc)
    payload = {
        "id": str(org_id),
        "iat": now,
        "exp": now + timedelta(seconds=current_app.config["JWT_EXPIRES_IN"]),
    }
    return jwt.encode(payload, current_app.config["JWT_SECRET"], algorithm="HS256")


def decode_token(token):
    try:
        return jwt.decode(token, current_app.config["JWT_SECRET"], algorithms=["HS256"])
    except jwt.ExpiredSignatureError:
        raise AppError("Your token has expired! Please log in again.", 401)
    except jwt.InvalidTokenError:
        raise AppError("Invalid token. Please log in again!", 401)


def create_send_token(org, status_code):
    """Issue a token for ``org`` and answer with it (body and cookie)."""
    token = sign_token(org["_id"])
    response = jsonify({
        "status": "success",
        "token": token,
        "data": {"organisation": serialize(Organisation.public(org))},
    })
    response.status_code = status_code
    response.set_cookie(
        TOKEN_COOKIE,
        token,
        max_age=current_app.config["JWT_EXPIRES_IN"],
        httponly=True,
        secure=current_app.config.get("JWT_COOKIE_SECURE", False),
    )
    return response


def _token_from_request():
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip()
    return request.cookies.get(TOKEN_COOKIE)


# This decorator makes sure that only logged-in organisations can reach a route
def login_required(view_function):
    @wraps(view_function)
    def decorated_function(*args, **kwargs):
        token = _token_from_request()
        if not token:
            raise AppError("You are not logged in! Please log in to get access.", 401)

        claims = decode_token(token)
        org = Organisation.find_by_id(claims["id"], {"password": 0})
        if not org:
            raise AppError("The organisation belonging to this token no longer exists.", 401)

        g.organisation = org
        return view_function(*args, **kwargs)
    return decorated_function


def ensure_self(target_id):
    """Only the logged-in organisation may act on its own document."""
    if str(target_id) != str(g.organisation["_id"]):
        raise AppError("You do not have permission to perform this action", 403)


def restrict_to_self(view_function):
    # Guards routes whose ``doc_id`` is an organisation id; apply under login_required
    @wraps(view_function)
    def decorated_function(*args, **kwargs):
        ensure_self(kwargs.get("doc_id"))
        return view_function(*args, **kwargs)
    return decorated_function
