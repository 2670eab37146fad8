"""Authentication endpoints: register, login, refresh, logout."""

from __future__ import annotations

from flask import Blueprint, request

from authkit.api.deps import auth_service, current_actor_id, json_response, require_auth, timing
from authkit.schemas import LoginSchema, RegisterSchema, TokenPairSchema, TokenSchema

bp = Blueprint("auth", __name__)

register_schema = RegisterSchema()
login_schema = LoginSchema()
token_schema = TokenSchema()
token_pair_schema = TokenPairSchema()


@bp.post("/register")
@timing
def register():
    """Create an account and return its first token pair."""

    data = register_schema.load(request.get_json(silent=True) or {})
    pair = auth_service().register(data["email"], data["password"])
    return json_response({"data": token_pair_schema.dump(pair)}, status=201)


@bp.post("/login")
@timing
def login():
    """Authenticate credentials and issue a token pair."""

    data = login_schema.load(request.get_json(silent=True) or {})
    pair = auth_service().login(data["email"], data["password"])
    return json_response({"data": token_pair_schema.dump(pair)})


@bp.post("/refresh")
@require_auth(optional=True)
@timing
def refresh():
    """Rotate a refresh token.

    When an access token is sent as well, it must belong to the refresh
    token's owner.
    """

    data = token_schema.load(request.get_json(silent=True) or {})
    pair = auth_service().refresh_token(data["token"], actor_id=current_actor_id())
    return json_response({"data": token_pair_schema.dump(pair)})


@bp.post("/logout")
@timing
def logout():
    """Revoke a refresh token."""

    data = token_schema.load(request.get_json(silent=True) or {})
    auth_service().logout(data["token"])
    return "", 204
