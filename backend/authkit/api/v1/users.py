"""User endpoints."""

from __future__ import annotations

from flask import Blueprint

from authkit.api.deps import auth_service, current_actor_id, json_response, require_auth, timing
from authkit.schemas import UserProfileSchema

bp = Blueprint("users", __name__)

profile_schema = UserProfileSchema()


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user's profile."""

    profile = auth_service().get_profile(actor_id=current_actor_id())
    return json_response({"data": profile_schema.dump(profile)})
