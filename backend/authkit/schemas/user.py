"""User resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class UserProfileSchema(Schema):
    """Public representation of a user. The password hash is never dumped."""

    id = fields.String(required=True)
    email = fields.Email(required=True)
    created_at = fields.DateTime(allow_none=True)
    updated_at = fields.DateTime(allow_none=True)
