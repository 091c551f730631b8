"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import Schema, fields, validate


class IssuePathSchema(Schema):
    """Path parameters for initial issuance."""

    user_id = fields.UUID(required=True)


class RefreshSchema(Schema):
    """Input payload for refresh-token rotation."""

    refresh_token = fields.String(required=True, validate=validate.Length(min=1, max=512))


class TokenPairSchema(Schema):
    """Response payload carrying a fresh token pair."""

    access_token = fields.String(required=True)
    refresh_token = fields.String(required=True)


class WhoAmISchema(Schema):
    """Response payload describing the verified access token."""

    user_id = fields.String(required=True)
    expires_at = fields.DateTime(required=True)
