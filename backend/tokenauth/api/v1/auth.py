"""Token issuance, rotation and verification endpoints."""

from __future__ import annotations

from datetime import UTC, datetime

from flask import Blueprint, request
from flask_jwt_extended import get_jwt, get_jwt_identity

from tokenauth.api.deps import get_token_service, json_response, no_store, require_auth, timing
from tokenauth.schemas import IssuePathSchema, RefreshSchema, TokenPairSchema, WhoAmISchema
from tokenauth.services._shared.errors import ServiceError
from tokenauth.services.auth import IssueIn, RotateIn

bp = Blueprint("auth", __name__, url_prefix="/auth")

issue_path_schema = IssuePathSchema()
refresh_schema = RefreshSchema()
token_schema = TokenPairSchema()
whoami_schema = WhoAmISchema()


@bp.post("/tokens/<user_id>")
@timing
def issue(user_id: str):
    """Issue the first (or a replacement) token pair for a user GUID."""

    data = issue_path_schema.load({"user_id": user_id})
    service = get_token_service()
    try:
        pair = service.issue_for_user(IssueIn(user_id=str(data["user_id"])))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return no_store(json_response(token_schema.dump(pair), status=201))


@bp.post("/refresh")
@timing
def refresh():
    """Exchange a valid refresh token for a new pair."""

    data = refresh_schema.load(request.get_json(silent=True) or {})
    service = get_token_service()
    try:
        pair = service.rotate(RotateIn(refresh_token=data["refresh_token"]))
    except ServiceError as exc:
        raise service.translate_exceptions(exc) from exc
    return no_store(json_response(token_schema.dump(pair)))


@bp.get("/whoami")
@require_auth
@timing
def whoami():
    """Return the identity asserted by the bearer access token."""

    claims = get_jwt()
    body = {
        "user_id": str(get_jwt_identity()),
        "expires_at": datetime.fromtimestamp(int(claims["exp"]), tz=UTC),
    }
    return json_response(whoami_schema.dump(body))
