"""Integration tests for the token HTTP endpoints and CLI commands."""

from __future__ import annotations

import json
from datetime import UTC, datetime, timedelta
from uuid import UUID

import pytest

from tokenauth.core.extensions import GENERATOR_KEY, STORE_KEY
from tokenauth.core.security import encode_refresh_token
from tokenauth.infra.jwt.jwt_credential_generator import JWTCredentialGenerator
from tokenauth.services._shared.errors import PersistenceError
from tokenauth.services._shared.ports import InMemoryCredentialStore

BASE = "/api/v1/auth"


class BrokenStore(InMemoryCredentialStore):
    """Store double that fails every write and every ping."""

    def save(self, record, *, timeout):
        raise PersistenceError(op="store.test.save")

    def ping(self, *, timeout):
        return False


def _issue(client, user_id: str):
    return client.post(f"{BASE}/tokens/{user_id}")


def _refresh(client, token):
    return client.post(f"{BASE}/refresh", json={"refresh_token": token})


def _assert_envelope(resp, status: int, code: str) -> dict:
    assert resp.status_code == status, resp.get_data(as_text=True)
    body = resp.get_json()
    assert body["code"] == code
    assert body["error"]
    assert body["request_id"]
    return body


# --------------------------------- Issue ---------------------------------- #
def test_issue_returns_token_pair(client, user_id):
    resp = _issue(client, user_id)

    assert resp.status_code == 201
    body = resp.get_json()
    assert set(body) == {"access_token", "refresh_token"}
    assert resp.headers["Cache-Control"] == "no-store"
    assert resp.headers["X-Request-ID"]


def test_issue_echoes_request_id(client, user_id):
    resp = client.post(f"{BASE}/tokens/{user_id}", headers={"X-Request-ID": "trace-42"})
    assert resp.headers["X-Request-ID"] == "trace-42"


def test_issue_rejects_invalid_guid(client):
    body = _assert_envelope(_issue(client, "not-a-guid"), 400, "validation_error")
    assert "user_id" in body["details"]["errors"]


def test_issue_is_post_only(client, user_id):
    _assert_envelope(client.get(f"{BASE}/tokens/{user_id}"), 405, "method_not_allowed")


def test_issue_store_failure_is_internal_error(app, client, user_id):
    app.extensions[STORE_KEY] = BrokenStore()

    body = _assert_envelope(_issue(client, user_id), 500, "internal_server_error")
    assert body["error"] == "Credential store unavailable"


# -------------------------------- Refresh --------------------------------- #
def test_refresh_rotates_and_rejects_reuse(client, user_id):
    first = _issue(client, user_id).get_json()

    resp = _refresh(client, first["refresh_token"])
    assert resp.status_code == 200
    second = resp.get_json()
    assert second["refresh_token"] != first["refresh_token"]
    assert resp.headers["Cache-Control"] == "no-store"

    _assert_envelope(_refresh(client, first["refresh_token"]), 401, "unauthorized")
    assert _refresh(client, second["refresh_token"]).status_code == 200


def test_refresh_malformed_token_is_bad_request(client):
    _assert_envelope(_refresh(client, "@@definitely-not-a-token@@"), 400, "bad_request")


@pytest.mark.parametrize("payload", [None, {}, {"refresh_token": ""}, {"refresh_token": 5}])
def test_refresh_requires_token_field(client, payload):
    resp = client.post(f"{BASE}/refresh", json=payload)
    _assert_envelope(resp, 400, "validation_error")


def test_refresh_unknown_token_is_unauthorized(client, user_id):
    token = encode_refresh_token(UUID(user_id), b"\x07" * 32)
    _assert_envelope(_refresh(client, token), 401, "unauthorized")


# --------------------------------- WhoAmI --------------------------------- #
def test_whoami_accepts_issued_access_token(client, user_id):
    pair = _issue(client, user_id).get_json()

    resp = client.get(f"{BASE}/whoami", headers={"Authorization": f"Bearer {pair['access_token']}"})

    assert resp.status_code == 200
    body = resp.get_json()
    assert body["user_id"] == user_id
    assert datetime.fromisoformat(body["expires_at"]) > datetime.now(UTC)


def test_whoami_requires_bearer_token(client):
    _assert_envelope(client.get(f"{BASE}/whoami"), 401, "unauthorized")


def test_whoami_rejects_tampered_token(client, user_id):
    pair = _issue(client, user_id).get_json()
    tampered = pair["access_token"][:-2] + ("AA" if not pair["access_token"].endswith("AA") else "BB")

    resp = client.get(f"{BASE}/whoami", headers={"Authorization": f"Bearer {tampered}"})
    _assert_envelope(resp, 401, "unauthorized")


def test_whoami_rejects_expired_token(app, client, user_id):
    live = app.extensions[GENERATOR_KEY]
    past = datetime.now(UTC) - timedelta(hours=1)
    stale = JWTCredentialGenerator(
        secret_key=live.secret_key,
        access_ttl=live.access_ttl,
        hasher=live.hasher,
        clock=lambda: past,
    )

    token = stale.issue_access_token(user_id)
    resp = client.get(f"{BASE}/whoami", headers={"Authorization": f"Bearer {token}"})
    _assert_envelope(resp, 401, "token_expired")


# --------------------------------- Health --------------------------------- #
def test_health_ok(client):
    resp = client.get("/api/v1/health")

    assert resp.status_code == 200
    assert resp.get_json() == {"status": "ok", "store": "ok", "backend": "memory"}


def test_health_degraded_when_store_is_down(app, client):
    app.extensions[STORE_KEY] = BrokenStore()

    resp = client.get("/api/v1/health")

    assert resp.status_code == 503
    assert resp.get_json()["store"] == "fail"


def test_unknown_route_uses_error_envelope(client):
    _assert_envelope(client.get("/api/v1/nope"), 404, "not_found")


# ----------------------------------- CLI ---------------------------------- #
def test_cli_issue_prints_token_pair(app, user_id):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["auth", "issue", user_id])

    assert result.exit_code == 0, result.output
    pair = json.loads(result.output)
    assert set(pair) == {"access_token", "refresh_token"}
    assert app.extensions[STORE_KEY].get(user_id) is not None


def test_cli_issue_rejects_invalid_guid(app):
    result = app.test_cli_runner().invoke(args=["auth", "issue", "nope"])

    assert result.exit_code != 0
    assert "Invalid user id" in result.output


def test_cli_check_store(app):
    runner = app.test_cli_runner()
    result = runner.invoke(args=["auth", "check-store"])
    assert result.exit_code == 0
    assert "reachable" in result.output

    app.extensions[STORE_KEY] = BrokenStore()
    result = runner.invoke(args=["auth", "check-store"])
    assert result.exit_code != 0
