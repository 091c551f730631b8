"""Flask CLI commands for operating the credential store."""

from __future__ import annotations

import json
import logging

import click
from flask import current_app
from flask.cli import with_appcontext

from tokenauth.api.deps import get_token_service
from tokenauth.core.extensions import get_credential_store
from tokenauth.services._shared.errors import ServiceError
from tokenauth.services.auth import IssueIn

LOGGER = logging.getLogger(__name__)


@click.group("auth")
def auth_cli() -> None:
    """Token issuance and credential store commands."""


@auth_cli.command("check-store")
@with_appcontext
def check_store() -> None:
    """Ping the configured credential store backend."""
    backend = current_app.config["CREDENTIAL_STORE"]
    timeout = float(current_app.config["STORE_TIMEOUT_SECONDS"])
    if not get_credential_store().ping(timeout=timeout):
        raise click.ClickException(f"Credential store '{backend}' is not reachable.")
    click.echo(f"Credential store '{backend}' is reachable.")


@auth_cli.command("issue")
@click.argument("user_id")
@with_appcontext
def issue(user_id: str) -> None:
    """Issue a token pair for USER_ID and print it as JSON."""
    service = get_token_service()
    try:
        pair = service.issue_for_user(IssueIn(user_id=user_id))
    except ServiceError as exc:
        LOGGER.debug("cli issue failed", exc_info=exc)
        raise click.ClickException(exc.message) from exc
    click.echo(json.dumps({"access_token": pair.access_token, "refresh_token": pair.refresh_token}))
