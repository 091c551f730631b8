"""Application factory for the token service."""

from __future__ import annotations

import logging

from flask import Flask

from tokenauth.core.config import BaseConfig, get_config, validate_config
from tokenauth.core.logger import configure_logging, init_app as init_logging

log = logging.getLogger(__name__)


def _load_config(
    app: Flask, config: str | type[BaseConfig] | object | None, instance_filename: str | None
) -> None:
    app.config.from_object(config if config is not None else get_config())
    # Deployment overrides (secrets) may live in instance/<filename>
    if instance_filename:
        app.config.from_pyfile(instance_filename, silent=True)
    validate_config(app.config)


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_config_filename: str | None = "config.py",
) -> Flask:
    """
    Build the Flask application.

    Order matters: logging is configured before the store is contacted, so a
    failed start-up ping is logged as JSON; error handlers are attached after
    the blueprints they cover.

    :param config: Import path, class or object with upper-case settings.
        Defaults to the class selected by ``APP_ENV``.
    :param instance_config_filename: Optional file under the instance folder.
    :raises RuntimeError: Invalid settings or unreachable credential store.
    """
    app = Flask(__name__, instance_relative_config=True)
    _load_config(app, config, instance_config_filename)

    configure_logging(app.config["LOG_LEVEL"])
    init_logging(app)

    from tokenauth import cli
    from tokenauth.api import init_app as init_api
    from tokenauth.core import errors, extensions

    extensions.init_app(app)
    init_api(app)
    errors.init_app(app)
    cli.init_app(app)

    log.info("app.ready", extra={"op": app.config["APP_ENV"]})
    return app
