# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

import signal
import sys
import threading
from collections.abc import Sequence
from types import FrameType

from flask import Flask
from werkzeug.serving import BaseWSGIServer, WSGIRequestHandler, make_server

from sso.container import Container
from sso.infrastructure.admin_setup import AdminSetupError
from sso.infrastructure.repositories.users.sqlalchemy_user_repository import UserStorageError
from sso.shared.config import ConfigError, fetch_config_path, load_config
from sso.shared.logging import logger, setup_logging
from sso.shared.middleware.error_handler import configure_error_handling
from sso.shared.middleware.request_logger import configure_request_logging


def create_app(container: Container) -> Flask:
    app = Flask(__name__)
    configure_error_handling(app)
    configure_request_logging(app, debug_mode=not container.config.is_production())
    app.register_blueprint(container.auth_controller.as_blueprint())
    logger.info("Flask app initialized")
    return app


def _request_handler(timeout: float) -> type[WSGIRequestHandler]:
    class _TimeoutRequestHandler(WSGIRequestHandler):
        pass

    # socketserver applies this as the per-connection socket timeout.
    _TimeoutRequestHandler.timeout = timeout
    return _TimeoutRequestHandler


def _build_server(app: Flask, container: Container) -> BaseWSGIServer:
    rpc = container.config.rpc
    return make_server(
        rpc.host,
        rpc.port,
        app,
        threaded=True,
        request_handler=_request_handler(rpc.timeout.total_seconds()),
    )


def _shutdown(server: BaseWSGIServer, container: Container) -> None:
    logger.info("stopping application")
    server.shutdown()
    server.server_close()
    logger.info("rpc server stopped")

    container.token_cache.close()
    logger.info("token storage closed")

    container.user_directory.close()
    logger.info("user storage closed")

    logger.info("application stopped")


def main(argv: Sequence[str] | None = None) -> int:
    try:
        config = load_config(fetch_config_path(argv))
    except ConfigError as exc:
        print(f"sso: {exc}", file=sys.stderr)
        return 1

    setup_logging(config.env)
    logger.bind(env=config.env).info("starting application")

    container = Container(config)
    try:
        container.user_directory.ensure_indexes()
        container.admin_setup.setup_admin_user(config.admin_login)
    except (AdminSetupError, UserStorageError) as exc:
        logger.bind(error=str(exc)).error("failed to prepare user storage")
        container.user_directory.close()
        return 1

    app = create_app(container)
    server = _build_server(app, container)

    stop = threading.Event()

    def _on_signal(signum: int, _frame: FrameType | None) -> None:
        logger.bind(signal=signal.Signals(signum).name).info("shutdown signal received")
        stop.set()

    signal.signal(signal.SIGINT, _on_signal)
    signal.signal(signal.SIGTERM, _on_signal)

    worker = threading.Thread(target=server.serve_forever, name="rpc-server", daemon=True)
    worker.start()
    logger.bind(addr=f"{config.rpc.host}:{server.port}").info("rpc server started")

    stop.wait()
    _shutdown(server, container)
    worker.join()
    return 0


__all__ = ["create_app", "main"]
