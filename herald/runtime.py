"""Herald runtime entrypoint.

This module provides the ASGI application factory used by Granian. It loads
:class:`~herald.config.RelayConfig` from the environment, builds the chat
session and dispatcher, and delegates app construction to
:func:`herald.api.app.create_app` while keeping the
``herald.runtime:create_app`` entrypoint stable.

Configuration is driven by ``HERALD_*`` environment variables; see
:meth:`herald.config.RelayConfig.from_env`. A configuration error is fatal:
it is logged and the process exits with status 1.

Run the service directly with ``python -m herald.runtime``.
"""

from __future__ import annotations

import os
import typing as typ

from herald.config import ConfigurationError, RelayConfig
from herald.logging import (
    configure_logging,
    get_logger,
    log_error,
    log_info,
    log_warning,
)

if typ.TYPE_CHECKING:
    import falcon.asgi

    from herald.api.app import AppDependencies

__all__ = ["build_dependencies", "create_app", "load_config", "main"]

logger = get_logger(__name__)


def load_config() -> RelayConfig:
    """Load relay configuration, exiting on configuration errors.

    Raises
    ------
    SystemExit
        With status 1 when the configuration is missing or invalid.

    """
    try:
        return RelayConfig.from_env()
    except ConfigurationError as exc:
        # Use error() not exception() - validation failures need no traceback
        log_error(logger, "Invalid configuration: %s", exc)
        raise SystemExit(1) from exc


def build_dependencies(config: RelayConfig) -> AppDependencies:
    """Build the chat session and dispatcher described by ``config``.

    Parameters
    ----------
    config
        Validated relay configuration.

    Returns
    -------
    AppDependencies
        Dependencies for :func:`herald.api.app.create_app`.

    """
    from herald.api.app import AppDependencies
    from herald.chat import ChatSessionManager
    from herald.dispatcher import Dispatcher
    from herald.observability import RelayEventLogger

    event_logger = RelayEventLogger()
    session = ChatSessionManager(
        config.chat, rooms=config.all_rooms(), event_logger=event_logger
    )
    dispatcher = Dispatcher.from_config(config, session, event_logger=event_logger)
    return AppDependencies(dispatcher=dispatcher, session=session)


def create_app() -> falcon.asgi.App:
    """Create the fully wired Falcon ASGI application.

    Returns
    -------
    falcon.asgi.App
        App serving ``/health``, ``/ready`` and ``POST /github/callback``.

    """
    from herald.api.app import create_app as _create_api_app

    config = load_config()
    return _create_api_app(build_dependencies(config))


def main() -> None:
    """Validate configuration and start the Herald server using Granian."""
    from granian import Granian
    from granian.constants import Interfaces

    log_level_str = os.environ.get("HERALD_LOG_LEVEL", "INFO")

    # Configure logging - validate log level and warn on invalid values
    normalized_level, invalid_level = configure_logging(log_level_str)
    if invalid_level:
        log_warning(
            logger,
            "Invalid HERALD_LOG_LEVEL %r, falling back to %s",
            log_level_str,
            normalized_level,
        )

    config = load_config()
    log_info(
        logger,
        "Starting Herald on %s:%d (log_level=%s, rooms=%s)",
        config.host,
        config.port,
        normalized_level,
        ",".join(config.all_rooms()),
    )

    # A single worker: the chat session and dedup cache live in-process.
    server = Granian(
        "herald.runtime:create_app",
        address=config.host,
        port=config.port,
        interface=Interfaces.ASGI,
        factory=True,
        workers=1,
    )
    server.serve()


if __name__ == "__main__":
    main()
