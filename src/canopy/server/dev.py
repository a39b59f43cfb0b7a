"""Serve a built canopy App with pounce.

Pounce's ``run()`` takes an import string, but a canopy build produces a
live ``App`` object, so ``pounce.Server`` is used directly with the
ASGI callable.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from canopy.app import App

logger = logging.getLogger("canopy.server")


def run_server(
    app: App,
    host: str,
    port: int,
    *,
    workers: int = 1,
    reload: bool = False,
    reload_dirs: tuple[str, ...] = (),
) -> None:
    """Start a pounce server for *app*.

    The app is frozen first so route compilation errors surface before
    the socket is bound.

    Requires the ``server`` extra (``pip install canopy[server]``).
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    app._ensure_frozen()
    logger.info("Serving %d routes on http://%s:%d", len(app.routes), host, port)

    config = ServerConfig(
        host=host,
        port=port,
        workers=workers,
        reload=reload,
        reload_dirs=reload_dirs,
    )
    Server(config, app).run()
