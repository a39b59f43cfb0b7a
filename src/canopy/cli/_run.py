"""``canopy run`` — build an app and serve it with pounce."""

import argparse
import sys

from canopy.cli._resolve import resolve_app
from canopy.errors import BuildError


def run(args: argparse.Namespace) -> None:
    """Resolve ``args.app`` and hand it to the pounce server.

    CLI flags override the app's ``AppConfig``.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    except BuildError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from canopy.server.dev import run_server

    reload = args.reload or app.config.debug
    workers = args.workers if args.workers is not None else app.config.workers
    run_server(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        workers=1 if reload else workers,
        reload=reload,
        reload_dirs=app.config.reload_dirs,
    )
