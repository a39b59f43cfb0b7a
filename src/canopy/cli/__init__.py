"""Canopy CLI — inspect and serve built route trees.

Entry point registered as ``canopy`` in ``pyproject.toml``::

    [project.scripts]
    canopy = "canopy.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``canopy`` command."""
    parser = argparse.ArgumentParser(
        prog="canopy",
        description="Canopy — declarative route trees for ASGI apps.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- canopy routes ----------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List the routes a tree builds")
    routes_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:engine, myapp:tree, myapp:app)",
    )

    # -- canopy run -------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Build and serve an app with pounce")
    run_parser.add_argument(
        "app",
        help="Import string (e.g. myapp:engine)",
    )
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect)",
    )
    run_parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart on source changes (single worker)",
    )

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "routes":
        from canopy.cli._routes import run_routes

        run_routes(args)
    elif args.command == "run":
        from canopy.cli._run import run

        run(args)
