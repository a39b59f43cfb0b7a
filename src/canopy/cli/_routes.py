"""``canopy routes`` — list the routes a tree builds.

Prints one row per method and path with the handler and the full
middleware chain in the order it runs.
"""

import argparse
import sys
from collections.abc import Callable
from typing import Any

from canopy.cli._resolve import resolve_app
from canopy.errors import BuildError


def _name(func: Callable[..., Any]) -> str:
    return getattr(func, "__qualname__", None) or getattr(func, "__name__", repr(func))


def format_routes(rows: list[tuple[str, str, str, str]]) -> list[str]:
    """Lay out ``(method, path, handler, middleware)`` rows as a table."""
    headers = ("METHOD", "PATH", "HANDLER", "MIDDLEWARE")
    widths = [max(len(h), *(len(r[i]) for r in rows)) for i, h in enumerate(headers[:3])]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    lines = [fmt.format(*headers).rstrip()]
    lines.append("-" * min(sum(widths) + 6 + len(headers[3]), 80))
    lines.extend(fmt.format(*row).rstrip() for row in rows)
    return lines


def run_routes(args: argparse.Namespace) -> None:
    """List compiled routes for a canopy app.

    Resolves ``args.app``, builds it if needed, and prints a table of
    METHOD, PATH, HANDLER and MIDDLEWARE.
    """
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    except BuildError as exc:
        print(f"Build failed: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    endpoints = app.routes
    if not endpoints:
        print("No routes registered.")
        return

    rows = [
        (
            ", ".join(sorted(endpoint.methods)),
            endpoint.path,
            _name(endpoint.handler),
            " -> ".join(_name(mw) for mw in endpoint.middleware) or "-",
        )
        for endpoint in endpoints
    ]
    for line in format_routes(rows):
        print(line)
