"""Outcome of applying a node of a route tree.

Traversal reports expected misconfiguration by value, so every level can
stop its remaining work and hand the failure upward unchanged. Only the
top-level build turns a ``Failed`` into an exception.
"""

from dataclasses import dataclass
from typing import Literal

from canopy.errors import BuildError
from canopy.routing.scope import Scope


@dataclass(frozen=True, slots=True)
class Applied:
    """The node was fully registered under ``scope``."""

    scope: Scope
    ok: Literal[True] = True


@dataclass(frozen=True, slots=True)
class Failed:
    """The node stopped at ``error``; earlier registrations were kept."""

    error: BuildError
    ok: Literal[False] = False


type ApplyResult = Applied | Failed
