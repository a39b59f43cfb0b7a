"""Shared type aliases used across canopy modules."""

from collections.abc import Callable
from typing import Any

# Route handler: user-defined function with variable signature
type Handler = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
type ErrorHandler = Callable[..., Any]

# Group lifecycle hook: receives the mounted scope; raises or returns an
# Exception to abort the build
type Hook = Callable[..., BaseException | None]
