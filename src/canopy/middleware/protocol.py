"""Middleware protocol and Next type alias.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The framework checks the shape, not the lineage.

A middleware short-circuits the rest of its chain by returning a
response without awaiting ``next``, or by calling ``canopy.abort()``.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol

from canopy.http.request import Request
from canopy.http.response import Response

# The next handler in the middleware chain
type Next = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for canopy middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class RequireHeader:
            def __init__(self, name: str) -> None:
                self.name = name

            async def __call__(self, request: Request, next: Next) -> Response:
                if self.name not in request.headers:
                    abort(400, f"missing {self.name}")
                return await next(request)
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...
