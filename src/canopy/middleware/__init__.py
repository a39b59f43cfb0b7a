"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Middleware can be bound at four places, outermost first:
    App.add_middleware / Engine.middlewares -- every request, matched or not
    RouterGroup.persistent_middlewares -- the group's scope and everything below it
    RouterGroup.middlewares -- the group's own routes only
    Route.middlewares -- one route only
"""

from canopy.middleware.protocol import Middleware, Next

__all__ = ["Middleware", "Next"]
