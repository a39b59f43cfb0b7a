"""Canopy exception hierarchy.

Shared across the route tree, Router, App, handler, and middleware so
every module raises and catches the same types.

Two families live here:

- ``HTTPError`` and friends are raised while a request is being served and
  map straight to a status code.
- ``BuildError`` and friends describe a route tree that could not be
  applied. They travel through the tree as values (see
  ``canopy.groups.result``) and only become exceptions at the top-level
  ``BuildResult.unwrap()`` / ``Engine.new()`` call.
"""

from dataclasses import dataclass
from typing import Never


class CanopyError(Exception):
    """Base for all canopy-specific errors."""


class ConfigurationError(CanopyError):
    """Raised when app configuration is invalid.

    Duplicate registrations and registrations after the app froze end
    up here. These are programmer errors and are never collected into a
    build result.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(CanopyError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """404 — no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818 — conventional name in web frameworks
    """405 — route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


def abort(status: int, detail: str = "", headers: dict[str, str] | None = None) -> Never:
    """Stop the current handler chain and answer with *status*.

    Usable from any middleware or handler::

        async def no_deletes(request, next):
            if request.method == "DELETE":
                abort(400, "DELETE not allowed")
            return await next(request)
    """
    raise HTTPError(status=status, detail=detail, headers=tuple((headers or {}).items()))


# -- Build errors --


class BuildError(CanopyError):
    """A route tree could not be applied to its router.

    The router it was being applied to may be partially populated and
    must be discarded.
    """


class MissingHandler(BuildError):  # noqa: N818
    """A declared route has no handler.

    Detected when the route is applied, never when it is constructed.
    """

    def __init__(self, path: str, *, method: str = "", full_path: str = "") -> None:
        self.path = path
        self.method = method
        self.full_path = full_path or path
        where = f"{method} {self.full_path}" if method else self.full_path
        super().__init__(f"handler is None for route {path!r} ({where})")


class HookFailure(BuildError):  # noqa: N818
    """A group's pre- or post-hook signaled a failure.

    ``cause`` is exactly what the hook raised or returned.
    """

    def __init__(self, stage: str, cause: BaseException, *, base_path: str = "") -> None:
        self.stage = stage
        self.cause = cause
        self.base_path = base_path
        where = f" for group {base_path!r}" if base_path else ""
        super().__init__(f"{stage}-hook failed{where}: {cause}")
        self.__cause__ = cause
