"""Mount points handed to route trees while the app is being built.

A ``Scope`` is a path prefix plus the middleware bound to it. Scopes form
a parent chain; middleware added with ``use()`` reaches every route
registered under the scope or any descendant, whether the route was
registered before or after the call, because chains are only resolved
when the app freezes.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

from canopy.errors import ConfigurationError

# (scope, method, full_path, chain) -> None
type Register = Callable[[Scope, str, str, tuple[Callable[..., Any], ...]], None]


def join_paths(absolute: str, relative: str) -> str:
    """Append *relative* to *absolute*.

    An empty *relative* leaves *absolute* untouched; repeated slashes
    collapse; a trailing slash on *relative* survives::

        join_paths("/", "")            -> "/"
        join_paths("/test", "/patch")  -> "/test/patch"
        join_paths("/api", "users/")   -> "/api/users/"
    """
    if not relative:
        return absolute
    joined = "/" + "/".join(part for part in f"{absolute}/{relative}".split("/") if part)
    if relative.endswith("/") and not joined.endswith("/"):
        joined += "/"
    return joined


class Scope:
    """A mounted path prefix on an app.

    Created by ``App.root`` and ``Scope.group()``; never constructed by
    route trees directly.
    """

    __slots__ = ("_base_path", "_middleware", "_parent", "_register")

    def __init__(
        self,
        register: Register,
        base_path: str = "/",
        parent: Scope | None = None,
    ) -> None:
        self._register = register
        self._base_path = base_path
        self._parent = parent
        self._middleware: list[Callable[..., Any]] = []

    @property
    def base_path(self) -> str:
        return self._base_path

    @property
    def parent(self) -> Scope | None:
        return self._parent

    @property
    def middleware(self) -> tuple[Callable[..., Any], ...]:
        """Effective scope-wide chain, outermost ancestor first."""
        inherited = self._parent.middleware if self._parent is not None else ()
        return (*inherited, *self._middleware)

    def full_path(self, path: str) -> str:
        return join_paths(self._base_path, path)

    def group(self, path: str) -> Scope:
        """Derive a child scope mounted at *path* below this one."""
        return Scope(self._register, self.full_path(path), parent=self)

    def use(self, *middleware: Callable[..., Any]) -> Scope:
        """Bind scope-wide middleware. Returns ``self`` for chaining."""
        self._middleware.extend(middleware)
        return self

    def handle(self, method: str, path: str, *chain: Callable[..., Any]) -> None:
        """Register a handler chain for *method* at *path* under this scope.

        The last element of *chain* is the handler; everything before it
        is middleware that runs, in order, after this scope's own
        middleware.
        """
        if not chain:
            msg = f"No handler given for {method.upper()} {self.full_path(path)!r}."
            raise ConfigurationError(msg)
        self._register(self, method.upper(), self.full_path(path), chain)

    def __repr__(self) -> str:
        return f"<Scope {self._base_path!r} middleware={len(self.middleware)}>"
