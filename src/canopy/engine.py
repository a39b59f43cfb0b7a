"""Build entry points — the only place a brand-new App is created.

``build()`` applies one route tree to a fresh app. ``Engine`` is the
declarative top level: app-wide middleware, a list of groups and a pair
of hooks around the whole build.

Both stop at the first failure. The app behind a failed build may hold
some of the tree's routes; it is returned only so the failure can be
inspected and must never be served.
"""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from canopy.app import App
from canopy.config import AppConfig
from canopy.errors import BuildError, HookFailure
from canopy.groups.protocol import Applicable
from canopy.groups.result import Failed
from canopy.middleware.protocol import Middleware

logger = logging.getLogger("canopy.build")


@dataclass(frozen=True, slots=True)
class BuildResult:
    """A built app, or the first error that stopped the build."""

    app: App
    error: BuildError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> App:
        """Return the app, or raise the build error."""
        if self.error is not None:
            raise self.error
        return self.app


def _apply_all(app: App, groups: Sequence[Applicable]) -> BuildError | None:
    for group in groups:
        if group is None:
            msg = "Cannot apply None as a route tree."
            raise TypeError(msg)
        result = group.apply(app.root)
        if isinstance(result, Failed):
            return result.error
    return None


def _finish(app: App, error: BuildError | None) -> BuildResult:
    if error is not None:
        logger.warning("build failed: %s", error)
    else:
        logger.info("build complete: %d routes", len(app.registered))
    return BuildResult(app, error)


def build(
    root: Applicable,
    *,
    middleware: Sequence[Middleware] = (),
    config: AppConfig | None = None,
) -> BuildResult:
    """Apply *root* to a fresh app mounted at the empty base path.

    *middleware* is installed app-wide (it also sees unmatched requests).
    Raises ``TypeError`` when *root* is ``None``; every expected
    misconfiguration comes back in ``BuildResult.error`` instead.
    """
    app = App(config)
    for mw in middleware:
        app.add_middleware(mw)
    return _finish(app, _apply_all(app, [root]))


@dataclass(slots=True)
class Engine:
    """Everything needed to produce a ready-to-serve App.

    Attributes:
        middlewares: App-wide middleware, outermost first.
        router_groups: Route trees applied in order to the root scope.
        pre_hook: Zero-argument callable run before the app is created.
        post_hook: Zero-argument callable run after every group applied.
        config: Passed to the created App.

    Hooks fail the build the same way group hooks do: by raising or by
    returning an exception.
    """

    middlewares: Sequence[Middleware] = ()
    router_groups: list[Applicable] = field(default_factory=list)
    pre_hook: Callable[[], BaseException | None] | None = None
    post_hook: Callable[[], BaseException | None] | None = None
    config: AppConfig | None = None

    def try_new(self) -> BuildResult:
        """Build the app, reporting failure in the result."""
        error = _call_engine_hook(self.pre_hook, "pre")
        app = App(self.config)
        if error is not None:
            return _finish(app, error)

        for mw in self.middlewares:
            app.add_middleware(mw)
        error = _apply_all(app, self.router_groups)
        if error is None:
            error = _call_engine_hook(self.post_hook, "post")
        return _finish(app, error)

    def new(self) -> App:
        """Build the app or raise the first ``BuildError``."""
        return self.try_new().unwrap()


def _call_engine_hook(
    hook: Callable[[], BaseException | None] | None,
    stage: str,
) -> BuildError | None:
    if hook is None:
        return None
    try:
        signal = hook()
    except Exception as exc:
        signal = exc
    if isinstance(signal, BaseException):
        return HookFailure(stage, signal)
    return None
