"""App import resolution — turns ``"module:attribute"`` into a built App.

Shared by ``canopy routes`` and ``canopy run``. The attribute may be
anything that leads to an App: the App itself, a ``BuildResult``, an
``Engine``, a bare route tree, or a zero-argument factory returning one
of those.
"""

import importlib
import os
import sys

from canopy.app import App
from canopy.engine import BuildResult, Engine, build
from canopy.groups.protocol import Applicable


def resolve_app(import_string: str) -> App:
    """Resolve an import string to a canopy App instance.

    When the attribute portion is omitted it defaults to ``"app"``
    (``"myapp"`` resolves to ``myapp.app``).

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the object leads to nothing an App can be built from.
        BuildError: If the tree behind the object fails to build.
    """
    module_path, _, attr_name = import_string.partition(":")
    if not attr_name:
        attr_name = "app"

    # Console scripts do not put the working directory on sys.path
    cwd = os.getcwd()
    if cwd not in sys.path:
        sys.path.insert(0, cwd)

    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name)

    # Factories are called once; route trees are applicable, never callable
    if callable(obj) and not isinstance(obj, App):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    match obj:
        case App():
            return obj
        case BuildResult():
            return obj.unwrap()
        case Engine():
            return obj.new()
        case Applicable():
            return build(obj).unwrap()

    msg = (
        f"{import_string!r} resolved to {type(obj).__name__}; expected an App, "
        "BuildResult, Engine or route tree"
    )
    raise TypeError(msg)
