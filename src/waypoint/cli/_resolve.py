"""Resolve ``module:attribute`` strings to a waypoint App."""

import importlib
from typing import Any

from waypoint.app import App

DEFAULT_ATTRIBUTE = "app"


def _load(import_string: str) -> Any:
    module_name, sep, attribute = import_string.partition(":")
    module = importlib.import_module(module_name)
    return getattr(module, attribute if sep and attribute else DEFAULT_ATTRIBUTE)


def resolve_app(import_string: str) -> App:
    """Import the App named by *import_string*.

    ``"crm.api"`` means ``"crm.api:app"``. When the attribute is a plain
    callable rather than an App it is called once as a factory.

    Raises:
        ModuleNotFoundError: The module part does not import.
        AttributeError: The module has no such attribute.
        TypeError: The result (or the factory's result) is not an App,
            or the factory itself failed.
    """
    target = _load(import_string)

    if not isinstance(target, App) and callable(target):
        try:
            target = target()
        except Exception as exc:
            msg = f"App factory {import_string!r} failed: {exc}"
            raise TypeError(msg) from exc

    if isinstance(target, App):
        return target
    msg = f"{import_string!r} is a {type(target).__name__}, not a waypoint.App"
    raise TypeError(msg)
