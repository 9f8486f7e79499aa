"""
Factory loading for the CLI.

Devices and decision providers are not part of uipilot; the CLI loads them
from import paths of the form ``package.module:callable``.
"""

import importlib
from collections.abc import Callable
from typing import Any


class FactoryLoadError(Exception):
    """Raised when a factory import path cannot be resolved."""


def load_factory(import_path: str) -> Callable[[], Any]:
    """Resolve ``module:attribute`` to a zero-argument callable."""
    module_name, separator, attribute = import_path.partition(":")
    if not separator or not module_name or not attribute:
        raise FactoryLoadError(
            f"Invalid factory '{import_path}', expected 'module:callable'"
        )
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise FactoryLoadError(f"Cannot import '{module_name}': {e}") from e

    factory = module
    for part in attribute.split("."):
        try:
            factory = getattr(factory, part)
        except AttributeError:
            raise FactoryLoadError(
                f"'{module_name}' has no attribute '{attribute}'"
            ) from None
    if not callable(factory):
        raise FactoryLoadError(f"'{import_path}' is not callable")
    return factory
