"""Decorators and annotation markers that declare how classes take part in wiring.

Example:
    >>> @component
    ... class ClientClass:
    ...     db: Annotated[DB, autowired]
    ...
    >>> @component
    ... class Browser:
    ...     @autowired
    ...     def __init__(self, engine: Annotated[Engine, qualifier("v8Engine")]):
    ...         self.engine = engine
    ...
    >>> @configuration
    ... class AppConfiguration:
    ...     @bean()
    ...     def get_app(self) -> App:
    ...         return App()
"""

import inspect
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pinion.domain import Stereotype
from pinion.errors import DependencyError

__all__ = [
    "component",
    "configuration",
    "component_scan",
    "bean",
    "autowired",
    "qualifier",
    "Qualifier",
    "get_metadata",
]

METADATA_ATTRIBUTE = "__pinion_metadata__"


def set_metadata(target: Any, **kwargs) -> Any:
    # Read only the target's own namespace so subclasses never share a parent's dict.
    metadata = dict(vars(target).get(METADATA_ATTRIBUTE, {}))
    metadata.update(kwargs)
    setattr(target, METADATA_ATTRIBUTE, metadata)
    return target


def get_metadata(target: Any) -> dict[str, Any]:
    """Return the metadata declared directly on a class or function (never inherited)."""
    if isinstance(target, (classmethod, staticmethod)):
        target = target.__func__
    try:
        return vars(target).get(METADATA_ATTRIBUTE, {})
    except TypeError:
        return {}


def _require_class(target: Any, decorator_name: str):
    if not inspect.isclass(target):
        raise DependencyError(f"@{decorator_name} expects a class, got {target!r}")


def component(cls: type) -> type:
    """Mark a class as a managed singleton."""
    _require_class(cls, "component")
    return set_metadata(cls, stereotype=Stereotype.COMPONENT)


def configuration(cls: type) -> type:
    """Mark a class as a factory host whose ``@bean`` methods produce beans."""
    _require_class(cls, "configuration")
    return set_metadata(cls, stereotype=Stereotype.CONFIGURATION)


def component_scan(*packages: str) -> Callable[[type], type]:
    """Name the packages to scan when the decorated class is used as the container root.

    Without this decorator the root class's own package is scanned.
    """

    def decorator(cls: type) -> type:
        _require_class(cls, "component_scan")
        return set_metadata(cls, scan_packages=tuple(packages))

    return decorator


def bean(name: Optional[str] = None) -> Callable:
    """Decorator to mark a configuration method as a factory.

    Args:
        name: Optional name for the produced bean; defaults to the canonical name
            of the method's return type.

    Example:
        @bean("primaryDataSource")
        def data_source(self) -> DataSource:
            return DataSource()
    """
    if callable(name):
        return bean()(name)

    def decorator(func: Any) -> Any:
        if isinstance(func, (classmethod, staticmethod)):
            set_metadata(func.__func__, factory=True, factory_name=name)
            return func
        return set_metadata(func, factory=True, factory_name=name)

    return decorator


def autowired(target: Any) -> Any:
    """Mark a constructor or setter method as an injection point.

    The function object itself is also the field marker: ``Annotated[T, autowired]``.
    """
    if isinstance(target, (classmethod, staticmethod)):
        set_metadata(target.__func__, injectable=True)
        return target
    return set_metadata(target, injectable=True)


@dataclass(frozen=True)
class Qualifier:
    """A tag used to pick one provider among several.

    Used as ``Annotated`` metadata on parameters and fields, or as a decorator on
    a class to give that class an extra name to be matched by.
    """

    value: str

    def __post_init__(self):
        if not isinstance(self.value, str) or not self.value.strip():
            raise DependencyError("A qualifier must be a non-empty string")

    def __call__(self, target: type) -> type:
        _require_class(target, "qualifier")
        return set_metadata(target, qualifier=self.value)


def qualifier(value: str) -> Qualifier:
    return Qualifier(value)
