"""Strategies for finding the types a container should manage."""

import importlib
import inspect
import logging
import pkgutil
from abc import ABC, abstractmethod
from types import ModuleType
from typing import Iterable, Iterator

from pinion.decorators import get_metadata
from pinion.domain import TypeDescriptor
from pinion.errors import DiscoveryError
from pinion.introspection import describe

__all__ = ["Discovery", "PackageScanner", "StaticDiscovery"]

logger = logging.getLogger(__name__)


class Discovery(ABC):
    """Produces the descriptors of every type declared under some packages."""

    @abstractmethod
    def discover(self, packages: Iterable[str]) -> list[TypeDescriptor]:
        pass


class PackageScanner(Discovery):
    """Import every module below the given packages and describe the decorated classes in them.

    Only classes carrying ``@component`` or ``@configuration`` are described; a class is
    reported once, in the order its module was first imported.
    """

    def discover(self, packages: Iterable[str]) -> list[TypeDescriptor]:
        found: dict[type, TypeDescriptor] = {}
        for package_name in packages:
            before = len(found)
            for module in _modules_in(package_name):
                for cls in _classes_defined_in(module):
                    if cls not in found:
                        found[cls] = describe(cls)
            logger.debug(
                "Discovered %d types in package %s", len(found) - before, package_name
            )
        return list(found.values())


class StaticDiscovery(Discovery):
    """Describe an explicit list of classes, ignoring the package names it is given.

    Example:
        >>> container = init_container(Root, discovery=StaticDiscovery([Engine, Browser]))
    """

    def __init__(self, types: Iterable[type]):
        self._types = list(types)

    def discover(self, packages: Iterable[str]) -> list[TypeDescriptor]:
        return [describe(cls) for cls in dict.fromkeys(self._types)]


def _import(module_name: str) -> ModuleType:
    try:
        return importlib.import_module(module_name)
    except Exception as e:
        raise DiscoveryError(f"Cannot import module {module_name!r}: {e}") from e


def _raise_on_walk_error(module_name: str):
    raise DiscoveryError(f"Cannot import package {module_name!r}")


def _modules_in(package_name: str) -> Iterator[ModuleType]:
    package = _import(package_name)
    yield package

    path = getattr(package, "__path__", None)
    if path is None:
        return
    for module_info in pkgutil.walk_packages(
        path, prefix=f"{package.__name__}.", onerror=_raise_on_walk_error
    ):
        yield _import(module_info.name)


def _classes_defined_in(module: ModuleType) -> Iterator[type]:
    for value in list(vars(module).values()):
        if (
            inspect.isclass(value)
            and value.__module__ == module.__name__
            and "stereotype" in get_metadata(value)
        ):
            yield value
