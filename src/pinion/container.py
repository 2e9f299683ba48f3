"""Entry points for building and querying a container."""

import logging
import sys
from typing import Any, Optional, TypeVar

from pinion.bean_registry import BeanRegistry
from pinion.bootstrap import Bootstrapper
from pinion.decorators import get_metadata
from pinion.discovery import Discovery, PackageScanner
from pinion.errors import DependencyError, IoCError
from pinion.implementation_index import ImplementationIndex
from pinion.instantiator import Instantiator
from pinion.invoker import Invoker, ReflectiveInvoker

__all__ = ["Container", "init_container", "scan_packages_of"]

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Container:
    """A fully wired set of singletons.

    Containers are created by :func:`init_container`; beans are retrieved by type,
    optionally with a name to choose between several beans of the same type.

    Example:
        >>> container = init_container(Application)
        >>> browser = container.get_bean(Browser)
        >>> browser is container[Browser]
        True
    """

    def __init__(self, invoker: Optional[Invoker] = None):
        self._registry = BeanRegistry()
        self._index = ImplementationIndex()
        self._instantiator = Instantiator(
            self._index, self._registry, invoker or ReflectiveInvoker()
        )

    def get_bean(self, bean_type: type[T], name: Optional[str] = None) -> T:
        """Return the bean satisfying ``bean_type``.

        Args:
            bean_type: A concrete or abstract type.
            name: Optional bean name or qualifier, needed only when several beans match.

        Raises:
            IoCError: If no single bean satisfies the request.
        """
        try:
            return self._instantiator.resolver.resolve_bean(bean_type, None, name, False)
        except DependencyError as e:
            raise IoCError(e) from e

    def __getitem__(self, bean_type: type[T]) -> T:
        return self.get_bean(bean_type)

    def __len__(self) -> int:
        return len(self._registry)

    def _initialise(self, root: type, pre_supplied: tuple[Any, ...], discovery: Discovery):
        bootstrapper = Bootstrapper(self._index, self._registry, self._instantiator)
        bootstrapper.register_instance(self)
        for instance in pre_supplied:
            bootstrapper.register_instance(instance)

        packages = scan_packages_of(root)
        descriptors = discovery.discover(packages)
        logger.debug("Discovered %d types in %s", len(descriptors), list(packages))

        bootstrapper.bootstrap(descriptors)
        logger.info(
            "Container for %s initialised with %d beans", root.__qualname__, len(self._registry)
        )


def scan_packages_of(root: type) -> tuple[str, ...]:
    """The packages named by ``@component_scan`` on ``root``, else the package ``root`` lives in."""
    declared = get_metadata(root).get("scan_packages")
    if declared:
        return tuple(declared)
    module = sys.modules.get(root.__module__)
    return (getattr(module, "__package__", None) or root.__module__,)


def init_container(
    root: type,
    *pre_supplied: Any,
    discovery: Optional[Discovery] = None,
    invoker: Optional[Invoker] = None,
) -> Container:
    """
    Construct and return a fully wired container.

    Components and configurations are discovered under the packages named by
    ``@component_scan`` on ``root`` (or ``root``'s own package), configurations'
    factory methods are invoked, and every component is built as a singleton.

    Args:
        root: The application's root class.
        pre_supplied: Already-built objects to register as beans before discovery.
        discovery: How to find types; defaults to scanning packages.
        invoker: How to construct and call user types; defaults to plain attribute access.

    Returns:
        The initialised container.

    Raises:
        IoCError: If any bean cannot be discovered, resolved or built. The precise
            failure is available as the error's cause.
    """
    container = Container(invoker)
    try:
        container._initialise(root, pre_supplied, discovery or PackageScanner())
    except DependencyError as e:
        raise IoCError(e) from e
    return container
