"""Resolution of a requested type to a singleton."""

import inspect
import logging
from typing import Any, Callable, Optional

from pinion.bean_registry import BeanRegistry
from pinion.domain import canonical_name, is_capability
from pinion.errors import BeanNotFoundError
from pinion.implementation_index import ImplementationIndex

__all__ = ["Resolver"]

logger = logging.getLogger(__name__)


class Resolver:
    """Maps a requested type, plus optional hints, to a bean.

    Abstract types are first mapped to a concrete provider through the
    :class:`ImplementationIndex`. The bean is then read from the
    :class:`BeanRegistry` or, when allowed, built on demand.
    """

    def __init__(
        self,
        index: ImplementationIndex,
        registry: BeanRegistry,
        build: Callable[[type], Any],
    ):
        """
        Args:
            index: Capability to provider lookup.
            registry: Built singletons.
            build: Builds and publishes the singleton of a concrete type.
        """
        self._index = index
        self._registry = registry
        self._build = build

    def concrete_type_for(
        self,
        requested_type: Any,
        field_name: Optional[str] = None,
        qualifier: Optional[str] = None,
    ) -> Any:
        if is_capability(requested_type):
            return self._index.resolve(requested_type, field_name, qualifier)
        return requested_type

    def resolve_bean(
        self,
        requested_type: Any,
        field_name: Optional[str] = None,
        qualifier: Optional[str] = None,
        create_if_missing: bool = False,
    ) -> Any:
        """Return the bean satisfying a request.

        Args:
            requested_type: The declared type of the injection point or lookup.
            field_name: Name hint used to choose between several providers.
            qualifier: Qualifier hint; takes precedence over ``field_name``.
            create_if_missing: Build the bean if it does not exist yet.

        Raises:
            NoImplementationError: If an abstract type has no provider.
            AmbiguousImplementationError: If several providers match equally.
            BeanNotFoundError: If the bean does not exist and may not or cannot be built.
        """
        concrete = self.concrete_type_for(requested_type, field_name, qualifier)

        if self._registry.contains(concrete):
            if qualifier and qualifier.strip():
                return self._registry.get(concrete, qualifier)
            return self._registry.get(concrete, canonical_name(concrete))

        if create_if_missing and inspect.isclass(concrete):
            logger.debug("Building %r on demand for a request for %r", concrete, requested_type)
            with self._registry.lock:
                return self._build(concrete)

        raise BeanNotFoundError(f"Cannot find bean for {requested_type!r}")
