"""Seeding and materialisation of every discovered bean.

Bootstrapping runs in a fixed order:

1. The container and any pre-supplied objects are registered as beans.
2. The implementation index is seeded from the discovered components and from
   the return types of factory methods.
3. Configuration classes are materialised and their factory methods invoked.
   A configuration whose fields need a bean no configuration has produced yet is
   moved to the back of the queue and retried later.
4. Every component not already built is built.

Configurations come first because their factory methods may produce beans the
components depend on.
"""

import logging
from collections import deque
from typing import Any, Iterable

from pinion.bean_registry import BeanRegistry
from pinion.decorators import get_metadata
from pinion.domain import Stereotype, TypeDescriptor, canonical_name
from pinion.errors import BeanNotFoundError, UnresolvableConfigurationError
from pinion.implementation_index import ImplementationIndex
from pinion.instantiator import Instantiator, default_constructor
from pinion.introspection import capability_types_of

__all__ = ["Bootstrapper"]

logger = logging.getLogger(__name__)


class Bootstrapper:
    """Drives a container from discovered descriptors to fully wired singletons."""

    def __init__(
        self,
        index: ImplementationIndex,
        registry: BeanRegistry,
        instantiator: Instantiator,
    ):
        self._index = index
        self._registry = registry
        self._instantiator = instantiator

    def register_instance(self, instance: Any):
        """Register an already-built object as a bean of its own type and of its capability types."""
        concrete = type(instance)
        tag = get_metadata(concrete).get("qualifier")
        self._index.register(concrete, concrete, tag)
        for capability in capability_types_of(concrete):
            self._index.register(concrete, capability, tag)
        self._registry.put(concrete, instance)
        logger.debug("Registered supplied instance of %s", canonical_name(concrete))

    def bootstrap(self, descriptors: Iterable[TypeDescriptor]):
        """Materialise every configuration and component among ``descriptors``.

        Raises:
            UnresolvableConfigurationError: If configurations wait on each other forever.
            DependencyError: For any other resolution failure.
        """
        descriptors = list(descriptors)
        self._instantiator.add_descriptors(descriptors)

        components = [d for d in descriptors if d.stereotype is Stereotype.COMPONENT]
        configurations = [
            d for d in descriptors if d.stereotype is Stereotype.CONFIGURATION
        ]

        self._seed_index(components, configurations)
        self._materialise_configurations(configurations)
        self._materialise_components(components)

    def _seed_index(
        self,
        components: list[TypeDescriptor],
        configurations: list[TypeDescriptor],
    ):
        for descriptor in components:
            concrete = descriptor.concrete_type
            self._index.register(concrete, concrete, descriptor.qualifier)
            for capability in descriptor.capability_types:
                self._index.register(concrete, capability, descriptor.qualifier)

        for descriptor in configurations:
            for method in descriptor.factory_methods:
                self._index.register(method.return_type, method.return_type)

    def _materialise_configurations(self, configurations: list[TypeDescriptor]):
        queue = deque(configurations)
        failed_in_a_row = 0

        while len(queue) > 0:
            descriptor = queue.popleft()
            try:
                self._materialise_configuration(descriptor)
                failed_in_a_row = 0
            except BeanNotFoundError as e:
                queue.append(descriptor)
                failed_in_a_row += 1
                logger.debug(
                    "Configuration %s is waiting for a bean (%s); re-queued",
                    canonical_name(descriptor.concrete_type),
                    e,
                )
                if failed_in_a_row >= len(queue):
                    raise UnresolvableConfigurationError(
                        "Configurations "
                        f"{[canonical_name(d.concrete_type) for d in queue]} "
                        f"depend on beans that cannot be produced: {e}"
                    ) from e

    def _materialise_configuration(self, descriptor: TypeDescriptor):
        invoker = self._instantiator.invoker
        resolver = self._instantiator.resolver

        instance = invoker.new_instance(
            descriptor.concrete_type, default_constructor(descriptor), []
        )
        self._instantiator.inject_fields(descriptor, instance, create_if_missing=False)

        # All arguments are resolved before any factory runs, so a retried
        # configuration never leaves half of its beans behind.
        calls = [
            (
                method,
                [
                    resolver.resolve_bean(
                        p.param_type, canonical_name(p.param_type), p.qualifier, False
                    )
                    for p in method.parameters
                ],
            )
            for method in descriptor.factory_methods
        ]

        for method, arguments in calls:
            produced = invoker.call_method(instance, method, arguments)
            name = method.factory_name or canonical_name(method.return_type)
            self._registry.put(method.return_type, produced, name)
            logger.debug(
                "Factory %s.%s produced bean %r",
                descriptor.concrete_type.__qualname__,
                method.name,
                name,
            )

    def _materialise_components(self, components: list[TypeDescriptor]):
        for descriptor in components:
            concrete = descriptor.concrete_type
            if not self._registry.contains(concrete):
                with self._registry.lock:
                    self._instantiator.build_singleton(concrete)
