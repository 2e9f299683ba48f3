"""Construction and wiring of individual singletons.

Building a type happens in two stages. The constructor runs first, with its
arguments resolved (and, if needed, built) beforehand; the new instance is then
published to the registry. Only after publication are fields and setters
injected, so two beans that refer to each other only through fields or setters
can each find the other in the registry. Constructor-level cycles cannot be
satisfied and are reported by the :class:`CycleGuard`.
"""

import logging
from typing import Any, Iterable, Mapping, Optional

from pinion.bean_registry import BeanRegistry
from pinion.cycle_guard import CycleGuard
from pinion.domain import (
    ConstructorDescriptor,
    ParameterDescriptor,
    TypeDescriptor,
    canonical_name,
)
from pinion.errors import AmbiguousConstructorError, NoDefaultConstructorError
from pinion.implementation_index import ImplementationIndex
from pinion.introspection import describe
from pinion.invoker import Invoker
from pinion.resolver import Resolver

__all__ = ["Instantiator", "default_constructor"]

logger = logging.getLogger(__name__)


class Instantiator:
    """Build singletons, resolving their dependencies through a :class:`Resolver`.

    Attributes:
        resolver: The resolver used for every dependency; it calls back into
            :meth:`build_singleton` for beans that do not exist yet.
    """

    def __init__(
        self,
        index: ImplementationIndex,
        registry: BeanRegistry,
        invoker: Invoker,
        descriptors: Optional[Mapping[type, TypeDescriptor]] = None,
    ):
        self._registry = registry
        self._invoker = invoker
        self._descriptors: dict[type, TypeDescriptor] = dict(descriptors or {})
        self._guard = CycleGuard()
        self.resolver = Resolver(index, registry, self.build_singleton)

    @property
    def invoker(self) -> Invoker:
        return self._invoker

    def add_descriptors(self, descriptors: Iterable[TypeDescriptor]):
        for descriptor in descriptors:
            self._descriptors.setdefault(descriptor.concrete_type, descriptor)

    def descriptor_for(self, concrete: type) -> TypeDescriptor:
        """The discovered descriptor of a type, describing undiscovered types on first use."""
        if concrete not in self._descriptors:
            self._descriptors[concrete] = describe(concrete)
        return self._descriptors[concrete]

    def build_singleton(self, concrete: type) -> Any:
        """Construct, publish and wire the singleton of ``concrete``.

        Returns the existing bean if the type has already been built.

        Raises:
            CircularDependencyError: If ``concrete`` is already being constructed.
            NoDefaultConstructorError: If there is no usable constructor.
            AmbiguousConstructorError: If several constructors are marked injectable.
        """
        with self._guard.constructing(concrete):
            if self._registry.contains(concrete):
                return self._registry.get(concrete)

            descriptor = self.descriptor_for(concrete)
            instance = self._construct(descriptor)
            self._registry.put(concrete, instance)
            logger.debug("Published singleton %s", canonical_name(concrete))

        self.inject_fields(descriptor, instance)
        self.inject_setters(descriptor, instance)
        return instance

    def inject_fields(
        self, descriptor: TypeDescriptor, instance: Any, create_if_missing: bool = True
    ):
        """Assign every injectable field of ``instance``, including inherited ones."""
        for field in descriptor.injectable_fields:
            value = self.resolver.resolve_bean(
                field.declared_type, field.name, field.qualifier, create_if_missing
            )
            self._invoker.set_field(instance, field.name, value)
            logger.debug(
                "Injected field %s.%s", descriptor.concrete_type.__qualname__, field.name
            )

    def inject_setters(self, descriptor: TypeDescriptor, instance: Any):
        """Call every injectable method of ``instance`` with resolved arguments."""
        for method in descriptor.injectable_methods:
            arguments = [self._resolve_argument(p) for p in method.parameters]
            self._invoker.call_method(instance, method, arguments)
            logger.debug(
                "Injected through %s.%s", descriptor.concrete_type.__qualname__, method.name
            )

    def _construct(self, descriptor: TypeDescriptor) -> Any:
        constructor = _select_constructor(descriptor)
        arguments = (
            [self._resolve_argument(p) for p in constructor.parameters]
            if constructor.injectable
            else []
        )
        return self._invoker.new_instance(descriptor.concrete_type, constructor, arguments)

    def _resolve_argument(self, parameter: ParameterDescriptor) -> Any:
        # Arguments are hinted with their type's canonical name, not the parameter name.
        return self.resolver.resolve_bean(
            parameter.param_type,
            canonical_name(parameter.param_type),
            parameter.qualifier,
            True,
        )


def _select_constructor(descriptor: TypeDescriptor) -> ConstructorDescriptor:
    injectable = [c for c in descriptor.constructors if c.injectable]
    if len(injectable) > 1:
        raise AmbiguousConstructorError(
            f"Constructors {[c.name for c in injectable]} of "
            f"{canonical_name(descriptor.concrete_type)} are all marked @autowired"
        )
    if injectable:
        return injectable[0]
    return default_constructor(descriptor)


def default_constructor(descriptor: TypeDescriptor) -> ConstructorDescriptor:
    """The ``__init__`` of a type, provided it can be called without arguments.

    Raises:
        NoDefaultConstructorError: If ``__init__`` has parameters without defaults.
    """
    default = next(
        (c for c in descriptor.constructors if c.name == "__init__" and c.is_default),
        None,
    )
    if default is None:
        raise NoDefaultConstructorError(
            f"There is no default constructor in class {canonical_name(descriptor.concrete_type)}"
        )
    return default
