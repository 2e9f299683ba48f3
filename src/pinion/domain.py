"""Domain models used throughout the container."""

import abc
import inspect
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

__all__ = [
    "Stereotype",
    "ParameterDescriptor",
    "ConstructorDescriptor",
    "FieldDescriptor",
    "MethodDescriptor",
    "TypeDescriptor",
    "BeanEntry",
    "canonical_name",
    "short_name",
    "is_capability",
]


class Stereotype(Enum):
    """The role a discovered type plays in the container."""

    COMPONENT = "component"
    CONFIGURATION = "configuration"
    PLAIN = "plain"


@dataclass(frozen=True)
class ParameterDescriptor:
    """A parameter of a constructor or method.

    Attributes:
        name: The parameter name in the signature.
        param_type: The declared type, with any ``Annotated`` metadata stripped.
        qualifier: Optional tag used to choose between several providers.
        kind: The ``inspect.Parameter`` kind, used to pass the argument correctly.
        has_default: Whether the signature supplies a default value.
    """

    name: str
    param_type: Any
    qualifier: Optional[str] = None
    kind: Any = inspect.Parameter.POSITIONAL_OR_KEYWORD
    has_default: bool = False


@dataclass(frozen=True)
class ConstructorDescriptor:
    """A way of creating an instance: ``__init__`` or a classmethod constructor."""

    name: str
    parameters: tuple[ParameterDescriptor, ...]
    injectable: bool = False

    @property
    def is_default(self) -> bool:
        return all(p.has_default for p in self.parameters)


@dataclass(frozen=True)
class FieldDescriptor:
    """A class-level annotated attribute, possibly an injection point."""

    name: str
    declared_type: Any
    injectable: bool = False
    qualifier: Optional[str] = None
    declared_by: Optional[type] = None


@dataclass(frozen=True)
class MethodDescriptor:
    """A method that is a setter injection point or a factory.

    Attributes:
        name: The method name.
        return_type: The annotated return type, if any.
        parameters: Parameters excluding ``self``.
        injectable: Whether the method is called with resolved arguments after construction.
        factory: Whether the method produces a bean (configuration classes only).
        factory_name: The name given to the produced bean, if any.
        declared_by: The class in whose body the method was found.
    """

    name: str
    return_type: Any
    parameters: tuple[ParameterDescriptor, ...] = ()
    injectable: bool = False
    factory: bool = False
    factory_name: Optional[str] = None
    declared_by: Optional[type] = None


@dataclass(frozen=True)
class TypeDescriptor:
    """Everything the container needs to know about one discovered type.

    ``fields`` and ``methods`` include members inherited from ancestor classes,
    most-derived first.
    """

    concrete_type: type
    capability_types: tuple[type, ...] = ()
    stereotype: Stereotype = Stereotype.PLAIN
    constructors: tuple[ConstructorDescriptor, ...] = ()
    fields: tuple[FieldDescriptor, ...] = ()
    methods: tuple[MethodDescriptor, ...] = ()
    qualifier: Optional[str] = None
    scan_packages: tuple[str, ...] = ()

    @property
    def factory_methods(self) -> list[MethodDescriptor]:
        return [m for m in self.methods if m.factory]

    @property
    def injectable_fields(self) -> list[FieldDescriptor]:
        return [f for f in self.fields if f.injectable]

    @property
    def injectable_methods(self) -> list[MethodDescriptor]:
        return [m for m in self.methods if m.injectable]


@dataclass(frozen=True)
class BeanEntry:
    """A singleton stored in the registry."""

    concrete_type: Any
    name: str
    instance: Any


def canonical_name(target: Any) -> str:
    """The stable, fully-qualified identifier of a type.

    Example:
        >>> canonical_name(collections.OrderedDict)  # Returns "collections.OrderedDict"
    """
    if inspect.isclass(target):
        return f"{target.__module__}.{target.__qualname__}"
    return repr(target)


def short_name(target: Any) -> str:
    """The unqualified name of a type, used when matching field names and qualifiers."""
    if inspect.isclass(target):
        return target.__name__
    return repr(target)


def is_capability(target: Any) -> bool:
    """Whether a type is abstract, so that requests for it go through the implementation index.

    Abstract classes, protocols and classes declared directly on ``abc.ABC`` count.
    """
    if not inspect.isclass(target):
        return False
    return (
        inspect.isabstract(target)
        or getattr(target, "_is_protocol", False)
        or abc.ABC in target.__bases__
    )
