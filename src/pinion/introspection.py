"""Build :class:`TypeDescriptor` records from decorated Python classes.

Fields are read from class-level annotations, constructors from ``__init__`` and
``@autowired`` classmethods, and setter / factory methods from functions carrying
``@autowired`` or ``@bean``. Members inherited from ancestor classes are
included, most-derived first.
"""

import inspect
import logging
import sys
from typing import Any, Annotated, Callable, Optional, get_args, get_origin, get_type_hints

from pinion.decorators import Qualifier, autowired, get_metadata
from pinion.domain import (
    ConstructorDescriptor,
    FieldDescriptor,
    MethodDescriptor,
    ParameterDescriptor,
    Stereotype,
    TypeDescriptor,
    is_capability,
)
from pinion.errors import DiscoveryError

__all__ = ["describe", "capability_types_of"]

logger = logging.getLogger(__name__)

_FRAMEWORK_MODULES = frozenset({"builtins", "abc", "typing", "typing_extensions"})
_VARIADIC = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


def describe(cls: type) -> TypeDescriptor:
    """Describe a class for the container.

    Args:
        cls: The class to describe.

    Returns:
        A TypeDescriptor with its stereotype, capability types and injection points.

    Raises:
        DiscoveryError: If ``cls`` is not a class, an annotation cannot be evaluated,
            an injection point has an unannotated parameter, or a factory method
            has no return annotation.
    """
    if not inspect.isclass(cls):
        raise DiscoveryError(f"{cls!r} is not a class")

    metadata = get_metadata(cls)
    return TypeDescriptor(
        cls,
        capability_types_of(cls),
        metadata.get("stereotype", Stereotype.PLAIN),
        _constructors(cls),
        _fields(cls),
        _methods(cls),
        metadata.get("qualifier"),
        tuple(metadata.get("scan_packages", ())),
    )


def _ancestors(cls: type) -> list[type]:
    return [
        klass
        for klass in cls.__mro__
        if klass is not object and klass.__module__ not in _FRAMEWORK_MODULES
    ]


def capability_types_of(cls: type) -> tuple[type, ...]:
    """The abstract ancestors of a class, nearest first."""
    return tuple(klass for klass in _ancestors(cls)[1:] if is_capability(klass))


def _type_hints(target: Any, owner: type) -> dict[str, Any]:
    try:
        return get_type_hints(target, include_extras=True)
    except (NameError, TypeError) as e:
        raise DiscoveryError(
            f"Cannot evaluate annotations of {target!r} declared in {owner!r}: {e}"
        ) from e


def _split_annotated(annotation: Any) -> tuple[Any, list[Any]]:
    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        return base_type, metadata
    return annotation, []


def _qualifier_from(metadata: list[Any]) -> Optional[str]:
    for item in metadata:
        if isinstance(item, Qualifier):
            return item.value
        if isinstance(item, str) and item.strip():
            return item
    return None


def _parameters(func: Callable, hints: dict[str, Any]) -> tuple[ParameterDescriptor, ...]:
    """Describe a function's parameters, skipping the leading ``self`` / ``cls``."""
    parameters = list(inspect.signature(func).parameters.values())[1:]
    result = []
    for parameter in parameters:
        if parameter.kind in _VARIADIC:
            continue
        base_type, metadata = _split_annotated(hints.get(parameter.name))
        result.append(
            ParameterDescriptor(
                parameter.name,
                base_type,
                _qualifier_from(metadata),
                parameter.kind,
                parameter.default is not inspect.Parameter.empty,
            )
        )
    return tuple(result)


def _require_annotated(func: Callable, owner: type, parameters):
    for parameter in parameters:
        if parameter.param_type is None:
            raise DiscoveryError(
                "Dependency <%s> of <%s.%s> is not annotated"
                % (parameter.name, owner.__qualname__, func.__name__)
            )


def _constructors(cls: type) -> tuple[ConstructorDescriptor, ...]:
    constructors = [_init_constructor(cls)]
    seen = set()
    for klass in _ancestors(cls):
        for name, attr in vars(klass).items():
            if name in seen or not isinstance(attr, classmethod):
                continue
            seen.add(name)
            if not get_metadata(attr).get("injectable"):
                continue
            func = attr.__func__
            parameters = _parameters(func, _type_hints(func, klass))
            _require_annotated(func, klass, parameters)
            constructors.append(ConstructorDescriptor(name, parameters, True))
    return tuple(constructors)


def _init_constructor(cls: type) -> ConstructorDescriptor:
    init = cls.__init__
    if init is object.__init__ or not inspect.isfunction(init):
        return ConstructorDescriptor("__init__", ())

    if not get_metadata(init).get("injectable"):
        # Called without arguments, so only the presence of defaults matters.
        return ConstructorDescriptor("__init__", _parameters(init, {}))

    parameters = _parameters(init, _type_hints(init, cls))
    _require_annotated(init, cls, parameters)
    return ConstructorDescriptor("__init__", parameters, True)


def _field_hint(klass: type, name: str, annotation: Any) -> Any:
    """Evaluate a single class-level annotation in the namespace of the class declaring it."""
    module = sys.modules.get(klass.__module__)
    holder = type(klass.__name__, (), {"__annotations__": {name: annotation}})
    hints = get_type_hints(
        holder, getattr(module, "__dict__", {}), dict(vars(klass)), include_extras=True
    )
    return hints[name]


def _declares_injection(annotation: Any) -> bool:
    if isinstance(annotation, str):
        # Postponed annotations are judged by their source text.
        return "autowired" in annotation
    return any(item is autowired for item in _split_annotated(annotation)[1])


def _fields(cls: type) -> tuple[FieldDescriptor, ...]:
    fields = []
    seen = set()
    for klass in _ancestors(cls):
        for name, annotation in inspect.get_annotations(klass).items():
            if name in seen:
                continue
            seen.add(name)
            try:
                hint = _field_hint(klass, name, annotation)
            except (NameError, AttributeError, TypeError) as e:
                if _declares_injection(annotation):
                    raise DiscoveryError(
                        f"Cannot evaluate annotation of field {name!r} declared in {klass!r}: {e}"
                    ) from e
                logger.debug(
                    "Ignoring field %s.%s: annotation %r cannot be evaluated",
                    klass.__qualname__,
                    name,
                    annotation,
                )
                continue

            base_type, metadata = _split_annotated(hint)
            fields.append(
                FieldDescriptor(
                    name,
                    base_type,
                    any(item is autowired for item in metadata),
                    _qualifier_from(metadata),
                    klass,
                )
            )
    return tuple(fields)


def _methods(cls: type) -> tuple[MethodDescriptor, ...]:
    methods = []
    seen = set()
    for klass in _ancestors(cls):
        for name, attr in vars(klass).items():
            if name == "__init__" or name in seen:
                continue
            metadata = get_metadata(attr)
            if not (metadata.get("injectable") or metadata.get("factory")):
                continue
            if isinstance(attr, staticmethod) or (
                isinstance(attr, classmethod) and metadata.get("factory")
            ):
                kind = "static" if isinstance(attr, staticmethod) else "class"
                raise DiscoveryError(
                    f"{klass.__qualname__}.{name} is a {kind} method: "
                    "@bean and @autowired methods must be instance methods"
                )
            if not inspect.isfunction(attr):
                continue
            seen.add(name)
            methods.append(_make_method(attr, klass, metadata))
    return tuple(methods)


def _make_method(func: Callable, owner: type, metadata: dict[str, Any]) -> MethodDescriptor:
    hints = _type_hints(func, owner)
    parameters = _parameters(func, hints)
    return_type = hints.get("return")
    is_factory = bool(metadata.get("factory"))

    if metadata.get("injectable") or is_factory:
        _require_annotated(func, owner, parameters)
    if is_factory and return_type is None:
        raise DiscoveryError(
            f"Factory method {owner.__qualname__}.{func.__name__} "
            "does not have an annotated return type"
        )

    return MethodDescriptor(
        func.__name__,
        return_type,
        parameters,
        bool(metadata.get("injectable")),
        is_factory,
        metadata.get("factory_name"),
        owner,
    )
