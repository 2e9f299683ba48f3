"""Construct instances, assign fields and call methods on behalf of the container."""

import inspect
from abc import ABC, abstractmethod
from typing import Any, Callable, Sequence

from pinion.domain import ConstructorDescriptor, MethodDescriptor, ParameterDescriptor
from pinion.errors import DependencyError, InvocationError

__all__ = ["Invoker", "ReflectiveInvoker"]


class Invoker(ABC):
    """The operations the container performs on user types."""

    @abstractmethod
    def new_instance(
        self, cls: type, constructor: ConstructorDescriptor, arguments: Sequence[Any]
    ) -> Any:
        pass

    @abstractmethod
    def set_field(self, instance: Any, name: str, value: Any):
        pass

    @abstractmethod
    def call_method(
        self, instance: Any, method: MethodDescriptor, arguments: Sequence[Any]
    ) -> Any:
        pass


class ReflectiveInvoker(Invoker):
    """Default :class:`Invoker` based on plain attribute access.

    Methods are looked up on the instance, so the most-derived override is the
    one called. Exceptions raised by user code are wrapped in ``InvocationError``.
    """

    def new_instance(
        self, cls: type, constructor: ConstructorDescriptor, arguments: Sequence[Any]
    ) -> Any:
        target = cls if constructor.name == "__init__" else getattr(cls, constructor.name)
        return _invoke(target, constructor.parameters, arguments, f"constructing {cls!r}")

    def set_field(self, instance: Any, name: str, value: Any):
        try:
            setattr(instance, name, value)
        except Exception as e:
            raise InvocationError(
                f"Cannot assign field {name!r} of {type(instance)!r}: {e}"
            ) from e

    def call_method(
        self, instance: Any, method: MethodDescriptor, arguments: Sequence[Any]
    ) -> Any:
        return _invoke(
            getattr(instance, method.name),
            method.parameters,
            arguments,
            f"calling {type(instance).__qualname__}.{method.name}",
        )


def _invoke(
    target: Callable,
    parameters: Sequence[ParameterDescriptor],
    arguments: Sequence[Any],
    action: str,
) -> Any:
    args = []
    kwargs = {}
    for parameter, argument in zip(parameters, arguments):
        if parameter.kind is inspect.Parameter.KEYWORD_ONLY:
            kwargs[parameter.name] = argument
        else:
            args.append(argument)

    try:
        return target(*args, **kwargs)
    except DependencyError:
        raise
    except Exception as e:
        raise InvocationError(f"Error while {action}: {e}") from e
