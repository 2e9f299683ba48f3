"""Exceptions raised while discovering, resolving and wiring beans.

Every failure inside the container is a :class:`DependencyError` subclass. The
public entry points re-raise them as a single :class:`IoCError` chained to the
original, so callers only ever need to catch one type.
"""

from typing import Optional

__all__ = [
    "DependencyError",
    "NoImplementationError",
    "AmbiguousImplementationError",
    "BeanNotFoundError",
    "CircularDependencyError",
    "NoDefaultConstructorError",
    "AmbiguousConstructorError",
    "UnresolvableConfigurationError",
    "DiscoveryError",
    "InvocationError",
    "IoCError",
]


class DependencyError(Exception):
    """Raised when a component's dependency cannot be resolved or is misannotated."""

    pass


class NoImplementationError(DependencyError):
    """No concrete type provides the requested capability."""


class AmbiguousImplementationError(DependencyError):
    """Several concrete types provide a capability and no hint picks one."""


class BeanNotFoundError(DependencyError):
    """A lookup by type (and optionally name) found no bean."""


class CircularDependencyError(DependencyError):
    """A type was requested again while its constructor arguments were being resolved."""

    def __init__(self, concrete_type: type):
        super().__init__(
            f"Circular dependency detected while instantiating {concrete_type!r}"
        )
        self.concrete_type = concrete_type


class NoDefaultConstructorError(DependencyError):
    """Neither an injectable nor a no-argument constructor is available."""


class AmbiguousConstructorError(DependencyError):
    """More than one constructor is marked for injection."""


class UnresolvableConfigurationError(DependencyError):
    """Configuration classes wait on beans that no remaining configuration will produce."""


class DiscoveryError(DependencyError):
    """Scanning or describing user types failed."""


class InvocationError(DependencyError):
    """User code raised while being constructed, assigned to or called."""


class IoCError(Exception):
    """The single error surfaced to users of the container.

    The precise failure is available as :attr:`cause` (also ``__cause__``).
    """

    def __init__(self, cause: BaseException):
        super().__init__(str(cause))
        self.__cause__ = cause

    @property
    def cause(self) -> Optional[BaseException]:
        return self.__cause__
