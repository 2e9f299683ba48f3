"""Pinion inversion-of-control container.

Pinion discovers component classes under an application's packages, builds each
of them once and wires their dependencies by constructor, field or setter. Beans
may also be produced by factory methods on configuration classes.

Key Features:
    - Declarative registration with ``@component`` and ``@configuration``
    - Constructor, field and setter injection driven by standard type hints
    - Abstract types resolved to their single implementation, or disambiguated
      by qualifier or field name
    - Field and setter cycles tolerated; constructor cycles detected

Basic Usage:
    >>> from typing import Annotated
    >>> from pinion import StaticDiscovery, autowired, component, init_container
    >>>
    >>> @component
    ... class Engine:
    ...     def name(self) -> str:
    ...         return "V8"
    >>>
    >>> @component
    ... class Car:
    ...     engine: Annotated[Engine, autowired]
    >>>
    >>> container = init_container(Car, discovery=StaticDiscovery([Engine, Car]))
    >>> container.get_bean(Car).engine.name()
    'V8'

The framework consists of several core modules:
    - decorators: Metadata attached to user classes, methods and annotations
    - container: ``init_container`` and the ``Container`` lookup surface
    - bootstrap: Seeding and materialisation order
    - instantiator / resolver: Building singletons and resolving dependencies
    - bean_registry / implementation_index / cycle_guard: Core data structures
    - discovery / introspection / invoker: Finding, describing and calling user types
    - errors: Framework-specific exceptions
"""

from pinion.container import Container, init_container
from pinion.decorators import (
    Qualifier,
    autowired,
    bean,
    component,
    component_scan,
    configuration,
    qualifier,
)
from pinion.discovery import Discovery, PackageScanner, StaticDiscovery
from pinion.errors import DependencyError, IoCError

__all__ = [
    "Container",
    "init_container",
    "Qualifier",
    "autowired",
    "bean",
    "component",
    "component_scan",
    "configuration",
    "qualifier",
    "Discovery",
    "PackageScanner",
    "StaticDiscovery",
    "DependencyError",
    "IoCError",
]
