from abc import ABC, abstractmethod
from typing import Annotated, Callable

import pytest

from pinion.bean_registry import BeanRegistry
from pinion.decorators import autowired, qualifier
from pinion.errors import (
    AmbiguousConstructorError,
    BeanNotFoundError,
    CircularDependencyError,
    InvocationError,
    NoDefaultConstructorError,
)
from pinion.implementation_index import ImplementationIndex
from pinion.instantiator import Instantiator
from pinion.invoker import ReflectiveInvoker


class Engine(ABC):
    @abstractmethod
    def name(self) -> str:
        pass


class V8(Engine):
    def name(self) -> str:
        return "V8"


class Wheel:
    pass


class Car:
    wheel: Annotated[Wheel, autowired]

    @autowired
    def __init__(self, engine: Engine, *, spare: Wheel):
        self.engine = engine
        self.spare = spare


class Left:
    right: Annotated["Right", autowired]


class Right:
    left: Annotated[Left, autowired]


class Chicken:
    @autowired
    def __init__(self, egg: "Egg"):
        self.egg = egg


class Egg:
    @autowired
    def __init__(self, chicken: Chicken):
        self.chicken = chicken


class Garage:
    def __init__(self):
        self.calls = []

    @autowired
    def park(self, wheel: Wheel):
        self.calls.append(("garage", wheel))


class FancyGarage(Garage):
    def park(self, fancy_wheel: Wheel):
        self.calls.append(("fancy", fancy_wheel))


@pytest.fixture
def index() -> ImplementationIndex:
    index = ImplementationIndex()
    index.register(V8, V8)
    index.register(V8, Engine)
    return index


@pytest.fixture
def registry() -> BeanRegistry:
    return BeanRegistry()


@pytest.fixture
def instantiator(index, registry) -> Instantiator:
    return Instantiator(index, registry, ReflectiveInvoker())


def test_constructor_and_field_injection(instantiator, registry):
    car = instantiator.build_singleton(Car)

    assert registry.get(Car) is car
    assert car.engine is registry.get(V8)
    assert car.engine.name() == "V8"
    assert car.wheel is registry.get(Wheel)
    assert car.spare is car.wheel


def test_existing_singleton_is_returned(instantiator, registry):
    wheel = Wheel()
    registry.put(Wheel, wheel)

    assert instantiator.build_singleton(Wheel) is wheel


def test_field_cycle_is_tolerated(instantiator):
    left = instantiator.build_singleton(Left)

    assert left.right.left is left


def test_constructor_cycle_is_rejected(instantiator, registry):
    with pytest.raises(CircularDependencyError, match="Circular dependency detected"):
        instantiator.build_singleton(Chicken)

    assert not registry.contains(Chicken)
    assert not registry.contains(Egg)


def test_setter_injection_calls_topmost_override_once(instantiator, registry):
    garage = instantiator.build_singleton(FancyGarage)

    assert garage.calls == [("fancy", registry.get(Wheel))]


def test_no_default_constructor(instantiator):
    class NeedsSize:
        def __init__(self, size: int):
            self.size = size

    with pytest.raises(
        NoDefaultConstructorError, match="There is no default constructor in class"
    ):
        instantiator.build_singleton(NeedsSize)


def test_several_injectable_constructors_are_rejected(instantiator):
    class Undecided:
        @autowired
        def __init__(self, wheel: Wheel):
            self.wheel = wheel

        @classmethod
        @autowired
        def from_engine(cls, engine: Engine):
            return cls(Wheel())

    with pytest.raises(AmbiguousConstructorError, match="are all marked @autowired"):
        instantiator.build_singleton(Undecided)


def test_classmethod_constructor(instantiator, registry):
    class Pooled:
        def __init__(self, size: int):
            self.size = size

        @classmethod
        @autowired
        def create(cls, wheel: Wheel):
            pooled = cls(4)
            pooled.wheel = wheel
            return pooled

    pooled = instantiator.build_singleton(Pooled)

    assert pooled.size == 4
    assert pooled.wheel is registry.get(Wheel)


def test_constructor_failure_is_wrapped(instantiator):
    class Exploding:
        def __init__(self):
            raise ValueError("boom")

    with pytest.raises(InvocationError, match="boom") as excinfo:
        instantiator.build_singleton(Exploding)

    assert isinstance(excinfo.value.__cause__, ValueError)


def test_resolver_does_not_build_unless_asked(instantiator):
    with pytest.raises(BeanNotFoundError, match="Cannot find bean for"):
        instantiator.resolver.resolve_bean(Wheel)


def test_resolver_uses_qualifier_among_several_beans(instantiator, registry):
    class App:
        pass

    blue, green = App(), App()
    registry.put(App, blue, "blue")
    registry.put(App, green, "green")

    assert instantiator.resolver.resolve_bean(App, qualifier="green") is green
    with pytest.raises(BeanNotFoundError):
        instantiator.resolver.resolve_bean(App)


def test_resolver_qualifier_reaches_single_provider(instantiator, registry):
    v8 = instantiator.build_singleton(V8)

    assert (
        instantiator.resolver.resolve_bean(Engine, "engine", qualifier("v8Engine").value)
        is v8
    )


def test_resolver_cannot_build_non_class_types(instantiator):
    with pytest.raises(BeanNotFoundError):
        instantiator.resolver.resolve_bean(
            Callable[[str], str], create_if_missing=True
        )
