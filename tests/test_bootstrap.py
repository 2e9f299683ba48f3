from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Annotated

import pytest

from pinion.bean_registry import BeanRegistry
from pinion.bootstrap import Bootstrapper
from pinion.decorators import autowired, bean, component, configuration, qualifier
from pinion.domain import canonical_name
from pinion.errors import UnresolvableConfigurationError
from pinion.implementation_index import ImplementationIndex
from pinion.instantiator import Instantiator
from pinion.introspection import describe
from pinion.invoker import ReflectiveInvoker


class Clock(ABC):
    @abstractmethod
    def now(self) -> int:
        pass


class FixedClock(Clock):
    def now(self) -> int:
        return 42


class Settings:
    def __init__(self, url: str):
        self.url = url


class Connection:
    def __init__(self, settings: Settings):
        self.settings = settings


@pytest.fixture
def index() -> ImplementationIndex:
    return ImplementationIndex()


@pytest.fixture
def registry() -> BeanRegistry:
    return BeanRegistry()


@pytest.fixture
def bootstrapper(index, registry) -> Bootstrapper:
    return Bootstrapper(
        index, registry, Instantiator(index, registry, ReflectiveInvoker())
    )


def test_supplied_instance_is_registered_under_its_capabilities(
    bootstrapper, index, registry
):
    clock = FixedClock()
    bootstrapper.register_instance(clock)

    assert index.providers_of(Clock) == (FixedClock,)
    assert index.providers_of(FixedClock) == (FixedClock,)
    assert registry.get(FixedClock) is clock


def test_components_are_indexed_and_built(bootstrapper, index, registry):
    @component
    class Scheduler:
        clock: Annotated[Clock, autowired]

    @component
    class SystemClock(Clock):
        def now(self) -> int:
            return 1

    bootstrapper.bootstrap([describe(Scheduler), describe(SystemClock)])

    assert index.providers_of(Clock) == (SystemClock,)
    assert registry.get(Scheduler).clock is registry.get(SystemClock)


def test_configurations_wait_for_each_other(bootstrapper, registry):
    @configuration
    class ConnectionConfiguration:
        settings: Annotated[Settings, autowired]

        @bean("mainConnection")
        def connection(self) -> Connection:
            return Connection(self.settings)

    @configuration
    class SettingsConfiguration:
        @bean()
        def settings(self) -> Settings:
            return Settings("db://local")

    bootstrapper.bootstrap(
        [describe(ConnectionConfiguration), describe(SettingsConfiguration)]
    )

    connection = registry.get(Connection, "mainConnection")
    assert connection.settings is registry.get(Settings, canonical_name(Settings))
    assert connection.settings.url == "db://local"


def test_factory_arguments_are_resolved(bootstrapper, registry):
    @configuration
    class ConnectionConfiguration:
        @bean()
        def connection(self, settings: Settings) -> Connection:
            return Connection(settings)

    settings = Settings("db://supplied")
    bootstrapper.register_instance(settings)
    bootstrapper.bootstrap([describe(ConnectionConfiguration)])

    assert registry.get(Connection).settings is settings


def test_configurations_that_cannot_progress_fail(bootstrapper):
    @configuration
    class NeedsConnection:
        connection: Annotated[Connection, autowired]

        @bean()
        def settings(self) -> Settings:
            return Settings(self.connection.settings.url)

    @configuration
    class NeedsSettings:
        settings: Annotated[Settings, autowired]

        @bean()
        def connection(self) -> Connection:
            return Connection(self.settings)

    with pytest.raises(
        UnresolvableConfigurationError, match="depend on beans that cannot be produced"
    ):
        bootstrapper.bootstrap([describe(NeedsConnection), describe(NeedsSettings)])


def test_configuration_fields_do_not_build_components(bootstrapper):
    @component
    class Pool:
        pass

    @configuration
    class UsesPool:
        pool: Annotated[Pool, autowired]

    with pytest.raises(UnresolvableConfigurationError):
        bootstrapper.bootstrap([describe(Pool), describe(UsesPool)])


def test_descriptor_qualifier_disambiguates_providers(bootstrapper, index, registry):
    @component
    class AtomicClock(Clock):
        def now(self) -> int:
            return 1

    @component
    class SundialClock(Clock):
        def now(self) -> int:
            return 2

    @component
    class Watch:
        clock: Annotated[Clock, autowired, qualifier("main")]

    bootstrapper.bootstrap(
        [
            replace(describe(AtomicClock), qualifier="main"),
            describe(SundialClock),
            describe(Watch),
        ]
    )

    assert index.qualifier_of(AtomicClock) == "main"
    assert registry.get(Watch).clock is registry.get(AtomicClock)


def test_supplied_instance_keeps_its_class_qualifier(bootstrapper, index):
    @qualifier("fixed")
    class TaggedClock(Clock):
        def now(self) -> int:
            return 0

    bootstrapper.register_instance(TaggedClock())

    assert index.qualifier_of(TaggedClock) == "fixed"
