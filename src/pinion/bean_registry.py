"""Storage for built singletons, keyed by concrete type and bean name.

Most types have a single bean, so a lookup by type alone succeeds whenever the
type has exactly one entry, whatever name it was stored under. A name is only
needed to choose between several beans of the same type, which happens when
factory methods produce more than one instance of a type.
"""

import threading
from collections import defaultdict
from typing import Any, Iterator, Optional

from pinion.domain import BeanEntry, canonical_name
from pinion.errors import BeanNotFoundError

__all__ = ["BeanRegistry"]


class BeanRegistry:
    """Singletons by concrete type, then by name.

    Entries are never replaced or removed: the first ``put`` for a (type, name)
    pair wins.

    Attributes:
        lock: Re-entrant lock held while a missing bean is being built.

    Example:
        >>> registry = BeanRegistry()
        >>> registry.put(App, App(), "app")
        >>> registry.get(App)  # the only App, found without its name
    """

    def __init__(self):
        self._beans: dict[Any, dict[str, Any]] = defaultdict(dict)
        self.lock = threading.RLock()

    def put(self, concrete_type: Any, instance: Any, name: Optional[str] = None):
        """Store a bean unless one already exists under the same type and name.

        Args:
            concrete_type: The type the bean is stored under.
            instance: The bean.
            name: The bean name; defaults to the canonical name of ``concrete_type``.
        """
        self._beans[concrete_type].setdefault(name or canonical_name(concrete_type), instance)

    def contains(self, concrete_type: Any, name: Optional[str] = None) -> bool:
        """Whether any bean is stored for the type.

        ``name`` is accepted for symmetry with :meth:`get` but does not affect the result.
        """
        return len(self._beans.get(concrete_type, {})) > 0

    def get(self, concrete_type: Any, name: Optional[str] = None) -> Any:
        """Retrieve a bean, ignoring ``name`` when the type has a single bean.

        Raises:
            BeanNotFoundError: If the type has no bean, or has several and none is
                stored under ``name``.
        """
        beans = self._beans.get(concrete_type)
        if not beans:
            raise BeanNotFoundError(f"No bean found for type {concrete_type!r}")
        if len(beans) == 1:
            return next(iter(beans.values()))
        if name and name in beans:
            return beans[name]
        raise BeanNotFoundError(
            f"There are {len(beans)} beans of type {concrete_type!r} "
            f"and none is named {name!r}: expected a single bean or a qualifier "
            f"naming one of {sorted(beans)}"
        )

    def entries(self) -> Iterator[BeanEntry]:
        for concrete_type, beans in list(self._beans.items()):
            for name, instance in list(beans.items()):
                yield BeanEntry(concrete_type, name, instance)

    def __len__(self) -> int:
        return sum(len(beans) for beans in self._beans.values())

    def __contains__(self, concrete_type: Any) -> bool:
        return self.contains(concrete_type)
