"""Index of which concrete types provide each capability type."""

import logging
from collections import defaultdict
from typing import Any, Optional

from pinion.domain import short_name
from pinion.errors import AmbiguousImplementationError, NoImplementationError

__all__ = ["ImplementationIndex"]

logger = logging.getLogger(__name__)


class ImplementationIndex:
    """Maps capability types to the concrete types providing them.

    Registration is idempotent and providers keep the order in which they were
    first registered. A provider may carry a type-level qualifier, consulted when
    disambiguating between providers.
    """

    def __init__(self):
        self._providers: dict[Any, dict[Any, None]] = defaultdict(dict)
        self._qualifiers: dict[Any, str] = {}

    def register(
        self, concrete_type: Any, capability_type: Any, qualifier: Optional[str] = None
    ):
        providers = self._providers[capability_type]
        if concrete_type not in providers:
            providers[concrete_type] = None
            logger.debug("Registered %r as a provider of %r", concrete_type, capability_type)
        if qualifier and qualifier.strip():
            self._qualifiers.setdefault(concrete_type, qualifier)

    def qualifier_of(self, concrete_type: Any) -> Optional[str]:
        return self._qualifiers.get(concrete_type)

    def providers_of(self, capability_type: Any) -> tuple[Any, ...]:
        return tuple(self._providers.get(capability_type, ()))

    def resolve(
        self,
        capability_type: Any,
        field_name: Optional[str] = None,
        qualifier: Optional[str] = None,
    ) -> Any:
        """Choose the concrete type that should satisfy a request for a capability.

        A single provider is always chosen. Among several, the qualifier (or, when
        no qualifier is given, the field name) must match a provider's short type
        name or its type-level qualifier, ignoring case.

        Args:
            capability_type: The requested type.
            field_name: Name of the field or parameter being injected.
            qualifier: Qualifier declared on the injection point.

        Returns:
            The chosen concrete type.

        Raises:
            NoImplementationError: If nothing provides ``capability_type``.
            AmbiguousImplementationError: If several providers exist and none matches.
        """
        candidates = self.providers_of(capability_type)
        if len(candidates) == 0:
            raise NoImplementationError(
                f"No implementation found for {capability_type!r}"
            )
        if len(candidates) == 1:
            return candidates[0]

        find_by = qualifier if qualifier and qualifier.strip() else field_name
        if find_by:
            wanted = find_by.casefold()
            for candidate in candidates:
                if short_name(candidate).casefold() == wanted:
                    return candidate
            for candidate in candidates:
                tag = self.qualifier_of(candidate)
                if tag and tag.casefold() == wanted:
                    return candidate

        raise AmbiguousImplementationError(
            f"There are {len(candidates)} implementations of {capability_type!r} "
            f"({', '.join(short_name(c) for c in candidates)}) and none matches "
            f"{find_by!r}: expected a single implementation or a qualifier to resolve the conflict"
        )
