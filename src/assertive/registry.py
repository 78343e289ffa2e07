"""Per-type assertion rules keyed by concrete assertion name."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from assertive.errors import ConfigurationError
from assertive.patterns import ensure_valid_pattern, expand_pattern
from assertive.types import ANY_TYPE, Type


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AssertionRule:
    """A registered assertion for one concrete name on one type.

    Attributes
    ----------
    handler : callable
        Called as ``handler(expect, subject, *args)``.
    flags : Mapping[str, bool]
        Flag assignment of the expansion this name came from.
    pattern : str
        The pattern the name was expanded from.
    """

    handler: Callable[..., Any]
    flags: Mapping[str, bool] = field(default_factory=dict)
    pattern: str = ""


class AssertionRegistry:
    """Assertion rules grouped by type name."""

    def __init__(self, rules: Mapping[str, Mapping[str, AssertionRule]] | None = None) -> None:
        source = rules if rules is not None else {ANY_TYPE.name: {}}
        self._rules: dict[str, dict[str, AssertionRule]] = {
            type_name: dict(by_name) for type_name, by_name in source.items()
        }

    def add_type(self, type_name: str) -> None:
        self._rules.setdefault(type_name, {})

    def register(self, types: Sequence[Type], patterns: Sequence[str], handler: Callable[..., Any]) -> None:
        """Register ``handler`` under every expansion of ``patterns`` for ``types``.

        Everything is validated before anything is stored, so a rejected
        registration leaves the registry untouched. Expansions that coincide
        within one call are tolerated; the first one wins.

        Raises
        ------
        ConfigurationError
            For a non-callable handler, an invalid pattern, an unknown type or
            a name that is already registered for one of the types.
        """
        if not callable(handler):
            raise ConfigurationError("Assertion handlers must be callable")

        expansions = []
        for pattern in patterns:
            ensure_valid_pattern(pattern)
            expansions.extend((pattern, expanded) for expanded in expand_pattern(pattern))

        pending: list[tuple[dict[str, AssertionRule], str, AssertionRule]] = []
        for type_ in types:
            rules = self._rules.get(type_.name)
            if rules is None:
                raise ConfigurationError(f"No such type: {type_.name}")

            seen: set[str] = set()
            for pattern, expanded in expansions:
                if expanded.text in rules:
                    suffix = "" if type_.is_universal else f" for type {type_.name}"
                    raise ConfigurationError(f"Cannot redefine assertion: {expanded.text}{suffix}")
                if expanded.text in seen:
                    continue
                seen.add(expanded.text)
                pending.append((rules, expanded.text, AssertionRule(handler, expanded.flags, pattern)))

        for rules, text, rule in pending:
            rules.setdefault(text, rule)
        logger.debug(
            "Registered %d assertion name(s) for %s",
            len(pending),
            ", ".join(type_.name for type_ in types),
        )

    def find(self, type_: Type, name: str) -> AssertionRule | None:
        return self._rules.get(type_.name, {}).get(name)

    def resolve(self, type_: Type, name: str) -> tuple[Type, AssertionRule] | None:
        """Find ``name`` on ``type_`` or, failing that, on its nearest ancestor."""
        for candidate in type_.lineage():
            rule = self.find(candidate, name)
            if rule is not None:
                return candidate, rule
        return None

    def names(self, type_name: str) -> list[str]:
        return list(self._rules.get(type_name, {}))

    def defined_for(self, name: str, types: Iterable[Type]) -> list[Type]:
        return [type_ for type_ in types if name in self._rules.get(type_.name, {})]

    def all_names(self) -> list[str]:
        """Every registered name across all types, sorted and de-duplicated."""
        return sorted({name for rules in self._rules.values() for name in rules})

    def copy(self) -> AssertionRegistry:
        return AssertionRegistry(self._rules)
