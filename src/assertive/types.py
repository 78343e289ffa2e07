"""Types: named classifiers over values and the registry that orders them."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator, Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from assertive.errors import ConfigurationError
from assertive.output import Output


logger = logging.getLogger(__name__)

IdentifyFn = Callable[[Any], bool]
EqualFn = Callable[[Any, Any, Callable[[Any, Any], bool]], bool]
InspectFn = Callable[[Output, Any, Callable[[Output, Any], Output], float], Output]
DiffFn = Callable[..., "DiffResult | None"]


@dataclass(slots=True)
class DiffResult:
    """A rendered comparison of two values."""

    diff: Output


@dataclass(frozen=True, slots=True)
class Type:
    """A registered type.

    Every field is populated: fields a registration leaves unset are taken from
    the base type. ``base`` is ``None`` only for the universal type.

    Attributes
    ----------
    name : str
        Unique type name.
    identify : callable
        ``identify(value) -> bool``.
    equal : callable
        ``equal(a, b, equal) -> bool`` where the third argument compares
        children recursively.
    inspect : callable
        ``inspect(output, value, inspect, depth) -> Output`` where
        ``inspect(output, child)`` prints a child into ``output``.
    diff : callable
        ``diff(actual, expected, output, diff, inspect) -> DiffResult | None``.
    base : Type or None
        The parent type.
    """

    name: str
    identify: IdentifyFn
    equal: EqualFn
    inspect: InspectFn
    diff: DiffFn
    base: Type | None = None

    @property
    def is_universal(self) -> bool:
        return self.base is None

    def lineage(self) -> Iterator[Type]:
        """Yield this type followed by each of its ancestors."""
        current: Type | None = self
        while current is not None:
            yield current
            current = current.base


def _identify_any(value: Any) -> bool:
    return True


def _equal_any(a: Any, b: Any, equal: Callable[[Any, Any], bool]) -> bool:
    return a is b or a == b


def _inspect_any(output: Output, value: Any, inspect: Callable[[Output, Any], Output], depth: float) -> Output:
    return output.text(repr(value))


def _diff_any(actual: Any, expected: Any, output: Output, diff: Any, inspect: Any) -> DiffResult | None:
    return None


ANY_TYPE = Type(
    name="any",
    identify=_identify_any,
    equal=_equal_any,
    inspect=_inspect_any,
    diff=_diff_any,
)


class TypeSpec(BaseModel):
    """Validated input for registering a type.

    Attributes
    ----------
    name
        Non-blank, unique type name.
    base
        Name of an already registered parent type; the universal type when
        omitted.
    identify, equal, inspect, diff
        Behaviour overrides; unset ones are inherited from the base.
    """

    name: str
    base: str | None = None
    identify: Callable[[Any], bool] | None = None
    equal: Callable[..., bool] | None = None
    inspect: Callable[..., Any] | None = None
    diff: Callable[..., Any] | None = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("A type must be given a non-empty name")
        return value


def coerce_type_spec(spec: TypeSpec | Mapping[str, Any] | None = None, **fields: Any) -> TypeSpec:
    """Build a `TypeSpec` from a spec, a mapping and/or keyword fields.

    Raises
    ------
    ConfigurationError
        If the resulting spec does not validate.
    """
    if isinstance(spec, TypeSpec) and not fields:
        return spec

    data: dict[str, Any] = dict(spec) if spec is not None else {}
    data.update(fields)
    try:
        return TypeSpec.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid type definition: {exc}") from exc


class TypeRegistry:
    """Ordered collection of types, most recently registered first.

    The universal type is always last, so resolution never fails. A name index
    serves base-type lookups.
    """

    def __init__(self, types: list[Type] | None = None) -> None:
        self._types = list(types) if types is not None else [ANY_TYPE]
        self._by_name = {type_.name: type_ for type_ in self._types}

    def __iter__(self) -> Iterator[Type]:
        return iter(self._types)

    def __reversed__(self) -> Iterator[Type]:
        return reversed(self._types)

    def __len__(self) -> int:
        return len(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def get(self, name: str) -> Type:
        try:
            return self._by_name[name]
        except KeyError:
            raise ConfigurationError(f"No such type: {name}") from None

    def resolve(self, value: Any) -> Type:
        """Return the first type, newest first, that identifies ``value``."""
        for type_ in self._types:
            if type_.identify(value):
                return type_
        return ANY_TYPE

    def resolve_common(self, a: Any, b: Any) -> Type | None:
        """Return the first type that identifies both values."""
        for type_ in self._types:
            if type_.identify(a) and type_.identify(b):
                return type_
        return None

    def register(self, spec: TypeSpec) -> Type:
        """Create the effective type for ``spec`` and put it in front.

        Raises
        ------
        ConfigurationError
            If the name is taken or the base type is unknown.
        """
        if spec.name in self._by_name:
            raise ConfigurationError(f"Type already defined: {spec.name}")

        if spec.base is None:
            base = ANY_TYPE
        elif spec.base in self._by_name:
            base = self._by_name[spec.base]
        else:
            raise ConfigurationError(f"Unknown base type: {spec.base}")

        type_ = Type(
            name=spec.name,
            identify=spec.identify or base.identify,
            equal=spec.equal or base.equal,
            inspect=spec.inspect or base.inspect,
            diff=spec.diff or base.diff,
            base=base,
        )
        self._types.insert(0, type_)
        self._by_name[type_.name] = type_
        logger.debug("Registered type %r (base %r)", type_.name, base.name)
        return type_

    def copy(self) -> TypeRegistry:
        return TypeRegistry(self._types)
