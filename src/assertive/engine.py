"""The assertion engine: evaluation, registration and structural utilities."""

from __future__ import annotations

import logging
import math
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, NoReturn

from assertive.config import AssertiveSettings
from assertive.context import AssertionContext
from assertive.errors import AssertionFailure, ConfigurationError, UnknownAssertionError
from assertive.output import FORMATS, Output
from assertive.registry import AssertionRegistry
from assertive.suggest import suggest_assertion
from assertive.types import ANY_TYPE, DiffResult, Type, TypeRegistry, TypeSpec, coerce_type_spec


logger = logging.getLogger(__name__)

_PLACEHOLDER_SPLIT = re.compile(r"(\{\d+\})")
_PLACEHOLDER = re.compile(r"\{(\d+)\}")


def _as_list(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _coarse_kind(value: Any) -> str | None:
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if value is None or isinstance(value, (bool, int, float, complex, bytes)):
        return None
    return "object"


def _is_diffable(actual: Any, expected: Any) -> bool:
    kind = _coarse_kind(actual)
    return kind is not None and kind == _coarse_kind(expected)


@dataclass(frozen=True, slots=True)
class DeferredExpectation:
    """An assertion bound to its name and arguments, applied to a subject later."""

    engine: Expect = field(repr=False)
    name: str
    args: tuple[Any, ...] = ()

    def __call__(self, subject: Any) -> None:
        self.engine(subject, self.name, *self.args)


class Expect:
    """An assertion engine instance.

    Calling the instance evaluates an assertion::

        expect = assertive.create()
        expect.add_assertion("[not] to be positive", to_be_positive)
        expect(5, "to be positive")

    Parameters
    ----------
    types : TypeRegistry or None
        Registered types; a registry holding only the universal type by default.
    assertions : AssertionRegistry or None
        Registered assertions; empty by default.
    settings : AssertiveSettings or None
        Engine settings; read from the environment by default.
    output_format : str or None
        Initial output format; ``settings.output_format`` by default.
    """

    def __init__(
        self,
        *,
        types: TypeRegistry | None = None,
        assertions: AssertionRegistry | None = None,
        settings: AssertiveSettings | None = None,
        output_format: str | None = None,
    ) -> None:
        self.settings = settings if settings is not None else AssertiveSettings()
        self.types = types if types is not None else TypeRegistry()
        self.assertions = assertions if assertions is not None else AssertionRegistry()
        self._output_format = output_format or self.settings.output_format

    @classmethod
    def create(cls, settings: AssertiveSettings | None = None) -> Expect:
        return cls(settings=settings)

    # Evaluation

    def __call__(self, subject: Any, name: str, *args: Any) -> None:
        """Evaluate the assertion ``name`` against ``subject``.

        Raises
        ------
        AssertionFailure
            If the assertion fails.
        UnknownAssertionError
            If no assertion called ``name`` applies to ``subject``.
        TypeError
            If ``name`` is not a string.
        """
        try:
            self.evaluate_nested(subject, name, args)
        except AssertionFailure as failure:
            if failure.actual is not None or failure.expected is not None:
                self.set_error_message(failure)
            raise failure.with_traceback(None) from None

    def evaluate_nested(self, subject: Any, name: str, args: tuple[Any, ...] = ()) -> None:
        """Resolve and run an assertion without finalizing its failure.

        This is what nested evaluations go through; failures are left for the
        enclosing `AssertionContext` to compose.
        """
        if not isinstance(name, str):
            raise TypeError("The expect function requires the second parameter to be a string")

        subject_type = self.types.resolve(subject)
        resolved = self.assertions.resolve(subject_type, name)
        if resolved is None:
            raise self._unknown_assertion(subject, subject_type, name)

        _, rule = resolved
        context = AssertionContext(self, subject, name, rule.flags, args, subject_type)
        rule.handler(context, subject, *args)

    def _unknown_assertion(self, subject: Any, subject_type: Type, name: str) -> UnknownAssertionError:
        defined_for = self.assertions.defined_for(name, self.types)
        if defined_for:
            message = (
                f'The assertion "{name}" is not defined for the type "{subject_type.name}", '
                "but it is defined for "
            )
            if len(defined_for) == 1:
                message += f'the type "{defined_for[0].name}"'
            else:
                message += "these types: " + ", ".join(f'"{type_.name}"' for type_ in defined_for)
            return UnknownAssertionError(
                message,
                name=name,
                type_name=subject_type.name,
                defined_for=[type_.name for type_ in defined_for],
            )

        suggestion = suggest_assertion(subject, name, self.types, self.assertions)
        logger.debug("Unknown assertion %r for type %r, suggesting %r", name, subject_type.name, suggestion)
        message = f'Unknown assertion "{name}"'
        if suggestion is not None:
            message += f', did you mean: "{suggestion}"'
        return UnknownAssertionError(message, name=name, type_name=subject_type.name, suggestion=suggestion)

    def fn(self, name: str, *args: Any) -> DeferredExpectation:
        """Bind ``name`` and ``args`` for evaluation against a later subject."""
        return DeferredExpectation(self, name, args)

    # Failures

    def fail(self, message: Any = None, *args: Any, actual: Any = None, expected: Any = None) -> NoReturn:
        """Raise an `AssertionFailure`.

        Parameters
        ----------
        message : str, Output, callable or exception
            A template with ``{0}``, ``{1}``... placeholders filled from
            ``args``; an `Output` used as the body; a callable that receives an
            empty `Output` to write into; or an exception, re-raised as is.
            Defaults to ``"explicit failure"``.
        *args
            Placeholder values. `Output` values are appended with their
            styles, anything else as text. Placeholders without a value are
            kept verbatim.
        actual, expected
            Values to diff below the message when their kinds match.
        """
        if isinstance(message, BaseException):
            raise message

        output = self.new_output()
        if isinstance(message, Output):
            output.append(message)
        elif callable(message):
            result = message(output)
            if isinstance(result, Output):
                output = result
        else:
            template = str(message) if message else "explicit failure"
            for token in _PLACEHOLDER_SPLIT.split(template):
                if not token:
                    continue
                match = _PLACEHOLDER.fullmatch(token)
                if match is None:
                    output.text(token)
                    continue
                index = int(match.group(1))
                arg = args[index] if index < len(args) else token
                if isinstance(arg, Output):
                    output.append(arg)
                else:
                    output.text(arg)

        failure = AssertionFailure(output, actual=actual, expected=expected)
        self.set_error_message(failure)
        raise failure

    def set_error_message(self, failure: AssertionFailure) -> None:
        """Finalize ``failure``: append a diff if possible and render the message."""
        message = failure.output.clone()
        if _is_diffable(failure.actual, failure.expected):
            comparison = self.diff(failure.actual, failure.expected)
            if comparison is not None:
                message.nl(2).text("Diff:", "blue").nl(2).append(comparison.diff)
        failure.actual = None
        failure.expected = None

        fmt = self._output_format
        if fmt == "html":
            failure.html_message = message.render("html", width=self.settings.render_width)
            fmt = "text"
        failure.output = message
        failure.set_message(message.render(fmt, width=self.settings.render_width))

    def output_format(self, fmt: str | None = None) -> Any:
        """Return the output format, or set it and return the engine."""
        if fmt is None:
            return self._output_format
        if fmt not in FORMATS:
            raise ConfigurationError(f"Unknown output format: {fmt!r}")
        self._output_format = fmt
        return self

    def new_output(self) -> Output:
        return Output(indent_width=self.settings.indent_width)

    # Structural utilities

    def equal(self, actual: Any, expected: Any, depth: int = 0, seen: list[Any] | None = None) -> bool:
        """Compare two values structurally through their common type.

        Raises
        ------
        ValueError
            If a circular structure is detected past
            ``settings.max_compare_depth``.
        """
        if depth > self.settings.max_compare_depth:
            seen = [] if seen is None else seen
            if any(item is actual for item in seen):
                raise ValueError("Cannot compare circular structures")
            seen.append(actual)

        matching_type = self.types.resolve_common(actual, expected)
        if matching_type is None:
            return False
        return bool(matching_type.equal(actual, expected, lambda a, b: self.equal(a, b, depth + 1, seen)))

    def inspect(self, value: Any, depth: float | None = None) -> Output:
        """Pretty-print ``value`` through its type, at most ``depth`` levels deep.

        Arrays and objects reached at depth 0 print as ``...``. A value that
        contains itself prints ``[Circular]`` where it recurs; only the values
        on the current path count, so a value repeated among siblings is
        printed in full each time.
        """
        ancestors: list[Any] = []

        def print_output(output: Output, value: Any, depth: float) -> Output:
            if depth == 0 and _coarse_kind(value) in ("array", "object"):
                return output.text("...")
            if any(ancestor is value for ancestor in ancestors):
                return output.text("[Circular]")

            matching_type = self.types.resolve(value)
            ancestors.append(value)
            try:
                return matching_type.inspect(
                    output, value, lambda output, child: print_output(output, child, depth - 1), depth
                )
            finally:
                ancestors.pop()

        return print_output(self.new_output(), value, self.settings.inspect_depth if depth is None else depth)

    def diff(self, actual: Any, expected: Any) -> DiffResult | None:
        """Diff two values through their common type, if it knows how."""
        matching_type = self.types.resolve_common(actual, expected)
        if matching_type is None:
            return None
        return matching_type.diff(
            actual,
            expected,
            self.new_output(),
            self.diff,
            lambda value: self.inspect(value, math.inf),
        )

    # Registration

    def add_type(self, spec: TypeSpec | Mapping[str, Any] | None = None, **fields: Any) -> Expect:
        """Register a type; see `TypeSpec` for the fields.

        Raises
        ------
        ConfigurationError
            For an invalid spec, a taken name or an unknown base type.
        """
        type_ = self.types.register(coerce_type_spec(spec, **fields))
        self.assertions.add_type(type_.name)
        return self

    def add_assertion(self, *args: Any) -> Expect:
        """Register an assertion handler.

        Accepts ``(patterns, handler)`` for the universal type or
        ``(types, patterns, handler)``, where ``types`` and ``patterns`` are a
        single value or a list. Types may be given by name or as `Type`.

        Raises
        ------
        ConfigurationError
            For a wrong number of arguments, an unknown type, an invalid
            pattern or an assertion name that is already taken.
        """
        if len(args) == 2:
            patterns, handler = args
            types = [ANY_TYPE]
        elif len(args) == 3:
            type_refs, patterns, handler = args
            types = [self._resolve_type_ref(ref) for ref in _as_list(type_refs)]
        else:
            raise ConfigurationError("add_assertion: Needs 2 or 3 arguments")

        self.assertions.register(types, _as_list(patterns), handler)
        return self

    def _resolve_type_ref(self, ref: Any) -> Type:
        if isinstance(ref, Type):
            return self.types.get(ref.name)
        if isinstance(ref, str):
            return self.types.get(ref)
        raise ConfigurationError(f"Types must be given by name or as Type, got {ref!r}")

    def install_plugin(self, plugin: Callable[[Expect], Any]) -> Expect:
        """Call ``plugin`` with this engine, e.g. to register a pack of types."""
        if not callable(plugin):
            raise ConfigurationError("Expected first argument given to install_plugin to be a function")
        logger.debug("Installing plugin %s", getattr(plugin, "__name__", plugin))
        plugin(self)
        return self

    def clone(self) -> Expect:
        """Return an independent engine with a snapshot of this configuration."""
        return type(self)(
            types=self.types.copy(),
            assertions=self.assertions.copy(),
            settings=self.settings,
            output_format=self._output_format,
        )

    def __str__(self) -> str:
        return "\n".join(self.assertions.all_names())

    def __repr__(self) -> str:
        return f"Expect(types={[type_.name for type_ in self.types]!r}, format={self._output_format!r})"
