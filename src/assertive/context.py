"""Per-invocation evaluation context handed to assertion handlers."""

from __future__ import annotations

import re
from collections.abc import Callable, Mapping, Sequence
from enum import Enum
from typing import TYPE_CHECKING, Any

from assertive.errors import AssertionFailure, ConfigurationError
from assertive.output import Output


if TYPE_CHECKING:
    from assertive.engine import DeferredExpectation, Expect
    from assertive.types import DiffResult, Type


_FLAG_MARKER = re.compile(r"\[(!?)([^\]]+)\] ?")


class ErrorMode(Enum):
    """How an assertion's failure absorbs the failure of a nested assertion."""

    DEFAULT = "default"  # Own standard message only
    BUBBLE = "bubble"  # Nested message only
    NESTED = "nested"  # Own standard message with the nested one indented below


class AssertionContext:
    """State of one assertion invocation, callable as a nested evaluator.

    A handler receives its context as first argument. Calling the context
    evaluates another assertion; failures raised inside it are composed with
    this assertion's standard message according to `error_mode`. Flag markers
    in nested names are rewritten from this invocation's flags first, so
    ``expect(value, "[not] to be truthy")`` inside a ``"not ..."`` assertion
    evaluates ``"not to be truthy"``.

    Attributes
    ----------
    engine : Expect
        The engine the assertion runs in.
    subject : Any
        The value under test.
    name : str
        The concrete assertion name that was requested.
    flags : dict[str, bool]
        Flag assignment of the resolved assertion; a private copy.
    args : list
        Extra arguments passed after the name.
    type : Type
        Type the subject resolved to.
    error_mode : ErrorMode or str
        Composition policy, ``"default"`` unless the handler changes it.
    """

    def __init__(
        self,
        engine: Expect,
        subject: Any,
        name: str,
        flags: Mapping[str, bool],
        args: Sequence[Any],
        type_: Type,
    ) -> None:
        self.engine = engine
        self.subject = subject
        self.name = name
        self.flags = dict(flags)
        self.args = list(args)
        self.type = type_
        self.error_mode: ErrorMode | str = ErrorMode.DEFAULT
        self._nesting_level = 0

    @property
    def nesting_level(self) -> int:
        return self._nesting_level

    def __call__(self, subject: Any, name: str, *args: Any) -> None:
        """Evaluate a nested assertion."""
        self._call_nested(self.engine.evaluate_nested, subject, self.expand_flags(name), args)

    def expand_flags(self, name: str) -> str:
        """Render ``[flag]`` and ``[!flag]`` markers from the current flags."""

        def substitute(match: re.Match[str]) -> str:
            negate, flag = match.groups()
            return f"{flag} " if bool(self.flags.get(flag)) != bool(negate) else ""

        return _FLAG_MARKER.sub(substitute, name).strip()

    def fail(self, message: Any = None, *args: Any, actual: Any = None, expected: Any = None) -> None:
        """Fail this assertion; see `Expect.fail` for the arguments."""
        self._call_nested(self.engine.fail, message, *args, actual=actual, expected=expected)

    def _call_nested(self, callback: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        self._nesting_level += 1
        try:
            callback(*args, **kwargs)
        except AssertionFailure as failure:
            # Only the frame directly around the failure composes it.
            if self._nesting_level == 1:
                composed = self._compose(failure)
                self.engine.set_error_message(composed)
                raise composed.with_traceback(None) from None
            raise
        finally:
            self._nesting_level -= 1

    def _compose(self, failure: AssertionFailure) -> AssertionFailure:
        try:
            mode = ErrorMode(self.error_mode)
        except ValueError:
            raise ConfigurationError(f"Unknown error mode: '{self.error_mode}'") from None

        if mode is ErrorMode.NESTED:
            output = self.standard_error_message().nl().indent_lines().i().block(failure.output)
        elif mode is ErrorMode.DEFAULT:
            output = self.standard_error_message()
        else:
            output = failure.output
        return failure.with_output(output)

    def standard_error_message(self) -> Output:
        """``expected <subject> <name> <args>`` for this invocation."""
        output = self.engine.new_output()
        subject_output = self.engine.inspect(self.subject)

        output.error("expected")
        if subject_output.height > 1:
            output.nl().indent_lines().i().block(subject_output).outdent_lines().nl()
        else:
            output.sp().append(subject_output).sp()
        output.error(self.name)

        if self.args:
            output.sp()
            previous_was_output = False
            for index, arg in enumerate(self.args):
                is_output = isinstance(arg, Output)
                if index:
                    if not is_output and not previous_was_output:
                        output.text(",")
                    output.sp()
                output.append(arg if is_output else self.engine.inspect(arg))
                previous_was_output = is_output
        return output

    def equal(self, a: Any, b: Any) -> bool:
        return self.engine.equal(a, b)

    def inspect(self, value: Any, depth: float | None = None) -> Output:
        return self.engine.inspect(value, depth)

    def diff(self, actual: Any, expected: Any) -> DiffResult | None:
        return self.engine.diff(actual, expected)

    def fn(self, name: str, *args: Any) -> DeferredExpectation:
        return self.engine.fn(self.expand_flags(name), *args)

    def new_output(self) -> Output:
        return self.engine.new_output()

    def __repr__(self) -> str:
        return f"AssertionContext(name={self.name!r}, flags={self.flags!r}, nesting_level={self._nesting_level})"
