"""Exceptions raised by the assertion engine.

Two families exist. `ConfigurationError` signals misuse of the registration
API and is never composed by the engine. `AssertionFailure` is the expected,
recoverable outcome of a failing assertion; the engine recognises it by class
and re-wraps it as it crosses nested assertion boundaries.
"""

from __future__ import annotations

from typing import Any

from assertive.output import Output


class ConfigurationError(Exception):
    """Invalid setup: bad pattern, duplicate assertion, unknown type, ..."""


class UnknownAssertionError(ConfigurationError, AssertionError):
    """No assertion with the requested name applies to the subject.

    It is also an `AssertionError`, so test runners report it as a failed
    check. It is not an `AssertionFailure`, so it is never composed into the
    message of an enclosing assertion.

    Attributes
    ----------
    name : str
        The requested assertion name.
    type_name : str
        Name of the type the subject resolved to.
    defined_for : list[str]
        Types the assertion is registered for, when it exists elsewhere.
    suggestion : str or None
        Closest registered assertion name, if any assertions exist.
    """

    def __init__(
        self,
        message: str,
        *,
        name: str,
        type_name: str,
        defined_for: list[str] | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.name = name
        self.type_name = type_name
        self.defined_for = defined_for or []
        self.suggestion = suggestion
        super().__init__(message)


class AssertionFailure(AssertionError):
    """A failed assertion carrying its rendered message.

    Attributes
    ----------
    output : Output
        The styled document the message was rendered from.
    actual, expected : Any
        Values to diff when the message is finalized; cleared afterwards.
    message : str
        The rendered message in the active output format.
    html_message : str or None
        HTML rendering, only set when the output format is ``"html"``.
    cause : AssertionFailure or None
        The nested failure this one was composed from.
    """

    def __init__(
        self,
        output: Output,
        *,
        actual: Any = None,
        expected: Any = None,
        cause: AssertionFailure | None = None,
    ) -> None:
        self.output = output
        self.actual = actual
        self.expected = expected
        self.cause = cause
        self.html_message: str | None = None
        self.message = str(output)
        super().__init__(self.message)

    def set_message(self, message: str) -> None:
        self.message = message
        self.args = (message,)

    def with_output(self, output: Output) -> AssertionFailure:
        """Copy this failure with a new body, keeping it as the cause."""
        return AssertionFailure(output, actual=self.actual, expected=self.expected, cause=self)

    def __str__(self) -> str:
        return self.message
