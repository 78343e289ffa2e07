"""assertive - an extensible assertion engine."""

from .config import AssertiveSettings
from .context import AssertionContext, ErrorMode
from .engine import DeferredExpectation, Expect
from .errors import AssertionFailure, ConfigurationError, UnknownAssertionError
from .output import Output
from .patterns import ExpandedPattern, expand_pattern
from .registry import AssertionRule
from .types import ANY_TYPE, DiffResult, Type, TypeSpec
from .version import __version__


def create(settings: AssertiveSettings | None = None) -> Expect:
    """Create an engine with no registered types or assertions."""
    return Expect.create(settings)


_default_expect: Expect | None = None


def get_default_expect() -> Expect:
    """Return the shared default engine, creating it on first use.

    Settings are read from the environment when the engine is created, not
    when the package is imported.
    """
    global _default_expect
    if _default_expect is None:
        _default_expect = create()
    return _default_expect


def __getattr__(name: str) -> Expect:
    if name == "expect":
        return get_default_expect()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    # Engine
    "Expect",
    "create",
    "expect",
    "get_default_expect",
    "AssertionContext",
    "DeferredExpectation",
    "ErrorMode",
    "AssertiveSettings",
    # Types and assertions
    "ANY_TYPE",
    "Type",
    "TypeSpec",
    "DiffResult",
    "AssertionRule",
    "ExpandedPattern",
    "expand_pattern",
    # Output
    "Output",
    # Errors
    "AssertionFailure",
    "ConfigurationError",
    "UnknownAssertionError",
    "__version__",
]
