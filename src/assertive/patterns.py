"""Assertion name patterns.

A pattern declares one or more assertion names at once. Besides literal text
it may contain:

* ``[flag]`` -- an optional word. Each expansion records whether the word was
  present in ``flags``.
* ``(a|b|...)`` -- mutually exclusive literal alternatives.

>>> [p.text for p in expand_pattern("[not] to (equal|be)")]
['not to equal', 'not to be', 'to equal', 'to be']
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from assertive.errors import ConfigurationError


_TOKEN = re.compile(r"\[[^\]]+\]|\([^)]+\)")
_ALTERNATION_SPLIT = re.compile(r"[()|]")
_FLAG_BOUNDARY = "\x00"
_BOUNDARY_RUN = re.compile(r"[ \t]*(?:\x00[ \t]*)+")


@dataclass(frozen=True, slots=True)
class ExpandedPattern:
    """A concrete assertion name produced by expanding a pattern."""

    text: str
    flags: dict[str, bool] = field(default_factory=dict)


def ensure_valid_pattern(pattern: object) -> None:
    """Raise `ConfigurationError` unless ``pattern`` is a well-formed pattern."""
    if not isinstance(pattern, str) or pattern == "":
        raise ConfigurationError("Assertion patterns must be a non empty string")
    if pattern != pattern.strip():
        raise ConfigurationError("Assertion patterns can't start or end with whitespace")

    _ensure_valid_use_of_parentheses_or_brackets(pattern)


def _ensure_valid_use_of_parentheses_or_brackets(pattern: str) -> None:
    counts = {"[": 0, "]": 0, "(": 0, ")": 0}
    for index, char in enumerate(pattern):
        previous = pattern[index - 1] if index else ""
        if char in counts:
            counts[char] += 1

        if char == "]" and counts["["] >= counts["]"]:
            if counts["["] == counts["]"] + 1:
                raise ConfigurationError(f"Assertion patterns must not contain flags with brackets: '{pattern}'")
            if counts["("] != counts[")"]:
                raise ConfigurationError(f"Assertion patterns must not contain flags with parentheses: '{pattern}'")
            if previous == "[":
                raise ConfigurationError(f"Assertion patterns must not contain empty flags: '{pattern}'")
        elif char == ")" and counts["("] >= counts[")"]:
            if counts["("] == counts[")"] + 1:
                raise ConfigurationError(
                    f"Assertion patterns must not contain alternations with parentheses: '{pattern}'"
                )
            if counts["["] != counts["]"]:
                raise ConfigurationError(
                    f"Assertion patterns must not contain alternations with brackets: '{pattern}'"
                )

        if char in ")|" and counts["("] >= counts[")"] and previous in ("(", "|"):
            raise ConfigurationError(f"Assertion patterns must not contain empty alternations: '{pattern}'")

    if counts["["] != counts["]"]:
        raise ConfigurationError(f"Assertion patterns must not contain unbalanced brackets: '{pattern}'")
    if counts["("] != counts[")"]:
        raise ConfigurationError(f"Assertion patterns must not contain unbalanced parentheses: '{pattern}'")


def _is_flag(token: str) -> bool:
    return token.startswith("[") and token.endswith("]")


def _is_alternation(token: str) -> bool:
    return token.startswith("(") and token.endswith(")")


def _tokenize(pattern: str) -> list[str]:
    tokens = []
    last = 0
    for match in _TOKEN.finditer(pattern):
        tokens.append(pattern[last : match.start()])
        tokens.append(match.group())
        last = match.end()
    tokens.append(pattern[last:])
    return [token for token in tokens if token]


def _permutations(tokens: list[str], index: int) -> list[tuple[str, dict[str, bool]]]:
    if index == len(tokens):
        return [("", {})]

    token = tokens[index]
    tail = _permutations(tokens, index + 1)
    if _is_flag(token):
        # Flags are whole words; the space around a flag boundary is collapsed later.
        flag = token[1:-1]
        with_flag = [
            (f"{_FLAG_BOUNDARY}{flag}{_FLAG_BOUNDARY}{text}", {flag: True, **flags}) for text, flags in tail
        ]
        without_flag = [(f"{_FLAG_BOUNDARY}{text}", {flag: False, **flags}) for text, flags in tail]
        return with_flag + without_flag
    if _is_alternation(token):
        alternatives = [alternative for alternative in _ALTERNATION_SPLIT.split(token) if alternative]
        return [(alternative + text, flags) for alternative in alternatives for text, flags in tail]
    return [(token + text, flags) for text, flags in tail]


def expand_pattern(pattern: str) -> list[ExpandedPattern]:
    """Expand ``pattern`` into every concrete assertion name it declares.

    The pattern is expected to have passed `ensure_valid_pattern`.

    Parameters
    ----------
    pattern : str
        The pattern to expand.

    Returns
    -------
    list[ExpandedPattern]
        One entry per combination of flags and alternatives, flags on before
        flags off, alternatives in declaration order.

    Raises
    ------
    ConfigurationError
        If some expansion contains no literal text.
    """
    expanded = []
    for text, flags in _permutations(_tokenize(pattern), 0):
        text = _BOUNDARY_RUN.sub(" ", text).strip()
        if not text:
            raise ConfigurationError("Assertion patterns must not only contain flags")
        expanded.append(ExpandedPattern(text=text, flags=dict(flags)))
    return expanded
