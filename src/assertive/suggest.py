"""Closest-match suggestions for unknown assertion names."""

from __future__ import annotations

from typing import Any

from assertive.registry import AssertionRegistry
from assertive.types import TypeRegistry


def levenshtein_distance(a: str, b: str) -> int:
    """Number of single-character edits turning ``a`` into ``b``."""
    if len(a) < len(b):
        a, b = b, a
    previous = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i]
        for j, char_b in enumerate(b, start=1):
            current.append(
                min(
                    previous[j] + 1,
                    current[j - 1] + 1,
                    previous[j - 1] + (char_a != char_b),
                )
            )
        previous = current
    return previous[-1]


def suggest_assertion(subject: Any, name: str, types: TypeRegistry, assertions: AssertionRegistry) -> str | None:
    """Return the registered assertion name most likely meant by ``name``.

    Types are visited oldest first. Each type that identifies ``subject`` gets
    a bonus one higher than the previous matching type, so names on the more
    specific types win ties on edit distance. Every name scores
    ``bonus - levenshtein_distance(name, candidate)``; the first name found
    with the highest score is returned, or ``None`` if nothing is registered.
    """
    best_name: str | None = None
    best_score: int | None = None
    next_bonus = 0
    for type_ in reversed(types):
        bonus = 0
        if type_.identify(subject):
            bonus = next_bonus
            next_bonus += 1
        for candidate in assertions.names(type_.name):
            score = bonus - levenshtein_distance(name, candidate)
            if best_score is None or score > best_score:
                best_name, best_score = candidate, score
    return best_name
