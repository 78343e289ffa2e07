import difflib

import pytest

from assertive import AssertionFailure, DiffResult, Expect, create


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _inspect_list(output, value, inspect, depth):
    output.text("[")
    for index, item in enumerate(value):
        if index:
            output.text(", ")
        inspect(output, item)
    return output.text("]")


def _equal_list(a, b, equal):
    return len(a) == len(b) and all(equal(x, y) for x, y in zip(a, b))


def _inspect_dict(output, value, inspect, depth):
    output.text("{")
    for index, (key, item) in enumerate(value.items()):
        if index:
            output.text(", ")
        output.text(f"{key}: ")
        inspect(output, item)
    return output.text("}")


def _equal_dict(a, b, equal):
    return a.keys() == b.keys() and all(equal(a[key], b[key]) for key in a)


def _diff_string(actual, expected, output, diff, inspect):
    lines = [
        line
        for line in difflib.ndiff(actual.splitlines(), expected.splitlines())
        if not line.startswith("?")
    ]
    output.text("\n".join(lines))
    return DiffResult(output)


def sample_types(expect: Expect) -> None:
    expect.add_type(name="number", identify=_is_number)
    expect.add_type(name="string", identify=lambda value: isinstance(value, str), diff=_diff_string)
    expect.add_type(
        name="list",
        identify=lambda value: isinstance(value, list),
        equal=_equal_list,
        inspect=_inspect_list,
    )
    expect.add_type(
        name="dict",
        identify=lambda value: isinstance(value, dict),
        equal=_equal_dict,
        inspect=_inspect_dict,
    )


def sample_assertions(expect: Expect) -> None:
    def to_be_ok(expect, subject):
        if bool(subject) == expect.flags["not"]:
            expect.fail()

    def to_equal(expect, subject, value):
        try:
            expect(expect.equal(value, subject), "[not] to be truthy")
        except AssertionFailure as failure:
            if not expect.flags["not"]:
                failure.actual = subject
                failure.expected = value
            raise

    def to_be_above(expect, subject, value):
        if not subject > value:
            expect.fail()

    def to_contain(expect, subject, value):
        if value not in subject:
            expect.fail("{0} does not contain {1}", expect.inspect(subject), expect.inspect(value))

    def to_have_items_satisfying(expect, subject, name, *args):
        expect.error_mode = "nested"
        for item in subject:
            expect(item, name, *args)

    def to_be_non_empty(expect, subject):
        expect.error_mode = "bubble"
        expect(len(subject), "to be above", 0)

    expect.add_assertion("[not] to be (ok|truthy)", to_be_ok)
    expect.add_assertion("[not] to equal", to_equal)
    expect.add_assertion("number", "to be above", to_be_above)
    expect.add_assertion("string", "to contain", to_contain)
    expect.add_assertion("list", "to have items satisfying", to_have_items_satisfying)
    expect.add_assertion(["list", "string"], "to be non-empty", to_be_non_empty)


def sample_plugin(expect: Expect) -> None:
    expect.install_plugin(sample_types)
    expect.install_plugin(sample_assertions)


@pytest.fixture
def bare_expect() -> Expect:
    """An engine with nothing registered."""
    return create()


@pytest.fixture
def expect(bare_expect: Expect) -> Expect:
    """An engine with the sample types and assertions installed."""
    return bare_expect.install_plugin(sample_plugin)
