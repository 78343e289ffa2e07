"""Demonstrates how to extend an assertion engine with a plugin.

* Types classify values. The newest registered type that identifies a value wins.
* Assertions are registered under patterns:
    - `[not]` is an optional flag, read by the handler from `expect.flags`
    - `(a|b)` registers one name per alternative
* Handlers can call other assertions and pick how nested failures are reported.
"""

import assertive
from assertive import AssertionFailure


def numbers(expect):
    expect.add_type(
        name="number",
        identify=lambda value: isinstance(value, (int, float)) and not isinstance(value, bool),
    )

    def to_be_positive(expect, subject):
        if (subject > 0) == expect.flags["not"]:
            expect.fail()

    def to_be_between(expect, subject, low, high):
        if not low <= subject <= high:
            expect.fail("{0} is outside {1}..{2}", expect.inspect(subject), low, high)

    expect.add_assertion("number", "[not] to be (positive|greater than zero)", to_be_positive)
    expect.add_assertion("number", "to be between", to_be_between)


def sequences(expect):
    def inspect_list(output, value, inspect, depth):
        output.text("[")
        for index, item in enumerate(value):
            if index:
                output.text(", ")
            inspect(output, item)
        return output.text("]")

    expect.add_type(name="list", identify=lambda value: isinstance(value, list), inspect=inspect_list)

    def to_have_items_satisfying(expect, subject, name, *args):
        expect.error_mode = "nested"
        for item in subject:
            expect(item, name, *args)

    expect.add_assertion("list", "to have items satisfying", to_have_items_satisfying)


def main() -> None:
    expect = assertive.create()
    expect.install_plugin(numbers)
    expect.install_plugin(sequences)

    print("Registered assertions:")
    print(expect)
    print()

    expect(3, "to be positive")
    expect(-3, "not to be greater than zero")
    expect([1, 2, 3], "to have items satisfying", "to be between", 0, 5)

    for subject, args in (
        (-3, ("to be positive",)),
        (7, ("to be between", 0, 5)),
        ([1, 9], ("to have items satisfying", "to be between", 0, 5)),
    ):
        try:
            expect(subject, *args)
        except AssertionFailure as failure:
            print(failure)
            print()

    try:
        expect("text", "to be positive")
    except assertive.UnknownAssertionError as exc:
        print(exc)


if __name__ == "__main__":
    main()
