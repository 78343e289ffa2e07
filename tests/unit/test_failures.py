"""Tests for failure construction, nested composition and rendering."""

import traceback

import pytest

from assertive import AssertionFailure, ConfigurationError, ErrorMode, Output


class TestFail:
    def test_template_placeholders(self, bare_expect):
        with pytest.raises(AssertionFailure) as excinfo:
            bare_expect.fail("{0} is not {1}", "apple", 3)
        assert str(excinfo.value) == "apple is not 3"
        assert excinfo.value.message == "apple is not 3"
        assert excinfo.value.args == ("apple is not 3",)

    def test_out_of_range_placeholder_is_kept(self, bare_expect):
        with pytest.raises(AssertionFailure, match=r"^x and \{3\}$"):
            bare_expect.fail("{0} and {3}", "x")

    def test_output_placeholder_is_appended(self, bare_expect):
        with pytest.raises(AssertionFailure) as excinfo:
            bare_expect.fail("got {0}!", Output().text("thing", "green"))
        assert str(excinfo.value) == "got thing!"

    def test_output_message(self, bare_expect):
        with pytest.raises(AssertionFailure, match="^styled$"):
            bare_expect.fail(Output().error("styled"))

    def test_function_writes_into_fresh_output(self, bare_expect):
        with pytest.raises(AssertionFailure, match="^custom body$"):
            bare_expect.fail(lambda output: output.text("custom").sp().text("body"))

    def test_default_message(self, bare_expect):
        with pytest.raises(AssertionFailure, match="^explicit failure$"):
            bare_expect.fail()

    def test_exception_is_reraised_unchanged(self, bare_expect):
        error = ValueError("original")
        with pytest.raises(ValueError) as excinfo:
            bare_expect.fail(error)
        assert excinfo.value is error

    def test_diff_is_appended_for_comparable_values(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect.fail("strings differ", actual="foo", expected="bar")

        failure = excinfo.value
        assert str(failure) == "strings differ\n\nDiff:\n\n- foo\n+ bar"
        assert failure.actual is None
        assert failure.expected is None

    def test_no_diff_for_different_kinds(self, expect):
        with pytest.raises(AssertionFailure, match="^mismatch$"):
            expect.fail("mismatch", actual="foo", expected=["foo"])

    def test_no_diff_when_type_has_none(self, expect):
        with pytest.raises(AssertionFailure, match="^lists differ$"):
            expect.fail("lists differ", actual=[1], expected=[2])


class TestErrorModes:
    def test_default_mode_uses_standard_message(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect(0, "to be truthy")
        assert str(excinfo.value) == "expected 0 to be truthy"

    def test_default_mode_discards_inner_detail(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect("foo", "to contain", "x")
        assert str(excinfo.value) == "expected 'foo' to contain 'x'"
        assert str(excinfo.value.cause) == "'foo' does not contain 'x'"

    def test_nested_mode_indents_inner_message(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect([1, 2, -1], "to have items satisfying", "to be above", 0)
        assert str(excinfo.value) == (
            "expected [1, 2, -1] to have items satisfying 'to be above', 0\n"
            "  expected -1 to be above 0"
        )

    def test_nested_mode_indents_every_inner_line(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect([[1, -1]], "to have items satisfying", "to have items satisfying", "to be above", 0)
        assert str(excinfo.value) == (
            "expected [[1, -1]] to have items satisfying 'to have items satisfying', 'to be above', 0\n"
            "  expected [1, -1] to have items satisfying 'to be above', 0\n"
            "    expected -1 to be above 0"
        )

    def test_bubble_mode_uses_inner_message(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect([], "to be non-empty")
        assert str(excinfo.value) == "expected 0 to be above 0"

    def test_error_mode_accepts_enum(self, expect):
        def handler(expect, subject):
            expect.error_mode = ErrorMode.BUBBLE
            expect(subject, "to be ok")

        expect.add_assertion("to be ok via bubble", handler)
        with pytest.raises(AssertionFailure, match="^expected 0 to be ok$"):
            expect(0, "to be ok via bubble")

    def test_unknown_error_mode_is_a_configuration_error(self, expect):
        def handler(expect, subject):
            expect.error_mode = "loud"
            expect(subject, "to be ok")

        expect.add_assertion("to be loudly ok", handler)
        with pytest.raises(ConfigurationError, match="Unknown error mode: 'loud'"):
            expect(0, "to be loudly ok")
        expect(1, "to be loudly ok")

    def test_composition_happens_once_per_frame(self, expect):
        def outer(expect, subject):
            expect.error_mode = "nested"
            expect(subject, "to be inner")

        def inner(expect, subject):
            expect.error_mode = "nested"
            expect(subject, "to be ok")

        expect.add_assertion("to be outer", outer)
        expect.add_assertion("to be inner", inner)
        with pytest.raises(AssertionFailure) as excinfo:
            expect(0, "to be outer")
        assert str(excinfo.value) == "expected 0 to be outer\n  expected 0 to be inner\n    expected 0 to be ok"

    def test_failure_keeps_its_cause_chain(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect([-1], "to have items satisfying", "to be above", 0)
        cause = excinfo.value.cause
        assert str(cause) == "expected -1 to be above 0"
        assert str(cause.cause) == "explicit failure"

    def test_handler_can_recover_from_nested_failure(self, expect):
        def handler(expect, subject):
            try:
                expect(subject, "to be ok")
            except AssertionFailure:
                return

        expect.add_assertion("to be anything", handler)
        expect(0, "to be anything")

    def test_flag_markers_follow_outer_flags(self, expect):
        assert expect(1, "to equal", 1) is None
        assert expect(1, "not to equal", 2) is None
        with pytest.raises(AssertionFailure, match="^expected 1 not to equal 1$"):
            expect(1, "not to equal", 1)

    def test_negated_flag_marker(self, expect):
        names = []

        def handler(expect, subject):
            names.append(expect.expand_flags("to be [!not] [plural] [!plural]item"))

        expect.add_assertion("[not] to [plural] record", handler)
        expect(1, "not to record")
        expect(1, "to plural record")
        assert names == ["to be plural item", "to be not plural item"]


class TestDiffOnFailure:
    def test_top_level_diff_from_handler_values(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect("foo", "to equal", "bar")
        assert str(excinfo.value) == "expected 'foo' to equal 'bar'\n\nDiff:\n\n- foo\n+ bar"

    def test_negated_equal_has_no_diff(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect("foo", "not to equal", "foo")
        assert str(excinfo.value) == "expected 'foo' not to equal 'foo'"

    def test_diff_survives_nested_composition(self, expect):
        def handler(expect, subject, value):
            expect.error_mode = "nested"
            expect(subject, "to equal", value)

        expect.add_assertion("to match", handler)
        with pytest.raises(AssertionFailure) as excinfo:
            expect("foo", "to match", "bar")
        assert str(excinfo.value) == (
            "expected 'foo' to match 'bar'\n"
            "  expected 'foo' to equal 'bar'\n"
            "\n"
            "Diff:\n"
            "\n"
            "- foo\n"
            "+ bar"
        )


class TestRendering:
    def test_html_format_keeps_text_message(self, expect):
        expect.output_format("html")
        with pytest.raises(AssertionFailure) as excinfo:
            expect(0, "to be ok")

        failure = excinfo.value
        assert str(failure) == "expected 0 to be ok"
        assert failure.html_message.startswith("<pre")
        assert "expected" in failure.html_message
        assert "color" in failure.html_message

    def test_text_format_has_no_html(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect(0, "to be ok")
        assert excinfo.value.html_message is None

    def test_ansi_format(self, expect):
        expect.output_format("ansi")
        with pytest.raises(AssertionFailure) as excinfo:
            expect(0, "to be ok")
        assert "\x1b[" in str(excinfo.value)
        assert excinfo.value.output.render() == "expected 0 to be ok"

    def test_unknown_output_format(self, expect):
        with pytest.raises(ConfigurationError, match="Unknown output format"):
            expect.output_format("pdf")

    def test_traceback_starts_at_public_entry_point(self, expect):
        with pytest.raises(AssertionFailure) as excinfo:
            expect([-1], "to have items satisfying", "to be above", 0)

        failure = excinfo.value
        frames = [frame.name for frame in traceback.extract_tb(failure.__traceback__)]
        assert "_call_nested" not in frames
        assert "evaluate_nested" not in frames
        assert failure.__suppress_context__
