"""In-process tests for the child-side sandbox runner."""

import json

import pytest

from mentor.sandbox import runner


def test_run_returns_rendered_value():
    assert runner.run("return 6 * 7") == {"status": "ok", "value": "42", "stdout": ""}


def test_print_output_is_captured_not_returned():
    result = runner.run("print('hello')\nreturn 'done'")

    assert result["value"] == "done"
    assert result["stdout"] == "hello\n"


def test_classes_can_be_defined():
    source = "class Point:\n    def __init__(self, x):\n        self.x = x\n"
    # __init__ is a function name, not an attribute or name access
    result = runner.run(source + "return Point(3).x")

    assert result == {"status": "ok", "value": "3", "stdout": ""}


@pytest.mark.parametrize(
    "source",
    [
        "return __builtins__",
        "return [].__class__",
        "def gen(): yield 1\ng = gen()\nreturn g.gi_frame",
        "async def co(): pass\nreturn co().cr_frame",
        "try:\n    1 / 0\nexcept ZeroDivisionError as e:\n    tb = e.with_traceback(None)\nreturn tb.tb_frame",
        "def f(): pass\nreturn f.co_consts",
        "return frame.f_back",
        "from os import path",
    ],
)
def test_restricted_constructs(source):
    result = runner.run(source)

    assert result["status"] == "error"
    assert result["kind"] == "RestrictedOperation"


def test_exceptions_carry_type_and_message():
    result = runner.run("raise ValueError('bad input')")

    assert result == {"status": "error", "kind": "RuntimeError", "message": "ValueError: bad input"}


def test_syntax_error_reports_line():
    result = runner.run("x = 1\nreturn (")

    assert result["kind"] == "RuntimeError"
    assert result["message"].startswith("SyntaxError:")
    assert "(line 2)" in result["message"]


class TestRenderValue:
    def test_scalars_use_str(self):
        assert runner.render_value(3.5) == "3.5"
        assert runner.render_value("text") == "text"
        assert runner.render_value(None) == "None"

    def test_collections_use_indented_json(self):
        assert runner.render_value([1, {"a": True}]) == json.dumps([1, {"a": True}], indent=2)

    def test_sets_are_sorted(self):
        assert runner.render_value({3, 1, 2}) == json.dumps([1, 2, 3], indent=2)

    def test_long_output_is_truncated(self):
        text = runner.render_value("x" * (runner.MAX_RENDERED_CHARS + 10))

        assert text.endswith("... (truncated)")
        assert len(text) < runner.MAX_RENDERED_CHARS + 50


def test_empty_program_returns_none():
    namespace = {"__builtins__": runner.safe_builtins()}
    exec(runner.build_program(""), namespace)

    assert namespace[runner.ENTRY_POINT]() is None
