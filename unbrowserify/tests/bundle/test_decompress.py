# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from unbrowserify.decompress import decompress
from unbrowserify.jstree.parser import parse_program
from unbrowserify.jstree.printer import PrintOptions, print_program

_OPTIONS = PrintOptions(bracketize=True)


def _normalize(source: str) -> str:
	return print_program(decompress(parse_program(source)), _OPTIONS)


@pytest.mark.parametrize(
	"source, expected",
	[
		("x = !0;", "x = true;\n"),
		("x = !1;", "x = false;\n"),
		("x = void 0;", "x = undefined;\n"),
		("a(), b();", "a();\nb();\n"),
		("a && b();", "if (a) {\n    b();\n}\n"),
		("a || b();", "if (!a) {\n    b();\n}\n"),
		("!a || b();", "if (a) {\n    b();\n}\n"),
		("c ? a() : b();", "if (c) {\n    a();\n} else {\n    b();\n}\n"),
	],
)
def test_statement_rewrites(source: str, expected: str) -> None:
	assert _normalize(source) == expected


def test_return_sequence_is_split() -> None:
	out = _normalize("function f() { return a(), b(), c; }")
	assert out == "function f() {\n    a();\n    b();\n    return c;\n}\n"


def test_throw_sequence_is_split() -> None:
	out = _normalize("function f() { throw a(), new Error(); }")
	assert out == "function f() {\n    a();\n    throw new Error();\n}\n"


def test_rewrites_reach_nested_bodies() -> None:
	out = _normalize("if (x) a && (b(), c());")
	assert out == "if (x) {\n    if (a) {\n        b();\n        c();\n    }\n}\n"


def test_rewrites_apply_inside_functions_and_loops() -> None:
	out = _normalize("var f = function () { for (;;) x && y(); };")
	assert out == "var f = function() {\n    for (;;) {\n        if (x) {\n            y();\n        }\n    }\n};\n"


def test_other_expressions_are_untouched() -> None:
	assert _normalize("x = a && b;") == "x = a && b;\n"
	assert _normalize("x = !2;") == "x = !2;\n"


def test_output_is_a_fixed_point() -> None:
	source = "a && (b(), c ? d() : e()); return_ = !0, f() || g();"
	once = decompress(parse_program(source))
	first = print_program(once, _OPTIONS)
	assert print_program(decompress(once), _OPTIONS) == first
	assert _normalize(first) == first


def test_void_zero_stays_where_undefined_is_declared_locally() -> None:
	out = _normalize("function f(undefined) { return void 0; } function g() { return void 0; }")
	assert out == "function f(undefined) {\n    return void 0;\n}\nfunction g() {\n    return undefined;\n}\n"


def test_local_var_or_catch_named_undefined_blocks_the_rewrite() -> None:
	out = _normalize("(function () { var undefined = 1; x = void 0; })(); try {} catch (undefined) { y = void 0; }")
	assert "x = void 0;" in out
	assert "y = void 0;" in out
	assert _normalize("z = void 0;") == "z = undefined;\n"
