# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from unbrowserify.bundle.locator import find_bundle_call
from unbrowserify.bundle.table import decode_bundle, number_key
from unbrowserify.core.errors import InvalidBundleShape
from unbrowserify.jstree.parser import parse_program


def _decode(source: str):
	call, _ = find_bundle_call(parse_program(source))
	return decode_bundle(call)


def test_entries_keep_table_order_and_requires() -> None:
	table, diagnostics = _decode(
		"""
(function e(t, n, r) {})({
	1: [function (require, module, exports) {}, {"./util": 2, "./lib/b.js": "b"}],
	2: [function (require, module, exports) {}, {}],
	"b": [function (require, module, exports) {}, {}]
}, {}, [1]);
"""
	)
	assert diagnostics == []
	assert table.module_ids() == ["1", "2", "b"]
	assert table.main_ids == ("1",)
	requires = table.entries[0].requires
	assert [(r.local_name, r.target_id) for r in requires] == [("./util", "2"), ("./lib/b.js", "b")]


def test_number_and_string_ids_are_the_same_key() -> None:
	table, _ = _decode('f({"1": [function () {}, {"./a": 1.0}]}, {}, ["1"]);')
	assert table.entries[0].module_id == "1"
	assert table.entries[0].requires[0].target_id == "1"
	assert table.main_ids == ("1",)


def test_external_requires_are_skipped_with_a_note() -> None:
	table, diagnostics = _decode('f({1: [function () {}, {"fs": void 0, "./a": 2}], 2: [function () {}, {}]}, {}, [1]);')
	assert [r.local_name for r in table.entries[0].requires] == ["./a"]
	assert [(d.code, d.severity) for d in diagnostics] == [("EXTERNAL_REQUIRE", "note")]


def test_extra_arguments_are_ignored() -> None:
	table, _ = _decode("f({}, {}, [], 'extra');")
	assert table.entries == ()
	assert table.main_ids == ()


@pytest.mark.parametrize(
	"source, fragment",
	[
		("f({}, {});", "3 arguments"),
		("f([], {}, []);", "module table must be ObjectLiteral, found ArrayLiteral"),
		("f({}, [], []);", "module cache must be ObjectLiteral"),
		("f({}, {}, {});", "main id list must be ArrayLiteral"),
		("f({1: 2}, {}, []);", "must be ArrayLiteral, found NumberLiteral"),
		("f({1: [function () {}]}, {}, []);", "[function, mapping]"),
		("f({1: [x, {}]}, {}, []);", "function must be FunctionExpr, found SymbolRef"),
		("f({1: [function () {}, []]}, {}, []);", "require mapping must be ObjectLiteral"),
		("f({1: [function () {}, {'./a': g()}]}, {}, []);", "found Call"),
		("f({}, {}, [x]);", "main id must be a string or number literal"),
	],
)
def test_invalid_shapes_name_the_offending_variant(source: str, fragment: str) -> None:
	with pytest.raises(InvalidBundleShape) as info:
		_decode(source)
	assert fragment in str(info.value)
	assert info.value.code == "INVALID_BUNDLE_SHAPE"


def test_number_key_matches_javascript_property_keys() -> None:
	assert number_key(3) == "3"
	assert number_key(3.0) == "3"
	assert number_key(0.5) == "0.5"
	assert number_key(1e-7) == "1e-7"
	assert number_key(float("inf")) == "Infinity"
