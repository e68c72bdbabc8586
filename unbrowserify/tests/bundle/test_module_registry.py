# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import pytest

from unbrowserify.bundle.registry import ModuleNames, build_module_names, fallback_name, stem


@pytest.mark.parametrize(
	"local_name, expected",
	[
		("./util", "util"),
		("./lib/util.js", "util"),
		("../foo/", "foo"),
		("events", "events"),
		("./a.js.js", "a.js"),
		(".js", ".js"),
	],
)
def test_stem(local_name: str, expected: str) -> None:
	assert stem(local_name) == expected


def test_main_and_required_modules_are_named(table_factory) -> None:
	table = table_factory([("1", {"./util": "2"}), ("2", {})], ["1"])
	names, diagnostics = build_module_names(table)
	assert names.as_dict() == {"1": "main", "2": "util"}
	assert diagnostics == []


def test_first_require_path_wins(table_factory) -> None:
	table = table_factory([("1", {"./a": "3"}), ("2", {"./b.js": "3"}), ("3", {})], ["1"])
	names, diagnostics = build_module_names(table)
	assert names["3"] == "a"
	conflicts = [d for d in diagnostics if d.code == "NAME_CONFLICT"]
	assert len(conflicts) == 1
	assert conflicts[0].severity == "warning"
	assert conflicts[0].notes[0] == "kept: a"
	assert conflicts[0].notes[1].startswith("ignored: b")


def test_main_name_is_never_overwritten(table_factory) -> None:
	table = table_factory([("1", {"./helper": "2"}), ("2", {"./index": "1"})], ["1"])
	names, diagnostics = build_module_names(table)
	assert names["1"] == "main"
	assert names["2"] == "helper"
	assert [d.code for d in diagnostics] == ["NAME_CONFLICT"]


def test_same_name_twice_is_silent(table_factory) -> None:
	table = table_factory([("1", {"./util": "3"}), ("2", {"../util.js": "3"}), ("3", {})], ["1"])
	_, diagnostics = build_module_names(table)
	assert [d for d in diagnostics if d.code == "NAME_CONFLICT"] == []


def test_case_only_difference_is_a_note(table_factory) -> None:
	table = table_factory([("1", {"./Foo": "3"}), ("2", {"./foo": "3"}), ("3", {})], ["1"])
	names, diagnostics = build_module_names(table)
	assert names["3"] == "Foo"
	conflicts = [d for d in diagnostics if d.code == "NAME_CONFLICT"]
	assert len(conflicts) == 1
	assert conflicts[0].severity == "note"


def test_unrequired_modules_get_fallback_names(table_factory) -> None:
	table = table_factory([("1", {}), ("./x/y", {}), ("2", {})], ["1"])
	names, diagnostics = build_module_names(table)
	assert names["./x/y"] == "module___x_y"
	assert names["2"] == fallback_name("2") == "module_2"
	assert [d.code for d in diagnostics] == ["UNNAMED_MODULE", "UNNAMED_MODULE"]


def test_naming_is_deterministic(table_factory) -> None:
	table = table_factory([("1", {"./a": "2", "./b": "3"}), ("2", {"./b": "3"}), ("3", {"./c": "2"})], ["1"])
	first, _ = build_module_names(table)
	second, _ = build_module_names(table)
	assert list(first.items()) == list(second.items())


def test_module_names_assign_is_first_writer_wins() -> None:
	names = ModuleNames()
	assert names.assign("1", "a")
	assert not names.assign("1", "b")
	assert names.get("1") == "a"
	assert names.get("2") is None
	assert "1" in names and len(names) == 1
