# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
from pathlib import Path

from unbrowserify.pipeline import UnbundleOptions, unbundle_file, unbundle_files, unbundle_source

BUNDLE = """(function e(t,n,r){function s(o,u){if(!n[o]){if(!t[o]){var a=typeof require=="function"&&require;if(!u&&a)return a(o,!0);throw new Error("Cannot find module '"+o+"'")}var f=n[o]={exports:{}};t[o][0].call(f.exports,function(e){var n=t[o][1][e];return s(n?n:e)},f,f.exports,e,t,n,r)}return n[o].exports}for(var o=0;o<r.length;o++)s(r[o]);return s})({1:[function(t,e,n){var u=t("./lib/util.js");u.log("hi"),e.exports=!0},{"./lib/util.js":2}],2:[function(t,e,n){n.log=function(t){console.log(t)}},{}]},{},[1]);
"""


def _write(tmp_path: Path, text: str, name: str = "bundle.js") -> Path:
	path = tmp_path / name
	path.write_text(text, encoding="utf-8")
	return path


def test_main_and_util_are_written(tmp_path: Path) -> None:
	out_dir = tmp_path / "out"
	status = io.StringIO()
	result = unbundle_file(_write(tmp_path, BUNDLE), UnbundleOptions(output_dir=out_dir), status=status)
	assert result.ok
	assert result.written == [out_dir / "main.js", out_dir / "util.js"]
	assert status.getvalue().splitlines() == [f"Writing {out_dir / 'main.js'}", f"Writing {out_dir / 'util.js'}"]

	main = (out_dir / "main.js").read_text(encoding="utf-8")
	assert main == 'var u = require("./util.js");\nu.log("hi");\nmodule.exports = true;\n'
	util = (out_dir / "util.js").read_text(encoding="utf-8")
	assert util == "exports.log = function(t) {\n    console.log(t);\n};\n"


def test_no_decompress_keeps_minified_statements(tmp_path: Path) -> None:
	out_dir = tmp_path / "out"
	result = unbundle_file(
		_write(tmp_path, BUNDLE),
		UnbundleOptions(output_dir=out_dir, decompress=False),
		status=io.StringIO(),
	)
	assert result.ok
	main = (out_dir / "main.js").read_text(encoding="utf-8")
	assert main == 'var u = require("./util.js");\nu.log("hi"), module.exports = !0;\n'


def test_without_output_dir_modules_go_to_stdout(tmp_path: Path) -> None:
	stdout = io.StringIO()
	result = unbundle_file(_write(tmp_path, BUNDLE), UnbundleOptions(), stdout=stdout, status=io.StringIO())
	assert result.ok
	assert result.written == []
	assert stdout.getvalue().startswith('var u = require("./util.js");\n')
	assert "exports.log = function(t)" in stdout.getvalue()


def test_conflicting_names_are_reported_not_fatal(tmp_path: Path) -> None:
	text = (
		'f({1:[function(t,e,n){t("./a");t("./b")},{"./a":3,"./b":2}],'
		'2:[function(t,e,n){t("./c")},{"./c":3}],3:[function(t,e,n){},{}]},{},[1]);'
	)
	out_dir = tmp_path / "out"
	result = unbundle_file(_write(tmp_path, text), UnbundleOptions(output_dir=out_dir), status=io.StringIO())
	assert result.ok
	assert sorted(p.name for p in result.written) == ["a.js", "b.js", "main.js"]
	conflicts = [d for d in result.diagnostics if d.code == "NAME_CONFLICT"]
	assert len(conflicts) == 1
	assert conflicts[0].span.file == str(tmp_path / "bundle.js")
	# Module 2 points its require at the name module 3 actually got.
	assert (out_dir / "b.js").read_text(encoding="utf-8") == 'require("./a.js");\n'


def test_merged_modules_share_one_file(tmp_path: Path) -> None:
	text = 'f({1:[function(t){t("./x/i");t("./y/i")},{"./x/i":2,"./y/i":3}],2:[function(){a()},{}],3:[function(){b()},{}]},{},[1]);'
	out_dir = tmp_path / "out"
	result = unbundle_file(_write(tmp_path, text), UnbundleOptions(output_dir=out_dir), status=io.StringIO())
	assert result.ok
	assert [p.name for p in result.written] == ["main.js", "i.js"]
	assert (out_dir / "i.js").read_text(encoding="utf-8") == "a();\nb();\n"
	assert [d.code for d in result.diagnostics] == ["MODULE_MERGE"]


def test_structural_errors_fail_only_their_file(tmp_path: Path) -> None:
	bad = _write(tmp_path, "var x = 1;", "plain.js")
	broken = _write(tmp_path, "f({1: 2}, {}, []);", "broken.js")
	unparsable = _write(tmp_path, "var = ;", "syntax.js")
	good = _write(tmp_path, BUNDLE)
	results = unbundle_files(
		[bad, broken, unparsable, good, tmp_path / "missing.js"],
		UnbundleOptions(output_dir=tmp_path / "out"),
		status=io.StringIO(),
	)
	codes = [[d.code for d in r.diagnostics if d.is_error] for r in results]
	assert codes == [["NO_BUNDLE_FOUND"], ["INVALID_BUNDLE_SHAPE"], ["PARSE_ERROR"], [], ["READ_ERROR"]]
	assert [r.ok for r in results] == [False, False, False, True, False]
	assert results[2].diagnostics[0].span.file == str(unparsable)
	assert results[2].diagnostics[0].span.line == 1


def test_write_failure_becomes_a_diagnostic(tmp_path: Path) -> None:
	blocker = tmp_path / "out"
	blocker.write_text("not a directory", encoding="utf-8")
	result = unbundle_file(_write(tmp_path, BUNDLE), UnbundleOptions(output_dir=blocker), status=io.StringIO())
	assert not result.ok
	assert [d.code for d in result.diagnostics] == ["WRITE_ERROR"]
	assert result.diagnostics[0].phase == "emit"


def test_non_ascii_output_is_escaped(tmp_path: Path) -> None:
	text = 'f({1:[function(t,e){e.exports="caf\\u00e9 \u00e9"},{}]},{},[1]);'
	out_dir = tmp_path / "out"
	unbundle_file(_write(tmp_path, text), UnbundleOptions(output_dir=out_dir), status=io.StringIO())
	assert (out_dir / "main.js").read_text(encoding="utf-8") == 'module.exports = "caf\\xE9 \\xE9";\n'


def test_main_id_three_and_util_seven(tmp_path: Path) -> None:
	text = (
		'f({3:[function(t,e,n){var u=t("./util.js");u.go()},{"./util.js":7}],'
		'7:[function(t,e,n){n.go=function(){}},{}]},{},[3]);'
	)
	modules, diagnostics = unbundle_source(text)
	assert diagnostics == []
	assert {name: module.module_ids for name, module in modules.items()} == {"main": ["3"], "util": ["7"]}

	out_dir = tmp_path / "out"
	result = unbundle_file(_write(tmp_path, text), UnbundleOptions(output_dir=out_dir), status=io.StringIO())
	assert [p.name for p in result.written] == ["main.js", "util.js"]
	assert (out_dir / "main.js").read_text(encoding="utf-8") == 'var u = require("./util.js");\nu.go();\n'
	assert (out_dir / "util.js").read_text(encoding="utf-8") == "exports.go = function() {};\n"


def test_main_id_and_require_alias_merge_into_main(tmp_path: Path) -> None:
	text = 'f({1:[function(t){a();t("./main")},{"./main":2}],2:[function(){b()},{}]},{},[1]);'
	out_dir = tmp_path / "out"
	result = unbundle_file(_write(tmp_path, text), UnbundleOptions(output_dir=out_dir), status=io.StringIO())
	assert result.ok
	assert [p.name for p in result.written] == ["main.js"]
	assert (out_dir / "main.js").read_text(encoding="utf-8") == 'a();\nrequire("./main.js");\nb();\n'
	merge = [d for d in result.diagnostics if d.code == "MODULE_MERGE"]
	assert len(merge) == 1
	assert merge[0].span.line == 1


def test_long_call_chain_is_unpacked(tmp_path: Path) -> None:
	chain = "a" + ".b()" * 1500
	text = "f({1:[function(t,e){e.exports=" + chain + "},{}]},{},[1]);"
	out_dir = tmp_path / "out"
	result = unbundle_file(_write(tmp_path, text), UnbundleOptions(output_dir=out_dir), status=io.StringIO())
	assert result.ok
	assert (out_dir / "main.js").read_text(encoding="utf-8") == "module.exports = " + chain + ";\n"


def test_too_deep_nesting_fails_only_its_file(tmp_path: Path) -> None:
	nested = "[" * 3000 + "]" * 3000
	deep = _write(tmp_path, "f({1:[function(t,e){e.exports=" + nested + "},{}]},{},[1]);", "deep.js")
	good = _write(tmp_path, BUNDLE)
	results = unbundle_files([deep, good], UnbundleOptions(output_dir=tmp_path / "out"), status=io.StringIO())
	assert [d.code for d in results[0].diagnostics] == ["NESTING_TOO_DEEP"]
	assert results[0].diagnostics[0].span.file == str(deep)
	assert results[0].diagnostics[0].phase == "parser"
	assert results[0].written == []
	assert results[1].ok
	assert [p.name for p in results[1].written] == ["main.js", "util.js"]
