# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import json
from pathlib import Path

import pytest

from unbrowserify.cli import main

BUNDLE = 'f({1:[function(t,e,n){e.exports=t("./dep")},{"./dep":2,"fs":void 0}],2:[function(t,e,n){n.x=1},{}]},{},[1]);\n'


def _bundle(tmp_path: Path, text: str = BUNDLE, name: str = "bundle.js") -> Path:
	path = tmp_path / name
	path.write_text(text, encoding="utf-8")
	return path


def test_writes_modules_and_exits_zero(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	out_dir = tmp_path / "out"
	exit_code = main([str(_bundle(tmp_path)), "-o", str(out_dir)])
	assert exit_code == 0
	assert (out_dir / "main.js").read_text(encoding="utf-8") == 'module.exports = require("./dep.js");\n'
	assert (out_dir / "dep.js").read_text(encoding="utf-8") == "exports.x = 1;\n"
	captured = capsys.readouterr()
	assert captured.out == ""
	assert f"Writing {out_dir / 'main.js'}" in captured.err
	# Notes only show up with --verbose.
	assert "EXTERNAL" not in captured.err and "not part of the bundle" not in captured.err


def test_verbose_prints_notes(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	main([str(_bundle(tmp_path)), "-o", str(tmp_path / "out"), "-v"])
	err = capsys.readouterr().err
	assert "note: module '1': require('fs') is not part of the bundle" in err


def test_modules_print_to_stdout_without_output_dir(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main([str(_bundle(tmp_path))]) == 0
	out = capsys.readouterr().out
	assert out == 'module.exports = require("./dep.js");\nexports.x = 1;\n'


def test_failure_in_one_file_sets_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	good = _bundle(tmp_path)
	bad = _bundle(tmp_path, "var x;", "bad.js")
	exit_code = main([str(bad), str(good), "-o", str(tmp_path / "out")])
	assert exit_code == 1
	err = capsys.readouterr().err
	assert f"{bad}:?:?: error: no top-level function call found" in err
	assert (tmp_path / "out" / "main.js").exists()


def test_json_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	good = _bundle(tmp_path)
	bad = _bundle(tmp_path, "f({1: 2}, {}, []);", "bad.js")
	exit_code = main([str(good), str(bad), "-o", str(tmp_path / "out"), "--json"])
	assert exit_code == 1
	captured = capsys.readouterr()
	payload = json.loads(captured.out)
	assert payload["exit_code"] == 1
	first, second = payload["files"]
	assert first["source"] == str(good)
	assert [Path(p).name for p in first["written"]] == ["main.js", "dep.js"]
	assert [d["code"] for d in first["diagnostics"]] == ["EXTERNAL_REQUIRE"]
	diag = second["diagnostics"][0]
	assert diag["code"] == "INVALID_BUNDLE_SHAPE"
	assert diag["phase"] == "table"
	assert diag["severity"] == "error"
	assert diag["file"] == str(bad)
	assert diag["line"] == 1


def test_json_requires_output_dir(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	with pytest.raises(SystemExit) as info:
		main([str(_bundle(tmp_path)), "--json"])
	assert info.value.code == 2
	assert "--json requires -o" in capsys.readouterr().err


def test_missing_file_is_reported(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main([str(tmp_path / "nope.js"), "-o", str(tmp_path / "out")]) == 1
	assert "error: cannot read" in capsys.readouterr().err
