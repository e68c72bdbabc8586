# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from .core.diagnostics import SEVERITY_NOTE, diagnostic_to_json, format_diagnostic
from .pipeline import UnbundleOptions, UnbundleResult, unbundle_files


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(
		prog="unbrowserify",
		description="Split a browserify bundle back into one JavaScript file per module",
	)
	p.add_argument("bundles", nargs="+", type=Path, metavar="BUNDLE", help="Bundle file(s) to unpack")
	p.add_argument(
		"-o",
		"--output-dir",
		type=Path,
		default=None,
		help="Directory for the reconstructed modules (default: print them to stdout)",
	)
	p.add_argument(
		"--no-decompress",
		dest="decompress",
		action="store_false",
		help="Print module bodies as found, without undoing minifier tricks",
	)
	p.add_argument("--json", action="store_true", help="Emit a machine-readable JSON report on stdout (requires -o)")
	p.add_argument("-v", "--verbose", action="store_true", help="Also print notes")
	return p


def _result_to_json(result: UnbundleResult) -> dict:
	source = str(result.source)
	return {
		"source": source,
		"written": [str(path) for path in result.written],
		"diagnostics": [diagnostic_to_json(d, source) for d in result.diagnostics],
	}


def _report(results: list[UnbundleResult], verbose: bool) -> None:
	for result in results:
		for diag in result.diagnostics:
			if diag.severity == SEVERITY_NOTE and not verbose:
				continue
			print(format_diagnostic(diag, str(result.source), with_notes=verbose), file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
	"""
	Unpack each bundle given on the command line.

	Exit code 0 when every bundle was unpacked (warnings allowed), 1 when any
	bundle failed. With --json, prints one report object on stdout; otherwise
	diagnostics go to stderr as `file:line:col: severity: message`.
	"""
	p = _build_parser()
	args = p.parse_args(argv)
	if args.json and args.output_dir is None:
		# Without -o the modules themselves are printed to stdout.
		p.error("--json requires -o/--output-dir")

	options = UnbundleOptions(
		output_dir=args.output_dir,
		decompress=bool(args.decompress),
		json=bool(args.json),
		verbose=bool(args.verbose),
	)
	results = unbundle_files(args.bundles, options)
	exit_code = 0 if all(result.ok for result in results) else 1

	if options.json:
		payload = {
			"exit_code": exit_code,
			"files": [_result_to_json(result) for result in results],
		}
		print(json.dumps(payload))
	else:
		_report(results, options.verbose)
	return exit_code


if __name__ == "__main__":  # pragma: no cover
	sys.exit(main())
