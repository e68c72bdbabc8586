# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Per-file driver: read -> parse -> resolve scopes -> locate -> decode -> name
-> extract -> emit.

Files are processed one after another. A structural error (`UnbundleError`),
an I/O error or nesting deeper than the interpreter stack allows ends the
current file only: it becomes an error diagnostic in that file's
`UnbundleResult` and the batch moves on.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, TextIO, Tuple

from .bundle.emitter import emit_module
from .bundle.extractor import CanonicalModule, extract_modules
from .bundle.locator import find_bundle_call
from .bundle.registry import build_module_names
from .bundle.table import decode_bundle
from .core.diagnostics import Diagnostic, has_errors
from .core.errors import UnbundleError
from .core.span import Span
from .jstree.parser import parse_program
from .jstree.scope import resolve_scopes


@dataclass(frozen=True)
class UnbundleOptions:
	"""Run configuration; fixed for the whole batch."""

	output_dir: Optional[Path] = None
	decompress: bool = True
	json: bool = False
	verbose: bool = False


@dataclass
class UnbundleResult:
	source: Path
	written: List[Path] = field(default_factory=list)
	diagnostics: List[Diagnostic] = field(default_factory=list)

	@property
	def ok(self) -> bool:
		return not has_errors(self.diagnostics)


def unbundle_source(text: str, file: Optional[str] = None) -> Tuple[Dict[str, CanonicalModule], List[Diagnostic]]:
	"""
	Reconstruct the canonical modules of one bundle's source text.

	Raises `UnbundleError` subclasses for input that is not a recognizable bundle.
	"""
	diagnostics: List[Diagnostic] = []
	program = resolve_scopes(parse_program(text, file))
	call, found = find_bundle_call(program, file)
	diagnostics.extend(found)
	table, decoded = decode_bundle(call, file)
	diagnostics.extend(decoded)
	names, named = build_module_names(table)
	diagnostics.extend(named)
	modules, extracted = extract_modules(table, names)
	diagnostics.extend(extracted)
	return modules, diagnostics


def _too_deep(file: str, phase: str) -> Diagnostic:
	return Diagnostic(
		message="source is nested too deeply to process",
		code="NESTING_TOO_DEEP",
		phase=phase,
		span=Span(file=file),
	)


def unbundle_file(
	path: Path,
	options: UnbundleOptions,
	*,
	stdout: Optional[TextIO] = None,
	status: Optional[TextIO] = None,
) -> UnbundleResult:
	result = UnbundleResult(source=path)
	file = str(path)
	try:
		text = path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		result.diagnostics.append(
			Diagnostic(
				message=f"cannot read {file}: {getattr(err, 'strerror', None) or err}",
				code="READ_ERROR",
				phase="parser",
				span=Span(file=file),
			)
		)
		return result

	try:
		modules, diagnostics = unbundle_source(text, file)
	except UnbundleError as err:
		result.diagnostics.append(err.to_diagnostic(file))
		return result
	except RecursionError:
		result.diagnostics.append(_too_deep(file, "parser"))
		return result
	result.diagnostics.extend(diagnostics)

	for module in modules.values():
		try:
			path_written = emit_module(
				module,
				options.output_dir,
				normalize=options.decompress,
				stdout=stdout,
				status=status,
			)
		except RecursionError:
			result.diagnostics.append(_too_deep(file, "emit"))
			break
		except OSError as err:
			result.diagnostics.append(
				Diagnostic(
					message=f"cannot write {module.name}.js: {err.strerror or err}",
					code="WRITE_ERROR",
					phase="emit",
					span=Span(file=file),
				)
			)
			break
		if path_written is not None:
			result.written.append(path_written)

	for diag in result.diagnostics:
		diag.span = diag.span.with_file(file)
	return result


def unbundle_files(
	paths: Iterable[Path],
	options: UnbundleOptions,
	*,
	stdout: Optional[TextIO] = None,
	status: Optional[TextIO] = None,
) -> List[UnbundleResult]:
	return [unbundle_file(path, options, stdout=stdout, status=status) for path in paths]


__all__ = ["UnbundleOptions", "UnbundleResult", "unbundle_file", "unbundle_files", "unbundle_source"]
