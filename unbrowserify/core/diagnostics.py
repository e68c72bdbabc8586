# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Common diagnostic structure for the unbundling passes.

Each pass (parser, locate, table, names, extract, emit) returns its findings as
a list of `Diagnostic` records instead of printing them. The pipeline collects
them per input file and the CLI renders them, either as human-readable lines
on stderr or as JSON.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from .span import Span

SEVERITY_ERROR = "error"
SEVERITY_WARNING = "warning"
SEVERITY_NOTE = "note"


@dataclass
class Diagnostic:
	"""Represents a diagnostic (error/warning/note) produced while unbundling."""

	message: str
	code: str | None = None
	# Pass that produced the diagnostic (parser, locate, table, names, extract, emit).
	phase: str | None = None
	severity: str = SEVERITY_ERROR
	span: Span = field(default_factory=Span)  # Source location (Span() denotes unknown).
	notes: list[str] = field(default_factory=list)

	def __post_init__(self) -> None:
		if self.span is None:  # type: ignore[unreachable]
			self.span = Span()

	@property
	def is_error(self) -> bool:
		return self.severity == SEVERITY_ERROR


def warning(message: str, *, code: str, phase: str, span: Span | None = None, notes: Iterable[str] = ()) -> Diagnostic:
	return Diagnostic(
		message=message,
		code=code,
		phase=phase,
		severity=SEVERITY_WARNING,
		span=span or Span(),
		notes=list(notes),
	)


def note(message: str, *, code: str, phase: str, span: Span | None = None) -> Diagnostic:
	return Diagnostic(message=message, code=code, phase=phase, severity=SEVERITY_NOTE, span=span or Span())


def has_errors(diagnostics: Iterable[Diagnostic]) -> bool:
	return any(d.is_error for d in diagnostics)


def format_diagnostic(diag: Diagnostic, source: str | None = None, *, with_notes: bool = True) -> str:
	"""Render a Diagnostic as `file:line:col: severity: message` (+ indented notes)."""
	file = diag.span.file or source or "<input>"
	lines = [f"{file}:{diag.span.format_location()}: {diag.severity}: {diag.message}"]
	for extra in diag.notes if with_notes else ():
		lines.append(f"    {extra}")
	return "\n".join(lines)


def diagnostic_to_json(diag: Diagnostic, source: str | None = None) -> dict:
	"""Render a Diagnostic to a structured JSON-friendly dict."""
	return {
		"phase": diag.phase,
		"code": diag.code,
		"message": diag.message,
		"severity": diag.severity,
		"file": diag.span.file or source,
		"line": diag.span.line,
		"column": diag.span.column,
		"notes": list(diag.notes),
	}


__all__ = [
	"Diagnostic",
	"SEVERITY_ERROR",
	"SEVERITY_WARNING",
	"SEVERITY_NOTE",
	"warning",
	"note",
	"has_errors",
	"format_diagnostic",
	"diagnostic_to_json",
]
