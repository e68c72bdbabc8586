# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Structural errors that abort the processing of one input file.

These are deterministic mismatches between the input and the expected bundle
shape, never transient failures: the pipeline converts them into error
diagnostics and moves on to the next file.
"""

from __future__ import annotations

from .diagnostics import Diagnostic, SEVERITY_ERROR
from .span import Span


class UnbundleError(ValueError):
	"""Base class for per-file fatal errors; carries a stable code and a span."""

	code = "UNBUNDLE_ERROR"
	phase: str | None = None

	def __init__(self, message: str, span: Span | None = None) -> None:
		super().__init__(message)
		self.message = message
		self.span = span or Span()

	def to_diagnostic(self, file: str | None = None) -> Diagnostic:
		return Diagnostic(
			message=self.message,
			code=self.code,
			phase=self.phase,
			severity=SEVERITY_ERROR,
			span=self.span.with_file(file),
		)


class JsParseError(UnbundleError):
	"""The input text is not JavaScript the parser understands."""

	code = "PARSE_ERROR"
	phase = "parser"


class NoBundleFound(UnbundleError):
	"""The program contains no top-level call expression."""

	code = "NO_BUNDLE_FOUND"
	phase = "locate"


class InvalidBundleShape(UnbundleError):
	"""The bundle invocation's arguments do not have the module-table shape."""

	code = "INVALID_BUNDLE_SHAPE"
	phase = "table"


__all__ = ["UnbundleError", "JsParseError", "NoBundleFound", "InvalidBundleShape"]
