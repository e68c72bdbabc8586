# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Shared diagnostics, spans and error types."""

from .diagnostics import Diagnostic, diagnostic_to_json, format_diagnostic, has_errors
from .errors import InvalidBundleShape, JsParseError, NoBundleFound, UnbundleError
from .span import Span

__all__ = [
	"Diagnostic",
	"Span",
	"UnbundleError",
	"JsParseError",
	"NoBundleFound",
	"InvalidBundleShape",
	"diagnostic_to_json",
	"format_diagnostic",
	"has_errors",
]
