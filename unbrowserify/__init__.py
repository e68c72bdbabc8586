# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
unbrowserify: split a browserify bundle back into one source file per module.

Layers:
  core: spans, diagnostics, per-file errors
  jstree: JavaScript parser, scope resolution, printer
  bundle: locate the bundle call, decode its table, name/extract/emit modules
  pipeline: per-file driver used by the CLI
"""

from .core import Diagnostic, InvalidBundleShape, JsParseError, NoBundleFound, UnbundleError
from .pipeline import UnbundleOptions, UnbundleResult, unbundle_file, unbundle_files, unbundle_source

__version__ = "0.1.0"

__all__ = [
	"Diagnostic",
	"UnbundleError",
	"JsParseError",
	"NoBundleFound",
	"InvalidBundleShape",
	"UnbundleOptions",
	"UnbundleResult",
	"unbundle_file",
	"unbundle_files",
	"unbundle_source",
]
