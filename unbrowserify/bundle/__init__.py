# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""Bundle reversal: locate, decode, name, extract and emit modules."""

from .emitter import emit_module, emit_modules, render_module
from .extractor import CanonicalModule, canonicalize_params, extract_modules, rewrite_requires
from .locator import find_bundle_call
from .registry import ModuleNames, build_module_names, stem
from .table import ModuleEntry, ModuleTable, RequireEntry, decode_bundle

__all__ = [
	"CanonicalModule",
	"ModuleEntry",
	"ModuleNames",
	"ModuleTable",
	"RequireEntry",
	"build_module_names",
	"canonicalize_params",
	"decode_bundle",
	"emit_module",
	"emit_modules",
	"extract_modules",
	"find_bundle_call",
	"render_module",
	"rewrite_requires",
	"stem",
]
