# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Emitter: print each canonical module and write it out.

Modules are written as `<output_dir>/<name>.js`; without an output directory
the code goes to stdout. A `Writing <path>` status line per file goes to the
status stream (stderr by default) so stdout stays clean for code or JSON.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, TextIO

from ..decompress import decompress
from ..jstree.printer import PrintOptions, print_program
from .extractor import CanonicalModule


def render_module(module: CanonicalModule, *, normalize: bool = True) -> str:
	if normalize:
		decompress(module.program)
	options = PrintOptions(
		ascii_only=True,
		bracketize=True,
		one_declarator_per_line=True,
		renames=module.renames,
	)
	return print_program(module.program, options)


def emit_modules(
	modules: Dict[str, CanonicalModule],
	output_dir: Optional[Path] = None,
	*,
	normalize: bool = True,
	stdout: Optional[TextIO] = None,
	status: Optional[TextIO] = None,
) -> List[Path]:
	"""
	Write every canonical module, in registry order; return the written paths.

	Raises OSError when the output directory or a file cannot be written.
	"""
	written: List[Path] = []
	for module in modules.values():
		path = emit_module(module, output_dir, normalize=normalize, stdout=stdout, status=status)
		if path is not None:
			written.append(path)
	return written


def emit_module(
	module: CanonicalModule,
	output_dir: Optional[Path] = None,
	*,
	normalize: bool = True,
	stdout: Optional[TextIO] = None,
	status: Optional[TextIO] = None,
) -> Optional[Path]:
	"""Write one module; return its path, or None when it went to stdout."""
	code = render_module(module, normalize=normalize)
	if output_dir is None:
		(stdout or sys.stdout).write(code)
		return None
	output_dir.mkdir(parents=True, exist_ok=True)
	path = output_dir / f"{module.name}.js"
	print(f"Writing {path}", file=status or sys.stderr)
	path.write_text(code, encoding="utf-8")
	return path


__all__ = ["emit_module", "emit_modules", "render_module"]
