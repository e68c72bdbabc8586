# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Bundle locator.

A browserify bundle is one top-level call, `(function e(t, n, r) {...})(...)`.
The first call found in a depth-first walk is taken as that invocation; any
further call outside it is reported as a warning and ignored.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from ..core.diagnostics import Diagnostic, warning
from ..core.errors import NoBundleFound
from ..core.span import Span
from ..jstree.ast import Call, Node, Program, walk

PHASE = "locate"


def find_bundle_call(program: Program, file: Optional[str] = None) -> Tuple[Call, List[Diagnostic]]:
	"""
	Return the bundle invocation of `program` plus any `AMBIGUOUS_BUNDLE` warnings.

	Raises `NoBundleFound` when the program contains no call at all.
	"""
	found: Optional[Call] = None
	diagnostics: List[Diagnostic] = []

	def visit(node: Node) -> bool:
		nonlocal found
		if not isinstance(node, Call):
			return False
		if found is None:
			found = node
		else:
			diagnostics.append(
				warning(
					"more than one top-level function call found; using the first",
					code="AMBIGUOUS_BUNDLE",
					phase=PHASE,
					span=Span.from_loc(node.loc, file),
					notes=[f"bundle invocation at {Span.from_loc(found.loc, file).format_location()}"],
				)
			)
		# The bundle's module functions are full of calls; never look inside one.
		return True

	walk(program, visit)
	if found is None:
		raise NoBundleFound("no top-level function call found", Span(file=file))
	return found, diagnostics


__all__ = ["find_bundle_call"]
