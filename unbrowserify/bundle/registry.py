# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module name registry.

Every module id in the table gets exactly one canonical name, which becomes its
output file name:
1. main ids are named `main`;
2. otherwise the first require path pointing at the id names it (final path
   component, `.js` stripped), in table order then mapping order;
3. ids nothing requires get `module_<id>`.

A later require path that disagrees with the recorded name (ignoring case) is
reported and dropped; a name is never overwritten.
"""

from __future__ import annotations

import re
from pathlib import PurePosixPath
from typing import Dict, Iterator, List, Optional, Tuple

from ..core.diagnostics import Diagnostic, note, warning
from .table import ModuleTable

PHASE = "names"
MAIN_NAME = "main"

_NON_IDENT_RE = re.compile(r"[^A-Za-z0-9_$]")


def stem(local_name: str) -> str:
	"""
	Final path component of a require path, without one trailing `.js`.

	`./lib/util.js` -> `util`, `../foo/` -> `foo`, `.js` -> `.js`.
	"""
	name = PurePosixPath(local_name).name if local_name.strip("/") else local_name
	if name.endswith(".js") and name != ".js":
		name = name[: -len(".js")]
	return name


def fallback_name(module_id: str) -> str:
	return "module_" + _NON_IDENT_RE.sub("_", module_id)


class ModuleNames:
	"""Module id -> canonical name, first writer wins."""

	def __init__(self) -> None:
		self._names: Dict[str, str] = {}

	def __getitem__(self, module_id: str) -> str:
		return self._names[module_id]

	def __contains__(self, module_id: object) -> bool:
		return module_id in self._names

	def __iter__(self) -> Iterator[str]:
		return iter(self._names)

	def __len__(self) -> int:
		return len(self._names)

	def get(self, module_id: str) -> Optional[str]:
		return self._names.get(module_id)

	def assign(self, module_id: str, name: str) -> bool:
		"""Record `name` for `module_id` unless one is already recorded."""
		if module_id in self._names:
			return False
		self._names[module_id] = name
		return True

	def items(self):
		return self._names.items()

	def as_dict(self) -> Dict[str, str]:
		return dict(self._names)

	def __repr__(self) -> str:
		return f"ModuleNames({self._names!r})"


def build_module_names(table: ModuleTable) -> Tuple[ModuleNames, List[Diagnostic]]:
	names = ModuleNames()
	diagnostics: List[Diagnostic] = []

	for module_id in table.main_ids:
		names.assign(module_id, MAIN_NAME)

	for entry in table.entries:
		for require in entry.requires:
			candidate = stem(require.local_name)
			if names.assign(require.target_id, candidate):
				continue
			current = names[require.target_id]
			if current == candidate:
				continue
			if current.lower() != candidate.lower():
				diagnostics.append(
					warning(
						f"more than one name found for module {require.target_id!r}",
						code="NAME_CONFLICT",
						phase=PHASE,
						span=entry.span,
						notes=[f"kept: {current}", f"ignored: {candidate} (required from module {entry.module_id!r})"],
					)
				)
			else:
				diagnostics.append(
					note(
						f"module {require.target_id!r} is also required as {candidate!r}; keeping {current!r}",
						code="NAME_CONFLICT",
						phase=PHASE,
						span=entry.span,
					)
				)

	for entry in table.entries:
		if entry.module_id in names:
			continue
		name = fallback_name(entry.module_id)
		names.assign(entry.module_id, name)
		diagnostics.append(
			note(
				f"module {entry.module_id!r} is never required; naming it {name}",
				code="UNNAMED_MODULE",
				phase=PHASE,
				span=entry.span,
			)
		)

	return names, diagnostics


__all__ = ["ModuleNames", "MAIN_NAME", "build_module_names", "fallback_name", "stem"]
