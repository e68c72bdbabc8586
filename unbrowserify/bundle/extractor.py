# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Module extraction: turn each module function of the table into the body of a
canonical module.

Module functions keep their statements unchanged apart from two edits:
- their parameters are displayed under the canonical role names, through the
  module's rename table, so `function (t, e, n) {...}` prints as
  `require`, `module`, `exports`;
- `require("<path>")` calls whose path is in the entry's mapping point at the
  canonical output file, `require("./<name>.js")`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, MutableMapping

from ..core.diagnostics import Diagnostic, warning
from ..core.span import Span
from ..jstree.ast import Binding, Call, FunctionExpr, Located, Node, Program, Stmt, StringLiteral, SymbolRef, walk
from .registry import MAIN_NAME, ModuleNames, stem
from .table import ModuleTable

PHASE = "extract"

PARAM_ROLES = ("require", "module", "exports", "moduleSource", "loadedModules", "mainIds")


@dataclass
class CanonicalModule:
	name: str
	program: Program
	module_ids: List[str] = field(default_factory=list)
	renames: Dict[Binding, str] = field(default_factory=dict)


def display_name(symbol, renames: Mapping[Binding, str]) -> str:
	if symbol.binding is not None and symbol.binding in renames:
		return renames[symbol.binding]
	return symbol.name


def canonicalize_params(function: FunctionExpr, renames: MutableMapping[Binding, str]) -> None:
	"""Display the module function's parameters under their role names."""
	for param, role in zip(function.params, PARAM_ROLES):
		if param.binding is None:
			continue
		if display_name(param, renames) != role:
			renames[param.binding] = role


def rewrite_requires(function: FunctionExpr, mapping: Mapping[str, str], renames: Mapping[Binding, str]) -> int:
	"""Point `require("<path>")` calls at `./<canonical name>.js`; return how many changed."""
	count = 0

	def visit(node: Node) -> bool:
		nonlocal count
		if not isinstance(node, Call) or not isinstance(node.callee, SymbolRef):
			return False
		callee = node.callee
		if callee.name != "require" and display_name(callee, renames) != "require":
			return False
		if len(node.args) != 1 or not isinstance(node.args[0], StringLiteral):
			return False
		target = mapping.get(stem(node.args[0].value))
		if target is not None:
			node.args[0].value = f"./{target}.js"
			count += 1
		return False

	for stmt in function.body:
		walk(stmt, visit)
	return count


def extract_modules(table: ModuleTable, names: ModuleNames) -> tuple[Dict[str, CanonicalModule], List[Diagnostic]]:
	"""
	Group the table's module bodies into canonical modules keyed by name.

	`main` always exists and comes first; other modules follow in order of
	their first contribution. Bodies of ids sharing a name are concatenated in
	table order.
	"""
	modules: Dict[str, CanonicalModule] = {
		MAIN_NAME: CanonicalModule(name=MAIN_NAME, program=Program(loc=Located(line=1, column=1), body=[])),
	}
	diagnostics: List[Diagnostic] = []
	# Span of the first entry feeding each canonical module.
	spans: Dict[str, Span] = {}

	for entry in table.entries:
		module_name = names[entry.module_id]
		spans.setdefault(module_name, entry.span)
		mapping: Dict[str, str] = {}
		for require in entry.requires:
			mapping[stem(require.local_name)] = names[require.target_id]

		module = modules.get(module_name)
		if module is None:
			module = CanonicalModule(name=module_name, program=Program(loc=Located(line=1, column=1), body=[]))
			modules[module_name] = module

		canonicalize_params(entry.function, module.renames)
		rewrite_requires(entry.function, mapping, module.renames)

		body: List[Stmt] = entry.function.body
		module.program.body.extend(body)
		module.module_ids.append(entry.module_id)

	for module in modules.values():
		if len(module.module_ids) > 1:
			diagnostics.append(
				warning(
					f"modules {', '.join(repr(i) for i in module.module_ids)} share the name {module.name!r}; "
					f"their bodies are concatenated into {module.name}.js",
					code="MODULE_MERGE",
					phase=PHASE,
					span=spans.get(module.name),
				)
			)

	return modules, diagnostics


__all__ = [
	"CanonicalModule",
	"PARAM_ROLES",
	"canonicalize_params",
	"display_name",
	"extract_modules",
	"rewrite_requires",
]
