# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Decoding of the bundle invocation into a typed module table.

Expected shape of the invocation's arguments:

	({ <id>: [function (require, module, exports) {...}, { "<path>": <id>, ... }], ... },
	 {},
	 [<main id>, ...])

Module ids appear both as object keys and as literal values; JavaScript
coerces both to property-key strings, so every id is kept as that string.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Tuple

from ..core.diagnostics import Diagnostic, note
from ..core.errors import InvalidBundleShape
from ..core.span import Span
from ..jstree.ast import (
	ArrayLiteral,
	Atom,
	Call,
	FunctionExpr,
	Node,
	NumberLiteral,
	ObjectLiteral,
	Property,
	StringLiteral,
	SymbolRef,
	Unary,
)
from ..jstree.parser import parse_number

PHASE = "table"


@dataclass(frozen=True)
class BundleInvocation:
	call: Call
	modules: ObjectLiteral
	cache: ObjectLiteral
	main: ArrayLiteral


@dataclass(frozen=True)
class RequireEntry:
	local_name: str
	target_id: str


@dataclass(frozen=True)
class ModuleEntry:
	module_id: str
	function: FunctionExpr
	requires: Tuple[RequireEntry, ...]
	span: Span = Span()


@dataclass(frozen=True)
class ModuleTable:
	entries: Tuple[ModuleEntry, ...]
	main_ids: Tuple[str, ...]

	def module_ids(self) -> List[str]:
		return [entry.module_id for entry in self.entries]


def number_key(value: int | float) -> str:
	"""Render a number the way JavaScript renders it as a property key."""
	if isinstance(value, float):
		if value != value:
			return "NaN"
		if value in (float("inf"), float("-inf")):
			return "Infinity" if value > 0 else "-Infinity"
		if value.is_integer() and abs(value) < 1e21:
			return str(int(value))
		text = repr(value)
		# Python pads exponents (`1e-07`); JavaScript does not (`1e-7`).
		if "e" in text:
			mantissa, exponent = text.split("e")
			sign = exponent[0] if exponent[0] in "+-" else "+"
			return f"{mantissa}e{sign}{int(exponent.lstrip('+-'))}"
		return text
	return str(value)


def literal_id(node: Node) -> Optional[str]:
	"""The module id a string or number literal denotes, or None for other nodes."""
	if isinstance(node, StringLiteral):
		return node.value
	if isinstance(node, NumberLiteral):
		return number_key(node.value)
	return None


def property_id(prop: Property) -> str:
	if prop.key_kind == "number":
		return number_key(parse_number(prop.key))
	return prop.key


def _variant(node: Optional[Node]) -> str:
	if node is None:
		return "an array hole"
	return type(node).__name__


def _span(node: Optional[Node], fallback: Node, file: Optional[str]) -> Span:
	return Span.from_loc((node or fallback).loc, file)


def _is_external(node: Node) -> bool:
	"""`void 0`, `undefined`, `false` or `null`: a dependency kept outside the bundle."""
	if isinstance(node, Unary):
		return node.op == "void"
	if isinstance(node, SymbolRef):
		return node.name == "undefined"
	if isinstance(node, Atom):
		return node.value in ("false", "null")
	return False


def bundle_invocation(call: Call, file: Optional[str] = None) -> BundleInvocation:
	"""Check the argument shapes of the bundle call."""
	if len(call.args) < 3:
		raise InvalidBundleShape(
			f"bundle invocation takes 3 arguments (modules, cache, main ids), found {len(call.args)}",
			Span.from_loc(call.loc, file),
		)
	modules, cache, main = call.args[:3]
	for node, expected, what in (
		(modules, ObjectLiteral, "module table"),
		(cache, ObjectLiteral, "module cache"),
		(main, ArrayLiteral, "main id list"),
	):
		if not isinstance(node, expected):
			raise InvalidBundleShape(
				f"{what} must be {expected.__name__}, found {_variant(node)}",
				Span.from_loc(node.loc, file),
			)
	return BundleInvocation(call=call, modules=modules, cache=cache, main=main)


def decode_bundle(call: Call, file: Optional[str] = None) -> Tuple[ModuleTable, List[Diagnostic]]:
	"""
	Decode the bundle invocation into a `ModuleTable`.

	Raises `InvalidBundleShape` on the first argument that does not fit.
	Returns the table plus `EXTERNAL_REQUIRE` notes for dependencies that the
	bundle left to the host environment.
	"""
	invocation = bundle_invocation(call, file)
	diagnostics: List[Diagnostic] = []

	entries = []
	for prop in invocation.modules.properties:
		entries.append(_decode_entry(prop, file, diagnostics))

	main_ids = []
	for element in invocation.main.elements:
		module_id = literal_id(element) if element is not None else None
		if module_id is None:
			raise InvalidBundleShape(
				f"main id must be a string or number literal, found {_variant(element)}",
				_span(element, invocation.main, file),
			)
		main_ids.append(module_id)

	return ModuleTable(entries=tuple(entries), main_ids=tuple(main_ids)), diagnostics


def _decode_entry(prop: Property, file: Optional[str], diagnostics: List[Diagnostic]) -> ModuleEntry:
	module_id = property_id(prop)
	value = prop.value
	if prop.kind != "init":
		raise InvalidBundleShape(
			f"module {module_id!r} is a {prop.kind}ter, expected [function, mapping]",
			Span.from_loc(prop.loc, file),
		)
	if not isinstance(value, ArrayLiteral):
		raise InvalidBundleShape(
			f"module {module_id!r} must be ArrayLiteral, found {_variant(value)}",
			Span.from_loc(value.loc, file),
		)
	if len(value.elements) < 2:
		raise InvalidBundleShape(
			f"module {module_id!r} must hold [function, mapping], found {len(value.elements)} element(s)",
			Span.from_loc(value.loc, file),
		)
	function, mapping = value.elements[0], value.elements[1]
	if not isinstance(function, FunctionExpr):
		raise InvalidBundleShape(
			f"module {module_id!r} function must be FunctionExpr, found {_variant(function)}",
			_span(function, value, file),
		)
	if not isinstance(mapping, ObjectLiteral):
		raise InvalidBundleShape(
			f"module {module_id!r} require mapping must be ObjectLiteral, found {_variant(mapping)}",
			_span(mapping, value, file),
		)

	requires = []
	for item in mapping.properties:
		local_name = property_id(item)
		target = item.value
		target_id = literal_id(target)
		if target_id is not None:
			requires.append(RequireEntry(local_name=local_name, target_id=target_id))
		elif _is_external(target):
			diagnostics.append(
				note(
					f"module {module_id!r}: require({local_name!r}) is not part of the bundle",
					code="EXTERNAL_REQUIRE",
					phase=PHASE,
					span=Span.from_loc(item.loc, file),
				)
			)
		else:
			raise InvalidBundleShape(
				f"module {module_id!r}: require target for {local_name!r} must be a string or number literal, "
				f"found {_variant(target)}",
				Span.from_loc(target.loc, file),
			)
	return ModuleEntry(
		module_id=module_id,
		function=function,
		requires=tuple(requires),
		span=Span.from_loc(prop.loc, file),
	)


__all__ = [
	"BundleInvocation",
	"RequireEntry",
	"ModuleEntry",
	"ModuleTable",
	"bundle_invocation",
	"decode_bundle",
	"literal_id",
	"number_key",
	"property_id",
]
