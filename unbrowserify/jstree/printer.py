# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JavaScript code generator.

`print_program(program, options)` renders a tree back to beautified source.
Identifier occurrences print through `options.renames` (binding -> display
name), so renaming never touches the tree or its scope records.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Mapping, Optional

from .ast import (
	ArrayLiteral,
	Assign,
	Atom,
	Binary,
	Binding,
	Block,
	Break,
	Call,
	Conditional,
	Continue,
	Debugger,
	DoWhile,
	Empty,
	Expr,
	ExprStmt,
	For,
	ForIn,
	FunctionDecl,
	FunctionExpr,
	If,
	Index,
	Labeled,
	Member,
	New,
	Node,
	NumberLiteral,
	ObjectLiteral,
	Program,
	Property,
	RegexLiteral,
	Return,
	Sequence,
	Stmt,
	StringLiteral,
	Switch,
	SymbolDef,
	SymbolRef,
	This,
	Throw,
	Try,
	Unary,
	Update,
	VarDecl,
	While,
)


@dataclass(frozen=True)
class PrintOptions:
	ascii_only: bool = False
	bracketize: bool = False
	one_declarator_per_line: bool = False
	indent: int = 4
	renames: Mapping[Binding, str] = field(default_factory=dict)


def print_program(program: Program, options: Optional[PrintOptions] = None) -> str:
	"""Render `program` as source text (one statement per line, trailing newline)."""
	return _Printer(options or PrintOptions()).program(program)


# Precedence levels, loosest first.
PREC_SEQUENCE = 1
PREC_ASSIGN = 2
PREC_CONDITIONAL = 3
PREC_UNARY = 14
PREC_POSTFIX = 15
PREC_CALL = 17
PREC_PRIMARY = 18

_BINARY_PREC = {
	"||": 4,
	"&&": 5,
	"|": 6,
	"^": 7,
	"&": 8,
	"==": 9,
	"!=": 9,
	"===": 9,
	"!==": 9,
	"<": 10,
	">": 10,
	"<=": 10,
	">=": 10,
	"instanceof": 10,
	"in": 10,
	"<<": 11,
	">>": 11,
	">>>": 11,
	"+": 12,
	"-": 12,
	"*": 13,
	"/": 13,
	"%": 13,
}

_WORD_UNARY = {"typeof", "void", "delete"}

_QUOTE_ESCAPES = {
	"\\": "\\\\",
	"\n": "\\n",
	"\r": "\\r",
	"\t": "\\t",
	"\b": "\\b",
	"\f": "\\f",
	"\v": "\\x0B",
	"\u2028": "\\u2028",
	"\u2029": "\\u2029",
}

_DIGITS_RE = re.compile(r"\d+")


def precedence(node: Expr) -> int:
	if isinstance(node, Sequence):
		return PREC_SEQUENCE
	if isinstance(node, Assign):
		return PREC_ASSIGN
	if isinstance(node, Conditional):
		return PREC_CONDITIONAL
	if isinstance(node, Binary):
		return _BINARY_PREC[node.op]
	if isinstance(node, Unary):
		return PREC_UNARY
	if isinstance(node, Update):
		return PREC_UNARY if node.prefix else PREC_POSTFIX
	if isinstance(node, (Call, New, Member, Index)):
		return PREC_CALL
	return PREC_PRIMARY


def _escape_char(ch: str) -> str:
	code = ord(ch)
	if code <= 0xFF:
		return f"\\x{code:02X}"
	if code <= 0xFFFF:
		return f"\\u{code:04X}"
	code -= 0x10000
	return f"\\u{0xD800 + (code >> 10):04X}\\u{0xDC00 + (code & 0x3FF):04X}"


def quote_string(value: str, ascii_only: bool = False) -> str:
	"""Quote `value` as a JavaScript string literal."""
	quote = "'" if value.count('"') > value.count("'") else '"'
	out = [quote]
	for index, ch in enumerate(value):
		code = ord(ch)
		if ch == quote:
			out.append("\\" + ch)
		elif ch in _QUOTE_ESCAPES:
			out.append(_QUOTE_ESCAPES[ch])
		elif ch == "\0":
			following = value[index + 1:index + 2]
			out.append("\\x00" if following.isdigit() else "\\0")
		elif code < 0x20 or 0xD800 <= code <= 0xDFFF:
			out.append(_escape_char(ch))
		elif ascii_only and code > 0x7F:
			out.append(_escape_char(ch))
		else:
			out.append(ch)
	out.append(quote)
	return "".join(out)


def _ascii_text(text: str) -> str:
	if text.isascii():
		return text
	return "".join(ch if ord(ch) <= 0x7F else _escape_char(ch) for ch in text)


def _identifier_text(name: str, ascii_only: bool) -> str:
	if not ascii_only or name.isascii():
		return name
	# Identifiers only accept the `\uHHHH` form.
	parts = []
	for ch in name:
		code = ord(ch)
		if code <= 0x7F:
			parts.append(ch)
		elif code <= 0xFFFF:
			parts.append(f"\\u{code:04X}")
		else:
			parts.append(_escape_char(ch))
	return "".join(parts)


def format_number(node: NumberLiteral) -> str:
	if node.raw is not None:
		return node.raw
	value = node.value
	if isinstance(value, float) and value.is_integer() and abs(value) < 1e21:
		return str(int(value))
	return repr(value)


def _leftmost(expr: Expr) -> Expr:
	"""The node printed first in `expr` when no parentheses are added."""
	node = expr
	while True:
		if isinstance(node, (Call, Member, Index)):
			node = node.callee if isinstance(node, Call) else node.obj
		elif isinstance(node, Binary):
			node = node.left
		elif isinstance(node, Assign):
			node = node.target
		elif isinstance(node, Conditional):
			node = node.test
		elif isinstance(node, Sequence):
			node = node.exprs[0]
		elif isinstance(node, Update) and not node.prefix:
			node = node.operand
		else:
			return node


def _ends_with_open_if(stmt: Stmt) -> bool:
	"""True when an `else` printed after `stmt` would bind to an inner `if`."""
	node: Optional[Stmt] = stmt
	while node is not None:
		if isinstance(node, If):
			if node.alternate is None:
				return True
			node = node.alternate
		elif isinstance(node, (While, For, ForIn, Labeled)):
			node = node.body
		else:
			return False
	return False


class _Printer:
	def __init__(self, options: PrintOptions) -> None:
		self.options = options
		self.level = 0
		# Expressions that must be parenthesized regardless of precedence.
		self._wrap: set = set()
		self._in_for_init = False

	# Program / statements ---------------------------------------------------

	def program(self, program: Program) -> str:
		if not program.body:
			return ""
		return "\n".join(self.stmt(s) for s in program.body) + "\n"

	def pad(self, level: Optional[int] = None) -> str:
		return " " * (self.options.indent * (self.level if level is None else level))

	def block(self, body: List[Stmt]) -> str:
		if not body:
			return "{}"
		self.level += 1
		try:
			lines = [self.pad() + self.stmt(s) for s in body]
		finally:
			self.level -= 1
		return "{\n" + "\n".join(lines) + "\n" + self.pad() + "}"

	def body(self, stmt: Stmt) -> str:
		"""Body of a control statement, including the separating whitespace."""
		if isinstance(stmt, Block):
			return " " + self.block(stmt.body)
		if self.options.bracketize:
			if isinstance(stmt, Empty):
				return " {}"
			return " " + self.block([stmt])
		if isinstance(stmt, Empty):
			return ";"
		self.level += 1
		try:
			text = "\n" + self.pad() + self.stmt(stmt)
		finally:
			self.level -= 1
		return text

	def stmt(self, node: Stmt) -> str:
		if isinstance(node, ExprStmt):
			return self.expr_stmt(node.expr) + ";"
		if isinstance(node, VarDecl):
			return self.var_decl(node, in_for=False) + ";"
		if isinstance(node, Return):
			if node.value is None:
				return "return;"
			return "return " + self.expr(node.value, PREC_SEQUENCE) + ";"
		if isinstance(node, If):
			return self.if_stmt(node)
		if isinstance(node, Block):
			return self.block(node.body)
		if isinstance(node, FunctionDecl):
			return self.function(node.name, node.params, node.body)
		if isinstance(node, For):
			return self.for_stmt(node)
		if isinstance(node, ForIn):
			if isinstance(node.left, VarDecl):
				left = self.var_decl(node.left, in_for=True)
			else:
				left = self.expr(node.left, PREC_CALL)
			return f"for ({left} in {self.expr(node.right, PREC_SEQUENCE)})" + self.body(node.body)
		if isinstance(node, While):
			return f"while ({self.expr(node.test, PREC_SEQUENCE)})" + self.body(node.body)
		if isinstance(node, DoWhile):
			body = self.body(node.body)
			if body.startswith("\n") or body == ";":
				body = " " + self.block([node.body])
			return f"do{body} while ({self.expr(node.test, PREC_SEQUENCE)});"
		if isinstance(node, Throw):
			return "throw " + self.expr(node.value, PREC_SEQUENCE) + ";"
		if isinstance(node, Break):
			return f"break {node.label};" if node.label else "break;"
		if isinstance(node, Continue):
			return f"continue {node.label};" if node.label else "continue;"
		if isinstance(node, Try):
			return self.try_stmt(node)
		if isinstance(node, Switch):
			return self.switch(node)
		if isinstance(node, Labeled):
			return f"{node.label}: " + self.stmt(node.body)
		if isinstance(node, Empty):
			return ";"
		if isinstance(node, Debugger):
			return "debugger;"
		raise TypeError(f"Unsupported statement node: {type(node).__name__}")

	def expr_stmt(self, expr: Expr) -> str:
		first = _leftmost(expr)
		if isinstance(first, (FunctionExpr, ObjectLiteral)):
			self._wrap.add(first)
		return self.expr(expr, PREC_SEQUENCE)

	def var_decl(self, node: VarDecl, in_for: bool) -> str:
		parts = []
		for decl in node.declarations:
			text = self.symbol(decl.target)
			if decl.init is not None:
				text += " = " + self.expr(decl.init, PREC_ASSIGN)
			parts.append(text)
		if self.options.one_declarator_per_line and not in_for and len(parts) > 1:
			separator = ",\n" + self.pad(self.level + 1)
		else:
			separator = ", "
		return f"{node.kind} " + separator.join(parts)

	def if_stmt(self, node: If) -> str:
		out = []
		current: Optional[Stmt] = node
		# `else if` chains print flat.
		while isinstance(current, If):
			consequent = current.consequent
			if current.alternate is not None and not isinstance(consequent, Block) and _ends_with_open_if(consequent):
				consequent = Block(loc=consequent.loc, body=[consequent])
			out.append(f"if ({self.expr(current.test, PREC_SEQUENCE)})" + self.body(consequent))
			current = current.alternate
			if current is None:
				break
			out.append(" " if out[-1].endswith("}") else "\n" + self.pad())
			if isinstance(current, If):
				out.append("else ")
			else:
				out.append("else" + self.body(current))
		return "".join(out)

	def for_stmt(self, node: For) -> str:
		init = ""
		if isinstance(node.init, VarDecl):
			saved = self._in_for_init
			self._in_for_init = True
			try:
				init = self.var_decl(node.init, in_for=True)
			finally:
				self._in_for_init = saved
		elif node.init is not None:
			saved = self._in_for_init
			self._in_for_init = True
			try:
				init = self.expr(node.init, PREC_SEQUENCE)
			finally:
				self._in_for_init = saved
		test = " " + self.expr(node.test, PREC_SEQUENCE) if node.test is not None else ""
		update = " " + self.expr(node.update, PREC_SEQUENCE) if node.update is not None else ""
		return f"for ({init};{test};{update})" + self.body(node.body)

	def try_stmt(self, node: Try) -> str:
		text = "try " + self.block(node.block)
		if node.handler is not None:
			text += f" catch ({self.symbol(node.handler.param)}) " + self.block(node.handler.body)
		if node.finalizer is not None:
			text += " finally " + self.block(node.finalizer)
		return text

	def switch(self, node: Switch) -> str:
		head = f"switch ({self.expr(node.discriminant, PREC_SEQUENCE)}) "
		if not node.cases:
			return head + "{}"
		lines = []
		self.level += 1
		try:
			for case in node.cases:
				if case.test is None:
					lines.append(self.pad() + "default:")
				else:
					lines.append(self.pad() + "case " + self.expr(case.test, PREC_SEQUENCE) + ":")
				self.level += 1
				try:
					lines.extend(self.pad() + self.stmt(s) for s in case.body)
				finally:
					self.level -= 1
		finally:
			self.level -= 1
		return head + "{\n" + "\n".join(lines) + "\n" + self.pad() + "}"

	def function(self, name: Optional[SymbolDef], params: List[SymbolDef], body: List[Stmt]) -> str:
		saved = self._in_for_init
		self._in_for_init = False
		try:
			head = "function"
			if name is not None:
				head += " " + self.symbol(name)
			args = ", ".join(self.symbol(p) for p in params)
			return f"{head}({args}) " + self.block(body)
		finally:
			self._in_for_init = saved

	# Expressions ------------------------------------------------------------

	def symbol(self, node) -> str:
		name = node.name
		if node.binding is not None:
			name = self.options.renames.get(node.binding, name)
		return _identifier_text(name, self.options.ascii_only)

	def expr(self, node: Expr, min_prec: int) -> str:
		text = self._expr(node)
		if node in self._wrap or precedence(node) < min_prec:
			return "(" + text + ")"
		if self._in_for_init and isinstance(node, Binary) and node.op == "in":
			return "(" + text + ")"
		return text

	def _expr(self, node: Expr) -> str:
		if isinstance(node, SymbolRef):
			return self.symbol(node)
		if isinstance(node, (Call, Member, Index)):
			return self.chain(node)
		if isinstance(node, StringLiteral):
			return quote_string(node.value, self.options.ascii_only)
		if isinstance(node, Binary):
			return self.binary(node)
		if isinstance(node, Assign):
			return self.expr(node.target, PREC_CALL) + f" {node.op} " + self.expr(node.value, PREC_ASSIGN)
		if isinstance(node, NumberLiteral):
			return format_number(node)
		if isinstance(node, FunctionExpr):
			return self.function(node.name, node.params, node.body)
		if isinstance(node, Unary):
			return self.unary(node)
		if isinstance(node, Conditional):
			return (
				self.expr(node.test, PREC_CONDITIONAL + 1)
				+ " ? "
				+ self.expr(node.consequent, PREC_ASSIGN)
				+ " : "
				+ self.expr(node.alternate, PREC_ASSIGN)
			)
		if isinstance(node, Sequence):
			return ", ".join(self.expr(e, PREC_ASSIGN) for e in node.exprs)
		if isinstance(node, Atom):
			return node.value
		if isinstance(node, This):
			return "this"
		if isinstance(node, ObjectLiteral):
			return self.object_literal(node)
		if isinstance(node, ArrayLiteral):
			return self.array_literal(node)
		if isinstance(node, New):
			callee = self.expr(node.callee, PREC_CALL)
			if _contains_call(node.callee) and not callee.startswith("("):
				callee = "(" + callee + ")"
			return "new " + callee + self.args(node.args)
		if isinstance(node, Update):
			if node.prefix:
				return node.op + self.expr(node.operand, PREC_UNARY)
			return self.expr(node.operand, PREC_CALL) + node.op
		if isinstance(node, RegexLiteral):
			pattern = _ascii_text(node.pattern) if self.options.ascii_only else node.pattern
			return f"/{pattern}/{node.flags}"
		raise TypeError(f"Unsupported expression node: {type(node).__name__}")

	def chain(self, node: Expr) -> str:
		"""`a.b().c[d]()`: calls and accessors nest on the left; unwind them iteratively."""
		links = []
		base = node
		while isinstance(base, (Call, Member, Index)):
			links.append(base)
			base = base.callee if isinstance(base, Call) else base.obj
		text = self.expr(base, PREC_CALL)
		for link in reversed(links):
			if isinstance(link, Call):
				text += self.args(link.args)
			elif isinstance(link, Member):
				if isinstance(link.obj, NumberLiteral) and _DIGITS_RE.fullmatch(text):
					text = "(" + text + ")"
				text += "." + _identifier_text(link.prop, self.options.ascii_only)
			else:
				text += "[" + self.expr(link.index, PREC_SEQUENCE) + "]"
		return text

	def args(self, args: List[Expr]) -> str:
		return "(" + ", ".join(self.expr(a, PREC_ASSIGN) for a in args) + ")"

	def binary(self, node: Binary) -> str:
		prec = _BINARY_PREC[node.op]
		# Unwind the left spine of same-precedence operators iteratively.
		spine = [node]
		left = node.left
		while isinstance(left, Binary) and _BINARY_PREC[left.op] == prec and left not in self._wrap:
			if self._in_for_init and left.op == "in":
				break
			spine.append(left)
			left = left.left
		text = self.expr(left, prec)
		for link in reversed(spine):
			text += f" {link.op} " + self.expr(link.right, prec + 1)
		return text

	def unary(self, node: Unary) -> str:
		operand = self.expr(node.operand, PREC_UNARY)
		if node.op in _WORD_UNARY:
			return f"{node.op} {operand}"
		if node.op in ("+", "-") and operand.startswith(node.op):
			return f"{node.op} {operand}"
		return node.op + operand

	def object_literal(self, node: ObjectLiteral) -> str:
		if not node.properties:
			return "{}"
		self.level += 1
		try:
			items = [self.pad() + self.property(p) for p in node.properties]
		finally:
			self.level -= 1
		return "{\n" + ",\n".join(items) + "\n" + self.pad() + "}"

	def property(self, prop: Property) -> str:
		if prop.key_kind == "string":
			key = quote_string(prop.key, self.options.ascii_only)
		elif prop.key_kind == "number":
			key = prop.key
		else:
			key = _identifier_text(prop.key, self.options.ascii_only)
		if prop.kind in ("get", "set"):
			fn = prop.value
			args = ", ".join(self.symbol(p) for p in fn.params)
			return f"{prop.kind} {key}({args}) " + self.block(fn.body)
		return f"{key}: " + self.expr(prop.value, PREC_ASSIGN)

	def array_literal(self, node: ArrayLiteral) -> str:
		items = ["" if e is None else self.expr(e, PREC_ASSIGN) for e in node.elements]
		text = ", ".join(items)
		if node.elements and node.elements[-1] is None:
			text += ","
		return "[" + text + "]"


def _contains_call(expr: Node) -> bool:
	node = expr
	while isinstance(node, (Member, Index, Call)):
		if isinstance(node, Call):
			return True
		node = node.obj
	return False


__all__ = ["PrintOptions", "print_program", "quote_string", "format_number", "precedence"]
