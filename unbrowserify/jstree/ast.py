# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JavaScript program tree.

Every node kind is its own dataclass, so passes match on node variants with
`isinstance` instead of probing attributes. Nodes compare by identity; a pass
that needs to remember nodes can put them in sets and dicts.

Declaring occurrences of a name are `SymbolDef`s, every other identifier use is
a `SymbolRef`. Both carry a `binding` slot filled in by `scope.resolve_scopes`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Callable, Iterator, List, Optional, Union


@dataclass(frozen=True)
class Located:
	line: int
	column: int


NO_LOC = Located(line=0, column=0)


class Node:
	loc: Located


class Stmt(Node):
	pass


class Expr(Node):
	pass


@dataclass(eq=False)
class Binding:
	"""
	One declared (or implicitly global) variable.

	Identity is the variable: two occurrences refer to the same variable iff
	they share the Binding object. `kind` is one of: var, let, const, function,
	param, catch, global.
	"""

	name: str
	kind: str
	scope: object = field(default=None, repr=False)


@dataclass(eq=False)
class Program(Node):
	loc: Located
	body: List[Stmt]


@dataclass(eq=False)
class SymbolDef(Node):
	loc: Located
	name: str
	binding: Optional[Binding] = None


@dataclass(eq=False)
class SymbolRef(Expr):
	loc: Located
	name: str
	binding: Optional[Binding] = None


# Statements ----------------------------------------------------------------


@dataclass(eq=False)
class VarDeclarator(Node):
	loc: Located
	target: SymbolDef
	init: Optional[Expr] = None


@dataclass(eq=False)
class VarDecl(Stmt):
	loc: Located
	kind: str  # var | let | const
	declarations: List[VarDeclarator]


@dataclass(eq=False)
class FunctionDecl(Stmt):
	loc: Located
	name: SymbolDef
	params: List[SymbolDef]
	body: List[Stmt]


@dataclass(eq=False)
class ExprStmt(Stmt):
	loc: Located
	expr: Expr


@dataclass(eq=False)
class Block(Stmt):
	loc: Located
	body: List[Stmt]


@dataclass(eq=False)
class If(Stmt):
	loc: Located
	test: Expr
	consequent: Stmt
	alternate: Optional[Stmt] = None


@dataclass(eq=False)
class For(Stmt):
	loc: Located
	init: Optional[Union[VarDecl, Expr]]
	test: Optional[Expr]
	update: Optional[Expr]
	body: Stmt


@dataclass(eq=False)
class ForIn(Stmt):
	loc: Located
	left: Union[VarDecl, Expr]
	right: Expr
	body: Stmt


@dataclass(eq=False)
class While(Stmt):
	loc: Located
	test: Expr
	body: Stmt


@dataclass(eq=False)
class DoWhile(Stmt):
	loc: Located
	body: Stmt
	test: Expr


@dataclass(eq=False)
class Return(Stmt):
	loc: Located
	value: Optional[Expr] = None


@dataclass(eq=False)
class Break(Stmt):
	loc: Located
	label: Optional[str] = None


@dataclass(eq=False)
class Continue(Stmt):
	loc: Located
	label: Optional[str] = None


@dataclass(eq=False)
class Throw(Stmt):
	loc: Located
	value: Expr


@dataclass(eq=False)
class CatchClause(Node):
	loc: Located
	param: SymbolDef
	body: List[Stmt]


@dataclass(eq=False)
class Try(Stmt):
	loc: Located
	block: List[Stmt]
	handler: Optional[CatchClause] = None
	finalizer: Optional[List[Stmt]] = None


@dataclass(eq=False)
class SwitchCase(Node):
	loc: Located
	test: Optional[Expr]  # None for `default:`
	body: List[Stmt]


@dataclass(eq=False)
class Switch(Stmt):
	loc: Located
	discriminant: Expr
	cases: List[SwitchCase]


@dataclass(eq=False)
class Labeled(Stmt):
	loc: Located
	label: str
	body: Stmt


@dataclass(eq=False)
class Empty(Stmt):
	loc: Located


@dataclass(eq=False)
class Debugger(Stmt):
	loc: Located


# Expressions ---------------------------------------------------------------


@dataclass(eq=False)
class FunctionExpr(Expr):
	loc: Located
	name: Optional[SymbolDef]
	params: List[SymbolDef]
	body: List[Stmt]


@dataclass(eq=False)
class Call(Expr):
	loc: Located
	callee: Expr
	args: List[Expr]


@dataclass(eq=False)
class New(Expr):
	loc: Located
	callee: Expr
	args: List[Expr]


@dataclass(eq=False)
class Member(Expr):
	"""`obj.prop`"""

	loc: Located
	obj: Expr
	prop: str


@dataclass(eq=False)
class Index(Expr):
	"""`obj[index]`"""

	loc: Located
	obj: Expr
	index: Expr


@dataclass(eq=False)
class Unary(Expr):
	loc: Located
	op: str  # ! ~ + - typeof void delete
	operand: Expr


@dataclass(eq=False)
class Update(Expr):
	loc: Located
	op: str  # ++ --
	prefix: bool
	operand: Expr


@dataclass(eq=False)
class Binary(Expr):
	"""Arithmetic, relational and logical (`&&`, `||`) operators."""

	loc: Located
	op: str
	left: Expr
	right: Expr


@dataclass(eq=False)
class Assign(Expr):
	loc: Located
	op: str
	target: Expr
	value: Expr


@dataclass(eq=False)
class Conditional(Expr):
	loc: Located
	test: Expr
	consequent: Expr
	alternate: Expr


@dataclass(eq=False)
class Sequence(Expr):
	loc: Located
	exprs: List[Expr]


@dataclass(eq=False)
class ArrayLiteral(Expr):
	loc: Located
	elements: List[Optional[Expr]]  # None marks a hole (`[a, , b]`)


@dataclass(eq=False)
class Property(Node):
	loc: Located
	key: str
	key_kind: str  # name | string | number
	value: Expr  # FunctionExpr for getters/setters
	kind: str = "init"  # init | get | set


@dataclass(eq=False)
class ObjectLiteral(Expr):
	loc: Located
	properties: List[Property]


@dataclass(eq=False)
class StringLiteral(Expr):
	loc: Located
	value: str


@dataclass(eq=False)
class NumberLiteral(Expr):
	loc: Located
	value: Union[int, float]
	raw: Optional[str] = None


@dataclass(eq=False)
class RegexLiteral(Expr):
	loc: Located
	pattern: str
	flags: str = ""


@dataclass(eq=False)
class Atom(Expr):
	"""`true`, `false` or `null`."""

	loc: Located
	value: str


@dataclass(eq=False)
class This(Expr):
	loc: Located


# Traversal -----------------------------------------------------------------

_SKIP_FIELDS = frozenset({"loc", "binding"})


def iter_child_nodes(node: Node) -> Iterator[Node]:
	"""Yield the direct children of `node` in source order."""
	for f in fields(node):
		if f.name in _SKIP_FIELDS:
			continue
		value = getattr(node, f.name)
		if isinstance(value, Node):
			yield value
		elif isinstance(value, list):
			for item in value:
				if isinstance(item, Node):
					yield item


def walk(node: Node, visitor: Callable[[Node], Optional[bool]]) -> None:
	"""
	Visit `node` and its descendants depth-first, parents before children.

	When `visitor` returns True for a node, that node's children are skipped.
	Iterative, so long operator chains do not hit the recursion limit.
	"""
	stack: List[Node] = [node]
	while stack:
		current = stack.pop()
		if visitor(current):
			continue
		children = list(iter_child_nodes(current))
		children.reverse()
		stack.extend(children)


def is_function(node: Node) -> bool:
	return isinstance(node, (FunctionExpr, FunctionDecl))


__all__ = [
	"Located",
	"NO_LOC",
	"Node",
	"Stmt",
	"Expr",
	"Binding",
	"Program",
	"SymbolDef",
	"SymbolRef",
	"VarDeclarator",
	"VarDecl",
	"FunctionDecl",
	"ExprStmt",
	"Block",
	"If",
	"For",
	"ForIn",
	"While",
	"DoWhile",
	"Return",
	"Break",
	"Continue",
	"Throw",
	"CatchClause",
	"Try",
	"SwitchCase",
	"Switch",
	"Labeled",
	"Empty",
	"Debugger",
	"FunctionExpr",
	"Call",
	"New",
	"Member",
	"Index",
	"Unary",
	"Update",
	"Binary",
	"Assign",
	"Conditional",
	"Sequence",
	"ArrayLiteral",
	"Property",
	"ObjectLiteral",
	"StringLiteral",
	"NumberLiteral",
	"RegexLiteral",
	"Atom",
	"This",
	"iter_child_nodes",
	"walk",
	"is_function",
]
