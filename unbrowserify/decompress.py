# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Decompress normalizer: undo the statement-level tricks of minifiers.

Rewrites, applied in place everywhere including nested functions:
- `!0` -> `true`, `!1` -> `false`, `void 0` -> `undefined` (not where a local
  `undefined` is declared);
- `a, b;` -> `a; b;` and `return a, b;` -> `a; return b;` (same for `throw`);
- `a && b;` -> `if (a) { b; }`, `a || b;` -> `if (!a) { b; }`,
  `c ? a : b;` -> `if (c) { a; } else { b; }`;
- bodies of `if`/`else` and loops become blocks so the rules above reach them.

The output is a fixed point: running the pass again changes nothing.
"""

from __future__ import annotations

from dataclasses import fields
from typing import List, Optional, Tuple

from .jstree.ast import (
	Atom,
	Binary,
	Block,
	CatchClause,
	Conditional,
	DoWhile,
	Empty,
	Expr,
	ExprStmt,
	For,
	ForIn,
	FunctionDecl,
	FunctionExpr,
	If,
	Node,
	NumberLiteral,
	Program,
	Return,
	Sequence,
	Stmt,
	SwitchCase,
	SymbolRef,
	Throw,
	Try,
	Unary,
	VarDecl,
	While,
	iter_child_nodes,
	walk,
)


def decompress(program: Program) -> Program:
	# Like `walk`, plus whether a local `undefined` is visible at each node.
	stack: List[Tuple[Node, bool]] = [(program, False)]
	while stack:
		node, shadowed = stack.pop()
		shadowed = shadowed or _declares_undefined(node)
		_visit(node, shadowed)
		children = list(iter_child_nodes(node))
		children.reverse()
		stack.extend((child, shadowed) for child in children)
	return program


def _visit(node: Node, shadowed: bool) -> None:
	_simplify_children(node, shadowed)
	if isinstance(node, (Program, Block, FunctionDecl, FunctionExpr, CatchClause, SwitchCase)):
		node.body = _normalize_statements(node.body)
	elif isinstance(node, Try):
		node.block = _normalize_statements(node.block)
		if node.finalizer is not None:
			node.finalizer = _normalize_statements(node.finalizer)
	elif isinstance(node, If):
		node.consequent = _as_block(node.consequent)
		# `else if` chains stay flat.
		if node.alternate is not None and not isinstance(node.alternate, If):
			node.alternate = _as_block(node.alternate)
	elif isinstance(node, (For, ForIn, While, DoWhile)):
		node.body = _as_block(node.body)


# Expressions ----------------------------------------------------------------

_UNDEFINED = "undefined"


def _declares_undefined(node: Node) -> bool:
	"""True when `node` opens a scope that binds its own `undefined`."""
	if isinstance(node, (FunctionDecl, FunctionExpr)):
		if any(param.name == _UNDEFINED for param in node.params):
			return True
		if isinstance(node, FunctionExpr) and node.name is not None and node.name.name == _UNDEFINED:
			return True
		return _body_declares_undefined(node.body)
	if isinstance(node, Program):
		return _body_declares_undefined(node.body)
	if isinstance(node, CatchClause):
		return node.param.name == _UNDEFINED
	return False


def _body_declares_undefined(body: List[Stmt]) -> bool:
	# Any declaration in the function counts, block-scoped ones included.
	found = False

	def visit(node: Node) -> bool:
		nonlocal found
		if isinstance(node, FunctionDecl):
			found = found or node.name.name == _UNDEFINED
			return True
		if isinstance(node, FunctionExpr):
			return True
		if isinstance(node, VarDecl):
			found = found or any(d.target.name == _UNDEFINED for d in node.declarations)
		return found

	for stmt in body:
		walk(stmt, visit)
		if found:
			return True
	return False


def _simplify(expr: Node, shadowed: bool) -> Optional[Expr]:
	"""Replacement for `expr`, or None when it stays."""
	if not isinstance(expr, Unary) or not isinstance(expr.operand, NumberLiteral):
		return None
	value = expr.operand.value
	if expr.op == "!" and value in (0, 1):
		return Atom(loc=expr.loc, value="true" if value == 0 else "false")
	if expr.op == "void" and value == 0 and not shadowed:
		return SymbolRef(loc=expr.loc, name="undefined")
	return None


def _simplify_children(node: Node, shadowed: bool) -> None:
	for f in fields(node):
		value = getattr(node, f.name)
		if isinstance(value, Node):
			replacement = _simplify(value, shadowed)
			if replacement is not None:
				setattr(node, f.name, replacement)
		elif isinstance(value, list):
			for index, item in enumerate(value):
				if isinstance(item, Node):
					replacement = _simplify(item, shadowed)
					if replacement is not None:
						value[index] = replacement


# Statements -----------------------------------------------------------------


def _negate(expr: Expr) -> Expr:
	if isinstance(expr, Unary) and expr.op == "!":
		return expr.operand
	return Unary(loc=expr.loc, op="!", operand=expr)


def _expand(stmt: Stmt) -> Optional[List[Stmt]]:
	"""Statements replacing `stmt`, or None when it stays."""
	if isinstance(stmt, ExprStmt):
		expr = stmt.expr
		if isinstance(expr, Sequence):
			return [ExprStmt(loc=e.loc, expr=e) for e in expr.exprs]
		if isinstance(expr, Binary) and expr.op in ("&&", "||"):
			test = expr.left if expr.op == "&&" else _negate(expr.left)
			body = Block(loc=expr.right.loc, body=[ExprStmt(loc=expr.right.loc, expr=expr.right)])
			return [If(loc=stmt.loc, test=test, consequent=body)]
		if isinstance(expr, Conditional):
			consequent = Block(loc=expr.consequent.loc, body=[ExprStmt(loc=expr.consequent.loc, expr=expr.consequent)])
			alternate = Block(loc=expr.alternate.loc, body=[ExprStmt(loc=expr.alternate.loc, expr=expr.alternate)])
			return [If(loc=stmt.loc, test=expr.test, consequent=consequent, alternate=alternate)]
		return None
	if isinstance(stmt, (Return, Throw)) and isinstance(stmt.value, Sequence):
		exprs = stmt.value.exprs
		leading: List[Stmt] = [ExprStmt(loc=e.loc, expr=e) for e in exprs[:-1]]
		return leading + [type(stmt)(loc=stmt.loc, value=exprs[-1])]
	return None


def _normalize_statements(stmts: List[Stmt]) -> List[Stmt]:
	out: List[Stmt] = []
	pending = list(reversed(stmts))
	while pending:
		stmt = pending.pop()
		replacement = _expand(stmt)
		if replacement is None:
			out.append(stmt)
		else:
			pending.extend(reversed(replacement))
	return out


def _as_block(stmt: Stmt) -> Block:
	if isinstance(stmt, Block):
		return stmt
	if isinstance(stmt, Empty):
		return Block(loc=stmt.loc, body=[])
	return Block(loc=stmt.loc, body=[stmt])


__all__ = ["decompress"]
