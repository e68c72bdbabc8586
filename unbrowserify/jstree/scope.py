# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Scope resolution for the JavaScript tree.

After `resolve_scopes(program)` every `SymbolDef` and `SymbolRef` carries the
`Binding` of the variable it names. Later passes compare bindings by identity
(to decide whether a call's callee is the module's `require` parameter) and key
rename tables on them.

Scoping rules (ES5 plus `let`/`const`):
- `var` declarations and function declarations are hoisted to the enclosing
  function (or the program);
- a named function expression binds its own name in a scope between the
  enclosing scope and the function's own scope;
- `catch (e)` binds `e` in a scope of its own;
- `let`/`const` bind in the enclosing block, or the `for` head they appear in.

References that resolve nowhere bind to one implicit global binding per name.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from .ast import (
	Binding,
	Block,
	CatchClause,
	Expr,
	For,
	ForIn,
	FunctionDecl,
	FunctionExpr,
	Node,
	Program,
	Stmt,
	Switch,
	SymbolDef,
	SymbolRef,
	Try,
	VarDecl,
	walk,
)


class Scope:
	"""One lexical scope: toplevel, function, lambda (named function expression), catch or block."""

	def __init__(self, kind: str, parent: Optional["Scope"] = None) -> None:
		self.kind = kind
		self.parent = parent
		self.bindings: Dict[str, Binding] = {}

	def declare(self, name: str, kind: str) -> Binding:
		existing = self.bindings.get(name)
		if existing is not None:
			return existing
		binding = Binding(name=name, kind=kind, scope=self)
		self.bindings[name] = binding
		return binding

	def lookup(self, name: str) -> Optional[Binding]:
		scope: Optional[Scope] = self
		while scope is not None:
			binding = scope.bindings.get(name)
			if binding is not None:
				return binding
			scope = scope.parent
		return None

	def function_scope(self) -> "Scope":
		scope = self
		while scope.kind not in ("function", "toplevel") and scope.parent is not None:
			scope = scope.parent
		return scope

	def __repr__(self) -> str:
		return f"Scope({self.kind}, {sorted(self.bindings)})"


def resolve_scopes(program: Program) -> Program:
	"""Bind every symbol occurrence in `program` (in place) and return it."""
	_Resolver().resolve(program)
	return program


class _Resolver:
	def __init__(self) -> None:
		self.toplevel = Scope("toplevel")
		self.globals: Dict[str, Binding] = {}

	def resolve(self, program: Program) -> None:
		self._hoist(program.body, self.toplevel)
		self._declare_lexical(program.body, self.toplevel)
		for stmt in program.body:
			self._visit(stmt, self.toplevel)

	# Declarations -----------------------------------------------------------

	def _hoist(self, body: List[Stmt], scope: Scope) -> None:
		"""Declare the `var`s and function declarations of a function body in `scope`."""

		def visit(node: Node) -> bool:
			if isinstance(node, FunctionDecl):
				node.name.binding = scope.declare(node.name.name, "function")
				return True
			if isinstance(node, Expr):
				# Expressions hold no declarations; function expressions open their own scope.
				return True
			if isinstance(node, VarDecl) and node.kind == "var":
				for decl in node.declarations:
					decl.target.binding = scope.declare(decl.target.name, "var")
				return True
			return False

		for stmt in body:
			walk(stmt, visit)

	def _declare_lexical(self, body: List[Stmt], scope: Scope) -> None:
		for stmt in body:
			if isinstance(stmt, VarDecl) and stmt.kind != "var":
				self._declare_decl(stmt, scope)

	def _declare_decl(self, decl: VarDecl, scope: Scope) -> None:
		for item in decl.declarations:
			item.target.binding = scope.declare(item.target.name, decl.kind)

	# References -------------------------------------------------------------

	def _reference(self, name: str, scope: Scope) -> Binding:
		binding = scope.lookup(name)
		if binding is not None:
			return binding
		binding = self.globals.get(name)
		if binding is None:
			binding = Binding(name=name, kind="global", scope=self.toplevel)
			self.globals[name] = binding
		return binding

	# Traversal --------------------------------------------------------------

	def _visit(self, node: Node, scope: Scope) -> None:
		def visit(current: Node) -> bool:
			if isinstance(current, SymbolRef):
				current.binding = self._reference(current.name, scope)
				return True
			if isinstance(current, SymbolDef):
				binding = scope.lookup(current.name)
				if binding is None:
					binding = scope.function_scope().declare(current.name, "var")
				current.binding = binding
				return True
			if isinstance(current, (FunctionExpr, FunctionDecl)):
				self._function(current, scope)
				return True
			if isinstance(current, Block):
				self._visit_body(current.body, scope)
				return True
			if isinstance(current, Try):
				self._visit_body(current.block, scope)
				if current.handler is not None:
					self._catch(current.handler, scope)
				if current.finalizer is not None:
					self._visit_body(current.finalizer, scope)
				return True
			if isinstance(current, Switch):
				self._switch(current, scope)
				return True
			if isinstance(current, For) and _is_lexical(current.init):
				self._for_head(current, current.init, scope)
				return True
			if isinstance(current, ForIn) and _is_lexical(current.left):
				self._for_head(current, current.left, scope)
				return True
			return False

		walk(node, visit)

	def _visit_body(self, body: List[Stmt], scope: Scope) -> None:
		if any(_is_lexical(stmt) for stmt in body):
			scope = Scope("block", scope)
			self._declare_lexical(body, scope)
		for stmt in body:
			self._visit(stmt, scope)

	def _function(self, fn, scope: Scope) -> None:
		outer = scope
		if isinstance(fn, FunctionExpr) and fn.name is not None:
			outer = Scope("lambda", scope)
			fn.name.binding = outer.declare(fn.name.name, "function")
		elif isinstance(fn, FunctionDecl) and fn.name.binding is None:
			fn.name.binding = scope.function_scope().declare(fn.name.name, "function")
		inner = Scope("function", outer)
		for param in fn.params:
			param.binding = inner.declare(param.name, "param")
		self._hoist(fn.body, inner)
		self._declare_lexical(fn.body, inner)
		for stmt in fn.body:
			self._visit(stmt, inner)

	def _catch(self, clause: CatchClause, scope: Scope) -> None:
		inner = Scope("catch", scope)
		clause.param.binding = inner.declare(clause.param.name, "catch")
		self._visit_body(clause.body, inner)

	def _switch(self, node: Switch, scope: Scope) -> None:
		self._visit(node.discriminant, scope)
		inner = scope
		if any(_is_lexical(stmt) for case in node.cases for stmt in case.body):
			inner = Scope("block", scope)
			for case in node.cases:
				self._declare_lexical(case.body, inner)
		for case in node.cases:
			if case.test is not None:
				self._visit(case.test, inner)
			for stmt in case.body:
				self._visit(stmt, inner)

	def _for_head(self, node, decl: VarDecl, scope: Scope) -> None:
		inner = Scope("block", scope)
		self._declare_decl(decl, inner)
		if isinstance(node, For):
			parts = [decl, node.test, node.update, node.body]
		else:
			parts = [decl, node.right, node.body]
		for part in parts:
			if part is not None:
				self._visit(part, inner)


def _is_lexical(node: Optional[Node]) -> bool:
	return isinstance(node, VarDecl) and node.kind != "var"


__all__ = ["Scope", "resolve_scopes"]
