# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
JavaScript parser: lark LALR parse plus lark tree -> `jstree.ast` lowering.

Automatic semicolon insertion is split in two places:
- `SemicolonInserter` (postlexer) covers the restricted productions, where a
  line break terminates the statement even though the parse could continue
  (`return`/`break`/`continue`/`throw` followed by a newline, `++`/`--` that
  start a line).
- `_recover` (LALR `on_error`) covers the general rule: when a token cannot be
  shifted and it follows a line break, is `}` or is the end of input, feed a
  `;` and retry the token.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import List, Optional, Tuple

from lark import Lark, Token, Tree
from lark.exceptions import UnexpectedCharacters, UnexpectedEOF, UnexpectedInput, UnexpectedToken

from ..core.errors import JsParseError
from ..core.span import Span
from .ast import (
	NO_LOC,
	ArrayLiteral,
	Assign,
	Atom,
	Binary,
	Block,
	Break,
	Call,
	CatchClause,
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
	Located,
	Member,
	New,
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
	SwitchCase,
	SymbolDef,
	SymbolRef,
	This,
	Throw,
	Try,
	Unary,
	Update,
	VarDecl,
	VarDeclarator,
	While,
)

_GRAMMAR_PATH = Path(__file__).with_name("grammar.lark")
_GRAMMAR_SRC = _GRAMMAR_PATH.read_text(encoding="utf-8")

# Terminal names of reserved words. A keyword that was lexed where only a name
# fits is retyped once a semicolon has been inserted in front of it.
_KEYWORDS = {
	"var": "VAR",
	"let": "LET",
	"const": "CONST",
	"if": "_IF",
	"else": "_ELSE",
	"do": "_DO",
	"while": "_WHILE",
	"for": "_FOR",
	"continue": "_CONTINUE",
	"break": "_BREAK",
	"return": "_RETURN",
	"throw": "_THROW",
	"switch": "_SWITCH",
	"case": "_CASE",
	"default": "_DEFAULT",
	"try": "_TRY",
	"catch": "_CATCH",
	"finally": "_FINALLY",
	"debugger": "_DEBUGGER",
	"new": "_NEW",
	"function": "_FUNCTION_DECL",
	"typeof": "TYPEOF",
	"void": "VOID",
	"delete": "DELETE",
	"this": "THIS",
	"true": "TRUE",
	"false": "FALSE",
	"null": "NULL",
}

# Expression/statement flavors of the same text.
_RETAG = {
	"_LBRACE": "_BLOCK_OPEN",
	"_BLOCK_OPEN": "_LBRACE",
	"_FUNCTION": "_FUNCTION_DECL",
	"_FUNCTION_DECL": "_FUNCTION",
}


def _at_statement_start(token: Token) -> Token:
	"""Retype a token lexed in expression context as if it started a statement."""
	if token.type == "NAME" and token.value in _KEYWORDS:
		return Token.new_borrow_pos(_KEYWORDS[token.value], token.value, token)
	if token.type in ("_LBRACE", "_FUNCTION"):
		return Token.new_borrow_pos(_RETAG[token.type], token.value, token)
	return token


class SemicolonInserter:
	"""
	Postlexer for the restricted productions of automatic semicolon insertion.

	State persists across `process` calls: lark restarts the token stream after
	every `on_error` recovery, so the state is reset per parse by
	`parse_program`, not per stream.
	"""

	always_accept = ()

	# A line break after these ends the statement.
	RESTRICTED = {"_RETURN", "_BREAK", "_CONTINUE", "_THROW"}

	# Tokens that can end an expression; `++`/`--` on the next line after one of
	# these is a prefix operator of a new statement.
	EXPR_END = {
		"NAME",
		"NUMBER",
		"STRING",
		"REGEX",
		"THIS",
		"TRUE",
		"FALSE",
		"NULL",
		"_RPAR",
		"_RSQB",
		"_RBRACE",
		"INCDEC",
	}

	def __init__(self) -> None:
		self._reset()

	def _reset(self) -> None:
		self.last: Optional[Token] = None
		self.before_last: Optional[Token] = None

	def observe(self, token: Token) -> None:
		if self.last is not None and self.last.start_pos == token.start_pos:
			return
		self.before_last = self.last
		self.last = token

	def previous_of(self, token: Token) -> Optional[Token]:
		"""The real token preceding `token` (which may or may not be observed yet)."""
		if self.last is not None and self.last.start_pos == token.start_pos:
			return self.before_last
		return self.last

	def process(self, stream):
		for token in stream:
			prev = self.last
			if prev is not None and _newline_between(prev, token):
				if prev.type in self.RESTRICTED and token.type != "_SEMI":
					yield Token.new_borrow_pos("_SEMI", ";", token)
					token = _at_statement_start(token)
				elif token.type == "INCDEC" and prev.type in self.EXPR_END:
					yield Token.new_borrow_pos("_SEMI", ";", token)
			self.observe(token)
			yield token


def _newline_between(prev: Token, token: Token) -> bool:
	end_line = prev.end_line if prev.end_line is not None else prev.line
	return token.line is not None and end_line is not None and token.line > end_line


_POSTLEX = SemicolonInserter()

_PARSER = Lark(
	_GRAMMAR_SRC,
	parser="lalr",
	lexer="contextual",
	start="start",
	propagate_positions=True,
	maybe_placeholders=False,
	postlex=_POSTLEX,
)


def _recover(err: UnexpectedInput) -> bool:
	if not isinstance(err, UnexpectedToken):
		return False
	ip = err.interactive_parser
	tok = err.token
	try:
		choices = ip.choices()
		retag = _RETAG.get(tok.type)
		if retag is not None and retag in choices:
			tok = Token.new_borrow_pos(retag, tok.value, tok)
		else:
			if tok.type in ("$END", "_RBRACE"):
				insert = True
			else:
				prev = _POSTLEX.previous_of(tok)
				insert = prev is not None and _newline_between(prev, tok)
			if not insert or "_SEMI" not in choices:
				return False
			ip.feed_token(Token.new_borrow_pos("_SEMI", ";", tok))
			tok = _at_statement_start(tok)
		if tok.type != "$END":
			_POSTLEX.observe(tok)
			ip.feed_token(tok)
	except UnexpectedToken:
		return False
	return True


def parse_program(text: str, file: Optional[str] = None) -> Program:
	"""
	Parse JavaScript source into a `Program`.

	Raises `JsParseError` (with file, line and column) on syntax errors.
	"""
	if text.startswith("#!"):
		text = "//" + text[2:]
	_POSTLEX._reset()
	try:
		tree = _PARSER.parse(text, on_error=_recover)
	except UnexpectedInput as err:
		line = getattr(err, "line", None)
		column = getattr(err, "column", None)
		# lark reports "?" when the offending token has no position.
		if not isinstance(line, int) or not isinstance(column, int):
			line = column = None
		span = Span(file=file, line=line, column=column, raw=err)
		raise JsParseError(_describe(err), span) from err
	finally:
		_POSTLEX._reset()
	return Program(loc=Located(line=1, column=1), body=_build_statements(tree.children))


def _describe(err: UnexpectedInput) -> str:
	if isinstance(err, UnexpectedToken):
		if err.token.type == "$END":
			return "unexpected end of input"
		return f"unexpected token {err.token.value!r}"
	if isinstance(err, UnexpectedCharacters):
		return f"unexpected character {err.char!r}"
	if isinstance(err, UnexpectedEOF):
		return "unexpected end of input"
	return str(err).splitlines()[0]


# Statements -----------------------------------------------------------------


def _build_statements(children) -> List[Stmt]:
	return [_build_stmt(child) for child in children if isinstance(child, Tree)]


def _build_stmt(tree: Tree) -> Stmt:
	kind = _name(tree)
	loc = _loc(tree)
	kids = tree.children
	if kind == "expr_stmt":
		return ExprStmt(loc=loc, expr=_build_expr(kids[0]))
	if kind == "var_stmt":
		return _build_var_decls(kids[0])
	if kind == "block":
		return Block(loc=loc, body=_build_statements(kids))
	if kind == "empty_stmt":
		return Empty(loc=loc)
	if kind == "if_stmt":
		alternate = _build_stmt(kids[2]) if len(kids) > 2 else None
		return If(loc=loc, test=_build_expr(kids[0]), consequent=_build_stmt(kids[1]), alternate=alternate)
	if kind == "do_stmt":
		return DoWhile(loc=loc, body=_build_stmt(kids[0]), test=_build_expr(kids[1]))
	if kind == "while_stmt":
		return While(loc=loc, test=_build_expr(kids[0]), body=_build_stmt(kids[1]))
	if kind == "for_stmt":
		return _build_for(tree)
	if kind == "for_in_stmt":
		return _build_for_in(tree)
	if kind == "continue_stmt":
		return Continue(loc=loc, label=kids[0].value if kids else None)
	if kind == "break_stmt":
		return Break(loc=loc, label=kids[0].value if kids else None)
	if kind == "return_stmt":
		return Return(loc=loc, value=_build_expr(kids[0]) if kids else None)
	if kind == "throw_stmt":
		return Throw(loc=loc, value=_build_expr(kids[0]))
	if kind == "labeled_stmt":
		return Labeled(loc=loc, label=kids[0].value, body=_build_stmt(kids[1]))
	if kind == "debugger_stmt":
		return Debugger(loc=loc)
	if kind == "switch_stmt":
		return _build_switch(tree)
	if kind == "try_stmt":
		return _build_try(tree)
	if kind == "function_decl":
		name, params, body = _function_parts(tree)
		return FunctionDecl(loc=loc, name=name, params=params, body=body)
	raise ValueError(f"Unsupported statement node: {kind}")


def _build_var_decls(tree: Tree) -> VarDecl:
	kind_token = tree.children[0]
	declarations = []
	for child in tree.children[1:]:
		name_token = child.children[0]
		init = _build_expr(child.children[1]) if len(child.children) > 1 else None
		declarations.append(
			VarDeclarator(loc=_loc(child), target=_symbol_def(name_token), init=init)
		)
	return VarDecl(loc=_loc(tree), kind=kind_token.value, declarations=declarations)


def _build_for(tree: Tree) -> For:
	init = test = update = None
	body = None
	for child in tree.children:
		kind = _name(child)
		if kind == "for_init":
			inner = child.children[0]
			init = _build_var_decls(inner) if _name(inner) == "var_decls" else _build_expr(inner)
		elif kind == "for_test":
			test = _build_expr(child.children[0])
		elif kind == "for_update":
			update = _build_expr(child.children[0])
		else:
			body = _build_stmt(child)
	return For(loc=_loc(tree), init=init, test=test, update=update, body=body)


def _build_for_in(tree: Tree) -> ForIn:
	kids = tree.children
	loc = _loc(tree)
	if isinstance(kids[0], Token) and kids[0].type in ("VAR", "LET", "CONST"):
		name_token = kids[1]
		left = VarDecl(
			loc=_loc_from_token(kids[0]),
			kind=kids[0].value,
			declarations=[VarDeclarator(loc=_loc_from_token(name_token), target=_symbol_def(name_token))],
		)
		rest = kids[3:]
	else:
		left = _build_expr(kids[0])
		rest = kids[2:]
	return ForIn(loc=loc, left=left, right=_build_expr(rest[0]), body=_build_stmt(rest[1]))


def _build_switch(tree: Tree) -> Switch:
	discriminant = _build_expr(tree.children[0])
	cases = []
	for clause in tree.children[1:]:
		if _name(clause) == "case_clause":
			test = _build_expr(clause.children[0])
			body = _build_statements(clause.children[1:])
		else:
			test = None
			body = _build_statements(clause.children)
		cases.append(SwitchCase(loc=_loc(clause), test=test, body=body))
	return Switch(loc=_loc(tree), discriminant=discriminant, cases=cases)


def _build_try(tree: Tree) -> Try:
	block = _build_statements(tree.children[0].children)
	handler = None
	finalizer = None
	for child in tree.children[1:]:
		if _name(child) == "catch_clause":
			param = _symbol_def(child.children[0])
			handler = CatchClause(loc=_loc(child), param=param, body=_build_statements(child.children[1].children))
		elif _name(child) == "finally_clause":
			finalizer = _build_statements(child.children[0].children)
	return Try(loc=_loc(tree), block=block, handler=handler, finalizer=finalizer)


def _function_parts(tree: Tree) -> Tuple[Optional[SymbolDef], List[SymbolDef], List[Stmt]]:
	name = None
	params: List[SymbolDef] = []
	body: List[Stmt] = []
	for child in tree.children:
		if isinstance(child, Token):
			name = _symbol_def(child)
		elif _name(child) == "params":
			params = [_symbol_def(tok) for tok in child.children]
		elif _name(child) == "block":
			body = _build_statements(child.children)
	return name, params, body


# Expressions ----------------------------------------------------------------


def _build_expr(node) -> Expr:
	name = _name(node)
	kids = node.children
	if name == "identifier":
		return SymbolRef(loc=_loc(node), name=kids[0].value)
	if name in _CHAIN:
		return _build_chain(node)
	if name == "binary":
		return _build_binary(node)
	if name == "string":
		return StringLiteral(loc=_loc(node), value=decode_string(kids[0].value))
	if name == "number":
		return _build_number(kids[0])
	if name == "assign":
		return Assign(loc=_loc(node), op=kids[1].value, target=_build_expr(kids[0]), value=_build_expr(kids[2]))
	if name == "function_expr":
		fn_name, params, body = _function_parts(node)
		return FunctionExpr(loc=_loc(node), name=fn_name, params=params, body=body)
	if name == "unary":
		return Unary(loc=_loc(node), op=kids[0].value, operand=_build_expr(kids[1]))
	if name == "conditional":
		return Conditional(
			loc=_loc(node),
			test=_build_expr(kids[0]),
			consequent=_build_expr(kids[1]),
			alternate=_build_expr(kids[2]),
		)
	if name == "sequence":
		return _build_sequence(node)
	if name == "atom":
		return Atom(loc=_loc(node), value=kids[0].value)
	if name == "this":
		return This(loc=_loc(node))
	if name == "object_literal":
		return ObjectLiteral(loc=_loc(node), properties=[_build_property(p) for p in kids])
	if name == "array_literal":
		return _build_array_literal(node)
	if name == "new":
		return New(loc=_loc(node), callee=_build_expr(kids[0]), args=_build_args(kids[1]))
	if name == "new_noargs":
		return New(loc=_loc(node), callee=_build_expr(kids[0]), args=[])
	if name == "prefix_update":
		return Update(loc=_loc(node), op=kids[0].value, prefix=True, operand=_build_expr(kids[1]))
	if name == "postfix_update":
		return Update(loc=_loc(node), op=kids[1].value, prefix=False, operand=_build_expr(kids[0]))
	if name == "regex":
		return _build_regex(kids[0])
	raise ValueError(f"Unsupported expression node: {name}")


_CHAIN = frozenset({"call", "member", "index"})


def _build_chain(tree: Tree) -> Expr:
	# `a.b().c()...` nests on the left like binary chains do.
	spine = []
	node = tree
	while isinstance(node, Tree) and _name(node) in _CHAIN:
		spine.append(node)
		node = node.children[0]
	result = _build_expr(node)
	for link in reversed(spine):
		kind = _name(link)
		kids = link.children
		if kind == "call":
			result = Call(loc=_loc(link), callee=result, args=_build_args(kids[1]))
		elif kind == "member":
			result = Member(loc=_loc(link), obj=result, prop=kids[1].value)
		else:
			result = Index(loc=_loc(link), obj=result, index=_build_expr(kids[1]))
	return result


def _build_args(tree: Tree) -> List[Expr]:
	return [_build_expr(child) for child in tree.children]


def _build_binary(tree: Tree) -> Expr:
	# Left-associative chains (`a + b + c + ...`) nest on the left; unwind the
	# spine iteratively so long concatenations stay off the recursion limit.
	spine = []
	node = tree
	while isinstance(node, Tree) and _name(node) == "binary":
		spine.append(node)
		node = node.children[0]
	result = _build_expr(node)
	for link in reversed(spine):
		op_token = link.children[1]
		right = _build_expr(link.children[2])
		result = Binary(loc=_loc(link), op=op_token.value, left=result, right=right)
	return result


def _build_sequence(tree: Tree) -> Sequence:
	items = []
	node = tree
	while isinstance(node, Tree) and _name(node) == "sequence":
		items.append(node.children[1])
		node = node.children[0]
	items.append(node)
	items.reverse()
	return Sequence(loc=_loc(tree), exprs=[_build_expr(item) for item in items])


def _build_array_literal(tree: Tree) -> ArrayLiteral:
	slots = list(tree.children)
	# `[a, b,]`: the trailing comma does not add an element.
	if slots and not slots[-1].children:
		slots.pop()
	elements: List[Optional[Expr]] = [
		_build_expr(slot.children[0]) if slot.children else None for slot in slots
	]
	return ArrayLiteral(loc=_loc(tree), elements=elements)


def _build_property(tree: Tree) -> Property:
	kind = _name(tree)
	loc = _loc(tree)
	kids = tree.children
	if kind == "prop_init":
		key, key_kind = _build_key(kids[0])
		return Property(loc=loc, key=key, key_kind=key_kind, value=_build_expr(kids[1]))
	key, key_kind = _build_key(kids[1])
	if kind == "prop_get":
		value = FunctionExpr(loc=loc, name=None, params=[], body=_build_statements(kids[2].children))
		return Property(loc=loc, key=key, key_kind=key_kind, value=value, kind="get")
	param = _symbol_def(kids[2])
	value = FunctionExpr(loc=loc, name=None, params=[param], body=_build_statements(kids[3].children))
	return Property(loc=loc, key=key, key_kind=key_kind, value=value, kind="set")


def _build_key(tree: Tree) -> Tuple[str, str]:
	kind = _name(tree)
	token = tree.children[0]
	if kind == "key_string":
		return decode_string(token.value), "string"
	if kind == "key_number":
		return token.value, "number"
	return token.value, "name"


def parse_number(raw: str) -> int | float:
	"""Value of a numeric literal as written in source."""
	if raw[:2] in ("0x", "0X"):
		return int(raw, 16)
	if raw.isdigit():
		return int(raw)
	return float(raw)


def _build_number(token: Token) -> NumberLiteral:
	return NumberLiteral(loc=_loc_from_token(token), value=parse_number(token.value), raw=token.value)


def _build_regex(token: Token) -> RegexLiteral:
	text = token.value
	end = text.rindex("/")
	return RegexLiteral(loc=_loc_from_token(token), pattern=text[1:end], flags=text[end + 1:])


# String literal decoding ----------------------------------------------------

_ESCAPE_RE = re.compile(
	r"\\(?:x([0-9a-fA-F]{2})|u([0-9a-fA-F]{4})|([0-7]{1,3})|(\r\n|[\n\r\u2028\u2029])|([\s\S]))"
)

_SINGLE_ESCAPES = {
	"n": "\n",
	"t": "\t",
	"r": "\r",
	"b": "\b",
	"f": "\f",
	"v": "\v",
}


def _unescape(match: re.Match) -> str:
	hex2, hex4, octal, line_cont, other = match.groups()
	if hex2 is not None:
		return chr(int(hex2, 16))
	if hex4 is not None:
		return chr(int(hex4, 16))
	if octal is not None:
		# Legacy octal escapes stop before the value would exceed 0o377.
		if len(octal) == 3 and octal[0] > "3":
			return chr(int(octal[:2], 8)) + octal[2]
		return chr(int(octal, 8))
	if line_cont is not None:
		return ""
	return _SINGLE_ESCAPES.get(other, other)


_SURROGATE_PAIR_RE = re.compile("[\ud800-\udbff][\udc00-\udfff]")


def _join_pair(match: re.Match) -> str:
	high, low = match.group()
	return chr(0x10000 + ((ord(high) - 0xD800) << 10) + (ord(low) - 0xDC00))


def decode_string(raw: str) -> str:
	"""Decode a quoted JavaScript string literal token into its value."""
	body = raw[1:-1]
	if "\\" not in body:
		return body
	value = _ESCAPE_RE.sub(_unescape, body)
	# `\uD83D\uDE00` pairs decode to one code point; lone surrogates are kept.
	return _SURROGATE_PAIR_RE.sub(_join_pair, value)


# Helpers --------------------------------------------------------------------


def _symbol_def(token: Token) -> SymbolDef:
	return SymbolDef(loc=_loc_from_token(token), name=token.value)


def _loc(tree: Tree) -> Located:
	meta = tree.meta
	if getattr(meta, "empty", True):
		return NO_LOC
	return Located(line=meta.line, column=meta.column)


def _loc_from_token(token: Token) -> Located:
	return Located(line=token.line, column=token.column)


def _name(node: Tree | Token) -> str:
	if isinstance(node, Tree):
		data = node.data
		if isinstance(data, Token):
			return data.value
		return data
	if isinstance(node, Token):
		return node.type
	return str(node)


__all__ = ["parse_program", "parse_number", "decode_string", "SemicolonInserter"]
