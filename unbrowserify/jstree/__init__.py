# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""JavaScript program trees: parse, resolve scopes, print."""

from . import ast
from .parser import parse_program
from .printer import PrintOptions, print_program
from .scope import resolve_scopes

__all__ = ["ast", "parse_program", "resolve_scopes", "PrintOptions", "print_program"]
