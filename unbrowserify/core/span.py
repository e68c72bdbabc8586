# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Lightweight source span representation used by diagnostics.

A Span carries best-effort file/line/column info. Parser nodes keep their own
`Located` record; `Span.from_loc` lifts one into a file-qualified span.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class Span:
	"""Represents a source span (best-effort file/line/column plus raw parser loc)."""

	file: Optional[str] = None
	line: Optional[int] = None
	column: Optional[int] = None
	raw: Any = None

	@classmethod
	def from_loc(cls, loc: Any, file: Optional[str] = None) -> "Span":
		"""
		Construct a Span from a parser location object.

		If `loc` is already a Span it is returned unchanged (with `file` filled
		in when it was missing).
		"""
		if loc is None:
			return cls(file=file)
		if isinstance(loc, cls):
			if loc.file is None and file is not None:
				return cls(file=file, line=loc.line, column=loc.column, raw=loc.raw)
			return loc
		line = getattr(loc, "line", None)
		column = getattr(loc, "column", None)
		if not line:
			# Synthesized nodes carry line 0.
			line = column = None
		return cls(file=file or getattr(loc, "file", None), line=line, column=column, raw=loc)

	def with_file(self, file: Optional[str]) -> "Span":
		if self.file is not None or file is None:
			return self
		return Span(file=file, line=self.line, column=self.column, raw=self.raw)

	def format_location(self) -> str:
		line = self.line if self.line is not None else "?"
		column = self.column if self.column is not None else "?"
		return f"{line}:{column}"


__all__ = ["Span"]
