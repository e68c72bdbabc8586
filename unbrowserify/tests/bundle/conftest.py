# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

import pytest

from unbrowserify.bundle.table import ModuleEntry, ModuleTable, RequireEntry
from unbrowserify.jstree import ast as A


def make_table(entries: Iterable[Tuple[str, Dict[str, str]]], main_ids: List[str]) -> ModuleTable:
	"""Module table with empty module functions and the given require mappings."""
	built = []
	for module_id, requires in entries:
		function = A.FunctionExpr(loc=A.NO_LOC, name=None, params=[], body=[])
		built.append(
			ModuleEntry(
				module_id=module_id,
				function=function,
				requires=tuple(RequireEntry(local_name=k, target_id=v) for k, v in requires.items()),
			)
		)
	return ModuleTable(entries=tuple(built), main_ids=tuple(main_ids))


@pytest.fixture
def table_factory():
	return make_table
