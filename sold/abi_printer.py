# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Canonical text form of a contract ABI (`<prefix>.abi.json`).

The output is byte-for-byte stable for equal inputs:
- top-level sections in a fixed order, unknown sections after them sorted by key,
- one function/event per block, one parameter per line,
- parameters rendered compactly with `name`, `type`, `components` first and
  the remaining keys sorted,
- tab indentation, UTF-8, trailing newline.

Array element order is kept as the compiler emitted it.
"""

from __future__ import annotations

import json
from typing import Any, Iterable, List, Mapping, Sequence

from sold.errors import ProtocolViolation

TOP_LEVEL_ORDER = ("ABI version", "version", "header", "functions", "getters", "events", "data", "fields")
ENTRY_ORDER = ("name", "id", "inputs", "outputs")
PARAM_ORDER = ("name", "type", "components")
ENTRY_SECTIONS = frozenset({"functions", "getters", "events"})
PARAM_SECTIONS = frozenset({"data", "fields"})
PARAM_LISTS = frozenset({"inputs", "outputs"})


def ordered_keys(obj: Mapping[str, Any], preferred: Sequence[str]) -> List[str]:
	keys = [k for k in preferred if k in obj]
	keys.extend(sorted(k for k in obj if k not in preferred))
	return keys


def _scalar(value: Any) -> str:
	return json.dumps(value, ensure_ascii=False)


def compact(value: Any) -> str:
	if isinstance(value, dict):
		items = (f"{_scalar(k)}:{compact(value[k])}" for k in ordered_keys(value, PARAM_ORDER))
		return "{" + ",".join(items) + "}"
	if isinstance(value, list):
		return "[" + ",".join(compact(v) for v in value) + "]"
	return _scalar(value)


def _block(opening: str, items: Sequence[List[str]], closing: str, indent: int) -> List[str]:
	"""Join pre-rendered multi-line items with commas between them."""
	pad = "\t" * indent
	lines = [opening]
	for i, item in enumerate(items):
		rendered = list(item)
		if i + 1 < len(items):
			rendered[-1] += ","
		lines.extend(rendered)
	lines.append(pad + closing)
	return lines


def _param_list(params: Any, indent: int) -> List[str]:
	if not isinstance(params, list):
		return [compact(params)]
	pad = "\t" * (indent + 1)
	return _block("[", [[pad + compact(p)] for p in params], "]", indent)


def _entry(entry: Any, indent: int) -> List[str]:
	pad = "\t" * indent
	if not isinstance(entry, dict):
		return [pad + compact(entry)]
	inner = "\t" * (indent + 1)
	fields: List[List[str]] = []
	for key in ordered_keys(entry, ENTRY_ORDER):
		if key in PARAM_LISTS:
			lines = _param_list(entry[key], indent + 1)
		else:
			lines = [compact(entry[key])]
		lines[0] = f"{inner}{_scalar(key)}: {lines[0]}"
		fields.append(lines)
	return _block(pad + "{", fields, "}", indent)


def _section(key: str, value: Any) -> List[str]:
	if key in ENTRY_SECTIONS and isinstance(value, list):
		return _block("[", [_entry(e, 2) for e in value], "]", 1)
	if key in PARAM_SECTIONS:
		return _param_list(value, 1)
	return [compact(value)]


def canonical_abi_json(abi: Any) -> str:
	"""Render `abi` in canonical form (see module docstring)."""
	if not isinstance(abi, dict):
		raise ProtocolViolation()
	sections: List[List[str]] = []
	for key in ordered_keys(abi, TOP_LEVEL_ORDER):
		lines = _section(key, abi[key])
		lines[0] = f"\t{_scalar(key)}: {lines[0]}"
		sections.append(lines)
	return "\n".join(_block("{", sections, "}", 0)) + "\n"


__all__ = ["canonical_abi_json", "compact", "ordered_keys"]
