# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compilation request document sent to the compiler (standard-JSON style).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class BuildRequest:
	"""
	Immutable snapshot of what one compiler invocation should produce.

	`input_path` is the canonical path of the main source; it doubles as the
	source key in the request and in the result's `contracts`/`sources` maps.
	"""

	input_path: str
	contract: Optional[str] = None
	include_paths: Tuple[str, ...] = field(default_factory=tuple)
	function_ids: bool = False
	abi_only: bool = False
	ast_only: bool = False
	refresh_remote: bool = False

	@property
	def wants_assembly(self) -> bool:
		"""False when only the interface or the AST is wanted."""
		return not (self.abi_only or self.ast_only)


def output_selection(request: BuildRequest) -> List[str]:
	selection = ["abi"]
	if request.wants_assembly:
		selection.append("assembly")
	if request.function_ids:
		selection.append("showFunctionIds")
	return selection


def build_compile_input(request: BuildRequest) -> Dict[str, Any]:
	"""Build the request document for `request`. Values are passed through verbatim."""
	source = request.input_path
	return {
		"language": "Solidity",
		"settings": {
			"includePaths": list(request.include_paths),
			"forceRemoteUpdate": request.refresh_remote,
			"mainContract": request.contract or "",
			"outputSelection": {
				source: {
					"*": output_selection(request),
					"": ["ast"],
				},
			},
		},
		"sources": {
			source: {"urls": [source]},
		},
	}


__all__ = ["BuildRequest", "build_compile_input", "output_selection"]
