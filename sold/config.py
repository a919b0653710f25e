# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Locations of the external tools, taken from the environment.

  SOLD_LIBSOLC    compiler shared library (default: loader lookup of "solc")
  TVM_LINKER_BIN  downstream assembler executable (default: `tvm_linker` on PATH)
  SOLD_STDLIB     default standard library module (default: stdlib_sol.tvm next
                  to the compiler library or in its sibling lib/ directory)
"""

from __future__ import annotations

import ctypes.util
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

STDLIB_NAME = "stdlib_sol.tvm"


@dataclass(frozen=True)
class ToolPaths:
	libsolc: Optional[str]
	linker: Optional[str]
	stdlib: Optional[Path]


def _default_stdlib(libsolc: Optional[str]) -> Optional[Path]:
	if not libsolc:
		return None
	lib_dir = Path(libsolc).resolve().parent
	for candidate in (lib_dir / STDLIB_NAME, lib_dir.parent / "lib" / STDLIB_NAME):
		if candidate.is_file():
			return candidate
	return None


def tool_paths(environ: Optional[Mapping[str, str]] = None) -> ToolPaths:
	env = os.environ if environ is None else environ
	libsolc = env.get("SOLD_LIBSOLC") or ctypes.util.find_library("solc")
	linker = env.get("TVM_LINKER_BIN") or shutil.which("tvm_linker")
	stdlib_env = env.get("SOLD_STDLIB")
	stdlib = Path(stdlib_env) if stdlib_env else _default_stdlib(libsolc)
	return ToolPaths(libsolc=libsolc, linker=linker, stdlib=stdlib)


__all__ = ["STDLIB_NAME", "ToolPaths", "tool_paths"]
