# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

from sold.config import STDLIB_NAME, tool_paths
from sold.tests.fakes import _write_file


def test_environment_overrides(tmp_path: Path) -> None:
	env = {
		"SOLD_LIBSOLC": str(tmp_path / "libsolc.so"),
		"TVM_LINKER_BIN": "/opt/ton/tvm_linker",
		"SOLD_STDLIB": str(tmp_path / "custom.tvm"),
	}
	tools = tool_paths(env)
	assert tools.libsolc == env["SOLD_LIBSOLC"]
	assert tools.linker == "/opt/ton/tvm_linker"
	assert tools.stdlib == tmp_path / "custom.tvm"


def test_stdlib_is_found_next_to_the_compiler_library(tmp_path: Path) -> None:
	lib = _write_file(tmp_path / "bin" / "libsolc.so", "")
	stdlib = _write_file(tmp_path / "lib" / STDLIB_NAME, ".fragment x")
	tools = tool_paths({"SOLD_LIBSOLC": str(lib), "TVM_LINKER_BIN": "tvm_linker"})
	assert tools.stdlib == stdlib.resolve()

	sibling = _write_file(tmp_path / "bin" / STDLIB_NAME, ".fragment y")
	assert tool_paths({"SOLD_LIBSOLC": str(lib), "TVM_LINKER_BIN": "x"}).stdlib == sibling.resolve()


def test_no_stdlib_without_a_compiler_library(tmp_path: Path) -> None:
	tools = tool_paths({"SOLD_LIBSOLC": str(tmp_path / "nowhere" / "libsolc.so"), "TVM_LINKER_BIN": "x"})
	assert tools.stdlib is None
