# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import os
import stat
import sys
from pathlib import Path

import pytest

from sold.errors import IOFailure
from sold.keys import Keypair
from sold.linker import AssembleOptions, AssemblyInput, ContractState, TvmLinker
from sold.tests.fakes import _write_file

pytestmark = pytest.mark.skipif(sys.platform == "win32", reason="uses a POSIX shell script as the linker")

FAKE_LINKER = """#!/bin/sh
echo "$@" >> "{log}"
if [ "$1" = "init" ]; then
	printf ' patched' >> "$2"
	exit 0
fi
out=""
dbg=""
while [ $# -gt 0 ]; do
	case "$1" in
		-o) out="$2"; shift ;;
		--debug-map) dbg="$2"; shift ;;
	esac
	shift
done
printf 'TVC' > "$out"
printf '{{"map": {{}}}}' > "$dbg"
"""


INPUT_ECHO_LINKER = """#!/bin/sh
main="$2"
libs=""
dbg=""
while [ $# -gt 0 ]; do
	case "$1" in
		--lib) libs="$libs $2"; shift ;;
		-o) printf TVC > "$2"; shift ;;
		--debug-map) dbg="$2"; shift ;;
	esac
	shift
done
printf '{{"main": "%s", "libs": "%s"}}' "$main" "$libs" > "$dbg"
"""


def _linker(tmp_path: Path, body: str) -> tuple[TvmLinker, Path]:
	log = tmp_path / "linker.log"
	script = _write_file(tmp_path / "tvm_linker", body.format(log=log))
	script.chmod(script.stat().st_mode | stat.S_IXUSR)
	return TvmLinker(str(script)), log


def test_missing_executable_is_reported() -> None:
	with pytest.raises(IOFailure) as exc:
		TvmLinker(None)
	assert "TVM_LINKER_BIN" in exc.value.message


def test_assemble_runs_compile(tmp_path: Path) -> None:
	linker, log = _linker(tmp_path, FAKE_LINKER)
	opts = AssembleOptions(
		output_path=tmp_path / "c.tvc",
		abi_path=tmp_path / "c.abi.json",
		keypair=Keypair.from_seed(bytes(32)),
		silent=True,
	)
	dbg = linker.assemble(
		[AssemblyInput(name="stdlib_sol.tvm", text="lib"), AssemblyInput(name="out/c.code", text="code")],
		"{}",
		opts,
	)
	assert dbg == {"map": {}}
	assert (tmp_path / "c.tvc").read_bytes() == b"TVC"
	args = log.read_text(encoding="utf-8").split()
	assert args[0] == "compile"
	assert args[1].endswith(os.sep + "0-c.code")
	assert "--lib" in args
	assert args[args.index("--abi-json") + 1] == str(tmp_path / "c.abi.json")
	assert "--setkey" in args
	assert args[-1] == "--silent"


def test_update_data_runs_init(tmp_path: Path) -> None:
	linker, log = _linker(tmp_path, FAKE_LINKER)
	state = linker.update_data('{"fields": []}', '{"a":1}', ContractState(boc=b"TVC"))
	assert linker.serialize_state(state) == b"TVC patched"
	assert log.read_text(encoding="utf-8").startswith("init ")


def test_failing_linker_surfaces_its_output(tmp_path: Path) -> None:
	linker, _ = _linker(tmp_path, "#!/bin/sh\necho boom >&2\nexit 3\n")
	with pytest.raises(IOFailure) as exc:
		linker.assemble(
			[AssemblyInput(name="c.code", text="code")],
			"{}",
			AssembleOptions(output_path=tmp_path / "c.tvc", abi_path=tmp_path / "c.abi.json"),
		)
	assert exc.value.message == "tvm_linker failed: boom"


def test_inputs_on_disk_are_passed_by_path(tmp_path: Path) -> None:
	linker, _ = _linker(tmp_path, INPUT_ECHO_LINKER)
	stdlib = _write_file(tmp_path / "stdlib_sol.tvm", "lib")
	code = _write_file(tmp_path / "out" / "c.code", "code")
	inputs = [
		AssemblyInput(name="stdlib_sol.tvm", text="lib", path=str(stdlib)),
		AssemblyInput(name="out/c.code", text="code", path=str(code)),
	]
	opts = AssembleOptions(output_path=tmp_path / "c.tvc", abi_path=tmp_path / "c.abi.json")
	first = linker.assemble(inputs, "{}", opts)
	second = linker.assemble(inputs, "{}", opts)
	assert first == second
	assert first == {"main": str(code), "libs": f" {stdlib}"}
