# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

from pathlib import Path

import pytest

from sold.compiler import LibSolc, SourceReader, load_compiler, run_compiler
from sold.errors import IOFailure, ProtocolViolation
from sold.positions import PositionIndex
from sold.tests.fakes import _write_file


class _EchoCompiler:
	def __init__(self, output: str) -> None:
		self.output = output

	def compile(self, request: str, reader: SourceReader) -> str:
		return self.output

	def version(self) -> str:
		return "echo"


def test_reading_a_source_indexes_it(tmp_path: Path) -> None:
	src = _write_file(tmp_path / "a.sol", "contract A {}\ncontract B {}\n")
	index = PositionIndex()
	content = SourceReader(index).read("source", str(src))
	assert content == src.read_bytes()
	assert index.resolve(str(src), 14) == (2, 1)


def test_reader_rejects_unknown_kinds_and_missing_files(tmp_path: Path) -> None:
	reader = SourceReader(PositionIndex())
	with pytest.raises(IOFailure) as exc:
		reader.read("smt-query", "x")
	assert exc.value.message == 'Unknown kind "smt-query"'
	with pytest.raises(IOFailure) as exc:
		reader.read("source", str(tmp_path / "missing.sol"))
	assert exc.value.message.startswith("Failed to open file:")
	assert str(tmp_path / "missing.sol") not in reader.index


def test_run_compiler_decodes_the_result() -> None:
	res = run_compiler(_EchoCompiler('{"contracts": {}}'), {"sources": {}}, SourceReader(PositionIndex()))
	assert res == {"contracts": {}}


@pytest.mark.parametrize("output", ["not json", "[1, 2]", ""])
def test_run_compiler_rejects_malformed_output(output: str) -> None:
	with pytest.raises(ProtocolViolation):
		run_compiler(_EchoCompiler(output), {"sources": {}}, SourceReader(PositionIndex()))


def test_missing_compiler_library_is_an_io_failure(tmp_path: Path) -> None:
	with pytest.raises(IOFailure) as exc:
		load_compiler(None)
	assert "SOLD_LIBSOLC" in exc.value.message
	with pytest.raises(IOFailure):
		LibSolc(str(tmp_path / "libsolc.so"))
