# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler invocation.

The compiler is an external library consumed through a request/response
protocol: we hand it a JSON request plus a read capability, it pulls every
source it needs through that capability and answers with a JSON result.

`SourceReader` is the read capability. Reading a file through it records the
file in the `PositionIndex`, so diagnostics that point into it can later be
anchored at a line.
"""

from __future__ import annotations

import ctypes
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional, Protocol

import structlog

from sold.errors import IOFailure, ProtocolViolation
from sold.positions import PositionIndex

logger = structlog.get_logger(__name__)

SOURCE_KIND = "source"


class SourceReader:
	"""Resolves compiler read requests to file contents."""

	def __init__(self, index: PositionIndex) -> None:
		self.index = index

	def read(self, kind: str, path: str) -> bytes:
		if kind != SOURCE_KIND:
			raise IOFailure(message=f'Unknown kind "{kind}"')
		try:
			content = Path(path).read_bytes()
		except OSError as err:
			raise IOFailure(message=f"Failed to open file: {err}") from err
		self.index.record(path, content)
		return content


class Compiler(Protocol):
	def compile(self, request: str, reader: SourceReader) -> str:
		...

	def version(self) -> str:
		...


def run_compiler(compiler: Compiler, request: Dict[str, Any], reader: SourceReader) -> Dict[str, Any]:
	"""Send `request` to `compiler` and decode its JSON result."""
	logger.debug("compiler_invoked", sources=list(request.get("sources", {})))
	output = compiler.compile(json.dumps(request), reader)
	try:
		result = json.loads(output)
	except json.JSONDecodeError:
		raise ProtocolViolation() from None
	if not isinstance(result, dict):
		raise ProtocolViolation()
	return result


# void (*)(void* context, const char* kind, const char* data, char** o_contents, char** o_error)
READ_CALLBACK = ctypes.CFUNCTYPE(
	None,
	ctypes.c_void_p,
	ctypes.c_char_p,
	ctypes.c_char_p,
	ctypes.POINTER(ctypes.c_void_p),
	ctypes.POINTER(ctypes.c_void_p),
)


class LibSolc:
	"""`Compiler` backed by the compiler shared library, loaded with ctypes."""

	def __init__(self, path: str) -> None:
		try:
			lib = ctypes.CDLL(path)
		except OSError as err:
			raise IOFailure(message=f"Failed to load compiler library {path}: {err}") from err
		lib.solidity_compile.argtypes = [ctypes.c_char_p, READ_CALLBACK, ctypes.c_void_p]
		lib.solidity_compile.restype = ctypes.c_void_p
		lib.solidity_alloc.argtypes = [ctypes.c_uint64]
		lib.solidity_alloc.restype = ctypes.c_void_p
		lib.solidity_version.argtypes = []
		lib.solidity_version.restype = ctypes.c_char_p
		self.path = path
		self._lib = lib

	def _alloc(self, data: bytes) -> int:
		"""Copy `data` into library-owned memory, NUL-terminated."""
		ptr = self._lib.solidity_alloc(len(data) + 1)
		ctypes.memmove(ptr, data, len(data))
		ctypes.memset(ptr + len(data), 0, 1)
		return ptr

	def _callback(self, reader: SourceReader) -> Any:
		def read_file(_context: Any, kind: bytes, data: bytes, o_contents: Any, o_error: Any) -> None:
			# Exceptions cannot cross the C boundary; report them through o_error.
			try:
				content = reader.read(kind.decode("utf-8", "replace"), os.fsdecode(data))
			except IOFailure as err:
				o_error[0] = self._alloc(err.message.encode("utf-8"))
				return
			o_contents[0] = self._alloc(content)

		return READ_CALLBACK(read_file)

	def compile(self, request: str, reader: SourceReader) -> str:
		callback = self._callback(reader)
		ptr = self._lib.solidity_compile(request.encode("utf-8"), callback, None)
		return ctypes.string_at(ptr).decode("utf-8", "replace")

	def version(self) -> str:
		return self._lib.solidity_version().decode("utf-8", "replace")


def load_compiler(path: Optional[str]) -> LibSolc:
	if not path:
		raise IOFailure(message="Compiler library not found. Set SOLD_LIBSOLC to the path of libsolc")
	return LibSolc(path)


__all__ = ["Compiler", "LibSolc", "READ_CALLBACK", "SOURCE_KIND", "SourceReader", "load_compiler", "run_compiler"]
