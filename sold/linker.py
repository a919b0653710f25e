# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Downstream assembler: intermediate code + ABI -> binary container (`.tvc`).

The pipeline talks to the assembler through the `Assembler` protocol. Besides
assembling it exposes a load / merge / serialize trio used to patch initial
static-field data into an already produced container. `TvmLinker` implements
the protocol on top of the `tvm_linker` executable.
"""

from __future__ import annotations

import json
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, Sequence

import structlog

from sold.errors import IOFailure
from sold.keys import Keypair, store_secret

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AssemblyInput:
	"""
	One intermediate-code module fed to the assembler.

	`name` is used in its messages. `path` is the file already holding `text`,
	if any; the assembler is handed that file so its debug map stays stable.
	"""

	name: str
	text: str
	path: Optional[str] = None


@dataclass(frozen=True)
class ContractState:
	"""An encoded binary container as handled by the state trio."""

	boc: bytes


@dataclass(frozen=True)
class AssembleOptions:
	output_path: Path
	abi_path: Path
	keypair: Optional[Keypair] = None
	ctor_params: Optional[str] = None
	silent: bool = False


class Assembler(Protocol):
	def assemble(self, inputs: Sequence[AssemblyInput], abi: str, opts: AssembleOptions) -> Dict[str, Any]:
		"""Write the container to `opts.output_path` and return the debug map."""
		...

	def load_state(self, path: Path) -> ContractState:
		...

	def update_data(self, abi: str, params: str, state: ContractState) -> ContractState:
		"""Merge `params` (JSON, keyed by ABI field name) into the persisted data."""
		...

	def serialize_state(self, state: ContractState) -> bytes:
		...


def _input_file(inp: AssemblyInput, work: Path, i: int) -> str:
	"""Path handed to the linker for `inp`; text without a backing file goes to `work`."""
	if inp.path is not None:
		return inp.path
	path = work / f"{i}-{Path(inp.name).name}"
	path.write_text(inp.text, encoding="utf-8")
	return str(path)


class TvmLinker:
	"""`Assembler` that shells out to `tvm_linker`."""

	def __init__(self, executable: Optional[str]) -> None:
		if not executable:
			raise IOFailure(message="Assembler not found. Set TVM_LINKER_BIN to the path of tvm_linker")
		self.executable = executable

	def _run(self, args: List[str]) -> subprocess.CompletedProcess:
		cmd = [self.executable, *args]
		logger.debug("linker_invoked", cmd=cmd)
		try:
			res = subprocess.run(cmd, capture_output=True, text=True)
		except OSError as err:
			raise IOFailure(message=f"Failed to run {self.executable}: {err}") from err
		if res.returncode != 0:
			raise IOFailure(message=f"tvm_linker failed: {(res.stderr or res.stdout).strip()}")
		return res

	def assemble(self, inputs: Sequence[AssemblyInput], abi: str, opts: AssembleOptions) -> Dict[str, Any]:
		*libs, main = inputs
		with tempfile.TemporaryDirectory(prefix="sold-") as tmp:
			work = Path(tmp)
			args = ["compile", _input_file(main, work, 0)]
			for i, lib in enumerate(libs, start=1):
				args += ["--lib", _input_file(lib, work, i)]
			dbg_path = work / "debug.json"
			args += ["--abi-json", str(opts.abi_path), "-o", str(opts.output_path), "--debug-map", str(dbg_path)]
			if opts.keypair is not None:
				key_path = work / "keypair"
				store_secret(opts.keypair, key_path)
				args += ["--setkey", str(key_path)]
			if opts.ctor_params is not None:
				args += ["--ctor-params", opts.ctor_params]
			if opts.silent:
				args.append("--silent")
			self._run(args)
			try:
				return json.loads(dbg_path.read_text(encoding="utf-8"))
			except (OSError, json.JSONDecodeError) as err:
				raise IOFailure(message=f"Failed to read debug map: {err}") from err

	def load_state(self, path: Path) -> ContractState:
		return ContractState(boc=path.read_bytes())

	def update_data(self, abi: str, params: str, state: ContractState) -> ContractState:
		with tempfile.TemporaryDirectory(prefix="sold-") as tmp:
			tvc_path = Path(tmp) / "contract.tvc"
			tvc_path.write_bytes(state.boc)
			abi_path = Path(tmp) / "abi.json"
			abi_path.write_text(abi, encoding="utf-8")
			self._run(["init", str(tvc_path), params, str(abi_path)])
			return ContractState(boc=tvc_path.read_bytes())

	def serialize_state(self, state: ContractState) -> bytes:
		return state.boc


__all__ = ["AssembleOptions", "Assembler", "AssemblyInput", "ContractState", "TvmLinker"]
