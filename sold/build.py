# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Build pipeline: source -> compiler -> selected contract -> assembler -> `.tvc`.

Stages run in order, each one only if the previous succeeded:

1. prepare the output directory and validate the output prefix;
2. compile the canonicalized input and interpret the result (diagnostics,
   contract selection);
3. `function_ids`: print the function id listing and stop;
4. `ast`: dump the AST of every source as one JSON array and stop;
5. write `<prefix>.abi.json` (canonical form); stop if only the ABI was asked for;
6. write `<prefix>.code`;
7. assemble stdlib + code into `<prefix>.tvc` and `<prefix>.debug.json`,
   binding a generated or loaded keypair when requested;
8. patch initial static-field data into the container when requested.

Artifacts are written as soon as they exist and are not rolled back when a
later stage fails.
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

import structlog
from rich.console import Console

from sold import render
from sold.abi_printer import canonical_abi_json
from sold.compiler import Compiler, SourceReader, run_compiler
from sold.errors import IOFailure, InvalidOption, ProtocolViolation
from sold.keys import Keypair, generate_keypair, load_keypair
from sold.linker import AssembleOptions, Assembler, AssemblyInput
from sold.positions import PositionIndex
from sold.request import BuildRequest, build_compile_input
from sold.result import interpret_result

logger = structlog.get_logger(__name__)


class AstFormat(Enum):
	PRETTY = "pretty"
	COMPACT = "compact"


@dataclass(frozen=True)
class GenerateKey:
	"""Generate a fresh keypair, store it at `path` / `path.pub`."""

	path: Path


@dataclass(frozen=True)
class LoadKey:
	"""Load the keypair stored in the secret file at `path`."""

	path: Path


KeySource = Union[GenerateKey, LoadKey]


@dataclass(frozen=True)
class BuildOptions:
	input: str
	contract: Optional[str] = None
	output_dir: Optional[str] = None
	output_prefix: Optional[str] = None
	include_paths: Tuple[str, ...] = field(default_factory=tuple)
	lib: Optional[str] = None
	ctor_params: Optional[str] = None
	key: Optional[KeySource] = None
	init: Optional[str] = None
	function_ids: bool = False
	ast: Optional[AstFormat] = None
	abi_only: bool = False
	refresh_remote: bool = False

	def request(self, input_path: str) -> BuildRequest:
		return BuildRequest(
			input_path=input_path,
			contract=self.contract,
			include_paths=self.include_paths,
			function_ids=self.function_ids,
			abi_only=self.abi_only,
			ast_only=self.ast is not None,
			refresh_remote=self.refresh_remote,
		)


@dataclass
class BuildArtifacts:
	"""Files produced by one run; all share `prefix` inside `output_dir`."""

	output_dir: Path
	prefix: str
	abi: Optional[Path] = None
	code: Optional[Path] = None
	tvc: Optional[Path] = None
	debug_map: Optional[Path] = None
	ast: Optional[Path] = None
	keys: List[Path] = field(default_factory=list)


def _write(path: Path, data: Union[str, bytes]) -> None:
	try:
		if isinstance(data, bytes):
			path.write_bytes(data)
		else:
			path.write_text(data, encoding="utf-8")
	except OSError as err:
		raise IOFailure(message=f"Failed to write {path}: {err}") from err
	logger.debug("artifact_written", path=str(path))


def prepare_output_dir(output_dir: Path) -> None:
	if output_dir.exists():
		return
	try:
		output_dir.mkdir(parents=True)
	except OSError as err:
		raise IOFailure(message=f"Failed to create output dir: {err}") from err


def check_output_prefix(prefix: Optional[str]) -> None:
	if prefix is None:
		return
	separators = {"/", os.sep}
	if os.altsep:
		separators.add(os.altsep)
	if any(sep in prefix for sep in separators):
		raise InvalidOption(message=f'Invalid output prefix "{prefix}". Use option -O to set output directory')


def canonical_input(path: str) -> Path:
	try:
		return Path(path).resolve(strict=True)
	except OSError as err:
		raise IOFailure(message=f"Failed to canonicalize {path}: {err}") from err


def collect_asts(result: Mapping[str, Any]) -> List[Any]:
	"""AST node of every source in the result, in response order."""
	sources = result.get("sources")
	if not isinstance(sources, dict):
		raise ProtocolViolation()
	asts = []
	for value in sources.values():
		if not isinstance(value, dict) or "ast" not in value:
			raise ProtocolViolation()
		asts.append(value["ast"])
	return asts


def dump_json(value: Any, pretty: bool) -> str:
	if pretty:
		return json.dumps(value, indent=2, ensure_ascii=False) + "\n"
	return json.dumps(value, ensure_ascii=False, separators=(",", ":")) + "\n"


def _read_lib(lib: Optional[str], stdlib: Optional[Path]) -> AssemblyInput:
	path = Path(lib) if lib is not None else stdlib
	if path is None:
		raise IOFailure(message="Standard library not found. Set SOLD_STDLIB or use option -L")
	try:
		text = path.read_text(encoding="utf-8")
	except (OSError, UnicodeDecodeError) as err:
		raise IOFailure(message=f"Failed to read library {path}: {err}") from err
	return AssemblyInput(name=lib if lib is not None else path.name, text=text, path=str(path))


def _bind_keypair(key: Optional[KeySource], artifacts: BuildArtifacts) -> Optional[Keypair]:
	if isinstance(key, GenerateKey):
		pair = generate_keypair(key.path)
		artifacts.keys += [Path(str(key.path) + ".pub"), key.path]
		return pair
	if isinstance(key, LoadKey):
		return load_keypair(key.path)
	return None


def build(
	opts: BuildOptions,
	compiler: Compiler,
	assembler: Optional[Assembler] = None,
	stdlib: Optional[Path] = None,
	silent: bool = False,
	console: Optional[Console] = None,
) -> BuildArtifacts:
	"""
	Run the whole pipeline for `opts`.

	Args:
	  compiler: compiler the request is sent to.
	  assembler: downstream assembler; only required when a `.tvc` is produced.
	  stdlib: default standard library, used unless `opts.lib` is set.
	  silent: suppress the confirmation line.
	  console: where diagnostics are printed (stderr console by default).
	"""
	output_dir = opts.output_dir or "."
	output_path = Path(output_dir)
	prepare_output_dir(output_path)
	check_output_prefix(opts.output_prefix)

	input_canonical = canonical_input(opts.input)
	input_path = str(input_canonical)
	request = opts.request(input_path)
	logger.debug("build_started", input=input_path, output_dir=output_dir, assembly=request.wants_assembly)

	index = PositionIndex()
	printer = render.DiagnosticPrinter(index, console)
	result = run_compiler(compiler, build_compile_input(request), SourceReader(index))
	selected = interpret_result(result, input_path, opts.contract, request.wants_assembly, printer)
	out = selected.output

	prefix = opts.output_prefix or input_canonical.stem
	artifacts = BuildArtifacts(output_dir=output_path, prefix=prefix)

	if opts.function_ids:
		print(json.dumps(out.get("functionIds"), indent=2))
		return artifacts

	if opts.ast is not None:
		artifacts.ast = output_path / f"{prefix}.ast.json"
		_write(artifacts.ast, dump_json(collect_asts(result), opts.ast is AstFormat.PRETTY))
		return artifacts

	abi = out.get("abi")
	abi_file_name = f"{prefix}.abi.json"
	artifacts.abi = output_path / abi_file_name
	_write(artifacts.abi, canonical_abi_json(abi))
	if opts.abi_only:
		return artifacts

	assembly = out.get("assembly")
	if not isinstance(assembly, str):
		raise ProtocolViolation()
	assembly_file_name = f"{prefix}.code"
	artifacts.code = output_path / assembly_file_name
	_write(artifacts.code, assembly)
	if not silent:
		render.success(f"Solidity source successfully compiled to {artifacts.code} and {artifacts.abi}")

	if assembler is None:
		raise IOFailure(message="Assembler not found. Set TVM_LINKER_BIN to the path of tvm_linker")
	code_name = f"{output_dir}/{assembly_file_name}"
	inputs = [
		_read_lib(opts.lib, stdlib),
		AssemblyInput(name=code_name, text=assembly, path=code_name),
	]
	abi_text = json.dumps(abi, ensure_ascii=False, separators=(",", ":"))
	keypair = _bind_keypair(opts.key, artifacts)

	artifacts.tvc = output_path / f"{prefix}.tvc"
	dbgmap = assembler.assemble(
		inputs,
		abi_text,
		AssembleOptions(
			output_path=artifacts.tvc,
			abi_path=artifacts.abi,
			keypair=keypair,
			ctor_params=opts.ctor_params,
			silent=silent,
		),
	)
	artifacts.debug_map = output_path / f"{prefix}.debug.json"
	_write(artifacts.debug_map, dump_json(dbgmap, pretty=True))

	if opts.init is not None:
		try:
			state = assembler.load_state(artifacts.tvc)
		except OSError as err:
			raise IOFailure(message=f"Failed to load {artifacts.tvc}: {err}") from err
		state = assembler.update_data(abi_text, opts.init, state)
		_write(artifacts.tvc, assembler.serialize_state(state))
		logger.debug("initial_data_applied", tvc=str(artifacts.tvc))

	return artifacts


__all__ = [
	"AstFormat",
	"BuildArtifacts",
	"BuildOptions",
	"GenerateKey",
	"KeySource",
	"LoadKey",
	"build",
	"canonical_input",
	"check_output_prefix",
	"collect_asts",
	"dump_json",
	"prepare_output_dir",
]
