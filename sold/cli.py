# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
`sold` command line: compile a Solidity source and assemble it into a `.tvc`.
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Optional

import structlog

from sold import __version__, configure_logging, render
from sold.build import AstFormat, BuildOptions, GenerateKey, KeySource, LoadKey, build
from sold.compiler import Compiler, load_compiler
from sold.config import ToolPaths, tool_paths
from sold.errors import IOFailure, SoldError
from sold.linker import Assembler, TvmLinker

logger = structlog.get_logger(__name__)


def _build_parser() -> argparse.ArgumentParser:
	p = argparse.ArgumentParser(prog="sold", description="Solidity compiler driver producing TVM contracts (.tvc)")
	p.add_argument("input", nargs="?", help="Source file name")
	p.add_argument("-c", "--contract", help="Contract to build if sources define more than one contract")
	p.add_argument("-O", "--output-dir", help="Output directory (by default, current directory is used)")
	p.add_argument("-P", "--output-prefix", help="Output prefix (by default, input file stem is used as prefix)")
	p.add_argument(
		"-I",
		"--include-path",
		dest="include_paths",
		action="append",
		default=[],
		help="Include additional path to search for imports (repeatable)",
	)
	p.add_argument("-L", "--lib", help="Library to use instead of default")
	# Deprecated options, kept for compatibility and hidden from --help.
	# -g and -s exclude each other; checked in main.
	p.add_argument("-p", "--ctor-params", help=argparse.SUPPRESS)
	p.add_argument("-g", "--gen-key", type=Path, help=argparse.SUPPRESS)
	p.add_argument("-s", "--set-key", type=Path, help=argparse.SUPPRESS)
	p.add_argument("--init", help="Initialize static fields (JSON object keyed by field name)")
	p.add_argument("--function-ids", action="store_true", help="Print name and id for each public function")
	ast = p.add_mutually_exclusive_group()
	ast.add_argument("--ast-json", action="store_true", help="Get AST of all source files in JSON format")
	ast.add_argument(
		"--ast-compact-json",
		action="store_true",
		help="Get AST of all source files in compact JSON format",
	)
	p.add_argument("--abi-json", action="store_true", help="Get ABI without actually compiling")
	p.add_argument(
		"--tvm-refresh-remote",
		action="store_true",
		help="Force download and rewrite remote import files",
	)
	p.add_argument("--no-color", action="store_true", help="Disable colored output")
	p.add_argument("-v", "--verbose", action="store_true", help="Log pipeline stages to stderr")
	p.add_argument("-V", "--version", action="store_true", help="Print version information and exit")
	return p


def options_from_args(args: argparse.Namespace) -> BuildOptions:
	key: Optional[KeySource] = None
	if args.gen_key is not None:
		key = GenerateKey(path=args.gen_key)
	elif args.set_key is not None:
		key = LoadKey(path=args.set_key)
	ast: Optional[AstFormat] = None
	if args.ast_json:
		ast = AstFormat.PRETTY
	elif args.ast_compact_json:
		ast = AstFormat.COMPACT
	return BuildOptions(
		input=args.input,
		contract=args.contract,
		output_dir=args.output_dir,
		output_prefix=args.output_prefix,
		include_paths=tuple(args.include_paths),
		lib=args.lib,
		ctor_params=args.ctor_params,
		key=key,
		init=args.init,
		function_ids=bool(args.function_ids),
		ast=ast,
		abi_only=bool(args.abi_json),
		refresh_remote=bool(args.tvm_refresh_remote),
	)


def version_text(tools: ToolPaths) -> str:
	try:
		compiler_version = load_compiler(tools.libsolc).version()
	except IOFailure:
		compiler_version = "unavailable"
	return f"sold {__version__}\ncompiler {compiler_version}"


def main(
	argv: list[str] | None = None,
	compiler: Compiler | None = None,
	assembler: Assembler | None = None,
	tools: ToolPaths | None = None,
) -> int:
	"""
	Run the driver. Returns the process exit status.

	`compiler`, `assembler` and `tools` override what is found in the environment.
	"""
	p = _build_parser()
	args = p.parse_args(argv)
	configure_logging(bool(args.verbose))
	if args.no_color:
		render.set_no_color(True)
	tools = tools if tools is not None else tool_paths()

	if args.version:
		print(version_text(tools))
		return 0
	if args.input is None:
		p.error("the following arguments are required: input")
	if args.gen_key is not None and args.set_key is not None:
		p.error("argument -s/--set-key: not allowed with argument -g/--gen-key")

	opts = options_from_args(args)
	try:
		if compiler is None:
			compiler = load_compiler(tools.libsolc)
		if assembler is None and opts.ast is None and not opts.abi_only and not opts.function_ids:
			assembler = TvmLinker(tools.linker)
		build(opts, compiler, assembler, stdlib=tools.stdlib)
	except SoldError as err:
		logger.debug("build_failed", reason_code=err.reason_code)
		render.error(err.message)
		return 1
	except OSError as err:
		render.error(f"Failed: {err}")
		return 1
	return 0


__all__ = ["main", "options_from_args", "version_text"]
