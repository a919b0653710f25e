# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Interpretation of the compilation result.

Two steps, in order:

1. every entry of `errors` is printed (response order); an unknown severity
   is a protocol violation, and if any entry was an error the build fails
   with `CompilationFailed` once all of them have been printed;
2. exactly one contract of the main source is selected. An explicit name must
   exist; otherwise the candidates are filtered (contracts with assembly when
   building, all contracts otherwise) and there must be exactly one. Several
   matches are rejected, never resolved by picking the first.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Tuple

import structlog

from sold.diagnostics import Diagnostic, parse_diagnostic
from sold.errors import AmbiguousSelection, CompilationFailed, ProtocolViolation
from sold.render import DiagnosticPrinter

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SelectedContract:
	name: str
	output: Dict[str, Any]


def report_diagnostics(result: Mapping[str, Any], printer: DiagnosticPrinter) -> List[Diagnostic]:
	"""Print all diagnostics of `result`; raise CompilationFailed if any is an error."""
	entries = result.get("errors")
	if entries is None:
		return []
	if not isinstance(entries, list):
		raise ProtocolViolation()
	diagnostics: List[Diagnostic] = []
	severe = False
	for entry in entries:
		diag = parse_diagnostic(entry)
		printer.print_diagnostic(diag)
		diagnostics.append(diag)
		severe = severe or diag.is_error
	if severe:
		logger.debug("compilation_failed", errors=sum(1 for d in diagnostics if d.is_error))
		raise CompilationFailed()
	return diagnostics


def contracts_of(result: Mapping[str, Any], source: str) -> Dict[str, Any]:
	contracts = result.get("contracts")
	if not isinstance(contracts, dict):
		raise ProtocolViolation()
	units = contracts.get(source)
	if not isinstance(units, dict):
		raise ProtocolViolation()
	return units


def has_assembly(unit: Any) -> bool:
	return isinstance(unit, dict) and "assembly" in unit


def select_contract(units: Mapping[str, Any], contract: Optional[str], deployable: bool) -> Tuple[str, Any]:
	"""
	Pick the contract to build out of `units`.

	Args:
	  units: contract name -> output document for the main source.
	  contract: explicitly requested contract name, if any.
	  deployable: when True only contracts that emitted assembly are candidates.
	"""
	if contract is not None:
		if contract not in units:
			raise AmbiguousSelection(message=f'Source file doesn\'t contain the desired contract "{contract}"')
		return contract, units[contract]

	matches = [(name, unit) for name, unit in units.items() if not deployable or has_assembly(unit)]
	qualification = "deployable " if deployable else ""
	if not matches:
		raise AmbiguousSelection(message=f"Source file contains no {qualification}contracts")
	if len(matches) > 1:
		raise AmbiguousSelection(
			message=(
				f"Source file contains at least two {qualification}contracts. "
				"Consider adding the option --contract in compiler command line to select the desired contract"
			)
		)
	return matches[0]


def interpret_result(
	result: Mapping[str, Any],
	source: str,
	contract: Optional[str],
	deployable: bool,
	printer: DiagnosticPrinter,
) -> SelectedContract:
	report_diagnostics(result, printer)
	name, output = select_contract(contracts_of(result, source), contract, deployable)
	if not isinstance(output, dict):
		raise ProtocolViolation()
	logger.debug("contract_selected", contract=name, explicit=contract is not None)
	return SelectedContract(name=name, output=output)


__all__ = [
	"SelectedContract",
	"contracts_of",
	"has_assembly",
	"interpret_result",
	"report_diagnostics",
	"select_contract",
]
