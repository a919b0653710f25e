# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Compiler diagnostics as reported in the `errors` array of a compilation result.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from sold.errors import ProtocolViolation


class Severity(Enum):
	WARNING = "warning"
	ERROR = "error"

	@property
	def label(self) -> str:
		return self.value.capitalize()


@dataclass(frozen=True)
class Diagnostic:
	"""One entry of the compiler's `errors` array."""

	severity: Severity
	message: str
	formatted_message: str
	source_file: Optional[str] = None
	start: Optional[int] = None
	end: Optional[int] = None

	@property
	def is_error(self) -> bool:
		return self.severity is Severity.ERROR


def _require_str(entry: dict, key: str) -> str:
	value = entry.get(key)
	if not isinstance(value, str):
		raise ProtocolViolation()
	return value


def _require_offset(location: dict, key: str) -> int:
	value = location.get(key)
	# bool is an int subclass; JSON true/false is not an offset.
	if not isinstance(value, int) or isinstance(value, bool):
		raise ProtocolViolation()
	return value


def parse_diagnostic(entry: Any) -> Diagnostic:
	"""
	Decode one `errors` entry.

	Raises ProtocolViolation on a malformed entry or a severity other than
	`warning` / `error`. A missing `sourceLocation` yields an unanchored diagnostic.
	"""
	if not isinstance(entry, dict):
		raise ProtocolViolation()
	raw_severity = _require_str(entry, "severity")
	try:
		severity = Severity(raw_severity)
	except ValueError:
		raise ProtocolViolation(message=f'Unknown severity "{raw_severity}"') from None
	message = _require_str(entry, "message")
	formatted = _require_str(entry, "formattedMessage")

	location = entry.get("sourceLocation")
	if location is None:
		return Diagnostic(severity=severity, message=message, formatted_message=formatted)
	if not isinstance(location, dict):
		raise ProtocolViolation()
	return Diagnostic(
		severity=severity,
		message=message,
		formatted_message=formatted,
		source_file=_require_str(location, "file"),
		start=_require_offset(location, "start"),
		end=_require_offset(location, "end"),
	)


__all__ = ["Diagnostic", "Severity", "parse_diagnostic"]
