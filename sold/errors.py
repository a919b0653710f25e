# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Error taxonomy for the build driver.

Every failure the pipeline can report is a `SoldError` with a stable
`reason_code`. Fatal kinds abort the build; `PositionResolutionFailure` is
only ever raised towards the diagnostic renderer, which degrades to an
unanchored message instead of failing.
"""

from __future__ import annotations

from dataclasses import dataclass


PARSE_ERROR_MESSAGE = "Failed to parse compilation result"


@dataclass(frozen=True)
class SoldError(Exception):
	"""A structured error with a stable reason code and a user-facing message."""

	reason_code: str
	message: str

	def __str__(self) -> str:
		return self.message


@dataclass(frozen=True)
class ProtocolViolation(SoldError):
	"""The compiler response does not have the expected shape."""

	reason_code: str = "protocol-violation"
	message: str = PARSE_ERROR_MESSAGE


@dataclass(frozen=True)
class CompilationFailed(SoldError):
	"""At least one error-severity diagnostic was reported (and already printed)."""

	reason_code: str = "compilation-failed"
	message: str = "Compilation failed"


@dataclass(frozen=True)
class AmbiguousSelection(SoldError):
	"""Zero or several contracts match and no explicit choice resolves it."""

	reason_code: str = "ambiguous-selection"
	message: str = ""


@dataclass(frozen=True)
class InvalidOption(SoldError):
	reason_code: str = "invalid-option"
	message: str = ""


@dataclass(frozen=True)
class IOFailure(SoldError):
	"""Filesystem, keypair or external tool failure; `message` carries the cause."""

	reason_code: str = "io-failure"
	message: str = ""


@dataclass(frozen=True)
class PositionResolutionFailure(SoldError):
	reason_code: str = "position-unresolved"
	message: str = ""


@dataclass(frozen=True)
class PositionNotFound(PositionResolutionFailure):
	reason_code: str = "position-not-found"
	message: str = "Position not found"


@dataclass(frozen=True)
class FileNotIndexed(PositionResolutionFailure):
	reason_code: str = "file-not-indexed"
	message: str = "Filename not found"


__all__ = [
	"AmbiguousSelection",
	"CompilationFailed",
	"FileNotIndexed",
	"IOFailure",
	"InvalidOption",
	"PARSE_ERROR_MESSAGE",
	"PositionNotFound",
	"PositionResolutionFailure",
	"ProtocolViolation",
	"SoldError",
]
