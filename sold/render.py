# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Console output: compiler diagnostics anchored at source lines, plus the
one-line status messages of the driver.

Diagnostics go to stderr. Styling is applied only when the target console is
an interactive terminal with color enabled (rich honours `NO_COLOR`); plain
output carries exactly the same characters minus the escape codes.
"""

from __future__ import annotations

import os
from typing import Iterable, List, Optional

from rich.console import Console
from rich.style import Style

from sold.diagnostics import Diagnostic, Severity
from sold.errors import PositionResolutionFailure
from sold.positions import PositionIndex

_force_no_color = os.environ.get("NO_COLOR") is not None

GUTTER = "bold blue"
SNIPPET = "yellow"
TITLE = "bold white"
SEVERITY_STYLES = {
	Severity.WARNING: "bold yellow",
	Severity.ERROR: "bold red",
}


def create_console(stderr: bool = False, no_color: bool = False) -> Console:
	"""Create a console bound to stdout (or stderr) with the color policy applied."""
	force_terminal = None
	if no_color or _force_no_color:
		force_terminal = False
	return Console(stderr=stderr, force_terminal=force_terminal, no_color=no_color or _force_no_color)


out_console = create_console()
err_console = create_console(stderr=True)


def set_no_color(no_color: bool) -> None:
	global out_console, err_console
	out_console = create_console(no_color=no_color)
	err_console = create_console(stderr=True, no_color=no_color)


def colorize(console: Console, text: str, style: str) -> str:
	if console.is_terminal and not console.no_color:
		return Style.parse(style).render(text)
	return text


def _write_lines(console: Console, lines: Iterable[str]) -> None:
	stream = console.file
	for line in lines:
		stream.write(line + "\n")
	stream.flush()


def gutter_width(line: int) -> int:
	return len(str(line))


def snippet_lines(console: Console, message: str, line: int) -> List[str]:
	"""
	Lay out a multi-line compiler message anchored at `line`.

	First message line becomes the `-->` header, the second one carries the
	line number, every further line gets a plain gutter bar.
	"""
	width = gutter_width(line)
	pad = " " * width
	out: List[str] = []
	for index, text in enumerate(message.splitlines()):
		if index == 0:
			out.append(f"{pad}{colorize(console, '--> ', GUTTER)}{text}")
			out.append(f"{pad} {colorize(console, '|', GUTTER)}")
		elif index == 1:
			hint = f"{line:>{width}} |"
			out.append(f"{colorize(console, hint, GUTTER)} {colorize(console, text, SNIPPET)}")
		else:
			out.append(f"{pad} {colorize(console, '|', GUTTER)} {colorize(console, text, SNIPPET)}")
	out.append("")
	return out


class DiagnosticPrinter:
	"""Prints compiler diagnostics, resolving their positions through a `PositionIndex`."""

	def __init__(self, index: PositionIndex, console: Optional[Console] = None) -> None:
		self.index = index
		self._console = console

	@property
	def console(self) -> Console:
		return self._console if self._console is not None else err_console

	def print_header(self, diag: Diagnostic) -> None:
		prefix = colorize(self.console, diag.severity.label, SEVERITY_STYLES[diag.severity])
		_write_lines(self.console, [f"{prefix}: {colorize(self.console, diag.message, TITLE)}"])

	def print_formatted_message(self, message: str, file: Optional[str], start: Optional[int]) -> None:
		"""
		Print `message` anchored at the line containing `start` in `file`.

		When the position cannot be resolved the raw message is printed instead.
		"""
		if file is None or start is None:
			_write_lines(self.console, [message])
			return
		try:
			line, _column = self.index.resolve(file, start)
		except PositionResolutionFailure:
			_write_lines(self.console, [message])
			return
		_write_lines(self.console, snippet_lines(self.console, message, line))

	def print_diagnostic(self, diag: Diagnostic) -> None:
		self.print_header(diag)
		self.print_formatted_message(diag.formatted_message, diag.source_file, diag.start)


def success(message: str) -> None:
	out_console.print(message, highlight=False, markup=False, soft_wrap=True)


def error(message: str) -> None:
	prefix = colorize(err_console, "Error", SEVERITY_STYLES[Severity.ERROR])
	_write_lines(err_console, [f"{prefix}: {message}"])


__all__ = [
	"DiagnosticPrinter",
	"colorize",
	"create_console",
	"err_console",
	"error",
	"gutter_width",
	"out_console",
	"set_no_color",
	"snippet_lines",
	"success",
]
