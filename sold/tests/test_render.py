# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
from __future__ import annotations

import io
import re

from rich.console import Console

from sold.diagnostics import Diagnostic, Severity
from sold.positions import PositionIndex
from sold.render import DiagnosticPrinter, gutter_width, snippet_lines


def _plain_console() -> tuple[Console, io.StringIO]:
	buf = io.StringIO()
	return Console(file=buf, force_terminal=False, no_color=True), buf


def _tty_console() -> tuple[Console, io.StringIO]:
	buf = io.StringIO()
	return Console(file=buf, force_terminal=True, no_color=False), buf


MESSAGE = "Warning: Unused local variable.\n --> c.sol:12:9:\n   |\n12 |         uint x;\n   |         ^^^^^^"


def test_gutter_width_follows_line_digits() -> None:
	assert gutter_width(5) == 1
	assert gutter_width(10) == 2
	assert gutter_width(123) == 3


def test_snippet_layout() -> None:
	console, _ = _plain_console()
	lines = snippet_lines(console, MESSAGE, 12)
	assert lines == [
		"  --> Warning: Unused local variable.",
		"   |",
		"12 |  --> c.sol:12:9:",
		"   |    |",
		"   | 12 |         uint x;",
		"   |    |         ^^^^^^",
		"",
	]


def test_single_line_message_gets_header_and_gutter() -> None:
	console, _ = _plain_console()
	assert snippet_lines(console, "Error: oops", 7) == [" --> Error: oops", "  |", ""]


def test_printer_anchors_message_at_resolved_line() -> None:
	index = PositionIndex()
	index.record("c.sol", b"contract C {\n\tuint x;\n}\n")
	console, buf = _plain_console()
	printer = DiagnosticPrinter(index, console)
	printer.print_formatted_message("Error: first\nsecond\nthird", "c.sol", 14)
	assert buf.getvalue() == " --> Error: first\n  |\n2 | second\n  | third\n\n"


def test_printer_falls_back_to_raw_message() -> None:
	console, buf = _plain_console()
	printer = DiagnosticPrinter(PositionIndex(), console)
	printer.print_formatted_message("Error: first\nsecond", "never-read.sol", 3)
	assert buf.getvalue() == "Error: first\nsecond\n"


def test_printer_header_and_unanchored_diagnostic() -> None:
	console, buf = _plain_console()
	printer = DiagnosticPrinter(PositionIndex(), console)
	printer.print_diagnostic(Diagnostic(severity=Severity.ERROR, message="Boom", formatted_message="Error: Boom"))
	assert buf.getvalue() == "Error: Boom\nError: Boom\n"


def test_colors_only_on_terminals_and_text_is_unchanged() -> None:
	index = PositionIndex()
	index.record("c.sol", b"a\nb\n")
	diag = Diagnostic(
		severity=Severity.WARNING,
		message="Careful",
		formatted_message="Warning: Careful\nb",
		source_file="c.sol",
		start=2,
		end=3,
	)
	plain, plain_buf = _plain_console()
	DiagnosticPrinter(index, plain).print_diagnostic(diag)
	tty, tty_buf = _tty_console()
	DiagnosticPrinter(index, tty).print_diagnostic(diag)

	assert "\x1b[" not in plain_buf.getvalue()
	assert "\x1b[" in tty_buf.getvalue()
	assert re.sub(r"\x1b\[[0-9;]*m", "", tty_buf.getvalue()) == plain_buf.getvalue()
