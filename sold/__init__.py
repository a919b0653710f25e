# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
sold: Solidity compiler driver for TVM.

Compiles a source through the compiler library, renders its diagnostics,
selects the contract to build and assembles it into a `.tvc` container.
The CLI entrypoint is `sold.cli:main`.
"""

from __future__ import annotations

import logging
import sys

import structlog

__version__ = "0.1.0"


def configure_logging(verbose: bool = False) -> None:
	"""Route structlog events to stderr, keeping debug events only when `verbose`."""
	level = logging.DEBUG if verbose else logging.WARNING
	structlog.configure(
		wrapper_class=structlog.make_filtering_bound_logger(level),
		logger_factory=structlog.PrintLoggerFactory(sys.stderr),
		cache_logger_on_first_use=False,
	)


# Library callers get quiet stderr logging; stdout carries only driver output.
configure_logging()

__all__ = ["__version__", "configure_logging"]
