# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Byte offset -> (line, column) index for source files read during compilation.

The compiler reports diagnostics as raw byte offsets into the files it pulled
through the read callback. The callback records every file here the moment it
is read, so by the time a diagnostic is rendered its file is already indexed.

Offsets are 0-based, lines and columns are 1-based. For each file we keep the
cumulative end offset of every line (line length including its terminator).
An offset equal to a line end is the first byte of the next line.
"""

from __future__ import annotations

import threading
from typing import Dict, List, Tuple

import structlog

from sold.errors import FileNotIndexed, PositionNotFound

logger = structlog.get_logger(__name__)


def line_end_offsets(content: bytes) -> List[int]:
	"""Return the cumulative end offset of every line in `content`."""
	ends: List[int] = []
	start = 0
	while True:
		nl = content.find(b"\n", start)
		if nl < 0:
			break
		start = nl + 1
		ends.append(start)
	# Trailing text without a terminator still forms a line.
	if start < len(content):
		ends.append(len(content))
	return ends


class PositionIndex:
	"""Thread-safe registry of per-file line boundaries."""

	def __init__(self) -> None:
		self._lock = threading.Lock()
		self._lines: Dict[str, List[int]] = {}

	def record(self, filename: str, content: bytes) -> None:
		"""Scan `content` once and remember its line boundaries under `filename`."""
		ends = line_end_offsets(content)
		with self._lock:
			self._lines[filename] = ends
		logger.debug("file_indexed", filename=filename, lines=len(ends))

	def line_offsets(self, filename: str) -> List[int]:
		with self._lock:
			if filename not in self._lines:
				raise FileNotIndexed()
			return list(self._lines[filename])

	def resolve(self, filename: str, offset: int) -> Tuple[int, int]:
		"""
		Map a byte offset in `filename` to a 1-based (line, column).

		Raises:
		  FileNotIndexed: `filename` was never recorded.
		  PositionNotFound: `offset` lies past the end of the recorded content.
		"""
		ends = self.line_offsets(filename)
		if offset < 0:
			raise PositionNotFound()
		line = 1
		previous = 0
		for end in ends:
			if offset < end:
				return line, offset - previous + 1
			line += 1
			previous = end
		# End of the last line with nothing after it: stay on that line.
		if ends and offset == ends[-1]:
			last_start = ends[-2] if len(ends) > 1 else 0
			return len(ends), offset - last_start + 1
		raise PositionNotFound()


__all__ = ["PositionIndex", "line_end_offsets"]
