from __future__ import annotations

"""
Diagnostic Reporting Sinks.

A sink receives exactly one line per failed check. Hosts choose where the
lines go: a text stream, the logging pipeline, or an in-memory list.
"""

import logging
import sys
from typing import List, Optional, Protocol, TextIO

logger = logging.getLogger(__name__)


class DiagnosticSink(Protocol):
    def emit(self, line: str) -> None:
        ...


# -----------------------------------------------------------------------------
# SINK IMPLEMENTATIONS
# -----------------------------------------------------------------------------

class StreamSink:
    """
    Write newline-terminated diagnostics to a text stream.

    When no stream is given, the current ``sys.stderr`` is resolved at
    emit time so that redirections made after construction are honoured.
    """

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        self._stream = stream

    def emit(self, line: str) -> None:
        stream = self._stream if self._stream is not None else sys.stderr
        stream.write(line.rstrip("\n") + "\n")
        stream.flush()


class LoggerSink:
    """Route diagnostics through a logger at ERROR level."""

    def __init__(self, target: Optional[logging.Logger] = None) -> None:
        self._logger = target or logger

    def emit(self, line: str) -> None:
        self._logger.error(line)


class CollectingSink:
    """Keep diagnostics in memory, mainly for tests and JSON reports."""

    def __init__(self) -> None:
        self.lines: List[str] = []

    def emit(self, line: str) -> None:
        self.lines.append(line)

    def clear(self) -> None:
        self.lines.clear()


def create_sink(name: str) -> DiagnosticSink:
    """
    Build a sink from its configuration name.

    Args:
        name: One of 'stderr', 'stdout' or 'log'.

    Returns:
        DiagnosticSink: The matching sink.

    Raises:
        ValueError: For an unknown sink name.
    """
    if name == "stderr":
        return StreamSink()
    if name == "stdout":
        return StreamSink(sys.stdout)
    if name == "log":
        return LoggerSink()
    raise ValueError(f"Unknown diagnostics sink '{name}'.")
