"""Line-numbered diagnostic events and the sinks that receive them."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Protocol


class DiagnosticLevel(Enum):
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR


@dataclass(frozen=True)
class DiagnosticEvent:
    """A single message emitted while reading a patch text."""

    level: DiagnosticLevel
    message: str
    line_num: Optional[int] = None

    def format(self) -> str:
        if self.line_num is None:
            return self.message
        return f"L{self.line_num}: {self.message}"


class DiagnosticSink(Protocol):
    def emit(self, event: DiagnosticEvent) -> None:
        ...


class DiagnosticCollector:
    """Keeps every event in memory, in emission order."""

    def __init__(self) -> None:
        self.events: List[DiagnosticEvent] = []

    def emit(self, event: DiagnosticEvent) -> None:
        self.events.append(event)

    def _of_level(self, level: DiagnosticLevel) -> List[DiagnosticEvent]:
        return [event for event in self.events if event.level is level]

    @property
    def errors(self) -> List[DiagnosticEvent]:
        return self._of_level(DiagnosticLevel.ERROR)

    @property
    def warnings(self) -> List[DiagnosticEvent]:
        return self._of_level(DiagnosticLevel.WARNING)

    @property
    def has_errors(self) -> bool:
        return any(event.level is DiagnosticLevel.ERROR for event in self.events)

    def messages(self) -> List[str]:
        return [event.format() for event in self.events]


class LoggingSink:
    """Forwards events to a standard library logger.

    The line number travels as ``record.pchtxt_line`` so structured
    formatters can emit it as its own field.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("pchtxt.patching")

    def emit(self, event: DiagnosticEvent) -> None:
        self.logger.log(
            event.level.value,
            event.format(),
            extra={"pchtxt_line": event.line_num},
        )


class Diagnostics:
    """Helper bound to one sink, used by the scanner and the parser."""

    def __init__(self, sink: Optional[DiagnosticSink] = None):
        self.sink: DiagnosticSink = sink if sink is not None else LoggingSink()

    def info(self, message: str, line_num: Optional[int] = None) -> None:
        self.sink.emit(DiagnosticEvent(DiagnosticLevel.INFO, message, line_num))

    def warning(self, message: str, line_num: Optional[int] = None) -> None:
        self.sink.emit(DiagnosticEvent(DiagnosticLevel.WARNING, message, line_num))

    def error(self, message: str, line_num: Optional[int] = None) -> None:
        self.sink.emit(DiagnosticEvent(DiagnosticLevel.ERROR, message, line_num))
