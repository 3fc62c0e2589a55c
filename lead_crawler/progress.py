"""Progress reporting sink shared by the discovery and enrichment workers."""
from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional

from .models import ProgressLine, ProgressType

LOGGER = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressLine], None]

_LOG_LEVELS = {
    ProgressType.ERROR: logging.ERROR,
    ProgressType.WARNING: logging.WARNING,
}


class ProgressReporter:
    """Append-only collector of progress lines, safe for concurrent writers.

    Every line is mirrored to the module logger and forwarded to the optional
    ``callback`` (for example a UI notification fan-out owned by the caller).
    """

    def __init__(self, callback: Optional[ProgressCallback] = None) -> None:
        self._callback = callback
        self._lines: List[ProgressLine] = []
        self._lock = threading.Lock()

    def emit(self, text: str, type: ProgressType = ProgressType.INFO) -> ProgressLine:
        line = ProgressLine(text=text, type=type)
        with self._lock:
            self._lines.append(line)
        LOGGER.log(_LOG_LEVELS.get(type, logging.INFO), text)
        if self._callback is not None:
            try:
                self._callback(line)
            except Exception:
                LOGGER.exception("Progress callback failed for line %r", text)
        return line

    def info(self, text: str) -> ProgressLine:
        return self.emit(text, ProgressType.INFO)

    def success(self, text: str) -> ProgressLine:
        return self.emit(text, ProgressType.SUCCESS)

    def warning(self, text: str) -> ProgressLine:
        return self.emit(text, ProgressType.WARNING)

    def error(self, text: str) -> ProgressLine:
        return self.emit(text, ProgressType.ERROR)

    def child(self) -> "ProgressReporter":
        """A reporter with its own lines that forwards to the same callback."""

        return ProgressReporter(self._callback)

    @property
    def lines(self) -> List[ProgressLine]:
        with self._lock:
            return list(self._lines)
