"""sinks.py - Destinations for formatted log lines.

Any object with a ``write(str)`` method can serve as a sink, so ``sys.stdout``
or an ``io.StringIO`` work as-is. This module adds:

    NullSink    discards every line; used for silencing.
    StreamSink  writes to a stream under a lock and flushes after each line.
    LoggerSink  forwards each line to a standard ``logging.Logger``.

By handing a sink to ``Configuration(sink=...)`` or ``Emitter.with_output()``,
callers can swap the destination without touching any other code.

Typical usage::

    import logging
    import logmeter
    from logmeter.sinks import LoggerSink

    emitter = logmeter.build(sink=LoggerSink(logging.getLogger("metrics")))
    emitter.count("jobs.started")
"""

import logging
import sys
import threading
from abc import ABC, abstractmethod
from typing import Any, Optional

from .errors import CallerError


class Sink(ABC):
    """Abstract base class for line destinations.

    A line passed to ``write()`` is one complete logfmt line, including its
    trailing newline. The emitter calls ``write()`` exactly once per line.

    Example:
        >>> class ListSink(Sink):
        ...     def __init__(self):
        ...         self.lines = []
        ...     def write(self, line: str) -> None:
        ...         self.lines.append(line)
    """

    @abstractmethod
    def write(self, line: str) -> None:
        """Deliver one formatted line.

        Args:
            line: The logfmt line, terminated by ``"\\n"``.
        """


def ensure_sink(sink: Any) -> Any:
    """Return ``sink`` unchanged if it can receive lines.

    Raises:
        CallerError: If ``sink`` has no callable ``write`` attribute.
    """
    if not callable(getattr(sink, "write", None)):
        raise CallerError(f"sink must have a write() method, got {type(sink).__name__}")
    return sink


class NullSink(Sink):
    """A sink that accepts every line and discards it."""

    def write(self, line: str) -> None:
        return None

    def __repr__(self) -> str:  # pragma: no cover
        return "NullSink()"


class StreamSink(Sink):
    """Write lines to a writable stream (default: sys.stdout).

    Writes are serialised by a lock and the stream is flushed after each line
    so that lines from different threads never interleave mid-line, even on
    streams whose ``write()`` is not atomic.

    Attributes:
        _stream: The writable file-like object to write to.
        _flush: Whether to call ``flush()`` on the stream after each line.

    Example:
        >>> import sys
        >>> sink = StreamSink(stream=sys.stderr)
    """

    def __init__(self, stream=None, flush: bool = True) -> None:
        """Initialise the stream sink.

        Args:
            stream: A writable file-like object. Defaults to ``sys.stdout``.
            flush: If True (default), flush the stream after every line.
        """
        self._stream = ensure_sink(stream if stream is not None else sys.stdout)
        self._flush = flush
        self._lock = threading.Lock()

    @property
    def stream(self):
        return self._stream

    def write(self, line: str) -> None:
        with self._lock:
            self._stream.write(line)
            if self._flush and hasattr(self._stream, "flush"):
                self._stream.flush()


class LoggerSink(Sink):
    """Forward lines to a standard library logger.

    Each line becomes one ``LogRecord`` whose message is the line without its
    trailing newline. This lets logmeter output flow through an application's
    existing handlers, formatters and filters.

    Attributes:
        _logger (logging.Logger): The logger that receives the lines.
        _level (int): Level used for every record.

    Example:
        >>> import logging
        >>> sink = LoggerSink(logging.getLogger("app.metrics"), level=logging.DEBUG)
    """

    def __init__(self, logger: Optional[logging.Logger] = None, level: int = logging.INFO) -> None:
        """Initialise the logger sink.

        Args:
            logger: Target logger. Defaults to the ``"logmeter"`` logger.
            level: Logging level for every forwarded line. Defaults to INFO.
        """
        self._logger = logger if logger is not None else logging.getLogger("logmeter")
        self._level = level

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def write(self, line: str) -> None:
        self._logger.log(self._level, line.rstrip("\n"))
