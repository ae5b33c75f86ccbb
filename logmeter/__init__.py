"""logmeter/__init__.py - Public API for the logmeter package.

logmeter emits structured, logfmt-style log lines: one line per call, made of
bare tags and ``key=value`` tokens, easy to grep and easy to feed into
log-based metrics.

Quick start:
    import logmeter

    # 1. Build an emitter (writes to stdout by default)
    emitter = logmeter.build(source="billing")

    # 2. Log tags and key/value pairs
    emitter.log("invoice-sent", invoice=1042, amount=19.99)
    # source=billing invoice-sent invoice=1042 amount=19.9900

    # 3. Add context for a block, and time a block
    with emitter.with_context(request_id="r-7"):
        with emitter.timed("charge", customer=12):
            charge(12)

    # 4. Share one emitter between threads
    from logmeter import ThreadSafe
    meter = ThreadSafe(emitter)

Exported names:
    build:         Factory returning a configured Emitter.
    Configuration: Settings and hooks shared by an emitter and its clones.
    Emitter:       Composes, buffers and writes lines.
    ThreadSafe:    Gives each thread its own clone of a template Emitter.
    NullEmitter:   Emitter stand-in that does nothing.
    Deferred:      Marks a value to be computed at flush time.
    Sink, NullSink, StreamSink, LoggerSink: line destinations.
    LogmeterError, CallerError, FrozenEmitterError: exceptions.
"""

from typing import Any, Callable, Optional

from .configuration import Configuration
from .emitter import Emitter
from .errors import CallerError, FrozenEmitterError, LogmeterError
from .formatting import Deferred
from .null import NullEmitter
from .sinks import LoggerSink, NullSink, Sink, StreamSink
from .threadsafe import ThreadSafe


def build(configure: Optional[Callable[[Configuration], Any]] = None, **options: Any) -> Emitter:
    """Build an Emitter from keyword options.

    Args:
        configure: Optional callback receiving the Configuration before it is
            handed to the emitter, for settings easier to express in code.
        **options: Keyword arguments for ``Configuration``.

    Returns:
        A new Emitter.

    Example:
        >>> def setup(config):
        ...     config.format_keys(str.upper)
        >>> emitter = build(setup, prefix="api", sort=True)
    """
    configuration = Configuration(**options)
    if configure is not None:
        configure(configuration)
    return Emitter(configuration=configuration)


__all__ = [
    "build",
    "Configuration",
    "Emitter",
    "ThreadSafe",
    "NullEmitter",
    "Deferred",
    "Sink",
    "NullSink",
    "StreamSink",
    "LoggerSink",
    "LogmeterError",
    "CallerError",
    "FrozenEmitterError",
]
__version__ = "0.1.0"
