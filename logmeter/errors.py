"""errors.py - Exceptions raised by logmeter itself.

Errors raised inside an instrumented block, or by user-supplied hooks
(key/value formatters, scrubbers), are never wrapped in these classes: they
propagate to the caller exactly as raised.
"""


class LogmeterError(Exception):
    """Base class for errors raised by logmeter."""


class CallerError(LogmeterError, TypeError):
    """A call received arguments of the wrong shape.

    Example: a context producer that returns a list instead of a mapping,
    or a sink object without a ``write`` method.
    """


class FrozenEmitterError(LogmeterError, RuntimeError):
    """A state-mutating operation was attempted on a frozen template Emitter."""
