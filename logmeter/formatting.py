"""formatting.py - Key, value and token formatting for logfmt lines.

Values pass through a fixed set of kinds before they reach the output line:

    ``True``                      bare key, no ``=value``
    ``False`` / ``None``          token omitted
    ``float``                     fixed-point at the configured precision
    ``datetime`` / ``date`` / ``time``  ISO-8601, ``Z`` suffix for UTC
    ``list`` / ``tuple``          comma-joined, each element formatted in turn
    class objects                 their ``__name__``
    anything else                 ``str()``, quoted unless bare-safe

Deferred values (``Deferred`` instances, or any zero-argument callable that is
not a class) are resolved by ``resolve()`` immediately before formatting.
"""

import re
from datetime import date, datetime, time, timedelta
from typing import Any, Callable, Optional

from .errors import CallerError

_BARE_VALUE = re.compile(r"\A[\w,.:@\-\[\]]+\Z", re.ASCII)
_WHITESPACE = re.compile(r"\s+")
_KEY_SEPARATORS = re.compile(r"[^-a-z0-9.#]+")


class Deferred:
    """A value computed at flush time rather than at call time.

    The producer is invoked with no arguments on every flush and its result is
    never cached, which makes counters and clocks possible:

    Example:
        >>> import itertools
        >>> ticks = itertools.count(1)
        >>> value = Deferred(lambda: next(ticks))
        >>> value.resolve(), value.resolve()
        (1, 2)

    Plain functions and lambdas passed as values are treated the same way;
    ``Deferred`` exists for callables that should be explicit about it.
    """

    __slots__ = ("producer",)

    def __init__(self, producer: Callable[[], Any]) -> None:
        if not callable(producer):
            raise CallerError(
                f"Deferred expects a zero-argument callable, got {type(producer).__name__}"
            )
        self.producer = producer

    def resolve(self) -> Any:
        return self.producer()

    def __repr__(self) -> str:  # pragma: no cover
        return f"Deferred({self.producer!r})"


def is_deferred(value: Any) -> bool:
    """Return True if ``value`` must be invoked to obtain the real value."""
    if isinstance(value, Deferred):
        return True
    return callable(value) and not isinstance(value, type)


def resolve(value: Any) -> Any:
    """Resolve a deferred value; return anything else unchanged."""
    if isinstance(value, Deferred):
        return value.resolve()
    if is_deferred(value):
        return value()
    return value


def default_key_formatter(key: Any) -> str:
    """Normalise a key: trim, lowercase, collapse disallowed runs into ``-``.

    Example:
        >>> default_key_formatter(" Hello World ")
        'hello-world'
        >>> default_key_formatter("foo_bar")
        'foo-bar'
    """
    return _KEY_SEPARATORS.sub("-", str(key).strip().lower())


def quote(text: str) -> str:
    """Return ``text`` bare if it is bare-safe, else as a quoted logfmt string."""
    if _BARE_VALUE.match(text):
        return text
    collapsed = _WHITESPACE.sub(" ", text).strip()
    escaped = collapsed.replace("\\", "\\\\").replace('"', '\\"')
    return '"' + escaped + '"'


def _format_datetime(value: datetime) -> str:
    if value.tzinfo is not None and value.utcoffset() == timedelta(0):
        return value.strftime("%Y-%m-%dT%H:%M:%SZ")
    return value.isoformat(timespec="seconds")


def format_value(value: Any, precision: int = 4) -> str:
    """Format a single value, recursing into lists and tuples."""
    if value is True:
        return "true"
    if value is False:
        return "false"
    if value is None:
        return ""
    if isinstance(value, float):
        return f"{value:.{precision}f}"
    if isinstance(value, datetime):
        return _format_datetime(value)
    if isinstance(value, (date, time)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return ",".join(format_value(item, precision) for item in value)
    if isinstance(value, type):
        return quote(value.__name__)
    return quote(str(value))


def format_token(
    key: str,
    value: Any,
    precision: int = 4,
    value_formatter: Optional[Callable[[Any], str]] = None,
) -> Optional[str]:
    """Turn one resolved ``(key, value)`` pair into a token, or None to omit it.

    Args:
        key: The already-formatted key.
        value: The resolved (and scrubbed) value.
        precision: Number of decimal places used for floats.
        value_formatter: Optional replacement for ``format_value``. It is not
            consulted for ``True``, ``False`` or ``None``.

    Returns:
        ``"key"`` for True, ``"key=value"`` for other values, None when the
        token must be left out of the line.
    """
    if value is None or value is False:
        return None
    if value is True:
        return key
    if value_formatter is not None:
        return f"{key}={value_formatter(value)}"
    return f"{key}={format_value(value, precision)}"
