"""configuration.py - Settings shared by every emitter built from them.

A Configuration is filled in once at setup (directly, or through the
``configure`` callback of ``logmeter.build()``) and then handed to an
Emitter. From that point on it is shared, unchanged, by the emitter, all of
its clones and every per-thread copy made by ``ThreadSafe``. Nothing in
logmeter writes to it after handoff.
"""

import sys
from typing import Any, Callable, Mapping, Optional, Union

from .formatting import default_key_formatter
from .sinks import ensure_sink

KeyFormatter = Callable[[Any], str]
ValueFormatter = Callable[[Any], str]
Scrubber = Callable[[str, Any], Any]
BaseContext = Union[Mapping[Any, Any], Callable[[], Mapping[Any, Any]]]


class Configuration:
    """Settings and hooks for an emitter.

    Attributes:
        sink: Default destination for lines; anything with ``write(str)``.
        key_formatter (callable): Maps a raw key to its output form.
        value_formatter (callable | None): Replaces the built-in value
            formatting for non-boolean values when set.
        sort (bool): Sort tokens by key instead of keeping insertion order.
        prefix (str | None): Prepended to metric names by ``measure()`` and
            friends.
        float_precision (int): Decimal places used for floats and elapsed
            times.
        scrubber (callable | None): ``scrubber(key, value)`` returns the value
            to emit, or None to drop the token.
        base_context: Mapping, or zero-argument producer of one, added to every
            line beneath all scoped context.
        source (str | None): Emitted as ``source=<value>`` at the front of
            every line.

    Example:
        >>> config = Configuration(prefix="billing", sort=True)
        >>> @config.format_keys
        ... def upper(key):
        ...     return str(key).upper()
    """

    def __init__(
        self,
        sink: Any = None,
        key_formatter: Optional[KeyFormatter] = None,
        value_formatter: Optional[ValueFormatter] = None,
        sort: bool = False,
        prefix: Optional[str] = None,
        float_precision: int = 4,
        scrubber: Optional[Scrubber] = None,
        base_context: Optional[BaseContext] = None,
        source: Optional[str] = None,
    ) -> None:
        """Create a configuration.

        Raises:
            ValueError: If ``float_precision`` is negative.
            CallerError: If ``sink`` has no ``write()`` method.
        """
        if float_precision < 0:
            raise ValueError(f"float_precision must be >= 0, got {float_precision}")
        self.sink = ensure_sink(sink if sink is not None else sys.stdout)
        self.key_formatter = key_formatter or default_key_formatter
        self.value_formatter = value_formatter
        self.sort = bool(sort)
        self.prefix = prefix
        self.float_precision = float_precision
        self.scrubber = scrubber
        self.base_context = base_context
        self.source = source

    def format_keys(self, formatter: KeyFormatter) -> KeyFormatter:
        """Install ``formatter`` as the key formatter and return it unchanged."""
        self.key_formatter = formatter
        return formatter

    def __repr__(self) -> str:  # pragma: no cover
        return (
            f"Configuration(sink={self.sink!r}, sort={self.sort}, prefix={self.prefix!r}, "
            f"float_precision={self.float_precision}, source={self.source!r})"
        )
