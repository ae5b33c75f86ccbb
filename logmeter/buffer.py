"""buffer.py - Per-emitter line buffer for pending log tokens.

LogBuffer is the in-memory store that collects key/value pairs between a
``log()`` call and the flush that turns them into a single output line.
Outside of a batch the buffer lives for exactly one call; inside a batch it
accumulates every call until the outermost batch scope exits.

Design decisions:
    - Keys are already formatted when they arrive, so a plain ``dict`` gives
      the "last write wins, first position kept" behaviour a logfmt line needs.
    - Values are stored raw. Deferred producers are resolved by the emitter at
      flush time, never here, so each flush observes fresh values.
    - ``flash()`` reads and clears the entries in a single call so that a
      failing formatter or scrubber hook never leaves stale entries behind for
      the next line.
"""

from typing import Any, Dict, List, Mapping, Tuple


class LogBuffer:
    """Ordered mapping of formatted key to raw value.

    Each emitter owns exactly one LogBuffer. Emitters are never shared between
    threads (see ``logmeter.threadsafe``), so the buffer does no locking.

    Example:
        >>> buf = LogBuffer()
        >>> buf.update({"foo": 1})
        >>> buf.update({"bar": True, "foo": 2})
        >>> buf.flash()
        [('foo', 2), ('bar', True)]
        >>> len(buf)
        0
    """

    def __init__(self) -> None:
        self._entries: Dict[str, Any] = {}

    def update(self, pairs: Mapping[str, Any]) -> None:
        """Merge ``pairs`` into the buffer.

        A key that is already present keeps its position and takes the new
        value.

        Args:
            pairs: Mapping of formatted key to raw value.
        """
        self._entries.update(pairs)

    def flash(self) -> List[Tuple[str, Any]]:
        """Return all entries as ``(key, value)`` pairs and clear the buffer.

        Returns:
            A list of entries in insertion order. The buffer is empty after
            the call.
        """
        entries = list(self._entries.items())
        self._entries.clear()
        return entries

    def __len__(self) -> int:
        """Return the current number of entries in the buffer."""
        return len(self._entries)
