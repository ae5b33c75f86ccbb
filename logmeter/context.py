"""context.py - Scoped context layers contributed to every log line.

A ContextLayer is one set of key/value pairs (or a zero-argument producer of
one) that an emitter adds to each line while the layer is on its stack. The
ContextStack holds the layers of one emitter, oldest first; when two layers
set the same key, the more recently pushed one wins.

Layers can be built from:

    mapping     ``{"request_id": "abc"}``  copied at push time
    tag         ``"retry"``                means ``{"retry": True}``
    producer    ``lambda: {"user": current_user()}``  called per line

The stack is owned by a single emitter and therefore by a single thread; it
does no locking.
"""

import enum
import numbers
from contextlib import contextmanager
from types import MappingProxyType
from typing import Any, Callable, Iterable, Iterator, List, Mapping, Optional

from .errors import CallerError

TAG_TYPES = (str, numbers.Number, enum.Enum)


def is_tag(value: Any) -> bool:
    """Return True if ``value`` can be used as a boolean-present marker."""
    return isinstance(value, TAG_TYPES)


class ContextLayer:
    """An immutable key/value snapshot, or a deferred producer of one.

    Attributes:
        _pairs: Read-only view of the snapshot, None for a producer layer.
        _producer: Zero-argument callable returning a mapping, None for a
            snapshot layer.

    Example:
        >>> ContextLayer.from_argument("retry").resolve()
        mappingproxy({'retry': True})
        >>> ContextLayer.from_argument(lambda: {"n": 1}).resolve()
        {'n': 1}
    """

    __slots__ = ("_pairs", "_producer")

    def __init__(
        self,
        pairs: Optional[Mapping[Any, Any]] = None,
        producer: Optional[Callable[[], Mapping[Any, Any]]] = None,
    ) -> None:
        if producer is not None and not callable(producer):
            raise CallerError(
                f"context producer must be callable, got {type(producer).__name__}"
            )
        self._pairs = MappingProxyType(dict(pairs or {})) if producer is None else None
        self._producer = producer

    @classmethod
    def from_argument(cls, argument: Any) -> "ContextLayer":
        """Build a layer from a mapping, a tag, or a zero-argument producer.

        Raises:
            CallerError: If ``argument`` is none of those.
        """
        if isinstance(argument, ContextLayer):
            return argument
        if isinstance(argument, Mapping):
            return cls(pairs=argument)
        if is_tag(argument):
            return cls(pairs={argument: True})
        if callable(argument) and not isinstance(argument, type):
            return cls(producer=argument)
        raise CallerError(
            "context layers must be mappings, tags or zero-argument callables, "
            f"got {type(argument).__name__}"
        )

    @property
    def deferred(self) -> bool:
        return self._producer is not None

    def resolve(self) -> Mapping[Any, Any]:
        """Return the layer's pairs, invoking the producer if there is one.

        Raises:
            CallerError: If a producer returns something other than a mapping
                (``None`` is accepted and means an empty layer).
        """
        if self._producer is None:
            return self._pairs
        pairs = self._producer()
        if pairs is None:
            return {}
        if not isinstance(pairs, Mapping):
            raise CallerError(
                f"context producer must return a mapping, got {type(pairs).__name__}"
            )
        return pairs


class ContextStack:
    """LIFO stack of ContextLayers belonging to one emitter.

    Example:
        >>> stack = ContextStack()
        >>> with stack.pushed([ContextLayer({"a": 1})]):
        ...     len(stack)
        1
        >>> len(stack)
        0
    """

    def __init__(self, layers: Iterable[ContextLayer] = ()) -> None:
        self._layers: List[ContextLayer] = list(layers)

    def push(self, layers: Iterable[ContextLayer]) -> int:
        """Push ``layers`` (oldest first) and return the depth before the push.

        The returned depth is what ``truncate()`` expects to undo this push.
        """
        depth = len(self._layers)
        self._layers.extend(layers)
        return depth

    def truncate(self, depth: int) -> None:
        """Drop every layer above ``depth``."""
        del self._layers[depth:]

    @contextmanager
    def pushed(self, layers: Iterable[ContextLayer]) -> Iterator["ContextStack"]:
        """Push ``layers`` for the duration of a ``with`` block.

        The layers are removed on every exit path, including exceptions.
        """
        depth = self.push(layers)
        try:
            yield self
        finally:
            self.truncate(depth)

    def copy(self) -> "ContextStack":
        """Return a new stack holding the same layers.

        Layers are immutable, so sharing them between the copies is safe.
        """
        return ContextStack(self._layers)

    def __iter__(self) -> Iterator[ContextLayer]:
        """Iterate layers from oldest to most recently pushed."""
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)
