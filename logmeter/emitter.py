"""emitter.py - The logfmt line emitter.

Emitter composes each line from three sources, lowest precedence first:

    1. the configured ``source`` tag and ``base_context``
    2. scoped context layers, oldest to most recently pushed
    3. the arguments of the call itself

and writes the result into its LogBuffer. Outside of ``batch()`` every call
flushes immediately, producing exactly one line on the current sink.

Block-style operations are context managers::

    emitter = logmeter.build()

    with emitter.with_context(request_id="r-42"):
        emitter.log("cache-miss", key="user:7")   # request_id=r-42 cache-miss key=user:7

    with emitter.timed("sync", account=7):        # sync account=7 at=start
        sync_account(7)                           # sync account=7 at=finish elapsed=0.0123

    @emitter.timed("nightly")
    def nightly():
        ...

An Emitter is not thread-safe. Use ``logmeter.threadsafe.ThreadSafe`` to give
each thread its own clone.
"""

import time
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple, Union

from .buffer import LogBuffer
from .configuration import Configuration
from .context import ContextLayer, ContextStack, is_tag
from .errors import CallerError, FrozenEmitterError
from .formatting import format_token, resolve
from .sinks import NullSink, ensure_sink

# Module-level so tests can substitute a fake clock.
_clock = time.monotonic


def _unwrap(args: Sequence[Any], pairs: Mapping[Any, Any]) -> List[Tuple[Any, Any]]:
    """Turn positional tags/mappings plus keyword pairs into ordered raw pairs.

    Keys are not deduplicated here: two raw keys may only collide once
    formatted, and the later one must win.
    """
    params: List[Tuple[Any, Any]] = []
    for arg in args:
        if arg is None:
            continue
        if isinstance(arg, Mapping):
            params.extend(arg.items())
        elif is_tag(arg):
            params.append((arg, True))
        else:
            raise CallerError(
                f"log arguments must be tags or mappings, got {type(arg).__name__}"
            )
    params.extend(pairs.items())
    return params


def _layers(args: Sequence[Any], pairs: Mapping[Any, Any]) -> List[ContextLayer]:
    layers = [ContextLayer.from_argument(arg) for arg in args if arg is not None]
    if pairs:
        layers.append(ContextLayer(pairs=pairs))
    return layers


class Emitter:
    """Compose, buffer and write logfmt lines.

    Attributes:
        _configuration (Configuration): Shared, read-only settings.
        _buffer (LogBuffer): Pairs waiting for the next flush.
        _contexts (ContextStack): Scoped context layers.
        _outputs (list): Sink stack; the last element, if any, overrides
            ``configuration.sink``.
        _batch_depth (int): Number of open ``batch()`` scopes.
        _frozen (bool): Set by ``freeze()``; a frozen emitter is only a
            template for clones.
    """

    def __init__(self, configuration: Optional[Configuration] = None) -> None:
        self._configuration = configuration if configuration is not None else Configuration()
        self._buffer = LogBuffer()
        self._contexts = ContextStack()
        self._outputs: List[Any] = []
        self._batch_depth = 0
        self._frozen = False

    # ---------------------------------------------------------------------- #
    # Public interface
    # ---------------------------------------------------------------------- #

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> "Emitter":
        """Mark this emitter as a template and return it.

        A frozen emitter raises FrozenEmitterError on any operation that would
        change its buffer, context stack or sink stack. ``clone()`` and
        ``context()`` still work and return unfrozen emitters.
        """
        self._frozen = True
        return self

    def log(self, *args: Any, **pairs: Any) -> None:
        """Log tags and key/value pairs as one line.

        Positional strings, numbers and enum members are tags (emitted as a
        bare key); positional mappings and keyword arguments are key/value
        pairs. ``None`` arguments are ignored.

        Example:
            >>> emitter.log("signup", {"User ID": 7}, plan="pro")
            ... # signup user-id=7 plan=pro
        """
        self._write(self._compose(_unwrap(args, pairs)))

    @contextmanager
    def timed(self, *args: Any, **pairs: Any) -> Iterator["Emitter"]:
        """Wrap a block with ``at=start`` and ``at=finish``/``at=exception`` lines.

        The closing line repeats the payload and adds ``elapsed`` in seconds.
        On error it also carries ``exception=<qualified type name>`` and
        ``message=<text>``; the error is then re-raised unchanged. Works as a
        decorator as well, in which case the function's return value is passed
        through.
        """
        payload = self._compose(_unwrap(args, pairs))
        self._write({**payload, **self._formatted({"at": "start"})})

        started = _clock()
        try:
            yield self
        except BaseException as exc:
            elapsed = _clock() - started
            status = {
                "at": "exception",
                "exception": type(exc).__qualname__,
                "message": str(exc).strip(),
                "elapsed": elapsed,
            }
            self._write({**payload, **self._formatted(status)})
            raise
        elapsed = _clock() - started
        self._write({**payload, **self._formatted({"at": "finish", "elapsed": elapsed})})

    def measure(self, metric: Any, value: Any, unit: Optional[str] = None) -> None:
        """Log ``measure#<prefix>.<metric>.<unit>=<value>``."""
        self._log_metric("measure", metric, value, unit)

    def sample(self, metric: Any, value: Any, unit: Optional[str] = None) -> None:
        """Log ``sample#<prefix>.<metric>.<unit>=<value>``."""
        self._log_metric("sample", metric, value, unit)

    def count(self, metric: Any, value: Any = 1) -> None:
        """Log ``count#<prefix>.<metric>=<value>``."""
        self._log_metric("count", metric, value)

    def unique(self, metric: Any, value: Any) -> None:
        """Log ``unique#<prefix>.<metric>=<value>``."""
        self._log_metric("unique", metric, value)

    def context(self, *args: Any, **pairs: Any) -> "Emitter":
        """Return a new emitter carrying this emitter's context plus new layers.

        This emitter is left untouched. Each positional argument is one layer
        (a mapping, a tag, or a zero-argument callable returning a mapping);
        keyword arguments form one further layer.
        """
        derived = self.clone()
        derived._contexts.push(_layers(args, pairs))
        return derived

    @contextmanager
    def with_context(self, *args: Any, **pairs: Any) -> Iterator["Emitter"]:
        """Add context layers to this emitter for the duration of a block."""
        self._ensure_mutable()
        with self._contexts.pushed(_layers(args, pairs)):
            yield self

    @contextmanager
    def with_elapsed(self) -> Iterator["Emitter"]:
        """Add ``elapsed=<seconds since entry>`` to every line in the block."""
        started = _clock()
        with self.with_context(lambda: {"elapsed": _clock() - started}):
            yield self

    @contextmanager
    def silence(self) -> Iterator["Emitter"]:
        """Discard every line written inside the block."""
        with self.with_output(NullSink()):
            yield self

    def mute(self) -> None:
        """Discard lines until ``unmute()`` is called."""
        self._ensure_mutable()
        self._outputs.append(NullSink())

    def unmute(self) -> None:
        """Undo the most recent ``mute()``. Does nothing if nothing is pushed."""
        self._ensure_mutable()
        if self._outputs:
            self._outputs.pop()

    @contextmanager
    def with_output(self, sink: Any) -> Iterator["Emitter"]:
        """Send lines to ``sink`` for the duration of a block."""
        self._ensure_mutable()
        depth = len(self._outputs)
        self._outputs.append(ensure_sink(sink))
        try:
            yield self
        finally:
            del self._outputs[depth:]

    @contextmanager
    def batch(self) -> Iterator["Emitter"]:
        """Collect every call in the block into a single line.

        Later writes of a key overwrite earlier ones. Nested batches join the
        outermost one; the line is written when the outermost batch exits.
        """
        self._ensure_mutable()
        self._batch_depth += 1
        try:
            yield self
        finally:
            self._batch_depth -= 1
            if not self._batch_depth:
                self._flush()

    def clone(self) -> "Emitter":
        """Return an emitter with the same configuration, context and sinks.

        The clone starts with an empty buffer, outside any batch, unfrozen.
        """
        twin = type(self)(configuration=self._configuration)
        twin._contexts = self._contexts.copy()
        twin._outputs = list(self._outputs)
        return twin

    # ---------------------------------------------------------------------- #
    # Private helpers
    # ---------------------------------------------------------------------- #

    def _ensure_mutable(self) -> None:
        if self._frozen:
            raise FrozenEmitterError(
                "this emitter is a frozen template; log through a clone instead"
            )

    def _formatted(self, pairs: Union[Mapping[Any, Any], Iterable[Tuple[Any, Any]]]) -> Dict[str, Any]:
        key_formatter = self._configuration.key_formatter
        items = pairs.items() if isinstance(pairs, Mapping) else pairs
        return {key_formatter(key): value for key, value in items}

    def _compose(self, params: Iterable[Tuple[Any, Any]]) -> Dict[str, Any]:
        """Merge source, base context, context layers and call arguments.

        Later sources override earlier ones key by key; a key keeps the
        position where it first appeared.
        """
        config = self._configuration
        merged: Dict[str, Any] = {}
        if config.source:
            merged.update(self._formatted({"source": config.source}))
        if config.base_context is not None:
            base = ContextLayer.from_argument(config.base_context)
            merged.update(self._formatted(base.resolve()))
        for layer in self._contexts:
            merged.update(self._formatted(layer.resolve()))
        merged.update(self._formatted(params))
        return merged

    def _log_metric(self, verb: str, metric: Any, value: Any, unit: Optional[str] = None) -> None:
        parts = (self._configuration.prefix, metric, unit)
        name = ".".join(str(part) for part in parts if part is not None)
        self.log({f"{verb}#{name}": value})

    def _sink(self) -> Any:
        return self._outputs[-1] if self._outputs else self._configuration.sink

    def _write(self, pairs: Mapping[str, Any]) -> None:
        self._ensure_mutable()
        self._buffer.update(pairs)
        if not self._batch_depth:
            self._flush()

    def _flush(self) -> None:
        """Format the buffer into one line and write it to the current sink.

        The buffer is cleared before any hook runs, so a failing scrubber or
        formatter propagates to the caller without leaking pairs into the next
        line. Pairs whose formatted key is empty are dropped, and nothing is
        written when every token is omitted.
        """
        config = self._configuration
        entries = self._buffer.flash()

        tokens = []
        for key, raw in entries:
            if not key:
                continue
            value = resolve(raw)
            if config.scrubber is not None:
                value = config.scrubber(key, value)
            token = format_token(key, value, config.float_precision, config.value_formatter)
            if token is not None:
                tokens.append((key, token))

        if not tokens:
            return
        if config.sort:
            tokens.sort(key=lambda item: item[0])
        self._sink().write(" ".join(token for _, token in tokens) + "\n")
