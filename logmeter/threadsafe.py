"""threadsafe.py - Per-thread isolation for a shared emitter.

ThreadSafe wraps a template Emitter and exposes the same call surface. Every
call is routed to a clone of the template that belongs to the calling thread,
so no two threads ever touch the same buffer, context stack or sink stack.
The emitter state itself is never locked; only the registry that maps threads
to their clones is.

Typical usage::

    import logmeter
    from logmeter.threadsafe import ThreadSafe

    meter = ThreadSafe(logmeter.build(source="api"))

    def handle(request):
        with meter.with_context(request_id=request.id):   # this thread only
            meter.log("handled")
"""

import logging
import threading
import weakref
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Tuple

from .configuration import Configuration
from .emitter import Emitter
from .null import NullEmitter

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Module-level registry of per-thread clones.
#
# Keyed by (id(template), thread ident). Each entry keeps weak references to
# its thread and template so that a reused ident or id is detected and dead
# entries can be pruned. ``_registry_lock`` guards every access.
# ---------------------------------------------------------------------------


class _Entry:
    __slots__ = ("thread", "template", "emitter")

    def __init__(self, thread: threading.Thread, template: Emitter, emitter: Emitter) -> None:
        self.thread = weakref.ref(thread)
        self.template = weakref.ref(template)
        self.emitter = emitter

    def owned_by(self, thread: threading.Thread, template: Emitter) -> bool:
        return self.thread() is thread and self.template() is template

    def alive(self) -> bool:
        thread = self.thread()
        return thread is not None and thread.is_alive() and self.template() is not None


_registry: Dict[Tuple[int, Optional[int]], _Entry] = {}
_registry_lock = threading.Lock()


def _prune() -> int:
    """Drop entries for finished threads or collected templates. Lock held."""
    dead = [key for key, entry in _registry.items() if not entry.alive()]
    for key in dead:
        del _registry[key]
    return len(dead)


def thread_emitter(template: Emitter) -> Emitter:
    """Return the calling thread's clone of ``template``, creating it if needed.

    On first access within a thread a clone is created and cached, so later
    calls from the same thread always get the same instance. Pruning happens
    only on a miss: creating a clone first drops the entries of threads that
    have finished or templates that were collected. A hit never prunes.

    Args:
        template: The emitter to clone. It is never written to.

    Returns:
        The Emitter owned by the current thread.
    """
    thread = threading.current_thread()
    key = (id(template), thread.ident)
    with _registry_lock:
        entry = _registry.get(key)
        if entry is not None and entry.owned_by(thread, template):
            return entry.emitter
        pruned = _prune()
        emitter = template.clone()
        _registry[key] = _Entry(thread, template, emitter)
    logger.debug(
        "created emitter clone for thread %s (pruned %d stale entries)", thread.name, pruned
    )
    return emitter


_DISABLED = NullEmitter()


class ThreadSafe:
    """Routes each call to the calling thread's own clone of a template emitter.

    Attributes:
        _template (Emitter): Frozen emitter that clones are made from.
        _switch (threading.Event): Kill-switch shared with every wrapper derived
            through ``context()``. Once set, calls go to a NullEmitter.

    Example:
        >>> meter = ThreadSafe(Emitter())
        >>> meter.log("boot")      # written through this thread's clone
        >>> meter.disable()
        >>> meter.log("ignored")   # nothing is written, from any thread
    """

    def __init__(self, emitter: Emitter, _switch: Optional[threading.Event] = None) -> None:
        """Wrap ``emitter``, freezing it so it can only serve as a template."""
        self._template = emitter.freeze()
        self._switch = _switch if _switch is not None else threading.Event()

    @property
    def configuration(self) -> Configuration:
        return self._template.configuration

    @property
    def template(self) -> Emitter:
        return self._template

    @property
    def disabled(self) -> bool:
        return self._switch.is_set()

    def disable(self) -> None:
        """Silence this wrapper, and every wrapper derived from it, for good."""
        self._switch.set()

    def _receiver(self):
        if self._switch.is_set():
            return _DISABLED
        return thread_emitter(self._template)

    # ---------------------------------------------------------------------- #
    # Forwarded calls
    # ---------------------------------------------------------------------- #

    def log(self, *args: Any, **pairs: Any) -> None:
        self._receiver().log(*args, **pairs)

    def measure(self, metric: Any, value: Any, unit: Optional[str] = None) -> None:
        self._receiver().measure(metric, value, unit=unit)

    def sample(self, metric: Any, value: Any, unit: Optional[str] = None) -> None:
        self._receiver().sample(metric, value, unit=unit)

    def count(self, metric: Any, value: Any = 1) -> None:
        self._receiver().count(metric, value)

    def unique(self, metric: Any, value: Any) -> None:
        self._receiver().unique(metric, value)

    def mute(self) -> None:
        self._receiver().mute()

    def unmute(self) -> None:
        self._receiver().unmute()

    def clone(self):
        return self._receiver().clone()

    def context(self, *args: Any, **pairs: Any) -> "ThreadSafe":
        """Return a wrapper around a derived emitter, sharing the kill-switch.

        The derived emitter starts from the calling thread's clone, so it
        carries any block context that thread has open.
        """
        source = self._template if self._switch.is_set() else self._receiver()
        return ThreadSafe(source.context(*args, **pairs), _switch=self._switch)

    # Block operations resolve the receiver on entry, so that a decorator
    # built from them on one thread still logs through the calling thread.

    @contextmanager
    def timed(self, *args: Any, **pairs: Any) -> Iterator[Any]:
        with self._receiver().timed(*args, **pairs) as receiver:
            yield receiver

    @contextmanager
    def with_context(self, *args: Any, **pairs: Any) -> Iterator[Any]:
        with self._receiver().with_context(*args, **pairs) as receiver:
            yield receiver

    @contextmanager
    def with_elapsed(self) -> Iterator[Any]:
        with self._receiver().with_elapsed() as receiver:
            yield receiver

    @contextmanager
    def with_output(self, sink: Any) -> Iterator[Any]:
        with self._receiver().with_output(sink) as receiver:
            yield receiver

    @contextmanager
    def silence(self) -> Iterator[Any]:
        with self._receiver().silence() as receiver:
            yield receiver

    @contextmanager
    def batch(self) -> Iterator[Any]:
        with self._receiver().batch() as receiver:
            yield receiver
