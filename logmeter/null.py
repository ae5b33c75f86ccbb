"""null.py - An emitter stand-in that accepts every call and does nothing.

ThreadSafe routes all calls here once it has been disabled. Block operations
still run their block (and, used as decorators, still return the function's
result); they just never produce a line.
"""

from contextlib import contextmanager
from typing import Any, Iterator, Optional

from .configuration import Configuration
from .sinks import NullSink


class NullEmitter:
    """Emitter-compatible receiver with no output and no state."""

    def __init__(self, configuration: Optional[Configuration] = None) -> None:
        self._configuration = configuration if configuration is not None else Configuration(sink=NullSink())

    @property
    def configuration(self) -> Configuration:
        return self._configuration

    @property
    def frozen(self) -> bool:
        return False

    def log(self, *args: Any, **pairs: Any) -> None:
        return None

    def measure(self, metric: Any, value: Any, unit: Optional[str] = None) -> None:
        return None

    def sample(self, metric: Any, value: Any, unit: Optional[str] = None) -> None:
        return None

    def count(self, metric: Any, value: Any = 1) -> None:
        return None

    def unique(self, metric: Any, value: Any) -> None:
        return None

    def mute(self) -> None:
        return None

    def unmute(self) -> None:
        return None

    def context(self, *args: Any, **pairs: Any) -> "NullEmitter":
        return self

    def clone(self) -> "NullEmitter":
        return self

    @contextmanager
    def _passthrough(self) -> Iterator["NullEmitter"]:
        yield self

    def timed(self, *args: Any, **pairs: Any):
        return self._passthrough()

    def with_context(self, *args: Any, **pairs: Any):
        return self._passthrough()

    def with_elapsed(self):
        return self._passthrough()

    def with_output(self, sink: Any):
        return self._passthrough()

    def silence(self):
        return self._passthrough()

    def batch(self):
        return self._passthrough()
