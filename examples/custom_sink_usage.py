"""examples/custom_sink_usage.py - Implement and plug in custom sinks.

Shows how to subclass Sink to capture lines in memory (useful for tests),
how to route lines into the standard logging module with LoggerSink, and how
to redirect a block to another sink with with_output().

Run:
    python examples/custom_sink_usage.py
"""

import logging
from typing import List

import logmeter
from logmeter import LoggerSink, Sink


# ---------------------------------------------------------------------------
# Custom Sink: In-Memory Collector (great for unit tests)
# ---------------------------------------------------------------------------


class MemorySink(Sink):
    """Stores every line in memory.

    Attributes:
        lines: Each element is one logfmt line without its newline.

    Example:
        >>> sink = MemorySink()
        >>> logmeter.build(sink=sink).log("hello")
        >>> sink.lines
        ['hello']
    """

    def __init__(self) -> None:
        self.lines: List[str] = []

    def write(self, line: str) -> None:
        self.lines.append(line.rstrip("\n"))


def scrub_secrets(key: str, value):
    """Hide anything that looks like a credential; drop raw tokens entirely."""
    if key == "token":
        return None
    if "password" in key:
        return "[scrubbed]"
    return value


# ---------------------------------------------------------------------------
# Demo
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    # --- Demo 1: MemorySink with a scrubber ---
    print("=" * 60)
    print("Demo 1: MemorySink (all lines captured in-memory)")
    print("=" * 60)
    memory = MemorySink()
    emitter = logmeter.build(sink=memory, scrubber=scrub_secrets)
    emitter.log("login", user="bob", db_password="hunter2", token="abc123")
    for line in memory.lines:
        print(f"  {line}")

    print()

    # --- Demo 2: LoggerSink feeding the logging pipeline ---
    print("=" * 60)
    print("Demo 2: LoggerSink (lines become LogRecords)")
    print("=" * 60)
    emitter = logmeter.build(sink=LoggerSink(logging.getLogger("metrics")))
    emitter.count("jobs.started")

    # --- Demo 3: temporary redirection ---
    with emitter.with_output(memory):
        emitter.count("jobs.redirected")
    print(f"  redirected: {memory.lines[-1]}")
