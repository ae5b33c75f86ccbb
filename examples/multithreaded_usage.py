"""examples/multithreaded_usage.py - Thread isolation demo.

Demonstrates that each thread logging through one ThreadSafe wrapper keeps
its own context, batches and silencing. Worker-2 silences itself and opens a
batch, yet Worker-1's lines are unaffected and never pick up Worker-2's
context, and vice versa.

Run:
    python examples/multithreaded_usage.py
"""

import threading
import time

import logmeter
from logmeter import StreamSink, ThreadSafe

# ---------------------------------------------------------------------------
# Setup: one locked stdout sink, one wrapper shared by all threads
# ---------------------------------------------------------------------------
meter = ThreadSafe(logmeter.build(sink=StreamSink(), source="workers"))


# ---------------------------------------------------------------------------
# Business logic
# ---------------------------------------------------------------------------


def fetch_inventory(product_id: int) -> int:
    """Simulate a DB read for product stock."""
    with meter.timed("fetch-inventory", product=product_id):
        time.sleep(0.01)
        return {1: 10, 2: 0, 3: 5}.get(product_id, 0)


def worker(name: str, product_id: int) -> None:
    with meter.with_context(worker=name):
        stock = fetch_inventory(product_id)
        with meter.batch():
            meter.log(product=product_id)
            meter.sample("stock", stock)
        if stock == 0:
            with meter.silence():
                meter.log("this line is discarded")


# ---------------------------------------------------------------------------
# Demo
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    threads = [
        threading.Thread(target=worker, args=(f"worker-{i}", product_id), name=f"Worker-{i}")
        for i, product_id in enumerate((1, 2, 3), start=1)
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    # Turn everything off, from every thread, for good.
    meter.disable()
    meter.log("never printed")
