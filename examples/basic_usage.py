"""examples/basic_usage.py - Tags, pairs, context, timed blocks and batches.

Walks through the everyday calls of an emitter writing logfmt lines to
stdout. Every comment shows the line the call prints.

Run:
    python examples/basic_usage.py
"""

import time

import logmeter

# ---------------------------------------------------------------------------
# Setup: one emitter, a source tag on every line
# ---------------------------------------------------------------------------
emitter = logmeter.build(source="orders", prefix="shop")


# ---------------------------------------------------------------------------
# Business logic
# ---------------------------------------------------------------------------


@emitter.timed("charge")
def charge(order_id: int, amount: float) -> str:
    """Simulate a payment provider call."""
    time.sleep(0.01)
    if amount > 1000:
        raise ValueError("limit exceeded")
    emitter.log("charged", order=order_id, amount=amount)
    return f"receipt-{order_id}"


def place_order(order_id: int, amount: float) -> None:
    with emitter.with_context(order=order_id):
        emitter.count("orders.placed")
        try:
            charge(order_id, amount)
        except ValueError:
            emitter.count("orders.rejected")


# ---------------------------------------------------------------------------
# Demo
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    # source=orders boot version=1.2.0
    emitter.log("boot", version="1.2.0")

    # source=orders order=1 count#shop.orders.placed=1
    # source=orders order=1 charge at=start
    # source=orders order=1 charged amount=19.9900
    # source=orders order=1 charge at=finish elapsed=0.0101
    place_order(1, 19.99)

    # ... charge at=exception exception=ValueError message="limit exceeded" elapsed=...
    place_order(2, 5000)

    # source=orders measure#shop.db.query.ms=12 rows=40 table=orders
    with emitter.batch():
        emitter.measure("db.query", 12, unit="ms")
        emitter.log(rows=40, table="orders")

    # source=orders elapsed=0.0200 done
    with emitter.with_elapsed():
        time.sleep(0.02)
        emitter.log("done")
