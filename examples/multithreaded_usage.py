"""examples/multithreaded_usage.py - Trace loggers across concurrent requests.

Two worker threads share one context logger. Each request derives its own
trace logger, so interleaved lines in the shared output can still be told
apart by their trace="..." segment. Every line is written whole; parts of two
lines never mix.

Run:
    python examples/multithreaded_usage.py | grep 'trace="order-1002"'
"""

import sys
import threading
import time

import contrail

# ---------------------------------------------------------------------------
# Setup: one logger shared by all threads
# ---------------------------------------------------------------------------
log = contrail.new_writer("order_service", sys.stdout)


# ---------------------------------------------------------------------------
# Business logic
# ---------------------------------------------------------------------------


def fetch_inventory(req: contrail.Logger, product_id: int) -> int:
    """Simulate a DB read for product stock."""
    req.infof("fetching inventory: product_id=%d", product_id)
    time.sleep(0.01)  # simulate DB latency
    stock = {1: 10, 2: 0, 3: 5}  # product 2 is out-of-stock
    return stock.get(product_id, 0)


def place_order(order_id: int, product_id: int, qty: int) -> bool:
    """Attempt to place an order for the given product and quantity."""
    req = log.new_trace(f"order-{order_id}")
    req.infof("order received: product_id=%d qty=%d", product_id, qty)

    stock = fetch_inventory(req, product_id)
    if stock < qty:
        req.errorf("insufficient stock: requested=%d available=%d", qty, stock)
        return False

    req.info("order placed")
    return True


if __name__ == "__main__":
    threads = [
        threading.Thread(target=place_order, args=(1001, 1, 3), name="Thread-A"),
        threading.Thread(target=place_order, args=(1002, 2, 1), name="Thread-B"),
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
