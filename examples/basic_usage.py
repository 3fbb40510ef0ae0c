"""examples/basic_usage.py - contrail logging demo.

Demonstrates:
    Scenario A: a context logger for a subsystem, ctx="payments"
    Scenario B: per-request trace loggers, ctx="payments" trace="..."
    Scenario C: verbose lines gated behind v(level)

Run:
    python examples/basic_usage.py
    CONTRAIL_V=2 python examples/basic_usage.py      # also show v(2) lines
"""

import sys

import contrail

# ---------------------------------------------------------------------------
# Logger setup: one logger per subsystem, usually at module import time
# ---------------------------------------------------------------------------
contrail.configure(stream=sys.stdout)
log = contrail.new("payments")


# ===========================================================================
# Scenario A: plain context logging
# ===========================================================================


def start(port: int) -> None:
    log.info("payment service listening on", port)
    log.warningf("running with %d worker(s)", 1)


# ===========================================================================
# Scenario B: one trace logger per request
# ===========================================================================


def get_balance(req: contrail.Logger, user_id: int) -> int:
    """Simulate a DB balance query."""
    req.v(2).infof("querying balance: user_id=%d", user_id)
    return 3_000


def pay(request_id: str, user_id: int, amount: int) -> bool:
    """Simulate a payment flow; every line carries the request's trace id."""
    req = log.new_trace(request_id)
    req.info("payment attempt:", f"user_id={user_id}", f"amount={amount}")

    balance = get_balance(req, user_id)
    if balance < amount:
        req.errorf("insufficient funds (balance=%d, requested=%d)", balance, amount)
        return False

    req.info("payment successful")
    return True


# ---------------------------------------------------------------------------
# Run the scenarios
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    start(8080)
    pay("req-101", user_id=101, amount=1_000)
    pay("req-202", user_id=202, amount=5_000)

    # Scenario C: guard expensive verbose output
    if log.v(3):
        log.v(3).info("balances cache:", {101: 3_000, 202: 3_000})

    print()
    print("Tag used by this logger:", log.header_tag())
