from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from pin_service.errors import AlreadyUsed
from pin_service.lifecycle import PinLifecycle

ATTEMPTS = 50


def test_exactly_one_concurrent_redeem_succeeds(temp_settings, store):
    lifecycle = PinLifecycle(temp_settings, store)
    issued = lifecycle.issue(owner_id="u1")
    barrier = threading.Barrier(ATTEMPTS)

    def attempt():
        barrier.wait(timeout=30)
        try:
            return lifecycle.redeem(issued.pin)
        except AlreadyUsed as exc:
            return exc

    with ThreadPoolExecutor(max_workers=ATTEMPTS) as pool:
        outcomes = [future.result() for future in [pool.submit(attempt) for _ in range(ATTEMPTS)]]

    winners = [outcome for outcome in outcomes if not isinstance(outcome, AlreadyUsed)]
    losers = [outcome for outcome in outcomes if isinstance(outcome, AlreadyUsed)]
    assert len(winners) == 1
    assert len(losers) == ATTEMPTS - 1

    stored = store.find_by_code(issued.pin)
    assert stored.used_at == winners[0].used_at
