"""
Outcome Tracking Middleware — counts handler outcomes per event type.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field

from wetdry.core.bus import Delivery, MiddlewareNext
from wetdry.core.events import Event
from wetdry.core.types import Outcome

logger = logging.getLogger(__name__)


@dataclass
class OutcomeTracker:
    """
    Tallies what happened to every delivered event.

    Usage:
        tracker = OutcomeTracker()
        worker.use(tracker.middleware)

        # After some pushes...
        print(tracker.count("push", Outcome.PRESENT_FAILED))
    """

    deliveries: Counter = field(default_factory=Counter)
    outcomes: Counter = field(default_factory=Counter)
    handler_errors: int = 0

    def count(self, event_type: str, outcome: Outcome) -> int:
        return self.outcomes[(event_type, outcome)]

    @property
    def failure_count(self) -> int:
        return sum(n for (_, o), n in self.outcomes.items() if o is not Outcome.OK)

    def summary(self) -> dict[str, dict[str, int]]:
        result: dict[str, dict[str, int]] = {}
        for (event_type, outcome), n in sorted(
            self.outcomes.items(), key=lambda kv: (kv[0][0], kv[0][1].value)
        ):
            result.setdefault(event_type, {})[outcome.value] = n
        return result

    async def middleware(self, event: Event, next_handler: MiddlewareNext) -> Delivery:
        delivery = await next_handler(event)

        self.deliveries[event.type] += 1
        for result in delivery.results:
            for outcome in result.outcomes:
                self.outcomes[(event.type, outcome)] += 1
        self.handler_errors += len(delivery.errors)

        if not delivery.ok:
            logger.debug(
                f"{event.type} finished with failures: "
                f"{[o.value for r in delivery.results for o in r.failures()]}"
            )
        return delivery
