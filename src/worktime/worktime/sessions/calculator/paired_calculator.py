from __future__ import annotations

from typing import Sequence

from ...common.formatting import minutes_to_hours
from ...ledger.model import Event
from ..model import DayTally
from .base import SessionCalculator


class PairedSessionCalculator(SessionCalculator):
    """Standard rule: sum of (check_out - check_in) over closed pairs.

    The walk must never raise on a malformed ledger:
    - a check-out with nothing open is skipped;
    - a check-in while one is already open is ignored, so the first unmatched
      check-in stays the open one;
    - a trailing open check-in contributes nothing to the total.
    Each pair contributes whole elapsed minutes.
    """

    def tally(self, events: Sequence[Event]) -> DayTally:
        ordered = sorted(events, key=lambda e: (e.occurred_at, e.event_id))

        total_minutes = 0
        open_in = None
        first_in = None
        last_in = None
        last_out = None
        check_ins = 0
        check_outs = 0

        for e in ordered:
            if e.is_check_in:
                check_ins += 1
                last_in = e.occurred_at
                if first_in is None:
                    first_in = e.occurred_at
                if open_in is None:
                    open_in = e.occurred_at
            elif e.is_check_out:
                check_outs += 1
                last_out = e.occurred_at
                if open_in is not None:
                    total_minutes += max(int((e.occurred_at - open_in).total_seconds() // 60), 0)
                    open_in = None

        return DayTally(
            total_minutes=total_minutes,
            total_hours=minutes_to_hours(total_minutes),
            first_check_in=first_in,
            last_check_out=last_out,
            open_check_in=open_in,
            last_check_in=last_in,
            is_complete=bool(ordered) and ordered[-1].is_check_out,
            check_ins=check_ins,
            check_outs=check_outs,
        )
