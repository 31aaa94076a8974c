from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Sequence

from ...ledger.model import Event
from ..model import DayTally


class SessionCalculator(ABC):
    """Calculator interface (Strategy Pattern for turning a day's events into totals)."""

    @abstractmethod
    def tally(self, events: Sequence[Event]) -> DayTally:
        raise NotImplementedError
