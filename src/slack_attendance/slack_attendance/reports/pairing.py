from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Sequence

from ..core.enums import AttendanceAction


@dataclass(frozen=True)
class TimedEvent:
    at: datetime
    action: AttendanceAction


@dataclass(frozen=True)
class WorkPair:
    start: datetime
    end: datetime

    @property
    def duration(self) -> timedelta:
        return self.end - self.start


class PairingPolicy(ABC):
    """How one day's events are matched into worked periods (Strategy Pattern)."""

    @abstractmethod
    def pair(self, events: Sequence[TimedEvent]) -> list[WorkPair]:
        raise NotImplementedError


class AdjacentPairingPolicy(PairingPolicy):
    """A start immediately followed by an end is a pair; anything else is skipped.

    ``events`` must already be sorted chronologically. With
    [start 09:00, start 09:05, end 17:00] the 09:00 start is dropped and
    (09:05, 17:00) pairs; a trailing start or a leading end is dropped too.
    """

    def pair(self, events: Sequence[TimedEvent]) -> list[WorkPair]:
        pairs: list[WorkPair] = []
        i = 0
        while i < len(events) - 1:
            current, following = events[i], events[i + 1]
            if current.action == AttendanceAction.START and following.action == AttendanceAction.END:
                pairs.append(WorkPair(start=current.at, end=following.at))
                i += 2
                continue
            i += 1
        return pairs
