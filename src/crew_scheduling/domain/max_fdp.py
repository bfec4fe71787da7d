from __future__ import annotations

from dataclasses import dataclass
from datetime import time, timedelta
from typing import Dict, Optional, Sequence, Tuple

MAX_FDP_SLOTS = 10
DEFAULT_MAX_FDP = timedelta(hours=9)


def segment_index(segments: int) -> int:
    """Slot of the MaxFDP table used for a duty with ``segments`` legs."""
    return 0 if segments <= 2 else segments - 2


@dataclass(frozen=True)
class MaxFDPRule:
    """
    Basic maximum daily flight duty period for duties whose start falls
    in the local time bucket [start, end] (both ends inclusive).

    Attributes
    ----------
    start, end : time
        Local (acclimatised) time-of-day bounds of the bucket.
    limits : Tuple[Optional[timedelta], ...]
        Maximum FDP per slot, see ``segment_index``. Unset slots are None.
    """
    start: time
    end: time
    limits: Tuple[Optional[timedelta], ...] = (None,) * MAX_FDP_SLOTS

    @classmethod
    def from_segments(
        cls,
        start: time,
        end: time,
        max_fdp_by_segments: Dict[int, timedelta],
    ) -> "MaxFDPRule":
        slots = [None] * MAX_FDP_SLOTS
        for segments, limit in max_fdp_by_segments.items():
            idx = segment_index(int(segments))
            if idx >= MAX_FDP_SLOTS:
                raise ValueError(
                    f"MaxFDP segment count {segments} exceeds table size {MAX_FDP_SLOTS}"
                )
            slots[idx] = limit
        return cls(start=start, end=end, limits=tuple(slots))

    def matches(self, local_time: time) -> bool:
        return self.start <= local_time <= self.end

    def max_fdp_for(self, segments: int) -> timedelta:
        idx = segment_index(segments)
        if idx >= len(self.limits) or self.limits[idx] is None:
            return DEFAULT_MAX_FDP
        return self.limits[idx]


@dataclass(frozen=True)
class MaxFDPTable:
    rules: Tuple[MaxFDPRule, ...] = ()

    @classmethod
    def of(cls, rules: Sequence[MaxFDPRule]) -> "MaxFDPTable":
        return cls(rules=tuple(rules))

    def rule_for(self, local_time: time) -> Optional[MaxFDPRule]:
        """
        First rule whose bucket contains ``local_time``. Falls back to the
        first rule of the table when no bucket matches.
        """
        for rule in self.rules:
            if rule.matches(local_time):
                return rule
        return self.rules[0] if self.rules else None

    def max_fdp(self, local_time: time, segments: int) -> timedelta:
        rule = self.rule_for(local_time)
        if rule is None:
            return DEFAULT_MAX_FDP
        return rule.max_fdp_for(segments)
