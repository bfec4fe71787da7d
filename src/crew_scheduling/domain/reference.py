from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Optional, Tuple

from crew_scheduling.domain.airport import Airport, RepositioningFlight
from crew_scheduling.domain.max_fdp import MaxFDPTable


@dataclass(frozen=True)
class ReferenceData:
    """
    Read-only lookup tables shared by every evaluator.

    Built once at load time and never mutated, so independent copies of a
    roster can share a single instance.
    """
    airports: Dict[str, Airport]
    max_fdp: MaxFDPTable = field(default_factory=MaxFDPTable)
    repositioning_flights: Dict[Tuple[str, str], Tuple[RepositioningFlight, ...]] = field(
        default_factory=dict
    )

    @classmethod
    def build(
        cls,
        airports: Iterable[Airport],
        max_fdp: MaxFDPTable,
        repositioning_flights: Iterable[RepositioningFlight] = (),
    ) -> "ReferenceData":
        grouped: Dict[Tuple[str, str], List[RepositioningFlight]] = defaultdict(list)
        for rf in repositioning_flights:
            grouped[(rf.departure_airport, rf.arrival_airport)].append(rf)
        return cls(
            airports={a.code: a for a in airports},
            max_fdp=max_fdp,
            repositioning_flights={k: tuple(v) for k, v in grouped.items()},
        )

    def has_airport(self, code: str) -> bool:
        return code in self.airports

    def taxi_minutes(self, origin: str, destination: str) -> Optional[int]:
        """Ground transfer minutes, None when not reachable by ground."""
        if origin == destination:
            return 0
        airport = self.airports.get(origin)
        if airport is None:
            return None
        return airport.taxi_minutes_to(destination)

    def repositioning_options(
        self,
        origin: str,
        destination: str,
        on_date: Optional[date] = None,
    ) -> List[RepositioningFlight]:
        options = self.repositioning_flights.get((origin, destination), ())
        if on_date is None:
            return list(options)
        return [rf for rf in options if rf.is_available(on_date)]
