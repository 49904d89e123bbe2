"""
Hall of Fame Module

Bounded archive of the best individuals seen across all populations and
generations, kept sorted by ascending fitness. Entries are snapshots, so
later changes to a population never reach the archive.
"""

import bisect
import threading
from typing import Any, Dict, Iterator, List, Optional

from ga_exceptions import ConfigurationError, SerializationError
from evo_components.individual import GenomeDecoder, Individual


class HallOfFame:
    """
    Sorted, bounded archive of individual snapshots.

    Equal fitnesses are allowed; a newcomer is placed after the entries it
    ties with, and at capacity it has to be strictly better than the worst
    entry to get in.
    """

    def __init__(self, size: int):
        if size < 1:
            raise ConfigurationError(f"Hall of fame size ({size}) must be positive")
        self.size = size
        self._entries: List[Individual] = []
        self._fitnesses: List[float] = []
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[Individual]:
        return iter(list(self._entries))

    def __getitem__(self, index: int) -> Individual:
        return self._entries[index]

    @property
    def entries(self) -> List[Individual]:
        """Copy of the archive, best first."""
        return list(self._entries)

    @property
    def best(self) -> Optional[Individual]:
        return self._entries[0] if self._entries else None

    @property
    def worst(self) -> Optional[Individual]:
        return self._entries[-1] if self._entries else None

    def add(self, individual: Individual) -> bool:
        """
        Offer an individual to the archive.

        Returns:
            True if a snapshot of the individual was stored
        """
        if not individual.evaluated:
            return False

        with self._lock:
            if len(self._entries) >= self.size and individual.fitness >= self._fitnesses[-1]:
                return False

            position = bisect.bisect_right(self._fitnesses, individual.fitness)
            self._fitnesses.insert(position, individual.fitness)
            self._entries.insert(position, individual.clone())

            if len(self._entries) > self.size:
                self._entries.pop()
                self._fitnesses.pop()
            return True

    def update(self, individuals) -> int:
        """Offer every individual in order; returns how many were stored."""
        return sum(1 for indi in individuals if self.add(indi))

    def to_records(self) -> List[Dict[str, Any]]:
        """Encode the archive as JSON-compatible records, best first."""
        return [indi.to_record() for indi in self._entries]

    @classmethod
    def from_records(cls, size: int, records: Any, genome_decoder: GenomeDecoder) -> "HallOfFame":
        """
        Rebuild an archive from to_records() output.

        Raises:
            SerializationError: On malformed records or more records than size
        """
        if not isinstance(records, list):
            raise SerializationError("Hall of fame must be encoded as a list")
        if len(records) > size:
            raise SerializationError(f"Hall of fame holds {len(records)} entries, capacity is {size}")

        hall_of_fame = cls(size)
        for record in records:
            individual = Individual.from_record(record, genome_decoder)
            if not individual.evaluated:
                raise SerializationError(f"Hall of fame entry {individual.id} is not evaluated")
            position = bisect.bisect_right(hall_of_fame._fitnesses, individual.fitness)
            hall_of_fame._fitnesses.insert(position, individual.fitness)
            hall_of_fame._entries.insert(position, individual)
        return hall_of_fame
