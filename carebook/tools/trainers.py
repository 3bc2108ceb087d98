"""
In-memory trainer roster with per-date availability.

In production, this would query the trainer API and its availability
calendar. Here availability is a set of blocked dates per trainer.
"""

import logging
from datetime import date
from typing import Iterable, Optional

from carebook.schemas.trainer_schema import Trainer
from carebook.tools.contracts import RepositoryError, TrainerFilters

logger = logging.getLogger(__name__)


class InMemoryTrainerRoster:
    """Trainers in roster order, plus the dates each one cannot work."""

    def __init__(self, trainers: Optional[Iterable[Trainer]] = None) -> None:
        self._trainers: dict[str, Trainer] = {}
        self._blocked: dict[str, set[date]] = {}
        for trainer in trainers or []:
            self.add(trainer)

    def add(self, trainer: Trainer) -> None:
        self._trainers[trainer.id] = trainer

    def block_date(self, trainer_id: str, on_date: date) -> None:
        if trainer_id not in self._trainers:
            raise RepositoryError(f"Trainer {trainer_id} not found.")
        self._blocked.setdefault(trainer_id, set()).add(on_date)

    def get(self, trainer_id: str) -> Optional[Trainer]:
        return self._trainers.get(trainer_id)

    async def is_available(self, trainer_id: str, on_date: date) -> bool:
        if trainer_id not in self._trainers:
            return False
        return on_date not in self._blocked.get(trainer_id, set())

    async def list_available_trainers(
        self, filters: Optional[TrainerFilters] = None
    ) -> list[Trainer]:
        filters = filters or TrainerFilters()
        results = []
        for trainer in self._trainers.values():
            if filters.capability is not None and filters.capability not in trainer.capabilities:
                continue
            if filters.on_date is not None and not await self.is_available(trainer.id, filters.on_date):
                continue
            results.append(trainer)
        logger.debug("Roster query %s returned %d trainers", filters, len(results))
        return results

    def reset(self) -> None:
        """Clear the roster. Used by test fixtures for isolation."""
        self._trainers.clear()
        self._blocked.clear()
