"""Meal logging service."""

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field

from foodtrack.domain.errors import (
    EmptyDescriptionError,
    StorageError,
    SubmissionInProgressError,
)
from foodtrack.domain.meals import NutritionRecord
from foodtrack.services.analysis import AnalysisService
from foodtrack.services.ledger import MealLedger

_logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MealLogOutcome:
    """A logged meal and, if persisting it failed, the storage error."""

    record: NutritionRecord
    storage_error: StorageError | None = None


@dataclass
class MealLogService:
    """Service that analyzes submissions and logs them, one at a time."""

    analysis_service: AnalysisService
    ledger: MealLedger
    _in_flight: bool = field(default=False, init=False)
    _restore_error: StorageError | None = field(default=None, init=False)

    @property
    def is_analyzing(self) -> bool:
        """Whether a submission is currently being analyzed."""
        return self._in_flight

    def load(self) -> StorageError | None:
        """Hydrate the ledger and keep new ids ahead of the stored ones."""
        error = self.ledger.load()
        self.analysis_service.normalizer.id_generator.observe(
            record.id for record in self.ledger.all()
        )
        self._restore_error = error
        return error

    def take_restore_error(self) -> StorageError | None:
        """Return the error from the last load once, then forget it."""
        error, self._restore_error = self._restore_error, None
        return error

    async def submit_photo(
        self, image_bytes: bytes, content_type: str | None = None
    ) -> MealLogOutcome:
        """Analyze a meal photo and log the result."""
        return await self._submit(
            lambda: self.analysis_service.analyze_photo(image_bytes, content_type)
        )

    async def submit_description(self, description: str) -> MealLogOutcome:
        """Analyze a free-text meal description and log the result."""
        cleaned = description.strip()
        if not cleaned:
            raise EmptyDescriptionError()
        return await self._submit(
            lambda: self.analysis_service.analyze_description(cleaned)
        )

    def delete_meal(self, meal_id: int) -> StorageError | None:
        """Remove a logged meal."""
        return self.ledger.remove(meal_id)

    def clear_meals(self) -> StorageError | None:
        """Remove every logged meal."""
        return self.ledger.clear()

    def list_meals(self) -> tuple[NutritionRecord, ...]:
        """Return logged meals, newest first."""
        return self.ledger.all()

    async def _submit(
        self, analyze: Callable[[], Awaitable[NutritionRecord]]
    ) -> MealLogOutcome:
        # check-and-set must not straddle an await
        if self._in_flight:
            raise SubmissionInProgressError()
        self._in_flight = True
        try:
            record = await analyze()
            storage_error = self.ledger.append(record)
        finally:
            self._in_flight = False
        _logger.info("Logged meal %s (%s)", record.id, record.name)
        return MealLogOutcome(record=record, storage_error=storage_error)
