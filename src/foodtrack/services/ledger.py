"""Persisted, ordered ledger of logged meals."""

import json
import logging
from collections import Counter
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic import ValidationError as PydanticValidationError

from foodtrack.domain.errors import CorruptLedgerError, DuplicateMealError, StorageError
from foodtrack.domain.meals import MealSource, NutritionRecord

_logger = logging.getLogger(__name__)


class LedgerStorage(Protocol):
    """Persistence interface for the serialized ledger.

    Implementations raise ``StorageError`` when the backing store cannot be
    read or written.
    """

    def read(self) -> str | None:
        """Return the stored payload, or None if nothing was stored yet."""

    def write(self, payload: str) -> None:
        """Replace the stored payload."""


class StoredMeal(BaseModel):
    """Persisted representation of a nutrition record."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    id: int
    name: str = Field(min_length=1)
    calories: float = Field(ge=0, allow_inf_nan=False)
    protein: float = Field(ge=0, allow_inf_nan=False)
    carbs: float = Field(ge=0, allow_inf_nan=False)
    fats: float = Field(ge=0, allow_inf_nan=False)
    timestamp: datetime
    source: MealSource

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)


_STORED_MEALS = TypeAdapter(list[StoredMeal])


def format_timestamp(moment: datetime) -> str:
    """Format a timestamp as ISO-8601 UTC with millisecond precision."""
    utc = moment.astimezone(UTC)
    return utc.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def dump_ledger(records: list[NutritionRecord]) -> str:
    """Serialize records, in order, to the persisted JSON form."""
    rows = [
        {
            "id": record.id,
            "name": record.name,
            "calories": record.calories,
            "protein": record.protein,
            "carbs": record.carbs,
            "fats": record.fats,
            "timestamp": format_timestamp(record.timestamp),
            "source": record.source.value,
        }
        for record in records
    ]
    return json.dumps(rows)


def parse_ledger(payload: str) -> list[NutritionRecord]:
    """Decode a persisted payload, rejecting it as a whole if any row is bad."""
    try:
        rows = _STORED_MEALS.validate_json(payload)
    except PydanticValidationError as exc:
        raise CorruptLedgerError(f"Stored meals are unreadable: {exc}") from exc
    duplicates = [
        meal_id for meal_id, count in Counter(row.id for row in rows).items() if count > 1
    ]
    if duplicates:
        raise CorruptLedgerError(f"Stored meals repeat ids: {duplicates}")
    return [
        NutritionRecord(
            id=row.id,
            name=row.name,
            calories=row.calories,
            protein=row.protein,
            carbs=row.carbs,
            fats=row.fats,
            timestamp=row.timestamp,
            source=row.source,
        )
        for row in rows
    ]


@dataclass
class MealLedger:
    """Newest-first collection of meals, persisted in full on every change.

    Storage failures never propagate out of the ledger. Reads degrade to an
    empty ledger and writes keep the in-memory change; in both cases the
    ``StorageError`` is returned to the caller.
    """

    storage: LedgerStorage
    _records: list[NutritionRecord] = field(default_factory=list, init=False)

    def load(self) -> StorageError | None:
        """Hydrate the ledger from storage."""
        self._records = []
        try:
            payload = self.storage.read()
            if payload is None:
                return None
            self._records = parse_ledger(payload)
        except StorageError as exc:
            _logger.warning("Starting with an empty meal ledger: %s", exc)
            return exc
        _logger.info("Loaded %s meals from storage", len(self._records))
        return None

    def append(self, record: NutritionRecord) -> StorageError | None:
        """Insert a record at the front and persist."""
        if self.get(record.id) is not None:
            raise DuplicateMealError(record.id)
        self._records.insert(0, record)
        return self._persist()

    def remove(self, meal_id: int) -> StorageError | None:
        """Delete a record by id; absent ids are ignored."""
        remaining = [record for record in self._records if record.id != meal_id]
        if len(remaining) == len(self._records):
            return None
        self._records = remaining
        return self._persist()

    def clear(self) -> StorageError | None:
        """Drop every record and persist the empty ledger."""
        self._records = []
        return self._persist()

    def get(self, meal_id: int) -> NutritionRecord | None:
        """Return a record by id."""
        for record in self._records:
            if record.id == meal_id:
                return record
        return None

    def all(self) -> tuple[NutritionRecord, ...]:
        """Return the current records, newest first."""
        return tuple(self._records)

    def _persist(self) -> StorageError | None:
        try:
            self.storage.write(dump_ledger(self._records))
        except StorageError as exc:
            _logger.warning("Meal ledger was not persisted: %s", exc)
            return exc
        return None
