"""Domain models for meal logging."""

import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum


class MealSource(StrEnum):
    """How a meal was logged."""

    PHOTO = "photo"
    MANUAL = "manual"


@dataclass(frozen=True)
class NutritionRecord:
    """A normalized nutrition estimate for one logged meal."""

    id: int
    name: str
    calories: float
    protein: float
    carbs: float
    fats: float
    timestamp: datetime
    source: MealSource


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


@dataclass
class MealIdGenerator:
    """Issues strictly increasing millisecond-based meal ids."""

    clock: Callable[[], int] = _epoch_millis
    _last: int = field(default=0, init=False)

    def observe(self, ids: Iterable[int]) -> None:
        """Make sure future ids sort after the given existing ids."""
        self._last = max([self._last, *ids])

    def next_id(self) -> int:
        """Return a fresh id greater than every id issued or observed."""
        candidate = max(self.clock(), self._last + 1)
        self._last = candidate
        return candidate
