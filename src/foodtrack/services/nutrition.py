"""Validation and normalization of model nutrition estimates."""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from pydantic import ValidationError as PydanticValidationError

from foodtrack.domain.errors import InvalidFieldError, MissingNameError
from foodtrack.domain.meals import MealIdGenerator, MealSource, NutritionRecord
from foodtrack.domain.nutrition import NUMERIC_FIELDS, OPTIONAL_FIELDS, NutritionEstimate

_logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class NutritionNormalizer:
    """Turns raw candidate objects into ledger-ready nutrition records."""

    id_generator: MealIdGenerator = field(default_factory=MealIdGenerator)
    clock: Callable[[], datetime] = _utc_now

    def normalize(
        self, candidate: dict[str, object], source: MealSource
    ) -> NutritionRecord:
        """Validate a candidate object and stamp it as a new record."""
        estimate = validate_estimate(candidate)
        return NutritionRecord(
            id=self.id_generator.next_id(),
            name=estimate.name,
            calories=estimate.calories,
            protein=estimate.protein,
            carbs=estimate.carbs,
            fats=estimate.fats,
            timestamp=_truncate_to_millis(self.clock()),
            source=MealSource(source),
        )


def validate_estimate(candidate: dict[str, object]) -> NutritionEstimate:
    """Validate a raw candidate, defaulting absent macros to zero."""
    defaulted = [name for name in OPTIONAL_FIELDS if candidate.get(name) is None]
    data = {
        key: value
        for key, value in candidate.items()
        if not (key in OPTIONAL_FIELDS and value is None)
    }
    try:
        estimate = NutritionEstimate.model_validate(data)
    except PydanticValidationError as exc:
        raise _translate_error(exc) from exc
    if defaulted:
        _logger.info(
            "Estimate for %s lacks %s; defaulting to 0",
            estimate.name,
            ", ".join(defaulted),
        )
    return estimate


def _translate_error(
    exc: PydanticValidationError,
) -> MissingNameError | InvalidFieldError:
    failed = {error["loc"][0] for error in exc.errors() if error["loc"]}
    if "name" in failed:
        return MissingNameError()
    for name in NUMERIC_FIELDS:
        if name in failed:
            return InvalidFieldError(name)
    return InvalidFieldError(str(next(iter(failed), "unknown")))


def _truncate_to_millis(moment: datetime) -> datetime:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.replace(microsecond=moment.microsecond // 1000 * 1000)
