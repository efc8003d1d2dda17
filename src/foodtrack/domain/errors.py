"""Error taxonomy for meal analysis and the meal ledger."""


class FoodTrackError(Exception):
    """Base class for all application errors."""


class TransportError(FoodTrackError):
    """The analysis request could not complete."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ParseError(FoodTrackError):
    """The completion response could not be reduced to a candidate object."""


class NoExtractableTextError(ParseError):
    """No message text could be found in the completion response."""


class NoJsonFoundError(ParseError):
    """The message text contains no brace-delimited span."""


class MalformedJsonError(ParseError):
    """The brace-delimited span is not a decodable JSON object."""


class NutritionValidationError(FoodTrackError):
    """A candidate object failed normalization."""


class MissingNameError(NutritionValidationError):
    """The candidate has no usable name."""

    def __init__(self) -> None:
        super().__init__("Nutrition estimate is missing a name")


class InvalidFieldError(NutritionValidationError):
    """A numeric nutrition field is missing or unusable."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Nutrition estimate has an invalid '{field}' value")
        self.field = field


class StorageError(FoodTrackError):
    """Persisted ledger state is unreadable or unwritable."""


class CorruptLedgerError(StorageError):
    """Persisted ledger state exists but cannot be decoded."""


class DuplicateMealError(FoodTrackError):
    """A meal with the same id is already in the ledger."""

    def __init__(self, meal_id: int) -> None:
        super().__init__(f"Meal {meal_id} is already logged")
        self.meal_id = meal_id


class SubmissionInProgressError(FoodTrackError):
    """Another analysis is still in flight."""

    def __init__(self) -> None:
        super().__init__("An analysis is already in progress")


class EmptyDescriptionError(FoodTrackError):
    """A manual entry was submitted without a description."""

    def __init__(self) -> None:
        super().__init__("Meal description is empty")
