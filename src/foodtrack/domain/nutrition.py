"""Nutrition domain models."""

from pydantic import BaseModel, ConfigDict, Field, field_validator

NUMERIC_FIELDS = ("calories", "protein", "carbs", "fats")
OPTIONAL_FIELDS = ("protein", "carbs", "fats")


class NutritionEstimate(BaseModel):
    """Nutrition facts as estimated by the language model."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    name: str = Field(min_length=1)
    calories: float = Field(ge=0, allow_inf_nan=False)
    protein: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    carbs: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    fats: float = Field(default=0.0, ge=0, allow_inf_nan=False)

    @field_validator("name", mode="before")
    @classmethod
    def _strip_name(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator(*NUMERIC_FIELDS, mode="before")
    @classmethod
    def _coerce_number(cls, value: object) -> object:
        # bool is an int subclass; "true" is not a calorie count
        if isinstance(value, bool):
            raise ValueError("boolean is not a number")
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError as exc:
                raise ValueError(f"not a number: {value!r}") from exc
        return value
