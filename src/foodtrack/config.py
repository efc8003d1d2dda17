"""Application configuration."""

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from foodtrack.domain.stats import DailyGoals

_ENVIRONMENT = os.getenv("ENVIRONMENT", "local")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    completion_proxy_url: str = "http://localhost:8888/.netlify/functions/analyze-food"
    completion_api_key: str | None = None
    completion_base_url: str = "https://openrouter.ai/api/v1"
    completion_model: str = "google/gemini-1.5-flash"
    completion_timeout_seconds: float = Field(default=60, gt=0)
    app_url: str = "https://foodtrack-ai.netlify.app"
    app_title: str = "FoodTrack AI"
    data_dir: Path = Path(".foodtrack")
    ledger_key: str = "meals"
    goal_calories: float = Field(default=2000, gt=0)
    goal_protein: float = Field(default=150, gt=0)
    goal_carbs: float = Field(default=250, gt=0)
    goal_fats: float = Field(default=65, gt=0)
    environment: str = _ENVIRONMENT

    model_config = SettingsConfigDict(
        env_file=(f".env.{_ENVIRONMENT}", ".env"),
        extra="ignore",
    )

    @property
    def uses_direct_provider(self) -> bool:
        """Whether completions go straight to the provider instead of the proxy."""
        return bool(self.completion_api_key)

    def daily_goals(self) -> DailyGoals:
        """Return the configured daily goals."""
        return DailyGoals(
            calories=self.goal_calories,
            protein=self.goal_protein,
            carbs=self.goal_carbs,
            fats=self.goal_fats,
        )
