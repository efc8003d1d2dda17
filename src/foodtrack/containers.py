"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from foodtrack.adapters.json_file_storage import JsonFileLedgerStorage
from foodtrack.adapters.openai_completion_client import OpenAICompletionClient
from foodtrack.adapters.proxy_completion_client import HttpxProxyCompletionClient
from foodtrack.config import Settings
from foodtrack.services.analysis import AnalysisService
from foodtrack.services.ledger import MealLedger
from foodtrack.services.meals import MealLogService
from foodtrack.services.nutrition import NutritionNormalizer
from foodtrack.services.stats import StatsService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ledger: MealLedger
    analysis_service: AnalysisService
    meal_log_service: MealLogService
    stats_service: StatsService
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    completion_client: OpenAICompletionClient | HttpxProxyCompletionClient
    if resolved_settings.uses_direct_provider:
        completion_client = OpenAICompletionClient.create(
            api_key=str(resolved_settings.completion_api_key),
            base_url=resolved_settings.completion_base_url,
            default_model=resolved_settings.completion_model,
            app_url=resolved_settings.app_url,
            app_title=resolved_settings.app_title,
            timeout=resolved_settings.completion_timeout_seconds,
        )
    else:
        completion_client = HttpxProxyCompletionClient.create(
            url=resolved_settings.completion_proxy_url,
            timeout=resolved_settings.completion_timeout_seconds,
        )
    ledger = MealLedger(
        JsonFileLedgerStorage(
            directory=resolved_settings.data_dir,
            key=resolved_settings.ledger_key,
        )
    )
    analysis_service = AnalysisService(
        client=completion_client,
        model=resolved_settings.completion_model,
        normalizer=NutritionNormalizer(),
    )
    meal_log_service = MealLogService(
        analysis_service=analysis_service,
        ledger=ledger,
    )
    stats_service = StatsService(ledger, resolved_settings.daily_goals())

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=resolved_settings,
        ledger=ledger,
        analysis_service=analysis_service,
        meal_log_service=meal_log_service,
        stats_service=stats_service,
        close_resources=close_resources,
    )
