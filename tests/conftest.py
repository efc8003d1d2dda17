"""Shared test fixtures."""

import asyncio
import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from pathlib import Path

import pytest

from foodtrack.config import Settings
from foodtrack.containers import AppContainer
from foodtrack.domain.errors import StorageError
from foodtrack.domain.meals import MealIdGenerator, MealSource, NutritionRecord
from foodtrack.services.analysis import AnalysisService, CompletionClient
from foodtrack.services.ledger import LedgerStorage, MealLedger
from foodtrack.services.meals import MealLogService
from foodtrack.services.nutrition import NutritionNormalizer
from foodtrack.services.stats import StatsService

FIXED_NOW = datetime(2026, 10, 19, 8, 15, 30, 123456, tzinfo=UTC)

APPLE = {"name": "Apple", "calories": 95, "protein": 0, "carbs": 25, "fats": 0}


def chat_completion(content: object) -> str:
    """Return a chat-completion response body wrapping the given content."""
    return json.dumps({"choices": [{"message": {"role": "assistant", "content": content}}]})


def make_record(  # noqa: PLR0913
    meal_id: int,
    name: str = "Oatmeal",
    calories: float = 300,
    protein: float = 10,
    carbs: float = 50,
    fats: float = 6,
    source: MealSource = MealSource.MANUAL,
) -> NutritionRecord:
    return NutritionRecord(
        id=meal_id,
        name=name,
        calories=calories,
        protein=protein,
        carbs=carbs,
        fats=fats,
        timestamp=FIXED_NOW.replace(microsecond=123000),
        source=source,
    )


@dataclass
class InMemoryLedgerStorage(LedgerStorage):
    """In-memory ledger storage for tests."""

    payload: str | None = None
    writes: int = 0

    def read(self) -> str | None:
        return self.payload

    def write(self, payload: str) -> None:
        self.writes += 1
        self.payload = payload


@dataclass
class FailingLedgerStorage(LedgerStorage):
    """Ledger storage whose reads and writes fail."""

    fail_reads: bool = True
    fail_writes: bool = True

    def read(self) -> str | None:
        if self.fail_reads:
            raise StorageError("storage unavailable")
        return None

    def write(self, payload: str) -> None:
        if self.fail_writes:
            raise StorageError("disk full")


@dataclass
class FakeCompletionClient(CompletionClient):
    """Completion client returning a fixed body and recording requests."""

    body: str = field(default_factory=lambda: chat_completion(json.dumps(APPLE)))
    error: Exception | None = None
    requests: list[dict[str, object]] = field(default_factory=list)
    gate: asyncio.Event | None = None
    closed: bool = False

    async def complete(self, payload: dict[str, object]) -> str:
        self.requests.append(payload)
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.body

    async def close(self) -> None:
        self.closed = True


def make_normalizer() -> NutritionNormalizer:
    counter = iter(range(1_000, 1_000_000))
    return NutritionNormalizer(
        id_generator=MealIdGenerator(clock=lambda: next(counter)),
        clock=lambda: FIXED_NOW,
    )


def make_meal_log_service(
    client: CompletionClient, storage: LedgerStorage | None = None
) -> MealLogService:
    ledger = MealLedger(storage if storage is not None else InMemoryLedgerStorage())
    analysis_service = AnalysisService(
        client=client,
        model="google/gemini-1.5-flash",
        normalizer=make_normalizer(),
    )
    return MealLogService(analysis_service=analysis_service, ledger=ledger)


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(data_dir=tmp_path / "data")


@pytest.fixture
def ledger_storage() -> InMemoryLedgerStorage:
    return InMemoryLedgerStorage()


@pytest.fixture
def completion_client() -> FakeCompletionClient:
    return FakeCompletionClient()


@pytest.fixture
def container(
    settings: Settings,
    ledger_storage: InMemoryLedgerStorage,
    completion_client: FakeCompletionClient,
) -> AppContainer:
    meal_log_service = make_meal_log_service(completion_client, ledger_storage)
    stats_service = StatsService(meal_log_service.ledger, settings.daily_goals())

    async def close_resources() -> None:
        await completion_client.close()

    return AppContainer(
        settings=settings,
        ledger=meal_log_service.ledger,
        analysis_service=meal_log_service.analysis_service,
        meal_log_service=meal_log_service,
        stats_service=stats_service,
        close_resources=close_resources,
    )
