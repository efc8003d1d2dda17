"""Tests for meal log service."""

import asyncio

import pytest

from foodtrack.domain.errors import (
    EmptyDescriptionError,
    InvalidFieldError,
    MissingNameError,
    NoJsonFoundError,
    StorageError,
    SubmissionInProgressError,
    TransportError,
)
from foodtrack.services.ledger import dump_ledger
from tests.conftest import (
    FailingLedgerStorage,
    FakeCompletionClient,
    InMemoryLedgerStorage,
    chat_completion,
    make_meal_log_service,
    make_record,
)


def test_submission_is_logged_newest_first() -> None:
    service = make_meal_log_service(FakeCompletionClient())
    service.ledger.append(make_record(1, name="Breakfast"))

    outcome = asyncio.run(service.submit_description("an apple"))

    assert outcome.storage_error is None
    assert [record.name for record in service.list_meals()] == ["Apple", "Breakfast"]


def test_second_submission_is_rejected_while_one_is_pending() -> None:
    gate = asyncio.Event()
    client = FakeCompletionClient(gate=gate)
    service = make_meal_log_service(client)

    async def scenario() -> None:
        first = asyncio.create_task(service.submit_description("apple"))
        await asyncio.sleep(0)
        assert service.is_analyzing
        with pytest.raises(SubmissionInProgressError):
            await service.submit_photo(b"image-bytes")
        gate.set()
        await first

    asyncio.run(scenario())

    assert len(client.requests) == 1
    assert len(service.list_meals()) == 1
    assert not service.is_analyzing


@pytest.mark.parametrize(
    "client",
    [
        FakeCompletionClient(error=TransportError("proxy down", status_code=500)),
        FakeCompletionClient(body=chat_completion("No idea, sorry.")),
        FakeCompletionClient(body=chat_completion('{"name": "", "calories": 100}')),
        FakeCompletionClient(body=chat_completion('{"name": "Soup"}')),
    ],
)
def test_failed_analysis_leaves_ledger_unchanged(client: FakeCompletionClient) -> None:
    storage = InMemoryLedgerStorage()
    service = make_meal_log_service(client, storage)
    service.ledger.append(make_record(1))
    before = service.list_meals()
    writes = storage.writes

    with pytest.raises(
        (TransportError, NoJsonFoundError, MissingNameError, InvalidFieldError)
    ):
        asyncio.run(service.submit_description("soup"))

    assert service.list_meals() == before
    assert storage.writes == writes
    assert not service.is_analyzing


def test_slot_is_released_after_failure() -> None:
    client = FakeCompletionClient(error=TransportError("timeout"))
    service = make_meal_log_service(client)

    with pytest.raises(TransportError):
        asyncio.run(service.submit_description("apple"))
    client.error = None
    outcome = asyncio.run(service.submit_description("apple"))

    assert outcome.record.name == "Apple"


def test_blank_description_is_rejected_before_any_request() -> None:
    client = FakeCompletionClient()
    service = make_meal_log_service(client)

    with pytest.raises(EmptyDescriptionError):
        asyncio.run(service.submit_description("   "))

    assert client.requests == []


def test_storage_failure_still_logs_meal_for_session() -> None:
    service = make_meal_log_service(FakeCompletionClient(), FailingLedgerStorage())

    outcome = asyncio.run(service.submit_photo(b"image-bytes", "image/jpeg"))

    assert isinstance(outcome.storage_error, StorageError)
    assert service.list_meals() == (outcome.record,)


def test_load_keeps_new_ids_ahead_of_stored_ones() -> None:
    storage = InMemoryLedgerStorage(payload=dump_ledger([make_record(5_000_000)]))
    service = make_meal_log_service(FakeCompletionClient(), storage)

    assert service.load() is None
    outcome = asyncio.run(service.submit_description("apple"))

    assert outcome.record.id == 5_000_001
    assert [record.id for record in service.list_meals()] == [5_000_001, 5_000_000]


def test_restore_error_is_reported_once() -> None:
    storage = InMemoryLedgerStorage(payload="not a ledger")
    service = make_meal_log_service(FakeCompletionClient(), storage)

    error = service.load()

    assert isinstance(error, StorageError)
    assert service.take_restore_error() is error
    assert service.take_restore_error() is None


def test_delete_and_clear_delegate_to_ledger() -> None:
    service = make_meal_log_service(FakeCompletionClient())
    service.ledger.append(make_record(1))
    service.ledger.append(make_record(2))

    assert service.delete_meal(1) is None
    assert [record.id for record in service.list_meals()] == [2]
    assert service.clear_meals() is None
    assert service.list_meals() == ()
