"""FastAPI application factory."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import asdict
from typing import Any

from fastapi import FastAPI, File, Request, Response, UploadFile, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from foodtrack.api.models import (
    ManualEntryRequest,
    MealLoggedResponse,
    MealResponse,
    Notification,
)
from foodtrack.app_logging import configure_logging
from foodtrack.containers import AppContainer
from foodtrack.domain.errors import (
    EmptyDescriptionError,
    NutritionValidationError,
    ParseError,
    StorageError,
    SubmissionInProgressError,
    TransportError,
)
from foodtrack.services.meals import MealLogOutcome

_PHOTO_FAILURE = "Failed to analyze image. Please try again."
_MANUAL_FAILURE = "Failed to analyze food. Please try again."
_RESTORE_WARNING = "Saved meals could not be restored; the log started empty."
RESTORE_WARNING_HEADER = "X-Meal-Log-Warning"


def create_app(container: AppContainer) -> FastAPI:  # noqa: PLR0915
    """Create a FastAPI app configured with dependencies."""
    configure_logging()
    logger = logging.getLogger(__name__)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        error = app.state.container.meal_log_service.load()
        if error is not None:
            logger.warning("Meal log could not be restored: %s", error)
        yield
        await app.state.container.close_resources()

    app = FastAPI(lifespan=lifespan)
    app.state.container = container

    @app.exception_handler(RequestValidationError)
    async def invalid_request(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        logger.info("Rejected request to %s: %s", request.url.path, exc.errors())
        return _notification(
            status.HTTP_422_UNPROCESSABLE_ENTITY, _invalid_request_message(request)
        )

    @app.exception_handler(SubmissionInProgressError)
    async def submission_in_progress(
        request: Request, exc: SubmissionInProgressError
    ) -> JSONResponse:
        return _notification(
            status.HTTP_409_CONFLICT, "Still analyzing the previous meal."
        )

    @app.exception_handler(EmptyDescriptionError)
    async def empty_description(
        request: Request, exc: EmptyDescriptionError
    ) -> JSONResponse:
        return _notification(status.HTTP_400_BAD_REQUEST, "Describe your meal first.")

    @app.exception_handler(TransportError)
    async def transport_failed(request: Request, exc: TransportError) -> JSONResponse:
        logger.warning("Analysis request failed: %s", exc)
        return _notification(status.HTTP_502_BAD_GATEWAY, _failure_message(request))

    @app.exception_handler(ParseError)
    async def parse_failed(request: Request, exc: ParseError) -> JSONResponse:
        logger.warning("Could not parse analysis response: %s", exc)
        return _notification(
            status.HTTP_422_UNPROCESSABLE_ENTITY, _failure_message(request)
        )

    @app.exception_handler(NutritionValidationError)
    async def estimate_rejected(
        request: Request, exc: NutritionValidationError
    ) -> JSONResponse:
        logger.warning("Rejected nutrition estimate: %s", exc)
        return _notification(
            status.HTTP_422_UNPROCESSABLE_ENTITY, _failure_message(request)
        )

    @app.get("/health")
    async def health() -> dict[str, str]:
        """Simple health check endpoint."""
        return {"status": "ok"}

    @app.get("/meals")
    async def list_meals(request: Request, response: Response) -> list[MealResponse]:
        """Return logged meals, newest first."""
        state_container: AppContainer = request.app.state.container
        if state_container.meal_log_service.take_restore_error() is not None:
            response.headers[RESTORE_WARNING_HEADER] = _RESTORE_WARNING
        return [
            MealResponse.from_record(record)
            for record in state_container.meal_log_service.list_meals()
        ]

    @app.post(
        "/meals/photo",
        response_model=MealLoggedResponse,
        status_code=status.HTTP_201_CREATED,
        response_model_exclude_none=True,
    )
    async def log_photo(
        request: Request, file: UploadFile = File(...)
    ) -> MealLoggedResponse | JSONResponse:
        """Analyze an uploaded meal photo and log it."""
        state_container: AppContainer = request.app.state.container
        image_bytes = await file.read()
        if not image_bytes:
            return _notification(status.HTTP_400_BAD_REQUEST, "No image received.")
        outcome = await state_container.meal_log_service.submit_photo(
            image_bytes, file.content_type
        )
        return _logged_response(outcome)

    @app.post(
        "/meals/manual",
        status_code=status.HTTP_201_CREATED,
        response_model_exclude_none=True,
    )
    async def log_manual(
        payload: ManualEntryRequest, request: Request
    ) -> MealLoggedResponse:
        """Analyze a free-text meal description and log it."""
        state_container: AppContainer = request.app.state.container
        outcome = await state_container.meal_log_service.submit_description(
            payload.description
        )
        return _logged_response(outcome)

    @app.delete("/meals/{meal_id}", response_model_exclude_none=True)
    async def delete_meal(meal_id: int, request: Request) -> Notification:
        """Remove a meal from the log."""
        state_container: AppContainer = request.app.state.container
        error = state_container.meal_log_service.delete_meal(meal_id)
        return Notification(
            status="ok",
            message="Meal removed from log",
            warning=_storage_warning(error),
        )

    @app.delete("/meals", response_model_exclude_none=True)
    async def clear_meals(request: Request) -> Notification:
        """Remove every meal from the log."""
        state_container: AppContainer = request.app.state.container
        error = state_container.meal_log_service.clear_meals()
        return Notification(
            status="ok", message="Meal log cleared", warning=_storage_warning(error)
        )

    @app.get("/summary")
    async def summary(request: Request) -> dict[str, Any]:
        """Return totals and goal progress for the logged meals."""
        state_container: AppContainer = request.app.state.container
        return asdict(state_container.stats_service.get_summary())

    @app.get("/goals")
    async def goals(request: Request) -> dict[str, float]:
        """Return the configured daily goals."""
        state_container: AppContainer = request.app.state.container
        return asdict(state_container.stats_service.goals)

    return app


def _notification(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"status": "error", "message": message},
    )


def _failure_message(request: Request) -> str:
    if request.url.path.endswith("/photo"):
        return _PHOTO_FAILURE
    return _MANUAL_FAILURE


def _invalid_request_message(request: Request) -> str:
    if request.url.path.endswith("/photo"):
        return "Attach a meal photo."
    if request.url.path.endswith("/manual"):
        return "Describe your meal in at most 2000 characters."
    return "Invalid request."


def _logged_response(outcome: MealLogOutcome) -> MealLoggedResponse:
    return MealLoggedResponse(
        status="ok",
        message=f"Added {outcome.record.name} to your log!",
        warning=_storage_warning(outcome.storage_error),
        meal=MealResponse.from_record(outcome.record),
    )


def _storage_warning(error: StorageError | None) -> str | None:
    if error is None:
        return None
    return "Saved for this session only; the meal log could not be written."
