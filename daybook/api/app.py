"""HTTP API over the scheduling core."""
from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from daybook.domain.errors import InvalidTimeFormat, NotFound, ValidationError
from daybook.services.container import Container, build_container

from .schemas import (
    NoteCreate,
    NoteUpdate,
    NotificationCreate,
    SettingValue,
    TaskCompletion,
    TaskCreate,
    TaskUpdate,
    bucket_to_wire,
    progress_to_wire,
    to_wire,
)

logger = logging.getLogger("daybook.api")


def get_container(request: Request) -> Container:
    return request.app.state.container


def _message(status_code: int, message) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


def _no_content(deleted: bool, kind: str) -> Response:
    if not deleted:
        return _message(404, f"{kind} not found")
    return Response(status_code=204)


def create_app(container: Container | None = None) -> FastAPI:
    app = FastAPI(title="Daybook", version="1.0")
    app.state.container = container if container is not None else build_container()

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.debug("%s %s -> %s", request.method, request.url.path, response.status_code)
        return response

    @app.exception_handler(InvalidTimeFormat)
    async def invalid_time_handler(request: Request, exc: InvalidTimeFormat) -> JSONResponse:
        return _message(422, str(exc))

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
        return _message(400, str(exc))

    @app.exception_handler(NotFound)
    async def not_found_handler(request: Request, exc: NotFound) -> JSONResponse:
        return _message(404, str(exc))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _message(400, [error.get("msg") for error in exc.errors()])

    # --- tasks ---

    @app.get("/api/tasks")
    def list_tasks(c: Container = Depends(get_container)) -> list[dict]:
        return [to_wire(task) for task in c.tasks.list_tasks()]

    @app.get("/api/tasks/daily")
    def list_daily_tasks(c: Container = Depends(get_container)) -> list[dict]:
        return [to_wire(task) for task in c.calendar.daily_tasks()]

    @app.get("/api/tasks/daily/progress")
    def daily_progress(c: Container = Depends(get_container)) -> dict:
        return progress_to_wire(c.tasks.daily_progress())

    @app.get("/api/tasks/date/{day}")
    def tasks_on_day(day: str, c: Container = Depends(get_container)) -> list[dict]:
        return [to_wire(task) for task in c.calendar.tasks_on_day(day)]

    @app.post("/api/tasks", status_code=201)
    def create_task(body: TaskCreate, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.tasks.create_task(body.to_fields()))

    @app.get("/api/tasks/{task_id}")
    def get_task(task_id: int, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.tasks.get_task(task_id))

    @app.put("/api/tasks/{task_id}")
    def update_task(task_id: int, body: TaskUpdate, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.tasks.update_task(task_id, body.to_fields()))

    @app.post("/api/tasks/{task_id}/complete")
    def complete_task(task_id: int, body: TaskCompletion, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.tasks.complete_task(task_id, body.outcome))

    @app.delete("/api/tasks/{task_id}")
    def delete_task(task_id: int, c: Container = Depends(get_container)) -> Response:
        return _no_content(c.tasks.delete_task(task_id), "Task")

    # --- notes ---

    @app.get("/api/notes")
    def list_notes(c: Container = Depends(get_container)) -> list[dict]:
        return [to_wire(note) for note in c.notes.list_notes()]

    @app.get("/api/notes/date/{day}")
    def notes_on_day(day: str, c: Container = Depends(get_container)) -> list[dict]:
        return [to_wire(note) for note in c.calendar.notes_on_day(day)]

    @app.post("/api/notes", status_code=201)
    def create_note(body: NoteCreate, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.notes.create_note(body.to_fields()))

    @app.get("/api/notes/{note_id}")
    def get_note(note_id: int, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.notes.get_note(note_id))

    @app.put("/api/notes/{note_id}")
    def update_note(note_id: int, body: NoteUpdate, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.notes.update_note(note_id, body.to_fields()))

    @app.delete("/api/notes/{note_id}")
    def delete_note(note_id: int, c: Container = Depends(get_container)) -> Response:
        return _no_content(c.notes.delete_note(note_id), "Note")

    # --- notifications ---

    @app.get("/api/notifications")
    def list_notifications(c: Container = Depends(get_container)) -> list[dict]:
        return [to_wire(item) for item in c.notifications.list_notifications()]

    @app.get("/api/notifications/unread")
    def list_unread(c: Container = Depends(get_container)) -> list[dict]:
        return [to_wire(item) for item in c.notifications.list_unread()]

    @app.post("/api/notifications", status_code=201)
    def create_notification(body: NotificationCreate, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.notifications.create_notification(body.task_id, body.notification_time))

    @app.put("/api/notifications/{notification_id}/read")
    def mark_read(notification_id: int, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.notifications.mark_read(notification_id))

    @app.delete("/api/notifications/{notification_id}")
    def delete_notification(notification_id: int, c: Container = Depends(get_container)) -> Response:
        return _no_content(c.notifications.delete_notification(notification_id), "Notification")

    # --- settings ---

    @app.get("/api/settings/{key}")
    def get_setting(key: str, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.settings_service.get(key))

    @app.put("/api/settings/{key}")
    def put_setting(key: str, body: SettingValue, c: Container = Depends(get_container)) -> dict:
        return to_wire(c.settings_service.set(key, body.value))

    # --- calendar ---

    @app.get("/api/calendar/{start}/{end}")
    def calendar_range(start: str, end: str, c: Container = Depends(get_container)) -> dict:
        buckets = c.calendar.aggregate_range(start, end)
        return {day: bucket_to_wire(bucket) for day, bucket in buckets.items()}

    return app
