"""
FastAPI application for the Smart Task Organizer.

This is the HTTP entry point that:
- Owns one TaskStore for the life of the process
- Loads tasks on startup and saves them on shutdown (including SIGINT/SIGTERM)
- Maps store errors to HTTP status codes
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Query, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .config import Settings
from .errors import NotFoundError, ValidationError
from .logging_setup import configure_logging
from .models import Task, TaskCreate, TaskUpdate
from .store import EXPORT_FILENAME, TaskStore


def _to_json(task: Task) -> dict:
    return task.model_dump(mode="json")


def _describe_request_error(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request body"
    loc = [str(part) for part in errors[0].get("loc", ()) if part != "body"]
    field = ".".join(loc) or "body"
    return f"Invalid value for '{field}': {errors[0].get('msg', 'invalid')}"


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Service settings. Defaults to Settings.from_env().

    Returns:
        Configured app; its store is available as ``app.state.store``.
    """
    settings = settings or Settings.from_env()
    store = TaskStore(settings.data_dir)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Load tasks on startup, flush them on shutdown."""
        store.start()
        try:
            yield
        finally:
            store.stop()

    app = FastAPI(
        title="Smart Task Organizer",
        description="Single-user task tracker backed by a JSON file",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.store = store
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError):
        return JSONResponse(status_code=400, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def request_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _describe_request_error(exc)})

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"message": exc.message})

    # Handlers are async so every store call runs on the single event loop thread.

    @app.get("/tasks")
    async def list_tasks(
        sort_by: str | None = Query(default=None, alias="sortBy"),
        filter_by: str | None = Query(default=None, alias="filter"),
    ):
        """List tasks with optional sorting and filtering."""
        return [_to_json(t) for t in store.list_tasks(sort_by=sort_by, filter_by=filter_by)]

    @app.post("/tasks", status_code=201)
    async def create_task(payload: TaskCreate | None = None):
        """Create a task. Title is required; priority falls back to Low."""
        payload = payload or TaskCreate()
        task = store.create_task(
            payload.title,
            description=payload.description,
            deadline=payload.deadline,
            priority=payload.priority,
        )
        return _to_json(task)

    @app.get("/tasks/export")
    async def export_tasks():
        """Export all tasks as a text file download."""
        text = store.export_tasks()
        return PlainTextResponse(
            text,
            headers={"Content-Disposition": f'attachment; filename="{EXPORT_FILENAME}"'},
        )

    @app.get("/tasks/{task_id}")
    async def get_task(task_id: int):
        return _to_json(store.get_task(task_id))

    @app.put("/tasks/{task_id}")
    async def update_task(task_id: int, updates: TaskUpdate):
        """Apply only the fields present in the request body."""
        task = store.update_task(task_id, updates.model_dump(exclude_unset=True))
        return _to_json(task)

    @app.delete("/tasks/{task_id}", status_code=204)
    async def delete_task(task_id: int):
        store.delete_task(task_id)
        return Response(status_code=204)

    @app.post("/tasks/{task_id}/complete")
    async def complete_task(task_id: int):
        return _to_json(store.complete_task(task_id))

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "tasks": len(store)}

    return app


def main() -> None:
    import uvicorn

    settings = Settings.from_env()
    configure_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()
