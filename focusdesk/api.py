"""
FastAPI app entry point aggregating per-domain routers under focusdesk/routes.
Keep as `uvicorn focusdesk.api:app`.
"""
from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from . import __version__
from .db import Database, ensure_schema
from .logs import LogContext
from .services.settings_svc import ensure_default_settings


def create_app(db: Database | None = None) -> FastAPI:
    app = FastAPI(title="focusdesk-api", version=__version__)
    app.state.db = db or Database()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:1420",
            "http://127.0.0.1:1420",
            "http://localhost:5173",
            "http://127.0.0.1:5173",
            "tauri://localhost",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    def on_startup():
        ensure_schema(app.state.db)
        try:
            ensure_default_settings(app.state.db)
        except Exception as e:
            LogContext(app.state.db, "STARTUP").write("ERROR", f"ensure_default_settings_failed: {e}")
            raise

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.db.close()

    # Include routers (split by domain)
    from .routes import base as base_routes
    from .routes import notes as notes_routes
    from .routes import tasks as tasks_routes
    from .routes import projects as projects_routes
    from .routes import tags as tags_routes
    from .routes import pomodoro as pomodoro_routes
    from .routes import kanban as kanban_routes
    from .routes import settings as settings_routes
    from .routes import logs as logs_routes
    from .routes import invoke as invoke_routes

    app.include_router(base_routes.router)
    app.include_router(notes_routes.router)
    app.include_router(tasks_routes.router)
    app.include_router(projects_routes.router)
    app.include_router(tags_routes.router)
    app.include_router(pomodoro_routes.router)
    app.include_router(kanban_routes.router)
    app.include_router(settings_routes.router)
    app.include_router(logs_routes.router)
    app.include_router(invoke_routes.router)
    return app


app = create_app()
