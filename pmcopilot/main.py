"""
FastAPI Backend for PM Copilot

Provides REST APIs for:
- PRD documents (CRUD, RICE scores, exports, share links)
- Snapshots (compressed point-in-time copies of a PRD)
- Integration settings and saved export templates
- Linear / Jira / Notion hand-off
- The offline service worker script

Run with the `pmcopilot` console script (main below): it checks the database
before serving and exits with code 1 when NEO4J_URI is missing or the server
cannot be reached.
"""

from __future__ import annotations

from dotenv import load_dotenv
load_dotenv()

import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from starlette.requests import Request
from starlette.responses import Response
from fastapi.middleware.cors import CORSMiddleware

from pmcopilot.platform.env import get_host, get_port
from pmcopilot.platform.neo4j import (
    DatabaseConfigError,
    close_neo4j_driver,
    init_neo4j_driver,
    verify_connectivity,
)
from pmcopilot.platform.observability.request_logging import (
    RequestTimer,
    http_context,
    new_request_id,
    set_request_id,
)
from pmcopilot.platform.observability.smart_logger import SmartLogger
from pmcopilot.platform.schema import initialize_schema

from pmcopilot.features.health.router import router as health_router
from pmcopilot.features.integrations.router import router as integrations_router
from pmcopilot.features.notion.router import router as notion_router
from pmcopilot.features.offline.router import router as offline_router
from pmcopilot.features.prds.router import router as prds_router
from pmcopilot.features.snapshots.router import router as snapshots_router
from pmcopilot.features.sync.router import router as sync_router
from pmcopilot.features.templates.router import router as templates_router


def _make_lifespan(init_database: bool):
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage Neo4j connection lifecycle."""
        SmartLogger.log(
            "INFO",
            "Starting API (lifespan init)",
            category="api.lifespan",
            params={
                "logger_impl": getattr(SmartLogger, "impl_source", "unknown"),
                "init_database": init_database,
            },
        )
        if init_database:
            try:
                init_neo4j_driver(log=True)
                verify_connectivity()
            except Exception as e:
                # A bare ASGI server picks its own exit code here; main() exits 1.
                SmartLogger.log(
                    "ERROR",
                    "Database unavailable at startup.",
                    category="api.lifespan.database",
                    params={"error": {"type": type(e).__name__, "message": str(e)}},
                )
                close_neo4j_driver(log=False)
                raise
            initialize_schema()
        yield
        if init_database:
            close_neo4j_driver(log=True)
        SmartLogger.log("INFO", "API stopped", category="api.lifespan")

    return lifespan


def create_app(init_database: bool = True) -> FastAPI:
    """
    Build the application.

    init_database=False skips the Neo4j driver entirely; tests use it together
    with dependency_overrides on the repository providers.
    """
    app = FastAPI(
        title="PM Copilot API",
        description="API for PRD authoring, export and issue-tracker hand-off",
        version="1.0.0",
        lifespan=_make_lifespan(init_database),
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-Id", "Content-Disposition", "X-RateLimit-Limit", "X-RateLimit-Remaining", "X-RateLimit-Reset"],
    )

    @app.middleware("http")
    async def _request_id_middleware(request: Request, call_next):
        """Assign a request_id to every inbound HTTP request and emit start/end logs."""
        rid = request.headers.get("x-request-id") or new_request_id()
        set_request_id(rid)
        timer = RequestTimer()

        SmartLogger.log(
            "INFO",
            "HTTP request received: starting route execution.",
            category="api.http.start",
            params=http_context(request),
        )

        try:
            response: Response = await call_next(request)
            SmartLogger.log(
                "INFO",
                "HTTP request completed.",
                category="api.http.end",
                params={
                    **http_context(request),
                    "result": {
                        "status_code": response.status_code,
                        "duration_ms": timer.ms(),
                    },
                },
            )
            response.headers["X-Request-Id"] = rid
            return response
        except Exception as e:
            SmartLogger.log(
                "ERROR",
                "HTTP request failed: route raised an exception.",
                category="api.http.error",
                params={
                    **http_context(request),
                    "error": {"type": type(e).__name__, "message": str(e)},
                    "duration_ms": timer.ms(),
                },
            )
            raise
        finally:
            # Avoid leaking request_id into unrelated async contexts.
            set_request_id(None)

    app.include_router(health_router)
    app.include_router(prds_router)
    app.include_router(snapshots_router)
    app.include_router(integrations_router)
    app.include_router(templates_router)
    app.include_router(sync_router)
    app.include_router(notion_router)
    app.include_router(offline_router)
    return app


app = create_app()


def main() -> None:
    """Console entry: fail fast when the database is missing or unreachable, then serve."""
    import uvicorn

    try:
        init_neo4j_driver(log=True)
        verify_connectivity()
    except DatabaseConfigError as e:
        SmartLogger.log("ERROR", "Database is not configured.", category="api.main", params={"error": str(e)})
        sys.exit(1)
    except Exception as e:
        SmartLogger.log(
            "ERROR",
            "Database connection failed.",
            category="api.main",
            params={"error": {"type": type(e).__name__, "message": str(e)}},
        )
        close_neo4j_driver(log=False)
        sys.exit(1)

    host, port = get_host(), get_port()
    SmartLogger.log("INFO", "Starting API", category="api.main", params={"host": host, "port": port})
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()
