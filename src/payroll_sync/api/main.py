"""FastAPI application factory."""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from sqlmodel import SQLModel

from payroll_sync.api.routes import employees, sync as sync_routes


def create_app(engine=None) -> FastAPI:
    """
    Build and return the FastAPI app.

    Args:
        engine: Engine whose tables are created on startup. Defaults to the
            configured engine, resolved lazily at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        from payroll_sync.db.engine import get_engine

        # Create tables on startup (idempotent)
        SQLModel.metadata.create_all(engine or get_engine())
        yield

    app = FastAPI(
        title="Payroll Sync API",
        description="Employee and shift reconciliation with audited sync runs",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(sync_routes.router, tags=["sync"])
    app.include_router(employees.router, prefix="/employees", tags=["employees"])

    return app


# Module-level app instance for uvicorn
app = create_app()
