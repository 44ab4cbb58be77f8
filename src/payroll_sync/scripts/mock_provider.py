"""
Mock payroll provider for local development.

Serves the two read endpoints the API row source expects, with canned rows
shaped like a real provider response (JSON numbers and booleans, break
minutes as a string):

    GET /employees
    GET /shifts

Usage:
    python -m payroll_sync.scripts.mock_provider    # listens on MOCK_PROVIDER_PORT
"""
import logging
from typing import Any, Dict, List

from fastapi import FastAPI

logger = logging.getLogger(__name__)

EMPLOYEES: List[Dict[str, Any]] = [
    {
        "external_id": "E-2001",
        "first_name": "Mock",
        "last_name": "User",
        "email": "Mock@Example.com",
        "hourly_rate": 25.0,
        "active": True,
    },
    {
        "external_id": "E-2002",
        "first_name": "Dana",
        "last_name": "Reyes",
        "email": "",
        "hourly_rate": "31.50",
        "active": "false",
    },
]

SHIFTS: List[Dict[str, Any]] = [
    {
        "external_id": "S-8001",
        "employee_external_id": "E-2001",
        "start_at": "2026-01-29T09:00:00Z",
        "end_at": "2026-01-29T17:00:00Z",
        "break_minutes": "30",
    },
    {
        "external_id": "S-8002",
        "employee_external_id": "E-2002",
        "start_at": "2026-01-30T22:00:00Z",
        "end_at": "2026-01-31T06:15:00Z",
        "break_minutes": 45,
    },
    {
        "external_id": "S-8003",
        "employee_external_id": "E-9999",
        "start_at": "2026-01-30T08:00:00Z",
        "end_at": "2026-01-30T12:00:00Z",
        "break_minutes": "",
    },
]


def create_mock_app() -> FastAPI:
    app = FastAPI(title="Mock Payroll Provider")

    @app.get("/employees")
    def employees() -> List[Dict[str, Any]]:
        return EMPLOYEES

    @app.get("/shifts")
    def shifts() -> List[Dict[str, Any]]:
        return SHIFTS

    return app


app = create_mock_app()


def main() -> None:
    import uvicorn

    from payroll_sync.config import get_settings

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(message)s")
    port = get_settings().mock_provider_port
    logger.info("Mock provider API on %d", port)
    uvicorn.run(app, host="127.0.0.1", port=port)


if __name__ == "__main__":
    main()
