from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./payroll.db"

    # File source: files are resolved relative to data_dir
    data_dir: str = "./data"
    employees_file: str = "employees.csv"
    shifts_file: str = "shifts.csv"

    # API source
    provider_base_url: str = "http://localhost:4001"
    provider_timeout_seconds: float = 10.0
    mock_provider_port: int = 4001

    sync_hour: int = 2
    scheduled_sync_source: str = "FILE"  # "FILE" or "API"

    summary_window_days: int = 7
    recent_runs_limit: int = 50

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
