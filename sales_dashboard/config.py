from typing import Literal, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict

class AppConfig(BaseSettings):
    """Application configuration using Pydantic BaseSettings.

    Loads configuration from environment variables and .env file (if present).
    Fields are type-checked and validated. Defaults are provided where appropriate.
    """
    # Databricks
    databricks_host: Optional[str] = None
    databricks_token: Optional[str] = None
    databricks_client_id: Optional[str] = None
    databricks_client_secret: Optional[str] = None
    databricks_config_profile: Optional[str] = None

    # Lakebase (Postgres) target for the SQL store
    lakebase_instance_name: Optional[str] = None
    lakebase_database: str = "databricks_postgres"
    database_url: Optional[str] = None

    # Application
    app_env: str = "local"
    log_level: str = "DEBUG"

    # Data paths
    data_dir: str = "sample_data"
    data_file: str = "sales_data.csv"
    store_backend: Literal["csv", "sql"] = "csv"

    # Query settings
    default_page_size: int = 10
    max_page_size: int = 100
    query_timeout_seconds: Optional[float] = 10.0
    execution_mode: Literal["snapshot", "parallel"] = "snapshot"
    filter_coercion: Literal["lenient", "strict"] = "lenient"

    # Seed data settings
    default_seed_rows: int = 1000
    default_seed_days: int = 90
    default_seed_value: int = 42

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

_config: Optional[AppConfig] = None

def get_config() -> AppConfig:
    """Return the AppConfig instance (singleton pattern)."""
    global _config
    if _config is None:
        _config = AppConfig()
    return _config

def set_config_for_test(**kwargs):
    """For testing only: override the AppConfig instance with new values."""
    global _config
    _config = AppConfig(**kwargs)
