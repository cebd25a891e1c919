
from pydantic import Field
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    app_name: str = Field("recost", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Gemini (invoice extraction)
    gemini_api_key: str | None = Field(default=None, alias="GEMINI_API_KEY")
    gemini_model: str = Field("gemini-2.5-flash", alias="GEMINI_MODEL")

    # Currency used when the invoice does not state one
    default_currency: str = Field("PLN", alias="DEFAULT_CURRENCY")

    # Storage: "memory", "sqlite" or "http"
    storage_backend: str = Field("memory", alias="STORAGE_BACKEND")
    storage_db_path: str = Field("recost.db", alias="STORAGE_DB_PATH")
    backend_url: str | None = Field(default=None, alias="BACKEND_URL")
    backend_timeout: float = Field(10.0, alias="BACKEND_TIMEOUT")

    # Multiplier for the simulated cloud latency (0 disables the delays)
    mock_latency_scale: float = Field(1.0, alias="MOCK_LATENCY_SCALE")

    # CORS allowed origins (comma-separated list for production deployment)
    cors_origins: str = Field("http://localhost:3000,http://127.0.0.1:3000", alias="CORS_ORIGINS")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

settings = Settings()
