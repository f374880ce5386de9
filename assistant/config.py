from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Database
    database_url: str = "sqlite:///./assistant.db"

    # Frontend URL for CORS
    frontend_url: str = "http://localhost:3000"

    log_level: str = "INFO"

    # Capability provider: "simulated" (offline, deterministic) or "gemini"
    capability_provider: str = "simulated"

    # Run the search right after submit as a background task (False = explicit /execute only)
    search_auto_execute: bool = False

    # Vertex AI (Gemini) provider
    vertex_project_id: str = ""
    vertex_location: str = "us-central1"
    vertex_credentials_path: str = ""  # path to service account JSON; empty = use ADC
    gemini_model: str = "gemini-2.0-flash"  # used when a catalog model has provider "google"
    gemini_temperature: float = 0.7
    gemini_max_output_tokens: int = 2048

    class Config:
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    return Settings()
