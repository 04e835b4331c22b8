from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # OpenRouter (an empty key is reported per search, not at import)
    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    default_model: str = "google/gemini-2.5-flash"
    openrouter_model: str = ""
    llm_timeout_seconds: float = 60.0
    llm_max_tokens: int = 8192

    # Search
    search_result_count: int = 6

    # Cosmetic pacing of the activity log (milliseconds, 0 disables)
    ux_pacing_ms: int = 400
    prior_art_narration_ms: int = 800

    # App
    cors_origins: str = "http://localhost:3000"
    app_log_level: str = "INFO"
    noisy_log_level: str = "WARNING"
    log_dir: str = "logs"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",")]

    @property
    def has_credentials(self) -> bool:
        return bool(self.openrouter_api_key.strip())


settings = Settings()
