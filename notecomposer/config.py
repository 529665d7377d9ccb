from pydantic_settings import BaseSettings
from pydantic import AliasChoices, Field


class Settings(BaseSettings):
    # Abbreviation persistence (SQLite)
    abbreviation_db_path: str = Field(
        default="abbreviations.db",
        validation_alias=AliasChoices(
            "NOTE_ABBREVIATION_DB_PATH",
            "NOTE_ABBREV_DB",
        ),
    )
    seed_abbreviations: bool = True

    # Expansion
    trigger_char: str = ":"
    date_macro_key: str = "cd"

    # Document defaults
    seed_problems: list[str] = []
    signature: str = "MigoJJ, MD\nEndocrinology"

    # Server
    host: str = "0.0.0.0"
    port: int = 8080
    cors_origins: list[str] = ["http://localhost:5173", "http://localhost:3000"]
    log_level: str = "INFO"

    model_config = {"env_prefix": "NOTE_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
