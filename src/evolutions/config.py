"""Library configuration."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Evolution settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EVOLUTIONS_",
        extra="ignore",
    )

    # Document attribute carrying the schema version
    version_key: str = "version"

    # Changelogs
    warn_on_duplicate_versions: bool = True


settings = Settings()
