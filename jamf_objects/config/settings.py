from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    jamf_url: str = Field(default="", description="Base URL of the Jamf Pro server")
    jamf_username: str = Field(default="", description="API account name")
    jamf_password: str = Field(default="", description="API account password")
    jamf_timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    jamf_verify_ssl: bool = Field(default=True, description="Verify the server certificate")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(default="INFO")

    scope_data_loss_warnings: bool = Field(
        default=True,
        description="Default for new Scope objects: warn when saving a scope the server may truncate",
    )

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


_settings_instance = None


def get_settings() -> Settings:
    global _settings_instance
    if _settings_instance is None:
        _settings_instance = Settings()
    return _settings_instance


def reset_settings() -> None:
    """Forget the cached settings so the next call re-reads the environment."""
    global _settings_instance
    _settings_instance = None
