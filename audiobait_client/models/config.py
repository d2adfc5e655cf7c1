"""
Pydantic model for application configuration.
Provides robust validation for all settings.
"""

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_REQUEST_TIMEOUT = 60.0


class ClientConfig(BaseModel):
    """A validated configuration model for the application."""

    # Device identity & API
    server_url: str
    group: str = ""
    device_name: str
    password: str = ""
    token: str = ""

    # Transfer Settings
    files_dir: str = "~/.local/share/audiobait-client/files"
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    max_attempts: int = 3
    retry_base_delay: float = 1.5

    # Internal fields not loaded from INI file
    config_path: str = Field("", repr=False)

    class Config:
        """Pydantic model configuration."""

        validate_assignment = True
        str_strip_whitespace = True

    @field_validator("server_url")
    @classmethod
    def validate_server_url(cls, v: str) -> str:
        """Ensures the server URL is an http(s) URL and strips any trailing slash."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("Server URL must start with http:// or https://.")
        return v.rstrip("/")

    @field_validator("device_name")
    @classmethod
    def validate_device_name(cls, v: str) -> str:
        if not v:
            raise ValueError("Device name cannot be empty.")
        return v

    @field_validator("request_timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Request timeout must be greater than zero.")
        return v

    @field_validator("max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        """Ensures a reasonable number of attempts."""
        if v < 1 or v > 10:
            raise ValueError("Max attempts must be between 1 and 10.")
        return v

    @model_validator(mode="after")
    def validate_credentials(self) -> "ClientConfig":
        """Validates that the device can obtain a session token."""
        has_token = bool(self.token and self.token.strip())
        has_password = bool(self.password and self.password.strip())

        if not has_token and not has_password:
            raise ValueError(
                "Authentication not configured. Provide either a password or "
                "a token."
            )
        return self

    @classmethod
    def get_ini_keys(cls) -> set[str]:
        """Returns a set of all keys that are expected in the INI file."""
        internal_fields = {"config_path"}
        return {key for key in cls.model_fields if key not in internal_fields}
