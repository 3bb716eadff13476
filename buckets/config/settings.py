"""
Application configuration using Pydantic settings.

Every field maps to an environment variable of the same name (upper
case). Values in a .env file are read too; real environment wins.
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..core.access.gate import AuthenticationRequirements, OperationKind


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like authentication_keys), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Buckets"
    api_version: str = "v1"

    # Storage
    bucket_path: str = Field(
        default="./data/buckets",
        description="Root directory for bucket storage. One subdirectory per bucket."
    )
    max_upload_size_mb: int = Field(
        default=100,
        description="Maximum object size accepted by PUT, in MB."
    )

    # Authentication
    authentication_keys: str = Field(
        default="",
        description="Comma-separated bearer tokens accepted by the server."
    )
    require_auth_bucket_list: bool = Field(
        default=False,
        description="Require a bearer token to list buckets."
    )
    require_auth_object_list: bool = Field(
        default=False,
        description="Require a bearer token to list objects in a bucket."
    )
    require_auth_object_read: bool = Field(
        default=False,
        description="Require a bearer token to read objects (GET and HEAD)."
    )
    require_auth_object_create: bool = Field(
        default=False,
        description="Require a bearer token to create objects."
    )
    require_auth_object_delete: bool = Field(
        default=False,
        description="Require a bearer token to delete objects."
    )

    # HTTP behaviour
    enable_docs: bool = Field(
        default=True,
        description="Serve OpenAPI documentation at /docs and /redoc."
    )
    use_https_redirection: bool = Field(
        default=False,
        description="Redirect plain HTTP requests to HTTPS."
    )
    use_forwarded_headers: bool = Field(
        default=False,
        description="Trust X-Forwarded-For/X-Forwarded-Proto from a reverse proxy."
    )
    forwarded_allow_ips: str = Field(
        default="127.0.0.1",
        description="Comma-separated proxy addresses trusted for forwarded headers."
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Level for the buckets loggers (case-insensitive)."
    )

    # CORS
    cors_origins: str = Field(
        default="",
        description="Comma-separated list of allowed CORS origins. Empty disables CORS."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def authentication_keys_list(self) -> list[str]:
        """Parse comma-separated bearer tokens into a list."""
        return [key.strip() for key in self.authentication_keys.split(",") if key.strip()]

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def forwarded_allow_ips_list(self) -> list[str]:
        return [ip.strip() for ip in self.forwarded_allow_ips.split(",") if ip.strip()]

    def authentication_requirements(self) -> AuthenticationRequirements:
        """
        Snapshot of the per-operation token requirements.

        Built fresh for each request and passed to the access gate, so
        nothing downstream holds on to mutable configuration.
        """
        return AuthenticationRequirements({
            OperationKind.BUCKET_LIST: self.require_auth_bucket_list,
            OperationKind.OBJECT_LIST: self.require_auth_object_list,
            OperationKind.OBJECT_READ: self.require_auth_object_read,
            OperationKind.OBJECT_CREATE: self.require_auth_object_create,
            OperationKind.OBJECT_DELETE: self.require_auth_object_delete,
        })

    def validate_required_fields(self) -> list[str]:
        """
        Report configuration that cannot work as intended.

        Returns a list of problems; empty means the configuration is usable.
        """
        problems = []

        if not self.bucket_path.strip():
            problems.append("BUCKET_PATH is empty")

        required = [
            kind.value
            for kind, flag in self.authentication_requirements().required.items()
            if flag
        ]
        if required and not self.authentication_keys_list:
            problems.append(
                "AUTHENTICATION_KEYS is empty but tokens are required for: "
                + ", ".join(required)
            )

        if self.max_upload_size_mb < 1:
            problems.append("MAX_UPLOAD_SIZE_MB must be positive")

        return problems


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, pass explicit Settings to create_app() or call
    get_settings.cache_clear() to reset.
    """
    return Settings()
