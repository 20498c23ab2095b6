"""Build metadata and telemetry configuration"""
import logging
import uuid
from pathlib import Path
from typing import Optional
from pydantic import AliasChoices, Field, PrivateAttr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_TOOL_NAME = "Idsec-SDK-Python"
DEFAULT_TELEMETRY_HEADER = "X-Cybr-Telemetry"


class Config(BaseSettings):
    """Tool identity, build information and telemetry switches"""

    model_config = SettingsConfigDict(env_prefix="IDSEC_", case_sensitive=False, populate_by_name=True)

    # Tool identity
    tool_name: str = Field(default=DEFAULT_TOOL_NAME, description="Name of the tool sending telemetry")
    version: str = Field(default="0.0.0", description="Tool version")
    build_number: str = Field(default="0", description="Build number")
    build_date: str = Field(default="N/A", description="Build date")
    git_commit: str = Field(default="N/A", description="Git commit the tool was built from")
    git_branch: str = Field(default="N/A", description="Git branch the tool was built from")

    # Deployment
    deploy_env: str = Field(
        default="prod",
        validation_alias=AliasChoices("DEPLOY_ENV", "IDSEC_DEPLOY_ENV"),
        description="Deployment environment of the tool",
    )

    # Telemetry
    disable_telemetry_collection: bool = Field(default=False, description="Disable environment and OS telemetry")
    telemetry_header: str = Field(default=DEFAULT_TELEMETRY_HEADER, description="Header carrying encoded telemetry")

    # Logging
    log_level: str = Field(default="INFO", description="Log level")
    logger_style: str = Field(default="json", description="Log renderer (json or console)")
    log_file: Optional[Path] = Field(default=None, description="Optional log file")

    _correlation_id: Optional[str] = PrivateAttr(default=None)

    @field_validator('deploy_env', mode='before')
    @classmethod
    def default_deploy_env(cls, v):
        return v or "prod"

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level

    @field_validator('logger_style')
    @classmethod
    def validate_logger_style(cls, v):
        style = v.lower()
        if style not in ("json", "console"):
            raise ValueError("LOGGER_STYLE must be 'json' or 'console'")
        return style

    @field_validator('log_file')
    @classmethod
    def ensure_log_directory(cls, v):
        if isinstance(v, Path):
            v.parent.mkdir(parents=True, exist_ok=True)
        return v

    @property
    def correlation_id(self) -> str:
        """Current correlation id, generated on first access"""
        if not self._correlation_id:
            return self.generate_correlation_id()
        return self._correlation_id

    def generate_correlation_id(self) -> str:
        """Replace the correlation id with a fresh UUID"""
        self._correlation_id = str(uuid.uuid4())
        return self._correlation_id

    def is_telemetry_collection_enabled(self) -> bool:
        """Check whether full telemetry collection is allowed"""
        return not self.disable_telemetry_collection
