"""Configuration management service with Pydantic Settings.

This module provides centralized configuration management for the
TxMS relay, loading and validating environment variables at startup.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from txms_relay.provider.models import DEFAULT_RPC_METHOD, ProviderConfig, ProviderKind


def _validate_http_url(v: str | None) -> str | None:
    if v is None:
        return v
    if not v.startswith(("http://", "https://")):
        raise ValueError("URL must be an HTTP(S) endpoint")
    return v


class ProviderSettings(BaseSettings):
    """Blockchain node backend settings."""

    model_config = SettingsConfigDict(env_prefix="", env_file=".env", extra="ignore")

    url: str | None = Field(
        default=None,
        alias="PROVIDER",
        description="Base URL of the raw HTTP (Blockbook-style) backend",
    )
    endpoint: str = Field(
        default="",
        alias="ENDPOINT",
        description="Path appended to PROVIDER, e.g. api/v2/sendtx/",
    )
    provider_type: str = Field(
        default="blockbook",
        alias="PROVIDER_TYPE",
        description="Backend protocol: blockbook (raw HTTP) or rpc (JSON-RPC)",
    )
    rpc_url: str | None = Field(
        default=None,
        alias="RPC_URL",
        description="JSON-RPC endpoint",
    )
    rpc_method: str = Field(
        default=DEFAULT_RPC_METHOD,
        alias="RPC_METHOD",
        description="JSON-RPC method used to submit raw transactions",
    )
    timeout: float = Field(
        default=30.0,
        alias="PROVIDER_TIMEOUT",
        description="Provider request timeout in seconds",
        gt=0,
    )

    @field_validator("url", "rpc_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate provider URL format."""
        return _validate_http_url(v)

    @model_validator(mode="after")
    def check_endpoint_for_kind(self) -> ProviderSettings:
        """Require the endpoint the selected protocol submits to."""
        kind = ProviderKind.from_tag(self.provider_type)
        if kind == ProviderKind.RAW_HTTP and not self.url:
            raise ValueError("PROVIDER is required when PROVIDER_TYPE is blockbook")
        if kind == ProviderKind.JSON_RPC and not self.rpc_url:
            raise ValueError("RPC_URL is required when PROVIDER_TYPE is rpc")
        return self

    @property
    def submission_url(self) -> str:
        """URL transactions are POSTed to."""
        if ProviderKind.from_tag(self.provider_type) == ProviderKind.JSON_RPC:
            return self.rpc_url or ""
        base = self.url or ""
        if not base.endswith("/"):
            base = f"{base}/"
        return f"{base}{self.endpoint.lstrip('/')}"

    def to_config(self) -> ProviderConfig:
        """Build the immutable provider config used by the dispatcher."""
        kind = ProviderKind.from_tag(self.provider_type)
        return ProviderConfig(
            kind=kind if kind is not None else self.provider_type,
            endpoint=self.submission_url,
            rpc_method=self.rpc_method if kind == ProviderKind.JSON_RPC else None,
        )


class MmsSettings(BaseSettings):
    """MMS attachment handling settings."""

    model_config = SettingsConfigDict(env_prefix="MMS_", env_file=".env", extra="ignore")

    enabled: bool = Field(
        default=False,
        alias="MMS",
        description="Fetch and relay carrier attachments",
    )
    suffix: str = Field(
        default=".txms.txt",
        alias="MMS_SUFFIX",
        description="File suffix that marks a carrier attachment",
    )
    timeout: float = Field(
        default=10.0,
        alias="MMS_TIMEOUT",
        description="Attachment fetch timeout in seconds",
        gt=0,
    )

    @field_validator("suffix")
    @classmethod
    def validate_suffix(cls, v: str) -> str:
        """Validate carrier suffix."""
        if not v.strip():
            raise ValueError("MMS_SUFFIX must not be empty")
        return v.strip()


class Settings(BaseSettings):
    """Main application settings.

    Loads configuration from environment variables with support for
    .env files.

    Example:
        ```python
        from txms_relay.config import get_settings

        settings = get_settings()
        print(settings.node.submission_url)
        print(settings.log_level)
        ```
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Nested configuration groups
    node: ProviderSettings = Field(default_factory=ProviderSettings)
    attachments: MmsSettings = Field(default_factory=MmsSettings)

    # Request handling
    body_name: str = Field(
        default="body",
        alias="BODY_NAME",
        description="Webhook field carrying the message text",
    )
    media_name: str = Field(
        default="mms",
        alias="MEDIA_NAME",
        description="Webhook field carrying attachment URLs",
    )
    segment_policy: Literal["first", "all"] = Field(
        default="first",
        alias="SEGMENT_POLICY",
        description="Relay only the first message segment, or all of them",
    )
    error_messages: dict[str, str] = Field(
        default_factory=dict,
        alias="ERROR_MESSAGES",
        description="Extra node error to reply phrase mappings (JSON object)",
    )

    # Application settings
    debug: bool = Field(
        default=False,
        alias="DEBUG",
        description="Enable debug logging",
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        alias="LOG_LEVEL",
        description="Logging level",
    )
    host: str = Field(
        default="0.0.0.0",
        alias="HOST",
        description="Address the webhook server binds to",
    )
    port: int = Field(
        default=8080,
        alias="PORT",
        description="HTTP port for the webhook server",
        ge=1,
        le=65535,
    )

    @property
    def effective_log_level(self) -> str:
        """Logging level name, forced to DEBUG when DEBUG is set."""
        return "DEBUG" if self.debug else self.log_level

    def get_logging_level(self) -> int:
        """Get the numeric logging level."""
        level: int = getattr(logging, self.effective_log_level)
        return level

    def redacted_summary(self) -> dict[str, str | dict[str, str]]:
        """Get a summary of settings with credentials redacted.

        Returns:
            Dictionary of settings with URL credentials masked.
        """
        return {
            "provider": {
                "type": self.node.provider_type,
                "url": self._redact_url(self.node.submission_url),
                "rpc_method": self.node.rpc_method,
                "timeout": str(self.node.timeout),
            },
            "mms_enabled": str(self.attachments.enabled),
            "mms_suffix": self.attachments.suffix,
            "body_name": self.body_name,
            "media_name": self.media_name,
            "segment_policy": self.segment_policy,
            "log_level": self.effective_log_level,
            "listen": f"{self.host}:{self.port}",
        }

    @staticmethod
    def _redact_url(url: str) -> str:
        """Redact password from URL if present."""
        if "@" in url and "://" in url:
            # URL has credentials - redact the password
            protocol_end = url.index("://") + 3
            at_pos = url.index("@")
            creds_part = url[protocol_end:at_pos]
            if ":" in creds_part:
                username = creds_part.split(":")[0]
                return f"{url[:protocol_end]}{username}:***@{url[at_pos + 1 :]}"
        return url


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings singleton.

    Returns:
        The Settings instance.

    Raises:
        ValidationError: If required environment variables are missing
            or have invalid values.
    """
    return Settings()


def clear_settings_cache() -> None:
    """Clear the settings cache.

    Useful for testing when you need to reload settings with
    different environment variables.
    """
    get_settings.cache_clear()
