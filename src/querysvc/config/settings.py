"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Environment variables (QUERYSVC_ prefix)
  2. YAML config file (if specified)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource

from querysvc.paging.codec import PageTokenSecret


class ServerSettings(BaseModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Server bind address")
    port: int = Field(default=8080, description="Server port")
    workers: int = Field(default=1, description="Number of worker processes")
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")


class PagingSettings(BaseModel):
    """Page token sealing configuration."""

    page_token_secret: str = Field(
        default="",
        repr=False,
        description="Secret used to seal page tokens; only the first 32 bytes are used",
    )

    def secret(self) -> PageTokenSecret:
        """Build the process-wide ``PageTokenSecret``.

        Raises:
            ValueError: If no secret is configured.
        """
        return PageTokenSecret.from_string(self.page_token_secret)


class SearchSettings(BaseModel):
    """Resource searcher configuration."""

    source: Literal["opensearch", "mock"] = Field(default="opensearch", description="Resource searcher backend")
    url: str = Field(default="http://localhost:9200", description="OpenSearch node URL")
    index: str = Field(default="resources", description="OpenSearch index holding resources")


class AccessControlSettings(BaseModel):
    """Access checker configuration."""

    source: Literal["nats", "mock"] = Field(default="nats", description="Access checker backend")
    url: str = Field(default="nats://localhost:4222", description="NATS server URL")
    timeout: float = Field(default=10.0, description="NATS connection timeout in seconds")
    max_reconnect: int = Field(default=3, description="Maximum NATS reconnect attempts")
    reconnect_wait: float = Field(default=2.0, description="Seconds between NATS reconnect attempts")


class OrganizationSettings(BaseModel):
    """Organization searcher configuration."""

    source: Literal["clearbit", "mock"] = Field(default="clearbit", description="Organization searcher backend")
    api_key: str = Field(default="", repr=False, description="Clearbit API key")
    base_url: str = Field(default="https://company.clearbit.com", description="Clearbit Company API URL")
    autocomplete_url: str = Field(
        default="https://autocomplete.clearbit.com",
        description="Clearbit Autocomplete API URL",
    )
    timeout: float = Field(default=10.0, description="HTTP request timeout in seconds")
    max_retries: int = Field(default=3, description="Retries for transient HTTP failures")
    retry_delay: float = Field(default=1.0, description="Base retry delay in seconds (doubles per retry)")


class AuthSettings(BaseModel):
    """Bearer token authentication configuration."""

    jwks_url: str = Field(default="http://heimdall:4457/.well-known/jwks", description="JWKS endpoint")
    audience: str = Field(default="lfx-v2-query-service", description="Expected token audience")
    mock_local_principal: str = Field(
        default="",
        description="If set, token validation is skipped and this principal is used (local development only)",
    )


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")

    @field_validator("log_level")
    @classmethod
    def _normalize_level(cls, v: str) -> str:
        return v.lower()


class Settings(BaseSettings):
    """Root application settings.

    Configuration is loaded from environment variables with the QUERYSVC_ prefix.
    Nested settings use double underscores: QUERYSVC_SERVER__PORT=9090

    Example:
        QUERYSVC_PAGING__PAGE_TOKEN_SECRET=...
        QUERYSVC_SEARCH__SOURCE=mock
        QUERYSVC_ORGANIZATIONS__API_KEY=sk_...
    """

    model_config = {
        "env_prefix": "QUERYSVC_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    # Component settings
    server: ServerSettings = Field(default_factory=ServerSettings)
    paging: PagingSettings = Field(default_factory=PagingSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    access_control: AccessControlSettings = Field(default_factory=AccessControlSettings)
    organizations: OrganizationSettings = Field(default_factory=OrganizationSettings)
    auth: AuthSettings = Field(default_factory=AuthSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        # Environment wins over init arguments (YAML), which win over .env
        return env_settings, init_settings, dotenv_settings, file_secret_settings

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Values from the YAML file are passed as init arguments. Environment
        variables still override them key by key.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
