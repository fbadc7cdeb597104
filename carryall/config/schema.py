"""Configuration schema using Pydantic.

One data model with defaults for both halves of the bridge, persisted to
~/.carryall/config.json and overridable from CARRYALL_* environment variables.
"""

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServerConfig(BaseModel):
    """Dispatcher endpoint configuration."""
    host: str = "127.0.0.1"
    port: int = 8790
    path: str = "/"  # Route that accepts the form-encoded call
    allow_origins: list[str] = Field(default_factory=lambda: ["*"])  # CORS origins for browser clients
    force_object: bool = True  # Encode result lists as index-keyed objects
    log_level: str = "INFO"
    # Import strings ("package.module:attr") registered at startup.
    # Functions join the allowlist under their name; classes and instances are registered as types.
    callables: list[str] = Field(default_factory=list)


class ClientConfig(BaseModel):
    """Call builder configuration."""
    dispatcher_url: str = "http://127.0.0.1:8790/"
    timeout_s: float = 10.0
    strict_status: bool = True  # Raise on non-200 responses instead of yielding an empty result


class Config(BaseSettings):
    """Root configuration for carryall."""
    server: ServerConfig = Field(default_factory=ServerConfig)
    client: ClientConfig = Field(default_factory=ClientConfig)

    model_config = SettingsConfigDict(
        env_prefix="CARRYALL_",
        env_nested_delimiter="__",
    )
