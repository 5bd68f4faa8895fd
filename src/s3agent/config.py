"""Configuration loading and Pydantic models for s3agent.

Programmatic construction is the primary way to build an agent; these
models exist for applications that keep their storage settings in YAML.
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field

ACCESS_KEY_ENV = "S3AGENT_ACCESS_KEY"
SECRET_KEY_ENV = "S3AGENT_SECRET_KEY"


class ClientConfig(BaseModel):
    """Credentials and addressing for the storage provider."""

    access_key: str = ""
    secret_key: str = Field(default="", repr=False)
    region: str = "s3"
    api_suffix: str = "amazonaws.com"
    scheme: str = "https"
    encode_list_params: bool = False


class TransportConfig(BaseModel):
    """HTTP transport settings."""

    timeout: float = 30.0
    verify_tls: bool = True


class LoggingConfig(BaseModel):
    """Logging level and output format."""

    level: str = "INFO"
    format: str = "text"


class MetricsConfig(BaseModel):
    """Prometheus metrics toggle."""

    enabled: bool = False


class S3AgentConfig(BaseModel):
    """Top-level s3agent configuration."""

    client: ClientConfig = Field(default_factory=ClientConfig)
    transport: TransportConfig = Field(default_factory=TransportConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)


def _parse_client(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the client section from YAML data.

    Handles nested structure: client.credentials.access_key -> access_key
    """
    if data is None:
        return {}
    result: dict[str, Any] = {
        "region": data.get("region", "s3"),
        "api_suffix": data.get("api_suffix", "amazonaws.com"),
        "scheme": data.get("scheme", "https"),
        "encode_list_params": data.get("encode_list_params", False),
    }
    credentials = data.get("credentials")
    if isinstance(credentials, dict):
        result["access_key"] = credentials.get("access_key", "")
        result["secret_key"] = credentials.get("secret_key", "")
    return result


def _parse_transport(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the transport section from YAML data."""
    if data is None:
        return {}
    return {
        "timeout": data.get("timeout", 30.0),
        "verify_tls": data.get("verify_tls", True),
    }


def _parse_logging(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the logging section from YAML data."""
    if data is None:
        return {}
    return {
        "level": data.get("level", "INFO"),
        "format": data.get("format", "text"),
    }


def _parse_metrics(data: dict[str, Any] | None) -> dict[str, Any]:
    """Parse the metrics section from YAML data."""
    if data is None:
        return {}
    return {"enabled": data.get("enabled", False)}


def apply_env_overrides(config: S3AgentConfig) -> S3AgentConfig:
    """Replace credentials with S3AGENT_ACCESS_KEY / S3AGENT_SECRET_KEY when set.

    Args:
        config: The configuration loaded from file.

    Returns:
        A copy with environment credentials applied.
    """
    overrides: dict[str, str] = {}
    access_key = os.environ.get(ACCESS_KEY_ENV)
    if access_key:
        overrides["access_key"] = access_key
    secret_key = os.environ.get(SECRET_KEY_ENV)
    if secret_key:
        overrides["secret_key"] = secret_key
    if not overrides:
        return config
    client = config.client.model_copy(update=overrides)
    return config.model_copy(update={"client": client})


def load_config(path: Path) -> S3AgentConfig:
    """Load an S3AgentConfig from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        A fully populated S3AgentConfig validated by Pydantic, with
        environment credential overrides applied.

    Raises:
        FileNotFoundError: If the config file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
    """
    with open(path, "r") as fh:
        raw: dict[str, Any] = yaml.safe_load(fh) or {}

    config = S3AgentConfig(
        client=ClientConfig(**_parse_client(raw.get("client"))),
        transport=TransportConfig(**_parse_transport(raw.get("transport"))),
        logging=LoggingConfig(**_parse_logging(raw.get("logging"))),
        metrics=MetricsConfig(**_parse_metrics(raw.get("metrics"))),
    )
    return apply_env_overrides(config)
