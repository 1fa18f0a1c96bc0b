"""
Configuration for gateway clients.

Two layers live here:

- ``ClientConfig``: the immutable per-client settings, produced by applying
  option functions (``with_base_url`` etc.) over provider defaults.
- ``GatewayConfig``: the host-level YAML description of which clients to build.
"""

import os
import logging
from typing import Callable, Dict, List, Any, Mapping, Optional
from dataclasses import dataclass, field, replace
from pathlib import Path

import httpx
import yaml

from .errors import GatewayConfigError

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 60.0


@dataclass(frozen=True)
class ClientConfig:
    """Read-only settings shared by every call made through one client."""
    base_url: str
    model: str
    timeout: float = DEFAULT_TIMEOUT
    http_client: Optional[httpx.Client] = None
    anthropic_version: Optional[str] = None
    headers: Mapping[str, str] = field(default_factory=dict)


ClientOption = Callable[[ClientConfig], ClientConfig]


def with_http_client(http_client: httpx.Client) -> ClientOption:
    """Use a caller-owned HTTP client. The adapter will not close it."""
    def option(config: ClientConfig) -> ClientConfig:
        return replace(config, http_client=http_client)
    return option


def with_base_url(base_url: str) -> ClientOption:
    def option(config: ClientConfig) -> ClientConfig:
        return replace(config, base_url=base_url)
    return option


def with_model(model: str) -> ClientOption:
    def option(config: ClientConfig) -> ClientConfig:
        return replace(config, model=model)
    return option


def with_timeout(timeout: float) -> ClientOption:
    def option(config: ClientConfig) -> ClientConfig:
        return replace(config, timeout=timeout)
    return option


def with_anthropic_version(version: str) -> ClientOption:
    def option(config: ClientConfig) -> ClientConfig:
        return replace(config, anthropic_version=version)
    return option


def with_header(name: str, value: str) -> ClientOption:
    """Add an extra header sent with every request."""
    def option(config: ClientConfig) -> ClientConfig:
        return replace(config, headers={**config.headers, name: value})
    return option


def build_client_config(defaults: ClientConfig, options: List[ClientOption]) -> ClientConfig:
    """
    Apply options in call order over provider defaults.

    Args:
        defaults: Provider default configuration
        options: Option functions, applied left to right

    Returns:
        Frozen configuration

    Raises:
        GatewayConfigError: If the resulting configuration is unusable
    """
    config = defaults
    for option in options:
        config = option(config)

    if not config.base_url:
        raise GatewayConfigError("Base URL is empty")
    if not config.model:
        raise GatewayConfigError("Model is empty")
    if config.timeout is None or config.timeout <= 0:
        raise GatewayConfigError(f"Timeout must be positive, got {config.timeout}")

    return replace(config, base_url=config.base_url.rstrip("/"))


@dataclass
class GatewayInstanceConfig:
    """Configuration for a single gateway instance."""
    type: str
    name: str
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass
class GatewayConfig:
    """Complete gateway configuration."""
    default_gateway: Optional[str] = None
    gateways: List[GatewayInstanceConfig] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GatewayConfig":
        return _parse_config(data)


def load_config(config_path: Optional[str] = None) -> GatewayConfig:
    """
    Load gateway configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses default location.

    Returns:
        Loaded configuration

    Raises:
        GatewayConfigError: If the file exists but cannot be read or parsed
    """
    if config_path is None:
        # Try common locations
        paths = [
            Path("config/genai-gateway/gateways.yaml"),
            Path("/etc/genai-gateway/gateways.yaml"),
            Path.home() / ".config/genai-gateway/gateways.yaml",
        ]
        for p in paths:
            if p.exists():
                config_path = str(p)
                break

    if config_path is None or not Path(config_path).exists():
        logger.warning("No gateway config file found, using environment defaults")
        return _default_config()

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise GatewayConfigError(f"Failed to load config from {config_path}: {e}") from e

    logger.info(f"Loaded gateway config from {config_path}")
    return _parse_config(data or {})


def _parse_config(data: Dict[str, Any]) -> GatewayConfig:
    """Parse configuration dictionary."""
    if not isinstance(data, dict):
        raise GatewayConfigError("Gateway config must be a mapping")

    entries = data.get("gateways") or []
    if not isinstance(entries, list):
        raise GatewayConfigError("'gateways' must be a list")

    gateways = []

    for gw_data in entries:
        if not isinstance(gw_data, dict) or not gw_data.get("type") or not gw_data.get("name"):
            raise GatewayConfigError(f"Gateway entry needs 'type' and 'name': {gw_data!r}")

        name = gw_data["name"]

        api_key = gw_data.get("api_key") or ""
        if not isinstance(api_key, str):
            raise GatewayConfigError("api_key must be a string", gateway=name)

        try:
            timeout = float(gw_data.get("timeout", DEFAULT_TIMEOUT))
        except (TypeError, ValueError) as e:
            raise GatewayConfigError(f"Invalid timeout: {gw_data.get('timeout')!r}", gateway=name) from e

        extra = gw_data.get("extra") or {}
        if not isinstance(extra, dict):
            raise GatewayConfigError("extra must be a mapping", gateway=name)

        gateways.append(GatewayInstanceConfig(
            type=gw_data["type"],
            name=name,
            api_key=_expand_env(api_key),
            base_url=gw_data.get("base_url"),
            model=gw_data.get("model"),
            timeout=timeout,
            extra=extra,
        ))

    return GatewayConfig(
        default_gateway=data.get("default_gateway"),
        gateways=gateways,
    )


def _expand_env(value: Optional[str]) -> Optional[str]:
    """Expand a ``${VAR}`` reference from the environment."""
    if value and value.startswith("${") and value.endswith("}"):
        return os.environ.get(value[2:-1], "")
    return value


def _default_config() -> GatewayConfig:
    """Return default configuration built from provider API key env vars."""
    gateways = []

    anthropic_key = os.environ.get("ANTHROPIC_API_KEY")
    if anthropic_key:
        gateways.append(GatewayInstanceConfig(
            type="anthropic",
            name="anthropic",
            api_key=anthropic_key,
        ))

    openai_key = os.environ.get("OPENAI_API_KEY")
    if openai_key:
        gateways.append(GatewayInstanceConfig(
            type="openai",
            name="openai",
            api_key=openai_key,
            extra={
                "organization": os.environ.get("OPENAI_ORGANIZATION"),
                "project": os.environ.get("OPENAI_PROJECT"),
            },
        ))

    return GatewayConfig(
        default_gateway=gateways[0].name if gateways else None,
        gateways=gateways,
    )
