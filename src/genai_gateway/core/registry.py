"""
Gateway registry for building and looking up provider adapters.
"""

import logging
from typing import Dict, List, Optional, Type, Any

from .config import (
    GatewayConfig,
    GatewayInstanceConfig,
    with_anthropic_version,
    with_base_url,
    with_header,
    with_model,
    with_timeout,
)
from .interface import AbstractGateway, GatewayCapability
from .errors import GatewayConfigError, GatewayError, GatewayNotFoundError

logger = logging.getLogger(__name__)


class GatewayRegistry:
    """
    Registry for gateway adapters.

    Maps gateway types to adapter classes and keeps the instances built
    from configuration, keyed by name.
    """

    def __init__(self):
        """Initialize the registry."""
        self._adapters: Dict[str, Type[AbstractGateway]] = {}
        self._instances: Dict[str, AbstractGateway] = {}
        self._default_gateway: Optional[str] = None

    @classmethod
    def from_config(cls, config: GatewayConfig) -> "GatewayRegistry":
        """
        Build a registry with the built-in adapters and one instance per
        configured gateway.
        """
        registry = cls()
        registry.register_default_adapters()

        try:
            for instance_config in config.gateways:
                registry.create_gateway(instance_config)

            if config.default_gateway:
                registry.set_default_gateway(config.default_gateway)
        except GatewayError:
            registry.close_all()
            raise

        return registry

    def register_adapter(
        self,
        gateway_type: str,
        adapter_class: Type[AbstractGateway]
    ) -> None:
        """
        Register a gateway adapter class.

        Args:
            gateway_type: Type identifier (e.g., "anthropic", "openai")
            adapter_class: Adapter class to register
        """
        self._adapters[gateway_type] = adapter_class
        logger.info(f"Registered gateway adapter: {gateway_type}")

    def register_default_adapters(self) -> None:
        from ..adapters import AnthropicAdapter, OpenAIAdapter

        self.register_adapter("anthropic", AnthropicAdapter)
        self.register_adapter("openai", OpenAIAdapter)

    def create_gateway(self, instance_config: GatewayInstanceConfig) -> AbstractGateway:
        """
        Create a gateway instance from a registered adapter.

        ``extra`` may carry ``anthropic_version``, a ``headers`` mapping, and
        adapter keyword arguments such as ``organization`` and ``project``.

        Args:
            instance_config: Configuration for the gateway

        Returns:
            Configured gateway instance

        Raises:
            GatewayConfigError: If the gateway cannot be built or its name is taken
        """
        gateway_type = instance_config.type
        if gateway_type not in self._adapters:
            raise GatewayConfigError(f"Unknown gateway type: {gateway_type}")

        if instance_config.name in self._instances:
            raise GatewayConfigError(
                f"Duplicate gateway name: {instance_config.name}",
                gateway=instance_config.name,
            )

        options = [with_timeout(instance_config.timeout)]
        if instance_config.base_url:
            options.append(with_base_url(instance_config.base_url))
        if instance_config.model:
            options.append(with_model(instance_config.model))

        extra = dict(instance_config.extra)
        version = extra.pop("anthropic_version", None)
        if version:
            options.append(with_anthropic_version(version))
        for header, value in (extra.pop("headers", None) or {}).items():
            options.append(with_header(header, str(value)))
        kwargs = {k: v for k, v in extra.items() if v is not None}

        adapter_class = self._adapters[gateway_type]
        try:
            instance = adapter_class(
                instance_config.api_key,
                *options,
                name=instance_config.name,
                **kwargs,
            )
        except TypeError as e:
            raise GatewayConfigError(
                f"Invalid options for {gateway_type} gateway {instance_config.name}: {e}",
                gateway=instance_config.name,
            ) from e

        self._instances[instance_config.name] = instance
        logger.info(f"Created gateway instance: {instance_config.name} (type: {gateway_type})")
        return instance

    def get_gateway(self, name: str) -> AbstractGateway:
        """
        Get a gateway instance by name.

        Raises:
            GatewayNotFoundError: If gateway not found
        """
        if name not in self._instances:
            raise GatewayNotFoundError(f"Gateway not found: {name}")
        return self._instances[name]

    def get_default_gateway(self) -> Optional[AbstractGateway]:
        if self._default_gateway:
            return self._instances.get(self._default_gateway)
        return None

    def set_default_gateway(self, name: str) -> None:
        if name not in self._instances:
            raise GatewayNotFoundError(f"Gateway not found: {name}")
        self._default_gateway = name
        logger.info(f"Set default gateway: {name}")

    def list_gateways(self) -> List[Dict[str, Any]]:
        """
        List all gateway instances.

        Returns:
            List of gateway info dicts
        """
        return [
            {
                "name": gw.name,
                "type": gw.gateway_type,
                "capabilities": sorted(c.value for c in gw.capabilities),
                "is_default": gw.name == self._default_gateway,
            }
            for gw in self._instances.values()
        ]

    def find_gateways_with_capability(
        self,
        capability: GatewayCapability
    ) -> List[AbstractGateway]:
        """Find all gateways that support a capability."""
        return [gw for gw in self._instances.values() if gw.supports(capability)]

    def close_all(self) -> None:
        """Close every gateway instance."""
        for gw in self._instances.values():
            gw.close()
