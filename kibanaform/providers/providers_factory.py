"""
The providers factory module.
"""

import copy
import importlib
import logging

from kibanaform.contextmanager.contextmanager import ContextManager
from kibanaform.providers.base.base_provider import BaseProvider
from kibanaform.providers.models.provider_config import ProviderConfig
from kibanaform.schema.schema import Resource

logger = logging.getLogger(__name__)

# resource type prefix -> provider type serving it
RESOURCE_PROVIDERS = {
    "elasticsearch_kibana_": "kibana",
}


class ProviderConfigurationException(Exception):
    pass


class ProvidersFactory:
    @staticmethod
    def get_provider_class(provider_type: str) -> type[BaseProvider]:
        try:
            module = importlib.import_module(
                f"kibanaform.providers.{provider_type}_provider.{provider_type}_provider"
            )
        except ModuleNotFoundError:
            raise ProviderConfigurationException(
                f"Unknown provider type {provider_type}"
            ) from None
        return getattr(module, provider_type.title().replace("_", "") + "Provider")

    @staticmethod
    def get_provider(
        context_manager: ContextManager,
        provider_id: str,
        provider_type: str,
        provider_config: dict,
    ) -> BaseProvider:
        """
        Get the instantiated provider class according to the provider type.

        Args:
            context_manager (ContextManager): The context of the current run.
            provider_id (str): The provider id.
            provider_type (str): e.g. kibana
            provider_config (dict): The provider configuration.

        Returns:
            BaseProvider: The provider instance.
        """
        provider_class = ProvidersFactory.get_provider_class(provider_type)
        provider_config = ProviderConfig(**copy.deepcopy(provider_config))

        try:
            return provider_class(
                context_manager=context_manager,
                provider_id=provider_id,
                config=provider_config,
            )
        except TypeError as exc:
            error_message = f"Configuration problem while trying to initialize the provider {provider_id}. Probably missing provider config, please check the provider configuration."
            logger.error(error_message)
            raise ProviderConfigurationException(exc)

    @staticmethod
    def get_provider_type_for_resource(resource_type: str) -> str:
        for prefix, provider_type in RESOURCE_PROVIDERS.items():
            if resource_type.startswith(prefix):
                return provider_type
        raise ProviderConfigurationException(
            f"No provider serves resource type {resource_type}"
        )

    @staticmethod
    def get_resource(resource_type: str) -> Resource:
        """
        Get the resource declaration (schema + callbacks) for a resource type.

        Args:
            resource_type (str): e.g. elasticsearch_kibana_alert
        """
        provider_type = ProvidersFactory.get_provider_type_for_resource(resource_type)
        provider_class = ProvidersFactory.get_provider_class(provider_type)
        try:
            return provider_class.get_resource(resource_type)
        except KeyError as exc:
            raise ProviderConfigurationException(exc.args[0]) from None
