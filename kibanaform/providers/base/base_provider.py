"""
Base class for all providers.
"""

import abc
import re
from typing import Callable

import opentelemetry.trace as trace

from kibanaform.contextmanager.contextmanager import ContextManager
from kibanaform.core.config import config
from kibanaform.core.logging import LOG_LEVEL
from kibanaform.providers.models.provider_config import ProviderConfig, ProviderScope
from kibanaform.schema.schema import Resource

tracer = trace.get_tracer(__name__)


class BaseProvider(metaclass=abc.ABCMeta):
    PROVIDER_SCOPES: list[ProviderScope] = []
    # resource type name -> factory returning the Resource declaration
    RESOURCES: dict[str, Callable[[], Resource]] = {}

    def __init__(
        self,
        context_manager: ContextManager,
        provider_id: str,
        config: ProviderConfig,
    ):
        """
        Initialize a provider.

        Args:
            context_manager (ContextManager): The context of the current run.
            provider_id (str): The provider id.
            config (ProviderConfig): Provider configuration.
        """
        self.provider_id = provider_id
        self.config = config
        self.context_manager = context_manager

        self.logger = context_manager.get_logger(
            f"provider.{self.provider_id}", provider_id=self.provider_id
        )
        self.logger.setLevel(
            _provider_log_level(self.provider_id),
        )

        self.validate_config()
        self.logger.debug(
            "Base provider initialized", extra={"provider": self.__class__.__name__}
        )
        self.provider_type = self._extract_type()
        context_manager.set_provider_context(self.provider_id, self)

    def _extract_type(self):
        """
        Extract the provider type from the provider class name.

        Returns:
            str: The provider type.
        """
        name = self.__class__.__name__
        name_without_provider = name.replace("Provider", "")
        name_with_spaces = (
            re.sub("([A-Z])", r" \1", name_without_provider).lower().strip()
        )
        return name_with_spaces.replace(" ", ".")

    @abc.abstractmethod
    def dispose(self):
        """
        Dispose of the provider.
        """
        raise NotImplementedError("dispose() method not implemented")

    @abc.abstractmethod
    def validate_config(self):
        """
        Validate provider configuration.
        """
        raise NotImplementedError("validate_config() method not implemented")

    def validate_scopes(self) -> dict[str, bool | str]:
        """
        Validate provider scopes.

        Returns:
            dict: where key is the scope name and value is whether the scope is valid (True boolean) or string with error message.
        """
        return {}

    @classmethod
    def get_resource(cls, resource_type: str) -> Resource:
        """
        Get the resource declaration for a resource type served by this provider.

        Args:
            resource_type (str): e.g. elasticsearch_kibana_alert

        Raises:
            KeyError: If the provider does not serve the resource type.
        """
        try:
            resource_factory = cls.RESOURCES[resource_type]
        except KeyError:
            raise KeyError(
                f"Resource {resource_type} is not served by {cls.__name__}"
            ) from None
        return resource_factory()

    def run(self, resource: Resource, operation: str, data, *args):
        """
        Run one of the resource callbacks (create/read/update/delete/import)
        with this provider as the meta object.
        """
        callback = resource.get_callback(operation)
        with tracer.start_as_current_span(
            f"{self.__class__.__name__}-{resource.name}-{operation}"
        ):
            self.logger.debug(
                "Running resource operation",
                extra={"resource": resource.name, "operation": operation},
            )
            return callback(data, self, *args)


def _provider_log_level(provider_id: str) -> str:
    level = config(
        "KIBANAFORM_{}_PROVIDER_LOG_LEVEL".format(provider_id.upper()),
        default=LOG_LEVEL,
    )
    return level.upper()
