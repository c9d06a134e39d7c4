import logging

from kibanaform.core.logging import ProviderLoggerAdapter


class ContextManager:
    def __init__(self, tenant_id, execution_id=None):
        self.logger = logging.getLogger(__name__)
        self.tenant_id = tenant_id
        self.execution_id = execution_id
        self.providers_context = {}
        self.__loggers = {}

    def get_logger(self, name, provider_id=None):
        key = (name, provider_id)
        if key in self.__loggers:
            return self.__loggers[key]

        logger_adapter = ProviderLoggerAdapter(
            logging.getLogger(name),
            self.tenant_id,
            provider_id or name,
            self.execution_id,
        )
        self.__loggers[key] = logger_adapter
        return logger_adapter

    def set_provider_context(self, provider_id, provider):
        self.providers_context[provider_id] = provider
