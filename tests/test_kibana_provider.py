"""Tests for the Kibana provider configuration and the providers factory."""

import pytest
import responses

from kibanaform.contextmanager.contextmanager import ContextManager
from kibanaform.exceptions.provider_config_exception import ProviderConfigException
from kibanaform.providers.kibana_provider.kibana_provider import KibanaProvider
from kibanaform.providers.models.provider_config import ProviderConfig
from kibanaform.providers.providers_factory import (
    ProviderConfigurationException,
    ProvidersFactory,
)
from kibanaform.schema.schema import Resource

KIBANA_URL = "http://kibana.local:5601"


def _provider(authentication: dict) -> KibanaProvider:
    return KibanaProvider(
        ContextManager(tenant_id="test"),
        "kibana",
        ProviderConfig(authentication=authentication),
    )


class TestKibanaProviderConfig:
    def test_scheme_is_added_to_localhost(self):
        provider = _provider({"kibana_host": "localhost:5601", "api_key": "k"})
        assert provider.client.base_url == "http://localhost:5601"

    def test_scheme_is_added_to_remote_host(self):
        provider = _provider({"kibana_host": "kibana.example.com", "api_key": "k"})
        assert provider.client.base_url == "https://kibana.example.com"

    def test_port(self, kibana_provider):
        assert kibana_provider.client.base_url == KIBANA_URL
        assert kibana_provider.client.session.headers["Authorization"] == (
            "ApiKey test-api-key"
        )

    def test_basic_auth(self):
        provider = _provider(
            {
                "kibana_host": "https://kibana.example.com",
                "username": "elastic",
                "password": "changeme",
            }
        )
        assert provider.client.session.auth == ("elastic", "changeme")

    def test_missing_host(self):
        with pytest.raises(ProviderConfigException, match="kibana_host") as e:
            _provider({"api_key": "k"})
        assert e.value.provider_id == "kibana"

    def test_missing_credentials(self):
        with pytest.raises(ProviderConfigException, match="api_key"):
            _provider({"kibana_host": "https://kibana.example.com"})

    def test_invalid_port(self):
        with pytest.raises(ProviderConfigException, match="Invalid Kibana configuration"):
            _provider(
                {
                    "kibana_host": "https://kibana.example.com",
                    "kibana_port": 70000,
                    "api_key": "k",
                }
            )

    def test_authentication_rendered_from_env(self, monkeypatch):
        monkeypatch.setenv("TEST_KIBANA_API_KEY", "from-env")
        provider = _provider(
            {
                "kibana_host": "https://kibana.example.com",
                "api_key": "{{ env.TEST_KIBANA_API_KEY }}",
            }
        )
        assert provider.authentication_config.api_key == "from-env"

    def test_registered_in_context(self, kibana_provider, context_manager):
        assert context_manager.providers_context["kibana"] is kibana_provider
        assert kibana_provider.provider_type == "kibana"

    def test_dispose(self, kibana_provider):
        first = kibana_provider.client
        kibana_provider.dispose()
        assert kibana_provider.client is not first


class TestValidateScopes:
    def test_all_scopes_valid(self, kibana_provider, mocked_responses):
        mocked_responses.add(
            responses.GET, f"{KIBANA_URL}/api/alerts/_find", json={"data": []}
        )
        mocked_responses.add(
            responses.POST, f"{KIBANA_URL}/api/alerts/alert", json={"id": "tmp"}
        )
        mocked_responses.add(
            responses.DELETE, f"{KIBANA_URL}/api/alerts/alert/tmp", status=204
        )

        assert kibana_provider.validate_scopes() == {
            "alerts:read": True,
            "alerts:write": True,
        }

    def test_forbidden_scope(self, kibana_provider, mocked_responses):
        mocked_responses.add(
            responses.GET, f"{KIBANA_URL}/api/alerts/_find", json={"data": []}
        )
        mocked_responses.add(
            responses.POST,
            f"{KIBANA_URL}/api/alerts/alert",
            json={"statusCode": 403, "message": "Unauthorized to create alert"},
            status=403,
        )

        scopes = kibana_provider.validate_scopes()

        assert scopes["alerts:read"] is True
        assert "Unauthorized to create alert" in scopes["alerts:write"]


class TestProvidersFactory:
    def test_get_provider(self, context_manager):
        provider = ProvidersFactory.get_provider(
            context_manager,
            provider_id="kibana",
            provider_type="kibana",
            provider_config={
                "authentication": {
                    "kibana_host": "https://kibana.example.com",
                    "api_key": "k",
                }
            },
        )
        assert isinstance(provider, KibanaProvider)

    def test_unknown_provider_type(self, context_manager):
        with pytest.raises(ProviderConfigurationException):
            ProvidersFactory.get_provider_class("grafana")

    def test_get_resource(self):
        resource = ProvidersFactory.get_resource("elasticsearch_kibana_alert")
        assert isinstance(resource, Resource)
        assert resource.name == "elasticsearch_kibana_alert"

    def test_unknown_resource(self):
        with pytest.raises(ProviderConfigurationException):
            ProvidersFactory.get_resource("elasticsearch_index_template")
        with pytest.raises(ProviderConfigurationException):
            ProvidersFactory.get_resource("aws_instance")
