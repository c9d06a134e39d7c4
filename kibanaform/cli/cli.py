import json
import logging
import sys
from importlib import metadata

import click
import yaml
from dotenv import find_dotenv, load_dotenv
from prettytable import PrettyTable

from kibanaform.contextmanager.contextmanager import ContextManager
from kibanaform.core.logging import setup_logging
from kibanaform.exceptions.provider_config_exception import ProviderConfigException
from kibanaform.providers.base.provider_exceptions import KibanaAlertException
from kibanaform.providers.kibana_provider.kibana_provider import KibanaProvider
from kibanaform.providers.kibana_provider.resource_kibana_alert import RESOURCE_NAME
from kibanaform.providers.providers_factory import (
    ProviderConfigurationException,
    ProvidersFactory,
)
from kibanaform.schema.resource_data import ResourceData, ResourceDataError

load_dotenv(find_dotenv(usecwd=True))

try:
    KIBANAFORM_VERSION = metadata.version("kibanaform")
except metadata.PackageNotFoundError:
    KIBANAFORM_VERSION = "unknown"

SINGLE_TENANT_ID = "singletenant"

logger = logging.getLogger(__name__)


class Info:
    """An information object to pass data between CLI functions."""

    def __init__(self):  # Note: This object must have an empty constructor.
        """Create a new instance."""
        self.verbose: int = 0
        self.json = False
        self.authentication = {}
        self._provider = None

    @property
    def provider(self) -> KibanaProvider:
        if self._provider is None:
            authentication = KibanaProvider.default_authentication()
            authentication.update(self.authentication)
            context_manager = ContextManager(tenant_id=SINGLE_TENANT_ID)
            self._provider = ProvidersFactory.get_provider(
                context_manager,
                provider_id="kibana",
                provider_type="kibana",
                provider_config={"authentication": authentication},
            )
        return self._provider

    def run(self, operation: str, data: ResourceData, *args):
        resource = ProvidersFactory.get_resource(RESOURCE_NAME)
        try:
            return self.provider.run(resource, operation, data, *args)
        except (ProviderConfigException, ProviderConfigurationException) as e:
            click.echo(click.style(f"Configuration error: {e}", fg="red", bold=True))
            sys.exit(2)
        except KibanaAlertException as e:
            click.echo(click.style(f"{type(e).__name__}: {e}", fg="red", bold=True))
            sys.exit(1)

    def echo_state(self, data: ResourceData):
        state = data.state()
        if self.json:
            click.echo(json.dumps(state, indent=2))
            return
        table = PrettyTable()
        table.field_names = ["Attribute", "Value"]
        table.align = "l"
        for key, value in state.items():
            if isinstance(value, (dict, list)):
                value = json.dumps(value)
            table.add_row([key, value])
        click.echo(table)


# pass_info is a decorator for functions that pass 'Info' objects.
#: pylint: disable=invalid-name
pass_info = click.make_pass_decorator(Info, ensure=True)


@click.group()
@click.option("--verbose", "-v", count=True, help="Enable verbose output.")
@click.option("--json", "-j", default=False, is_flag=True, help="Enable json output.")
@click.option("--kibana-host", envvar="KIBANA_HOST", help="The Kibana url.")
@click.option("--api-key", envvar="KIBANA_API_KEY", help="Kibana API key.")
@click.option("--username", envvar="KIBANA_USERNAME", help="Kibana username.")
@click.option("--password", envvar="KIBANA_PASSWORD", help="Kibana password.")
@pass_info
def cli(
    info: Info,
    verbose: int,
    json: bool,
    kibana_host: str,
    api_key: str,
    username: str,
    password: str,
):
    """Manage Kibana alerts."""
    # Use the verbosity count to determine the logging level...
    setup_logging(
        level="DEBUG" if verbose > 0 else None,
        log_format="json" if json else "dev_terminal",
    )
    info.verbose = verbose
    info.json = json
    for key, value in (
        ("kibana_host", kibana_host),
        ("api_key", api_key),
        ("username", username),
        ("password", password),
    ):
        if value:
            info.authentication[key] = value


@cli.command()
def version():
    """Get the library version."""
    click.echo(click.style(KIBANAFORM_VERSION, bold=True))


@cli.group()
@pass_info
def provider(info: Info):
    """Manage the Kibana provider."""
    pass


@provider.command(name="validate")
@pass_info
def validate_provider(info: Info):
    """Check which scopes the configured credentials have."""
    try:
        scopes = info.provider.validate_scopes()
    except (ProviderConfigException, ProviderConfigurationException) as e:
        click.echo(click.style(f"Configuration error: {e}", fg="red", bold=True))
        sys.exit(2)
    if info.json:
        click.echo(json.dumps(scopes, indent=2))
        return
    table = PrettyTable()
    table.field_names = ["Scope", "Valid"]
    for scope, valid in scopes.items():
        table.add_row([scope, valid])
    click.echo(table)


@cli.group()
@pass_info
def alert(info: Info):
    """Manage Kibana alerts."""
    pass


@alert.command(name="schema")
@pass_info
def alert_schema(info: Info):
    """Show the alert resource schema."""
    rows = ProvidersFactory.get_resource(RESOURCE_NAME).describe()
    if info.json:
        click.echo(json.dumps(rows, indent=2))
        return
    table = PrettyTable()
    table.field_names = ["Name", "Type", "Required", "Default", "Force new"]
    table.align = "l"
    for row in rows:
        table.add_row(
            [
                row["name"],
                row["type"],
                row["required"],
                json.dumps(row["default"]) if row["default"] is not None else "",
                row["force_new"],
            ]
        )
    click.echo(table)


@alert.command(name="create")
@click.option(
    "--file",
    "-f",
    type=click.File("r"),
    required=True,
    help="YAML or JSON file with the alert attributes.",
)
@pass_info
def create_alert(info: Info, file):
    """Create an alert from a configuration file."""
    alert_config = yaml.safe_load(file) or {}
    resource = ProvidersFactory.get_resource(RESOURCE_NAME)
    errors = resource.validate(alert_config)
    if errors:
        for error in errors:
            click.echo(click.style(error, fg="red"))
        sys.exit(2)

    try:
        data = ResourceData(resource.schema, alert_config)
    except ResourceDataError as e:
        click.echo(click.style(str(e), fg="red"))
        sys.exit(2)
    info.run("create", data)
    if data.id:
        info.run("read", data)
    info.echo_state(data)


@alert.command(name="get")
@click.argument("alert_id")
@click.option("--space-id", default="", help="Kibana space id.")
@pass_info
def get_alert(info: Info, alert_id: str, space_id: str):
    """Read an alert."""
    resource = ProvidersFactory.get_resource(RESOURCE_NAME)
    data = ResourceData(resource.schema, {"space_id": space_id or None}, id=alert_id)
    info.run("read", data)
    if not data.id:
        click.echo(click.style(f"Alert {alert_id} not found.", bold=True))
        sys.exit(1)
    info.echo_state(data)


@alert.command(name="delete")
@click.argument("alert_id")
@click.option("--space-id", default="", help="Kibana space id.")
@pass_info
def delete_alert(info: Info, alert_id: str, space_id: str):
    """Delete an alert."""
    resource = ProvidersFactory.get_resource(RESOURCE_NAME)
    data = ResourceData(resource.schema, {"space_id": space_id or None}, id=alert_id)
    info.run("delete", data)
    click.echo(click.style(f"Alert {alert_id} deleted.", bold=True))


@alert.command(name="import")
@click.argument("alert_id")
@pass_info
def import_alert(info: Info, alert_id: str):
    """Import an existing alert and print its state."""
    resource = ProvidersFactory.get_resource(RESOURCE_NAME)
    data = ResourceData(resource.schema, id=alert_id)
    for imported in info.run("import", data):
        info.run("read", imported)
        if not imported.id:
            click.echo(click.style(f"Alert {alert_id} not found.", bold=True))
            sys.exit(1)
        info.echo_state(imported)


if __name__ == "__main__":
    cli(auto_envvar_prefix="KIBANAFORM")
