"""Tests for the resource schema and attribute map."""

import pytest

from kibanaform.schema.resource_data import ResourceData, ResourceDataError
from kibanaform.schema.schema import Resource


class TestResourceData:
    def test_unset_attributes_read_as_defaults(self, alert_resource: Resource):
        data = ResourceData(alert_resource.schema, {"name": "terraform-test"})
        assert data.get("name") == "terraform-test"
        assert data.get("enabled") is True
        assert data.get("schedule") == [{"interval": "1m"}]
        assert data.get("tags") == []
        assert data.get("params") == {}
        assert data.get("throttle") == ""
        assert data.id == ""

    def test_get_ok_reports_presence(self, alert_resource):
        data = ResourceData(alert_resource.schema, {"enabled": False})
        assert data.get_ok("enabled") == (False, True)
        assert data.get_ok("throttle") == ("", False)

    def test_defaults_are_not_shared(self, alert_resource):
        data = ResourceData(alert_resource.schema)
        data.get("schedule")[0]["interval"] = "1h"
        assert data.get("schedule") == [{"interval": "1m"}]

    def test_set_none_unsets(self, alert_resource):
        data = ResourceData(alert_resource.schema, {"throttle": "5m"})
        data.set("throttle", None)
        assert not data.is_set("throttle")
        assert data.get("throttle") == ""

    def test_set_rejects_wrong_type(self, alert_resource):
        data = ResourceData(alert_resource.schema)
        with pytest.raises(ResourceDataError, match="enabled: expected bool"):
            data.set("enabled", "yes")

    def test_set_rejects_unknown_attribute(self, alert_resource):
        data = ResourceData(alert_resource.schema)
        with pytest.raises(ResourceDataError, match="Invalid attribute"):
            data.set("severity", "high")

    def test_set_enforces_max_items(self, alert_resource):
        data = ResourceData(alert_resource.schema)
        with pytest.raises(ResourceDataError, match="1 item"):
            data.set("schedule", [{"interval": "1m"}, {"interval": "5m"}])

    def test_set_validates_nested_blocks(self, alert_resource):
        data = ResourceData(alert_resource.schema)
        with pytest.raises(ResourceDataError, match="missing required argument 'id'"):
            data.set("actions", [{"group": "default", "action_type_id": ".slack"}])

    def test_set_attribute_removes_duplicates(self, alert_resource):
        data = ResourceData(alert_resource.schema)
        data.set("tags", ["b", "a", "b"])
        assert data.get("tags") == ["b", "a"]
        data.set("tags", {"z", "y"})
        assert data.get("tags") == ["y", "z"]

    def test_list_attribute_keeps_duplicates(self, alert_resource):
        action = {"group": "default", "id": "c1", "action_type_id": ".slack"}
        data = ResourceData(alert_resource.schema, {"actions": [action, action]})
        assert len(data.get("actions")) == 2

    def test_state(self, alert_resource):
        data = ResourceData(alert_resource.schema, {"name": "n"}, id="abc")
        state = data.state()
        assert state["id"] == "abc"
        assert state["name"] == "n"
        assert set(state) == {"id", *alert_resource.schema}
        data.set_id(None)
        assert data.id == ""


class TestResourceSchema:
    def test_valid_config(self, alert_resource, alert_config):
        assert alert_resource.validate(alert_config) == []

    def test_missing_required(self, alert_resource):
        errors = alert_resource.validate({"name": "terraform-test"})
        assert "missing required argument 'alert_type_id'" in errors
        assert "missing required argument 'notify_when'" in errors
        assert "missing required argument 'consumer'" in errors
        assert len(errors) == 3

    def test_unknown_argument(self, alert_resource, alert_config):
        alert_config["severity"] = "high"
        assert alert_resource.validate(alert_config) == [
            "unsupported argument 'severity'"
        ]

    def test_nested_block_errors(self, alert_resource, alert_config):
        alert_config["schedule"] = [{}]
        alert_config["actions"][0]["params"] = "not-a-map"
        errors = alert_resource.validate(alert_config)
        assert "schedule.0: missing required argument 'interval'" in errors
        assert "actions.0.params: expected map, got str" in errors

    def test_name_forces_new(self, alert_resource):
        assert alert_resource.schema["name"].force_new
        assert not alert_resource.schema["consumer"].force_new

    def test_describe_flattens_blocks(self, alert_resource):
        names = [row["name"] for row in alert_resource.describe()]
        assert "schedule.interval" in names
        assert "actions.action_type_id" in names
        tags = next(row for row in alert_resource.describe() if row["name"] == "tags")
        assert tags["type"] == "set(string)"

    def test_callbacks(self, alert_resource):
        assert alert_resource.get_callback("create") is alert_resource.create
        assert alert_resource.get_callback("import") is alert_resource.importer
        with pytest.raises(ValueError, match="Unknown operation"):
            alert_resource.get_callback("patch")
