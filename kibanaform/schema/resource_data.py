import copy
import json
from typing import Any

from kibanaform.schema.schema import Schema, SchemaType


class ResourceDataError(ValueError):
    pass


class ResourceData:
    """
    The attribute map of a single resource instance.

    Values that were never set (or were set to None) read back as the schema
    default, or the zero value of the attribute type.
    """

    def __init__(self, schema: dict[str, Schema], config: dict | None = None, id=""):
        self.schema = schema
        self._id = id or ""
        self._values: dict[str, Any] = {}
        for key, value in (config or {}).items():
            self.set(key, value)

    @property
    def id(self) -> str:
        return self._id

    def set_id(self, id: str | None):
        self._id = id or ""

    def _attribute(self, key: str) -> Schema:
        try:
            return self.schema[key]
        except KeyError:
            raise ResourceDataError(f"Invalid attribute {key!r}") from None

    def get(self, key: str) -> Any:
        attribute = self._attribute(key)
        if key in self._values:
            return copy.deepcopy(self._values[key])
        return attribute.zero_value()

    def get_ok(self, key: str) -> tuple[Any, bool]:
        """Return the value and whether it was explicitly set."""
        return self.get(key), key in self._values

    def is_set(self, key: str) -> bool:
        self._attribute(key)
        return key in self._values

    def set(self, key: str, value: Any):
        attribute = self._attribute(key)
        if value is None:
            self._values.pop(key, None)
            return

        errors = attribute.validate(key, value)
        if errors:
            raise ResourceDataError("; ".join(errors))

        if attribute.type == SchemaType.SET:
            value = _unique(value)
        elif attribute.type == SchemaType.LIST:
            value = list(value)
        self._values[key] = copy.deepcopy(value)

    def state(self) -> dict:
        """Snapshot of every attribute, unset ones at their default."""
        state = {"id": self.id}
        for key in self.schema:
            state[key] = self.get(key)
        return state

    def __repr__(self):
        return f"ResourceData(id={self.id!r}, values={self._values!r})"


def _unique(values) -> list:
    # python sets have no stable order, sort them so state is deterministic
    if isinstance(values, (set, frozenset)):
        values = sorted(values, key=lambda value: json.dumps(value, sort_keys=True))
    seen = set()
    unique = []
    for value in values:
        marker = json.dumps(value, sort_keys=True, default=str)
        if marker in seen:
            continue
        seen.add(marker)
        unique.append(value)
    return unique
