"""
Resource schema declarations.

A small, Terraform-like type system: every resource declares its attributes as
`Schema` entries and exposes its lifecycle callbacks through `Resource`.
"""

import copy
import dataclasses
import enum
from typing import Any, Callable, Optional


class SchemaType(enum.Enum):
    STRING = "string"
    BOOL = "bool"
    INT = "int"
    LIST = "list"
    SET = "set"
    MAP = "map"


_PRIMITIVES = {
    SchemaType.STRING: (str,),
    SchemaType.BOOL: (bool,),
    SchemaType.INT: (int,),
}

_ZERO_VALUES = {
    SchemaType.STRING: "",
    SchemaType.BOOL: False,
    SchemaType.INT: 0,
    SchemaType.LIST: [],
    SchemaType.SET: [],
    SchemaType.MAP: {},
}


@dataclasses.dataclass
class Schema:
    """
    A single attribute declaration.

    Args:
        type (SchemaType): The attribute type.
        required (bool): The attribute must be present in the configuration.
        optional (bool): The attribute may be present in the configuration.
        default (Any): Value used when the attribute is not set.
        force_new (bool): Changing the attribute requires a new resource.
        max_items (int): Maximum length of LIST/SET attributes (0 = unbounded).
        elem (Schema | dict[str, Schema] | None): Element type of LIST/SET
            attributes. A dict declares a nested block.
        description (str): Human readable description.
    """

    type: SchemaType
    required: bool = False
    optional: bool = False
    default: Any = None
    force_new: bool = False
    max_items: int = 0
    elem: Optional["Schema | dict[str, Schema]"] = None
    description: str = ""

    @property
    def is_block(self) -> bool:
        return isinstance(self.elem, dict)

    def zero_value(self):
        if self.default is not None:
            return copy.deepcopy(self.default)
        return copy.deepcopy(_ZERO_VALUES[self.type])

    def validate(self, key: str, value: Any) -> list[str]:
        """
        Validate a value against this schema.

        Returns:
            list[str]: Error messages, empty when the value is valid.
        """
        if value is None:
            return []

        if self.type in _PRIMITIVES:
            # bool is an int subclass, don't let it through as one
            if not isinstance(value, _PRIMITIVES[self.type]) or (
                self.type == SchemaType.INT and isinstance(value, bool)
            ):
                return [
                    f"{key}: expected {self.type.value}, got {type(value).__name__}"
                ]
            return []

        if self.type == SchemaType.MAP:
            if not isinstance(value, dict):
                return [f"{key}: expected map, got {type(value).__name__}"]
            return []

        if not isinstance(value, (list, tuple, set, frozenset)):
            return [f"{key}: expected {self.type.value}, got {type(value).__name__}"]
        if self.max_items and len(value) > self.max_items:
            return [f"{key}: attribute supports {self.max_items} item(s) maximum"]

        errors = []
        for index, item in enumerate(value):
            item_key = f"{key}.{index}"
            if self.is_block:
                errors.extend(validate_attributes(self.elem, item, prefix=item_key))
            elif self.elem is not None:
                errors.extend(self.elem.validate(item_key, item))
        return errors


def validate_attributes(
    schema: dict[str, Schema], config: Any, prefix: str = ""
) -> list[str]:
    """
    Validate a configuration block against a schema map.

    Reports missing required attributes, unknown attributes and type mismatches.
    """
    label = f"{prefix}: " if prefix else ""
    if not isinstance(config, dict):
        return [f"{label}expected a block, got {type(config).__name__}"]

    errors = []
    for key in config:
        if key not in schema:
            errors.append(f"{label}unsupported argument {key!r}")

    for key, attribute in schema.items():
        full_key = f"{prefix}.{key}" if prefix else key
        value = config.get(key)
        if value is None:
            if attribute.required:
                errors.append(f"{label}missing required argument {key!r}")
            continue
        errors.extend(attribute.validate(full_key, value))
    return errors


@dataclasses.dataclass
class Resource:
    """
    A resource declaration: attribute schema plus lifecycle callbacks.

    Every callback is called as callback(data, meta) where data is a
    ResourceData and meta is the provider instance.
    """

    name: str
    schema: dict[str, Schema]
    create: Callable
    read: Callable
    update: Callable
    delete: Callable
    importer: Optional[Callable] = None
    description: str = ""

    OPERATIONS = ("create", "read", "update", "delete", "import")

    def get_callback(self, operation: str) -> Callable:
        if operation not in self.OPERATIONS:
            raise ValueError(
                f"Unknown operation {operation!r}, expected one of {self.OPERATIONS}"
            )
        if operation == "import":
            if self.importer is None:
                raise ValueError(f"Resource {self.name} does not support import")
            return self.importer
        return getattr(self, operation)

    def validate(self, config: dict) -> list[str]:
        return validate_attributes(self.schema, config)

    def describe(self) -> list[dict]:
        """Flatten the schema into rows, nested blocks as dotted keys."""
        rows = []

        def _walk(schema: dict[str, Schema], prefix: str):
            for key, attribute in schema.items():
                full_key = f"{prefix}{key}"
                element = ""
                if attribute.is_block:
                    element = "block"
                elif attribute.elem is not None:
                    element = attribute.elem.type.value
                rows.append(
                    {
                        "name": full_key,
                        "type": attribute.type.value
                        + (f"({element})" if element else ""),
                        "required": attribute.required,
                        "default": attribute.default,
                        "force_new": attribute.force_new,
                        "description": attribute.description,
                    }
                )
                if attribute.is_block:
                    _walk(attribute.elem, f"{full_key}.")

        _walk(self.schema, "")
        return rows
